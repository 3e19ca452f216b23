"""Single-video analysis endpoint; stores the analysis the voice queries search."""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, File, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from trace_api.config.settings import settings
from trace_api.controllers.dependencies import AiBackendDep, RecordStoreDep
from trace_api.pipelines.ingestion import (
    VIDEO_MIME_TYPES,
    discard_local_file,
    resolve_content_type,
    stage_upload,
)
from trace_api.pipelines.video import process_video_upload
from trace_api.views import UploadErrorResponse, VideoAnalysisError

router = APIRouter(prefix="/analyze", tags=["analyze"])

logger = logging.getLogger(__name__)

_VIDEO_FILE_UPLOAD = File(None)


@router.post("")
async def analyze_single_video(
    record_store: RecordStoreDep,
    ai_backend: AiBackendDep,
    video: Optional[UploadFile] = _VIDEO_FILE_UPLOAD,
) -> Any:
    """Upload one video to Gemini, analyze it, and persist the result."""

    if video is None:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=UploadErrorResponse(
                error="No video file provided. Use field 'video'."
            ).model_dump(),
        )

    sent_at = datetime.now(timezone.utc)
    content_type = resolve_content_type(video, VIDEO_MIME_TYPES, "video")
    staged = await stage_upload(
        video, settings.upload_dir, content_type, max_bytes=settings.max_video_bytes
    )
    logger.info("File received: %s (%s)", staged.original_name, staged.size_label)

    try:
        result = await process_video_upload(
            ai_backend,
            record_store,
            staged,
            sent_at,
            model=settings.gemini.video_model,
            poll_interval_seconds=settings.video.poll_interval_seconds,
            poll_max_attempts=settings.video.poll_max_attempts,
        )
    except Exception as exc:
        logger.exception("Video analysis failed for %s", staged.original_name)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=VideoAnalysisError(
                sent_at=sent_at.isoformat(),
                error=str(exc) or exc.__class__.__name__,
            ).model_dump(by_alias=True),
        )
    finally:
        await run_in_threadpool(discard_local_file, staged.path)

    return result.model_dump(by_alias=True)
