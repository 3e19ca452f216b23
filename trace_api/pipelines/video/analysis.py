"""Single-video analysis: the path that creates the records voice queries search."""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime
from typing import Any, Dict

from trace_api.application.interfaces import GenerativeBackendInterface, RecordStoreInterface
from trace_api.domain.models import NewAnalysisRecord
from trace_api.pipelines.ingestion import StagedUpload
from trace_api.services.file_ingestion import SleepFn, release_remote_file, wait_until_active
from trace_api.services.response_contract import Degraded, VideoAnalysisPayload, parse_contract
from trace_api.telemetry import record_degraded_parse
from trace_api.views.analyze import VideoAnalysisResponse

logger = logging.getLogger(__name__)

VIDEO_ANALYSIS_PROMPT = """You are an expert video analyst. The footage is captured from smart glasses, so the viewpoint is "you". Determine whether "you" are performing the main action or if other people are doing it. Return JSON with this structure:
{
  "summary": "You have... (short sentence describing what happens from first-person perspective)",
  "actions": ["main action verb", "secondary action if any"],
  "objects": ["list", "of", "visible", "objects"],
  "locations": ["the location or environment of the scene"],
  "context": {
    "before": "what likely happened before this scene",
    "after": "what will likely happen next"
  },
  "confidence": 0.85,
  "tags": ["relevant", "search", "tags"]
}

Return ONLY the JSON, no extra text."""


async def analyze_video(
    backend: GenerativeBackendInterface,
    upload: StagedUpload,
    *,
    model: str,
    poll_interval_seconds: float,
    poll_max_attempts: int,
    sleep: SleepFn = asyncio.sleep,
) -> tuple[Dict[str, Any], bool]:
    """Return ``(analysis, parsed)``; unparseable output comes back as ``{"raw_response": text}``."""

    logger.info("Uploading video %s (%s)", upload.original_name, upload.size_label)
    uploaded = await backend.upload_file(
        str(upload.path),
        mime_type=upload.mime_type,
        display_name=upload.original_name,
    )
    try:
        active = await wait_until_active(
            backend,
            uploaded.name,
            interval_seconds=poll_interval_seconds,
            max_attempts=poll_max_attempts,
            sleep=sleep,
        )
        raw_text = await backend.generate_from_file(
            active,
            VIDEO_ANALYSIS_PROMPT,
            model=model,
            response_mime_type="application/json",
        )
    finally:
        await release_remote_file(backend, uploaded.name)

    result = parse_contract(VideoAnalysisPayload, raw_text)
    if isinstance(result, Degraded):
        logger.error("Video analysis JSON parse error (%s), returning raw text", result.reason)
        record_degraded_parse("video")
        return {"raw_response": result.raw_text}, False
    return result.value.model_dump(exclude_none=True), True


async def process_video_upload(
    backend: GenerativeBackendInterface,
    record_store: RecordStoreInterface,
    upload: StagedUpload,
    sent_at: datetime,
    *,
    model: str,
    poll_interval_seconds: float,
    poll_max_attempts: int,
    sleep: SleepFn = asyncio.sleep,
) -> VideoAnalysisResponse:
    """Analyze one video and persist the analysis when it parsed."""

    started = time.perf_counter()
    analysis, parsed = await analyze_video(
        backend,
        upload,
        model=model,
        poll_interval_seconds=poll_interval_seconds,
        poll_max_attempts=poll_max_attempts,
        sleep=sleep,
    )
    duration = f"{time.perf_counter() - started:.2f}s"

    traceback_id = None
    if parsed:
        traceback_id = await record_store.insert(
            NewAnalysisRecord(
                sent_at=sent_at,
                analysis=analysis,
                filename=upload.original_name,
                filesize=upload.size_label,
                duration=duration,
            )
        )
        logger.info("Stored traceback %s for %s", traceback_id, upload.original_name)

    return VideoAnalysisResponse(
        sent_at=sent_at.isoformat(),
        duration=duration,
        filename=upload.original_name,
        filesize=upload.size_label,
        analysis=analysis,
        traceback_id=traceback_id,
    )


__all__ = ["VIDEO_ANALYSIS_PROMPT", "analyze_video", "process_video_upload"]
