"""Voice query endpoint.

POST `/api/query` takes one audio upload (field `audio`) and answers with a
server-sent event stream. See `trace_api.pipelines.query` for the stages;
the events are, in order:

1. `transcription` – as soon as the text is extracted from the audio.
2. `response` – the full assistant reply, with synthesized audio.
3. `done` – end of stream.

Any failure replaces the remaining events with a single `error` event.
"""

import json
import logging
from typing import AsyncIterator, Optional

from fastapi import APIRouter, File, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, StreamingResponse

from trace_api.config.settings import settings
from trace_api.controllers.dependencies import OrchestratorDep
from trace_api.pipelines.ingestion import (
    AUDIO_MIME_TYPES,
    StagedUpload,
    discard_local_file,
    resolve_content_type,
    stage_upload,
)
from trace_api.pipelines.query import PipelineEvent, VoiceQueryOrchestrator
from trace_api.views import UploadErrorResponse

router = APIRouter(prefix="/api/query", tags=["query"])

logger = logging.getLogger(__name__)

_AUDIO_FILE_UPLOAD = File(None)

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_sse(event: PipelineEvent) -> str:
    return f"event: {event.name}\ndata: {json.dumps(dict(event.data), ensure_ascii=False)}\n\n"


async def _event_stream(
    orchestrator: VoiceQueryOrchestrator,
    staged: StagedUpload,
) -> AsyncIterator[str]:
    try:
        async for event in orchestrator.run(staged):
            yield format_sse(event)
    finally:
        await run_in_threadpool(discard_local_file, staged.path)


@router.post("", response_class=StreamingResponse)
async def query_audio(
    orchestrator: OrchestratorDep,
    audio: Optional[UploadFile] = _AUDIO_FILE_UPLOAD,
):
    """Answer a spoken memory question as a text/event-stream."""

    if audio is None:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=UploadErrorResponse(
                error="No audio file provided. Use field 'audio'."
            ).model_dump(),
        )

    content_type = resolve_content_type(audio, AUDIO_MIME_TYPES, "audio")
    staged = await stage_upload(
        audio, settings.upload_dir, content_type, max_bytes=settings.max_audio_bytes
    )
    logger.info("Audio received: %s (%s)", staged.original_name, staged.size_label)

    return StreamingResponse(
        _event_stream(orchestrator, staged),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
