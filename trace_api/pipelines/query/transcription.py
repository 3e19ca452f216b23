"""Transcription stage of the voice query pipeline."""

from __future__ import annotations

import asyncio
import logging

from trace_api.application.interfaces import GenerativeBackendInterface
from trace_api.domain.models import TopicCategory
from trace_api.services.file_ingestion import SleepFn, release_remote_file, wait_until_active
from trace_api.services.response_contract import Degraded, TranscriptionPayload, parse_contract
from trace_api.telemetry import record_degraded_parse

from .types import TranscriptionOutcome

logger = logging.getLogger("trace_api.pipelines.query")

TRANSCRIPTION_PROMPT = """Listen to this audio recording and:
1. Transcribe what the user said verbatim
2. Determine if the topic is RELEVANT to a memory assistant app (questions about past actions, lost objects, forgotten events, what happened, where things are, memory recall, etc.)

Return ONLY this JSON:
{
  "transcription": "exact words spoken by the user",
  "is_relevant": true or false,
  "topic_category": "memory_query | lost_object | past_action | event_recall | off_topic"
}"""


async def transcribe_query_audio(
    backend: GenerativeBackendInterface,
    path: str,
    mime_type: str,
    display_name: str,
    *,
    model: str,
    poll_interval_seconds: float,
    poll_max_attempts: int,
    sleep: SleepFn = asyncio.sleep,
) -> TranscriptionOutcome:
    """Upload the audio, wait for it to become active, then transcribe and classify it.

    The returned outcome names the remote file so the caller can release it
    once it is done; if this stage fails after uploading, it releases the
    file itself before re-raising.
    """

    logger.info("Uploading audio %s (%s)", display_name, mime_type)
    uploaded = await backend.upload_file(path, mime_type=mime_type, display_name=display_name)

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
            TRANSCRIPTION_PROMPT,
            model=model,
            response_mime_type="application/json",
        )
    except BaseException:
        await release_remote_file(backend, uploaded.name)
        raise

    result = parse_contract(TranscriptionPayload, raw_text)
    if isinstance(result, Degraded):
        logger.warning("Transcription response not in expected shape (%s); using raw text", result.reason)
        record_degraded_parse("transcription")
        outcome = TranscriptionOutcome(
            transcription=result.raw_text,
            is_relevant=False,
            topic_category=TopicCategory.UNKNOWN,
            remote_file_name=uploaded.name,
            degraded=True,
        )
    else:
        payload = result.value
        outcome = TranscriptionOutcome(
            transcription=payload.transcription,
            is_relevant=payload.is_relevant,
            topic_category=payload.topic_category,
            remote_file_name=uploaded.name,
        )

    logger.info(
        'Transcribed "%s" | topic=%s relevant=%s',
        outcome.transcription,
        outcome.topic_category.value,
        outcome.is_relevant,
    )
    return outcome


__all__ = ["TRANSCRIPTION_PROMPT", "transcribe_query_audio"]
