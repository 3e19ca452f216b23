"""Voice query orchestration.

Sequences transcription, parameter extraction, matching, composition and
synthesis for one uploaded recording, and reports progress as an ordered
stream of :class:`PipelineEvent` values:

* success: ``transcription`` -> ``response`` -> ``done``
* failure: (``transcription``) -> ``error``

Collaborators are injected; nothing here reaches for process-wide clients.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import time
from datetime import datetime, timezone
from typing import AsyncIterator, Callable, Optional
from uuid import uuid4
from zoneinfo import ZoneInfo

from trace_api.application.interfaces import (
    GenerativeBackendInterface,
    RecordStoreInterface,
    SpeechBackendInterface,
)
from trace_api.domain.models import SearchParameters
from trace_api.pipelines.ingestion import StagedUpload
from trace_api.services.file_ingestion import SleepFn, release_remote_file
from trace_api.telemetry import observe_stage, record_outcome
from trace_api.views.query import (
    AssistantResponse,
    AssistantTurn,
    Conversation,
    ErrorEventData,
    QueryResult,
    TranscriptionEventData,
    UserTurn,
)

from .composition import compose_off_topic_response, compose_response
from .extraction import build_time_context, extract_search_parameters
from .flow import PipelineRun, PipelineState
from .matching import match_records
from .synthesis import synthesize_reply
from .types import (
    ComposedReply,
    PipelineConfig,
    PipelineEvent,
    SynthesizedAudio,
    TranscriptionOutcome,
)
from .transcription import transcribe_query_audio

logger = logging.getLogger("trace_api.pipelines.query")
transcript_logger = logging.getLogger("trace_api.logs.transcript")

Clock = Callable[[], datetime]


def iso_timestamp(moment: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a ``Z`` suffix."""

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    utc = moment.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class _RemoteFileLease:
    """Releases an uploaded file at most once."""

    def __init__(self, backend: GenerativeBackendInterface) -> None:
        self._backend = backend
        self.name: Optional[str] = None

    async def release(self) -> None:
        name, self.name = self.name, None
        await release_remote_file(self._backend, name)


class VoiceQueryOrchestrator:
    """Run one voice query through every stage and emit ordered notifications."""

    def __init__(
        self,
        record_store: RecordStoreInterface,
        ai_backend: GenerativeBackendInterface,
        speech_backend: SpeechBackendInterface,
        config: PipelineConfig,
        *,
        clock: Clock | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._store = record_store
        self._ai = ai_backend
        self._speech = speech_backend
        self._config = config
        self._clock = clock or (lambda: datetime.now(ZoneInfo(config.timezone)))
        self._sleep = sleep

    async def run(self, upload: StagedUpload) -> AsyncIterator[PipelineEvent]:
        pipeline = PipelineRun(uuid4().hex[:12])
        request_time = self._clock()
        started = time.perf_counter()
        lease = _RemoteFileLease(self._ai)

        logger.info(
            "request=%s audio received: %s (%s)",
            pipeline.request_id,
            upload.original_name,
            upload.size_label,
        )

        try:
            pipeline.advance(PipelineState.TRANSCRIBING)
            with observe_stage("transcription"):
                outcome = await transcribe_query_audio(
                    self._ai,
                    str(upload.path),
                    upload.mime_type,
                    upload.original_name,
                    model=self._config.transcription_model,
                    poll_interval_seconds=self._config.poll_interval_seconds,
                    poll_max_attempts=self._config.poll_max_attempts,
                    sleep=self._sleep,
                )
            lease.name = outcome.remote_file_name
            transcript_logger.info(
                "user | request=%s | topic=%s | relevant=%s | text=%s",
                pipeline.request_id,
                outcome.topic_category.value,
                outcome.is_relevant,
                outcome.transcription,
            )
            yield PipelineEvent(
                "transcription",
                TranscriptionEventData(
                    user_query=outcome.transcription,
                    topic_category=outcome.topic_category.value,
                    is_relevant=outcome.is_relevant,
                    timestamp=iso_timestamp(request_time),
                ).model_dump(by_alias=True),
            )

            search_params: Optional[SearchParameters] = None
            match_count: Optional[int] = None
            if outcome.is_off_topic:
                pipeline.advance(PipelineState.OFF_TOPIC)
                await lease.release()
                pipeline.advance(PipelineState.COMPOSING)
                reply = compose_off_topic_response()
            else:
                pipeline.advance(PipelineState.SEARCHING)
                time_context = build_time_context(request_time)
                with observe_stage("search"):
                    search_params = await extract_search_parameters(
                        self._ai,
                        outcome.transcription,
                        time_context,
                        model=self._config.query_model,
                    )
                    corpus = await self._store.list_all()
                    matches = match_records(search_params, corpus)
                await lease.release()
                match_count = len(matches)
                logger.info(
                    "request=%s %s matches out of %s records%s",
                    pipeline.request_id,
                    match_count,
                    len(corpus),
                    f" (best score={matches[0].score} fields={list(matches[0].matched_fields)})"
                    if matches
                    else "",
                )

                pipeline.advance(PipelineState.COMPOSING)
                with observe_stage("composition"):
                    reply = await compose_response(
                        self._ai,
                        outcome.transcription,
                        matches[0] if matches else None,
                        time_context,
                        request_time,
                        model=self._config.query_model,
                    )

            pipeline.advance(PipelineState.SYNTHESIZING)
            with observe_stage("synthesis"):
                audio = await synthesize_reply(self._speech, reply.text)

            result = self._build_result(
                outcome,
                reply,
                audio,
                request_time=request_time,
                started=started,
                search_params=search_params,
                match_count=match_count,
            )
            pipeline.advance(PipelineState.COMPLETED)
            record_outcome(reply.response_type.value)
            transcript_logger.info(
                "assistant | request=%s | type=%s | text=%s",
                pipeline.request_id,
                reply.response_type.value,
                reply.text,
            )
            logger.info(
                "request=%s processed in %s - %s",
                pipeline.request_id,
                result.duration,
                reply.response_type.value,
            )
            yield PipelineEvent("response", result.to_payload())
            yield PipelineEvent("done", {})
        except Exception as exc:
            if not pipeline.finished:
                pipeline.advance(PipelineState.ERRORED)
            logger.exception("request=%s failed: %s", pipeline.request_id, exc)
            record_outcome("error")
            yield PipelineEvent(
                "error",
                ErrorEventData(
                    error=str(exc) or exc.__class__.__name__,
                    timestamp=iso_timestamp(request_time),
                ).model_dump(by_alias=True),
            )
        finally:
            await lease.release()

    def _build_result(
        self,
        outcome: TranscriptionOutcome,
        reply: ComposedReply,
        audio: Optional[SynthesizedAudio],
        *,
        request_time: datetime,
        started: float,
        search_params: Optional[SearchParameters],
        match_count: Optional[int],
    ) -> QueryResult:
        request_stamp = iso_timestamp(request_time)
        return QueryResult(
            duration=f"{time.perf_counter() - started:.2f}s",
            timestamp=request_stamp,
            user_query=outcome.transcription,
            search_params=search_params.model_dump() if search_params is not None else None,
            match_count=match_count,
            response=AssistantResponse(
                text=reply.text,
                type=reply.response_type.value,
                audio=base64.b64encode(audio.data).decode("ascii") if audio else None,
                audio_mime_type=audio.media_type if audio else None,
            ),
            conversation=Conversation(
                user=UserTurn(text=outcome.transcription, timestamp=request_stamp),
                assistant=AssistantTurn(
                    text=reply.text,
                    type=reply.response_type.value,
                    timestamp=iso_timestamp(self._clock()),
                ),
            ),
        )


__all__ = ["VoiceQueryOrchestrator", "iso_timestamp"]
