"""FastAPI dependency providers wiring collaborators into the pipelines.

Tests swap any of these through ``app.dependency_overrides``.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, status

from trace_api.application.interfaces import (
    GenerativeBackendInterface,
    RecordStoreInterface,
    SpeechBackendInterface,
)
from trace_api.config.settings import settings
from trace_api.infrastructure.persistence.record_store import SQLAlchemyRecordStore
from trace_api.pipelines.query import PipelineConfig, VoiceQueryOrchestrator
from trace_api.services.aws import create_boto3_client
from trace_api.services.gemini_client import GeminiBackend
from trace_api.services.polly_tts import PollySpeechBackend


@lru_cache
def get_record_store() -> RecordStoreInterface:
    from trace_api.database import SessionFactory

    return SQLAlchemyRecordStore(SessionFactory)


@lru_cache
def get_ai_backend() -> GenerativeBackendInterface:
    api_key = settings.gemini.api_key
    if api_key is None or not api_key.get_secret_value():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="GEMINI_API_KEY is not configured",
        )
    return GeminiBackend.from_api_key(api_key.get_secret_value())


@lru_cache
def get_speech_backend() -> SpeechBackendInterface:
    return PollySpeechBackend(
        create_boto3_client("polly", region_name=settings.polly.region),
        voice_id=settings.polly.voice_id,
        engine=settings.polly.engine,
        output_format=settings.polly.output_format,
    )


RecordStoreDep = Annotated[RecordStoreInterface, Depends(get_record_store)]
AiBackendDep = Annotated[GenerativeBackendInterface, Depends(get_ai_backend)]
SpeechBackendDep = Annotated[SpeechBackendInterface, Depends(get_speech_backend)]


def get_query_orchestrator(
    record_store: RecordStoreDep,
    ai_backend: AiBackendDep,
    speech_backend: SpeechBackendDep,
) -> VoiceQueryOrchestrator:
    return VoiceQueryOrchestrator(
        record_store,
        ai_backend,
        speech_backend,
        PipelineConfig(
            transcription_model=settings.gemini.transcription_model,
            query_model=settings.gemini.query_model,
            poll_interval_seconds=settings.query.poll_interval_seconds,
            poll_max_attempts=settings.query.poll_max_attempts,
            timezone=settings.query.timezone,
        ),
    )


OrchestratorDep = Annotated[VoiceQueryOrchestrator, Depends(get_query_orchestrator)]


__all__ = [
    "AiBackendDep",
    "OrchestratorDep",
    "RecordStoreDep",
    "SpeechBackendDep",
    "get_ai_backend",
    "get_query_orchestrator",
    "get_record_store",
    "get_speech_backend",
]
