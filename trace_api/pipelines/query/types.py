"""Typed containers shared across the voice query pipeline.

These dataclasses live in their own module so the stages (`transcription`,
`extraction`, `matching`, `composition`, `synthesis`) and the orchestrator
can import them without creating circular dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple

from trace_api.domain.models import AnalysisRecord, ResponseType, TopicCategory


@dataclass(frozen=True)
class TimeContext:
    """Wall-clock description of the request moment handed to the model."""

    date: str
    time: str
    day_part: str


@dataclass(frozen=True)
class TranscriptionOutcome:
    """Verbatim text plus topic classification for one voice query."""

    transcription: str
    is_relevant: bool
    topic_category: TopicCategory
    remote_file_name: Optional[str] = None
    degraded: bool = False

    @property
    def is_off_topic(self) -> bool:
        return not self.is_relevant or self.topic_category is TopicCategory.OFF_TOPIC


@dataclass(frozen=True)
class ScoredMatch:
    record: AnalysisRecord
    score: int
    matched_fields: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ComposedReply:
    text: str
    response_type: ResponseType


@dataclass(frozen=True)
class SynthesizedAudio:
    data: bytes
    media_type: str


@dataclass(frozen=True)
class PipelineEvent:
    """One server-push notification: ``transcription``, ``response``, ``done`` or ``error``."""

    name: str
    data: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PipelineConfig:
    transcription_model: str
    query_model: str
    poll_interval_seconds: float = 1.0
    poll_max_attempts: int = 30
    timezone: str = "UTC"
