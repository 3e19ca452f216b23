"""Domain models shared by the query pipeline and the record store."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TopicCategory(str, Enum):
    MEMORY_QUERY = "memory_query"
    LOST_OBJECT = "lost_object"
    PAST_ACTION = "past_action"
    EVENT_RECALL = "event_recall"
    OFF_TOPIC = "off_topic"
    UNKNOWN = "unknown"


class ResponseType(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    OFF_TOPIC = "off_topic"


def _as_string_list(value: Any) -> List[str]:
    """Coerce absent, scalar, or list values into a list of non-empty strings."""

    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item is not None and str(item).strip()]
    return []


class Analysis(BaseModel):
    """Structured fields extracted from one observed clip."""

    actions: List[str] = Field(default_factory=list)
    objects: List[str] = Field(default_factory=list)
    locations: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    summary: str = ""
    context: Optional[Dict[str, Any]] = None
    confidence: Optional[float] = None

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    @field_validator("actions", "objects", "locations", "tags", mode="before")
    @classmethod
    def coerce_lists(cls, value: Any) -> List[str]:
        return _as_string_list(value)

    @field_validator("summary", mode="before")
    @classmethod
    def coerce_summary(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("context", mode="before")
    @classmethod
    def coerce_context(cls, value: Any) -> Optional[Dict[str, Any]]:
        return value if isinstance(value, dict) else None

    @field_validator("confidence", mode="before")
    @classmethod
    def coerce_confidence(cls, value: Any) -> Optional[float]:
        try:
            return None if value is None else float(value)
        except (TypeError, ValueError):
            return None

    @classmethod
    def from_raw(cls, raw: Any) -> "Analysis":
        """Build an analysis from whatever the store returned; legacy singular keys are folded in."""

        if not isinstance(raw, dict):
            return cls()
        data = dict(raw)
        for singular, plural in (("action", "actions"), ("location", "locations")):
            if singular in data and not data.get(plural):
                data[plural] = data.pop(singular)
        return cls.model_validate(data)


class AnalysisRecord(BaseModel):
    """A stored unit of prior observation. Read-only for the query pipeline."""

    id: str
    sent_at: Optional[datetime] = Field(default=None, alias="sentAt")
    analysis: Analysis = Field(default_factory=Analysis)
    filename: Optional[str] = None
    filesize: Optional[str] = None
    duration: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @field_validator("analysis", mode="before")
    @classmethod
    def coerce_analysis(cls, value: Any) -> Analysis:
        if isinstance(value, Analysis):
            return value
        return Analysis.from_raw(value)


class NewAnalysisRecord(BaseModel):
    """Insert payload for the record store; the store assigns the id."""

    sent_at: datetime = Field(alias="sentAt")
    analysis: Dict[str, Any]
    filename: Optional[str] = None
    filesize: Optional[str] = None
    duration: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class SearchParameters(BaseModel):
    """Structured query derived from one transcription."""

    target_action: Optional[str] = None
    target_objects: List[str] = Field(default_factory=list)
    target_location: Optional[str] = None
    # Carried for logging and the payload; not used when scoring.
    time_context: str = "unknown"

    model_config = ConfigDict(extra="ignore")

    @field_validator("target_action", "target_location", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Optional[str]:
        if not isinstance(value, str):
            return None
        cleaned = value.strip()
        if not cleaned or cleaned.lower() in {"null", "none"}:
            return None
        return cleaned

    @field_validator("target_objects", mode="before")
    @classmethod
    def coerce_objects(cls, value: Any) -> List[str]:
        return _as_string_list(value)

    @field_validator("time_context", mode="before")
    @classmethod
    def coerce_time_context(cls, value: Any) -> str:
        return value if isinstance(value, str) and value.strip() else "unknown"


__all__ = [
    "Analysis",
    "AnalysisRecord",
    "NewAnalysisRecord",
    "ResponseType",
    "SearchParameters",
    "TopicCategory",
]
