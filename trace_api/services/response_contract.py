"""Pydantic models for validating AI backend JSON responses.

Every structured call goes through :func:`parse_contract`, which returns a
tagged result instead of raising: ``Parsed`` carries the validated model,
``Degraded`` carries the raw text so the caller can pick its fallback.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Generic, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError, field_validator

from trace_api.domain.models import Analysis, SearchParameters, TopicCategory

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class Parsed(Generic[ModelT]):
    value: ModelT
    raw_text: str


@dataclass(frozen=True)
class Degraded:
    raw_text: str
    reason: str


ParseResult = Union[Parsed[ModelT], Degraded]


class TranscriptionPayload(BaseModel):
    transcription: str
    is_relevant: bool = False
    topic_category: TopicCategory = TopicCategory.UNKNOWN

    @field_validator("transcription")
    @classmethod
    def require_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("transcription is blank")
        return value.strip()

    @field_validator("is_relevant", mode="before")
    @classmethod
    def null_is_not_relevant(cls, value: Any) -> Any:
        return False if value is None else value

    @field_validator("topic_category", mode="before")
    @classmethod
    def normalize_category(cls, value: Any) -> TopicCategory:
        if isinstance(value, str):
            try:
                return TopicCategory(value.strip().lower())
            except ValueError:
                return TopicCategory.UNKNOWN
        return TopicCategory.UNKNOWN


class SearchParametersPayload(BaseModel):
    search_parameters: SearchParameters

    @classmethod
    def model_validate_loose(cls, data: Any) -> "SearchParametersPayload":
        """Accept the parameters either wrapped or at the top level."""

        if isinstance(data, dict) and "search_parameters" not in data:
            data = {"search_parameters": data}
        return cls.model_validate(data)


class VideoAnalysisPayload(Analysis):
    """Any JSON object is kept; loose fields are coerced the way stored records are read."""

    @classmethod
    def model_validate_loose(cls, data: Any) -> "VideoAnalysisPayload":
        if not isinstance(data, dict):
            return cls.model_validate(data)
        return cls.from_raw(data)


def _clean_json_payload(payload: str) -> str:
    """Strip Markdown code blocks and find the first/last brace to extract JSON."""
    if not payload:
        return ""

    cleaned = payload.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]

    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]

    cleaned = cleaned.strip()

    start = cleaned.find("{")
    end = cleaned.rfind("}")

    if start != -1 and end != -1 and end > start:
        cleaned = cleaned[start : end + 1]

    return cleaned


def parse_contract(model: Type[ModelT], raw_text: Optional[str]) -> ParseResult:
    """Validate ``raw_text`` against ``model`` without raising."""

    text = raw_text or ""
    cleaned = _clean_json_payload(text)
    if not cleaned:
        return Degraded(raw_text=text, reason="empty response")

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        return Degraded(raw_text=text, reason=f"invalid JSON: {exc}")

    try:
        validate = getattr(model, "model_validate_loose", model.model_validate)
        value = validate(data)
    except ValidationError as exc:
        return Degraded(raw_text=text, reason=f"schema mismatch: {exc.error_count()} error(s)")

    return Parsed(value=value, raw_text=text)


__all__ = [
    "Degraded",
    "Parsed",
    "ParseResult",
    "SearchParametersPayload",
    "TranscriptionPayload",
    "VideoAnalysisPayload",
    "parse_contract",
]
