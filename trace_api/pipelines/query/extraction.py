"""Query-parameter extraction stage: free text to structured search parameters."""

from __future__ import annotations

import logging
from datetime import datetime

from trace_api.application.interfaces import GenerativeBackendInterface
from trace_api.domain.models import SearchParameters
from trace_api.services.response_contract import Degraded, SearchParametersPayload, parse_contract
from trace_api.telemetry import record_degraded_parse

from .types import TimeContext

logger = logging.getLogger("trace_api.pipelines.query")


def day_part_for_hour(hour: int) -> str:
    if 5 <= hour < 12:
        return "morning"
    if 12 <= hour < 17:
        return "afternoon"
    if 17 <= hour < 21:
        return "evening"
    return "night"


def format_long_date(moment: datetime) -> str:
    """``Sunday, October 18, 2026``"""
    return f"{moment:%A, %B} {moment.day}, {moment.year}"


def format_clock_time(moment: datetime) -> str:
    """``02:30 PM``"""
    return moment.strftime("%I:%M %p")


def build_time_context(now: datetime) -> TimeContext:
    return TimeContext(
        date=format_long_date(now),
        time=format_clock_time(now),
        day_part=day_part_for_hour(now.hour),
    )


def build_search_prompt(transcription: str, time_context: TimeContext) -> str:
    return f"""You are the "Memory Retrieval Engine" for Trace. Transform this query into search parameters.

USER QUERY: "{transcription}"

CURRENT TIME CONTEXT:
- Today is: {time_context.date}
- Current time: {time_context.time}
- Part of day: {time_context.day_part}

DATABASE SCHEMA:
{{
  "actions": ["string"],
  "objects": ["string"],
  "locations": ["string"],
  "tags": ["string"],
  "summary": "string"
}}

Return ONLY this JSON:
{{
  "search_parameters": {{
    "target_action": "action verb to search",
    "target_objects": ["objects to find"],
    "target_location": "location or null",
    "time_context": "today/morning/recent/unknown"
  }}
}}"""


async def extract_search_parameters(
    backend: GenerativeBackendInterface,
    transcription: str,
    time_context: TimeContext,
    *,
    model: str,
) -> SearchParameters:
    """Ask the model for search parameters; an unusable answer yields empty parameters."""

    raw_text = await backend.generate_text(
        build_search_prompt(transcription, time_context),
        model=model,
        response_mime_type="application/json",
    )
    result = parse_contract(SearchParametersPayload, raw_text)
    if isinstance(result, Degraded):
        logger.warning("Search parameters not in expected shape (%s); searching with none", result.reason)
        record_degraded_parse("extraction")
        return SearchParameters()

    params = result.value.search_parameters
    logger.info("Search params: %s", params.model_dump())
    return params


__all__ = [
    "build_search_prompt",
    "build_time_context",
    "day_part_for_hour",
    "extract_search_parameters",
    "format_clock_time",
    "format_long_date",
]
