"""Time context and search-parameter extraction."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from trace_api.domain.models import SearchParameters
from trace_api.pipelines.query import build_time_context, day_part_for_hour, extract_search_parameters

from conftest import FakeAiBackend, search_json


@pytest.mark.parametrize(
    ("hour", "expected"),
    [
        (4, "night"),
        (5, "morning"),
        (11, "morning"),
        (12, "afternoon"),
        (16, "afternoon"),
        (17, "evening"),
        (20, "evening"),
        (21, "night"),
        (0, "night"),
    ],
)
def test_day_part_boundaries(hour: int, expected: str) -> None:
    assert day_part_for_hour(hour) == expected


def test_time_context_formats() -> None:
    context = build_time_context(datetime(2026, 10, 18, 14, 30, tzinfo=timezone.utc))

    assert context.date == "Sunday, October 18, 2026"
    assert context.time == "02:30 PM"
    assert context.day_part == "afternoon"


@pytest.mark.asyncio
async def test_extracts_wrapped_parameters() -> None:
    backend = FakeAiBackend(search=search_json("left", ["keys", "wallet"], "hallway", "today"))
    context = build_time_context(datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc))

    params = await extract_search_parameters(backend, "Where did I leave my keys?", context, model="m")

    assert params == SearchParameters(
        target_action="left",
        target_objects=["keys", "wallet"],
        target_location="hallway",
        time_context="today",
    )
    assert "Where did I leave my keys?" in backend.text_prompts[0]
    assert "Part of day: morning" in backend.text_prompts[0]


@pytest.mark.asyncio
async def test_unusable_answer_yields_empty_parameters() -> None:
    backend = FakeAiBackend(search="I could not work that out.")
    context = build_time_context(datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc))

    params = await extract_search_parameters(backend, "hmm", context, model="m")

    assert params == SearchParameters()
