"""Per-request pipeline state machine."""

from __future__ import annotations

import pytest

from trace_api.pipelines.query import PipelineRun, PipelineState
from trace_api.pipelines.query.flow import InvalidTransition


def test_search_path_reaches_completed() -> None:
    run = PipelineRun("req")
    for state in (
        PipelineState.TRANSCRIBING,
        PipelineState.SEARCHING,
        PipelineState.COMPOSING,
        PipelineState.SYNTHESIZING,
        PipelineState.COMPLETED,
    ):
        run.advance(state)

    assert run.finished
    assert run.history[0] is PipelineState.RECEIVED
    assert run.history[-1] is PipelineState.COMPLETED


def test_off_topic_path_skips_searching() -> None:
    run = PipelineRun("req")
    run.advance(PipelineState.TRANSCRIBING)
    run.advance(PipelineState.OFF_TOPIC)

    with pytest.raises(InvalidTransition):
        run.advance(PipelineState.SEARCHING)

    run.advance(PipelineState.COMPOSING)
    assert run.state is PipelineState.COMPOSING


def test_errored_reachable_from_any_non_terminal_state() -> None:
    run = PipelineRun("req")
    run.advance(PipelineState.TRANSCRIBING)
    run.advance(PipelineState.ERRORED)

    assert run.finished
    with pytest.raises(InvalidTransition):
        run.advance(PipelineState.ERRORED)


def test_cannot_skip_transcription() -> None:
    run = PipelineRun("req")

    with pytest.raises(InvalidTransition):
        run.advance(PipelineState.COMPOSING)
