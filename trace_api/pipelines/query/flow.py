"""State machine for a single voice query.

``Received -> Transcribing -> (OffTopic | Searching) -> Composing ->
Synthesizing -> Completed``, with ``Errored`` reachable from any
non-terminal state. The orchestrator moves a :class:`PipelineRun` through
these states; an illegal move is a programming error.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, FrozenSet, List

logger = logging.getLogger("trace_api.pipelines.query")


class PipelineState(str, Enum):
    RECEIVED = "received"
    TRANSCRIBING = "transcribing"
    OFF_TOPIC = "off_topic"
    SEARCHING = "searching"
    COMPOSING = "composing"
    SYNTHESIZING = "synthesizing"
    COMPLETED = "completed"
    ERRORED = "errored"


_TRANSITIONS: Dict[PipelineState, FrozenSet[PipelineState]] = {
    PipelineState.RECEIVED: frozenset({PipelineState.TRANSCRIBING}),
    PipelineState.TRANSCRIBING: frozenset({PipelineState.OFF_TOPIC, PipelineState.SEARCHING}),
    PipelineState.OFF_TOPIC: frozenset({PipelineState.COMPOSING}),
    PipelineState.SEARCHING: frozenset({PipelineState.COMPOSING}),
    PipelineState.COMPOSING: frozenset({PipelineState.SYNTHESIZING}),
    PipelineState.SYNTHESIZING: frozenset({PipelineState.COMPLETED}),
    PipelineState.COMPLETED: frozenset(),
    PipelineState.ERRORED: frozenset(),
}

TERMINAL_STATES = frozenset({PipelineState.COMPLETED, PipelineState.ERRORED})


class InvalidTransition(RuntimeError):
    """Raised when a run is moved along an edge the state machine does not have."""


class PipelineRun:
    """Tracks the current state of one request and the path it took."""

    def __init__(self, request_id: str) -> None:
        self.request_id = request_id
        self.state = PipelineState.RECEIVED
        self.history: List[PipelineState] = [PipelineState.RECEIVED]

    def advance(self, target: PipelineState) -> None:
        if target is PipelineState.ERRORED:
            if self.state in TERMINAL_STATES:
                raise InvalidTransition(f"{self.state.value} is terminal")
        elif target not in _TRANSITIONS[self.state]:
            raise InvalidTransition(f"{self.state.value} -> {target.value}")

        logger.debug("request=%s %s -> %s", self.request_id, self.state.value, target.value)
        self.state = target
        self.history.append(target)

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES


__all__ = ["InvalidTransition", "PipelineRun", "PipelineState", "TERMINAL_STATES"]
