"""Voice query pipeline package.

Modules are organised by the order in which `/api/query` executes:

1. `transcription` – upload the recording, wait for it, transcribe + classify.
2. `extraction` – turn the transcription into structured search parameters.
3. `matching` – score stored records against those parameters.
4. `composition` – write the found / not-found / off-topic reply.
5. `synthesis` – speak the reply.
6. `orchestrator` – run the stages and emit the ordered event stream.

`flow` holds the per-request state machine the orchestrator walks.
"""

from .composition import OFF_TOPIC_TEXT, compose_response, relative_day
from .extraction import build_time_context, day_part_for_hour, extract_search_parameters
from .flow import PipelineRun, PipelineState
from .matching import match_records, score_record, strings_match
from .orchestrator import VoiceQueryOrchestrator
from .synthesis import clean_for_speech, synthesize_reply
from .transcription import transcribe_query_audio
from .types import (
    ComposedReply,
    PipelineConfig,
    PipelineEvent,
    ScoredMatch,
    SynthesizedAudio,
    TimeContext,
    TranscriptionOutcome,
)

__all__ = [
    "OFF_TOPIC_TEXT",
    "ComposedReply",
    "PipelineConfig",
    "PipelineEvent",
    "PipelineRun",
    "PipelineState",
    "ScoredMatch",
    "SynthesizedAudio",
    "TimeContext",
    "TranscriptionOutcome",
    "VoiceQueryOrchestrator",
    "build_time_context",
    "clean_for_speech",
    "compose_response",
    "day_part_for_hour",
    "extract_search_parameters",
    "match_records",
    "relative_day",
    "score_record",
    "strings_match",
    "synthesize_reply",
    "transcribe_query_audio",
]
