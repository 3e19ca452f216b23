"""Service layer helpers for external integrations."""

from .file_ingestion import (
    ProcessingFailed,
    ProcessingTimeout,
    release_remote_file,
    wait_until_active,
)
from .gemini_client import GeminiBackend, LlmInvocationError, UploadFailure
from .polly_tts import PollySpeechBackend, SpeechSynthesisError
from .response_contract import Degraded, Parsed, parse_contract

__all__ = [
    "Degraded",
    "GeminiBackend",
    "LlmInvocationError",
    "Parsed",
    "PollySpeechBackend",
    "ProcessingFailed",
    "ProcessingTimeout",
    "SpeechSynthesisError",
    "UploadFailure",
    "parse_contract",
    "release_remote_file",
    "wait_until_active",
]
