"""Pydantic schemas used as views in the MVC architecture."""

from .analyze import VideoAnalysisError, VideoAnalysisResponse
from .common import UploadErrorResponse
from .query import (
    AssistantResponse,
    AssistantTurn,
    Conversation,
    ErrorEventData,
    QueryResult,
    TranscriptionEventData,
    UserTurn,
)

__all__ = [
    "AssistantResponse",
    "AssistantTurn",
    "Conversation",
    "ErrorEventData",
    "QueryResult",
    "TranscriptionEventData",
    "UploadErrorResponse",
    "UserTurn",
    "VideoAnalysisError",
    "VideoAnalysisResponse",
]
