"""Schemas for the voice query event stream."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class TranscriptionEventData(_CamelModel):
    success: bool = True
    user_query: str = Field(alias="userQuery")
    topic_category: str = Field(alias="topicCategory")
    is_relevant: bool = Field(alias="isRelevant")
    timestamp: str


class ErrorEventData(_CamelModel):
    success: bool = False
    error: str
    timestamp: str


class AssistantResponse(_CamelModel):
    text: str
    type: str
    audio: Optional[str] = None
    audio_mime_type: Optional[str] = Field(default=None, alias="audioMimeType")


class UserTurn(_CamelModel):
    text: str
    timestamp: str


class AssistantTurn(_CamelModel):
    text: str
    type: str
    timestamp: str


class Conversation(_CamelModel):
    user: UserTurn
    assistant: AssistantTurn


class QueryResult(_CamelModel):
    success: bool = True
    duration: str
    timestamp: str
    user_query: str = Field(alias="userQuery")
    search_params: Optional[Dict[str, Any]] = Field(default=None, alias="searchParams")
    match_count: Optional[int] = Field(default=None, alias="matchCount")
    response: AssistantResponse
    conversation: Conversation

    def to_payload(self) -> Dict[str, Any]:
        """Serialize with camelCase keys; search fields only appear on the search branch."""

        payload = self.model_dump(by_alias=True, mode="json")
        if self.search_params is None:
            payload.pop("searchParams")
        if self.match_count is None:
            payload.pop("matchCount")
        return payload
