"""Schemas for the single-video analysis endpoint."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class VideoAnalysisResponse(BaseModel):
    success: bool = True
    sent_at: str = Field(alias="sentAt")
    duration: str
    filename: str
    filesize: str
    analysis: Dict[str, Any]
    traceback_id: Optional[str] = Field(default=None, alias="tracebackId")

    model_config = ConfigDict(populate_by_name=True)


class VideoAnalysisError(BaseModel):
    success: bool = False
    sent_at: str = Field(alias="sentAt")
    error: str

    model_config = ConfigDict(populate_by_name=True)
