"""Backend-neutral view of a file ingested by the generative AI backend."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class FileState(str, Enum):
    PROCESSING = "processing"
    ACTIVE = "active"
    FAILED = "failed"


@dataclass(frozen=True)
class RemoteFile:
    """Handle to an uploaded file; ``name`` is what deletion needs."""

    name: str
    uri: Optional[str]
    mime_type: Optional[str]
    state: FileState
    error_message: Optional[str] = None


__all__ = ["FileState", "RemoteFile"]
