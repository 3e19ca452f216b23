"""Request ingestion helpers shared by the query and video pipelines.

Uploads are validated here and staged to a local temporary file, which is
what the generative backend's file API consumes.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Mapping
from uuid import uuid4

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)

AUDIO_MIME_TYPES: Final[Mapping[str, str]] = {
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".m4a": "audio/mp4",
    ".aac": "audio/aac",
    ".ogg": "audio/ogg",
    ".oga": "audio/ogg",
    ".flac": "audio/flac",
    ".webm": "audio/webm",
    ".aiff": "audio/aiff",
    ".aif": "audio/aiff",
    ".amr": "audio/amr",
    ".opus": "audio/opus",
}

VIDEO_MIME_TYPES: Final[Mapping[str, str]] = {
    ".mp4": "video/mp4",
    ".mov": "video/quicktime",
    ".avi": "video/x-msvideo",
    ".mkv": "video/x-matroska",
    ".webm": "video/webm",
    ".m4v": "video/x-m4v",
    ".3gp": "video/3gpp",
    ".mpeg": "video/mpeg",
    ".mpg": "video/mpeg",
    ".wmv": "video/x-ms-wmv",
    ".flv": "video/x-flv",
}

_GENERIC_CONTENT_TYPES: Final[set[str]] = {"", "application/octet-stream"}

CHUNK_SIZE: Final[int] = 1024 * 1024


class UploadRejected(RuntimeError):
    """Raised when an upload cannot be accepted; answered as HTTP 400 `{success, error}`."""


@dataclass(frozen=True)
class StagedUpload:
    """An upload copied to local disk; ``path`` must be discarded by the caller."""

    path: Path
    original_name: str
    mime_type: str
    size_bytes: int

    @property
    def size_label(self) -> str:
        return f"{self.size_bytes / 1024:.2f} KB"


def resolve_content_type(upload: UploadFile, table: Mapping[str, str], family: str) -> str:
    """Trust the client's content type unless it is generic; then fall back to the extension."""

    extension = Path(upload.filename or "").suffix.lower()
    content_type = (upload.content_type or "").lower()
    if content_type in _GENERIC_CONTENT_TYPES:
        content_type = table.get(extension, "")

    if content_type not in table.values() and not content_type.startswith(f"{family}/"):
        raise UploadRejected(
            f"Unsupported {family} type: {upload.content_type or 'unknown'} ({extension or 'no extension'})"
        )
    return content_type


async def stage_upload(
    upload: UploadFile,
    directory: str,
    mime_type: str,
    *,
    max_bytes: int,
) -> StagedUpload:
    """Copy the upload under ``directory`` in chunks, rejecting it once it exceeds ``max_bytes``."""

    original_name = upload.filename or "upload"
    suffix = Path(original_name).suffix.lower()
    path = Path(directory) / f"{int(time.time() * 1000)}-{uuid4().hex}{suffix}"
    await run_in_threadpool(path.parent.mkdir, parents=True, exist_ok=True)

    size = 0
    handle = await run_in_threadpool(open, path, "wb")
    try:
        while True:
            chunk = await upload.read(CHUNK_SIZE)
            if not chunk:
                break
            size += len(chunk)
            if size > max_bytes:
                raise UploadRejected("File too large")
            await run_in_threadpool(handle.write, chunk)
        if size == 0:
            raise UploadRejected("Uploaded file is empty")
    except BaseException:
        await run_in_threadpool(handle.close)
        await run_in_threadpool(discard_local_file, path)
        raise
    finally:
        await upload.close()

    await run_in_threadpool(handle.close)
    return StagedUpload(
        path=path,
        original_name=original_name,
        mime_type=mime_type,
        size_bytes=size,
    )


def discard_local_file(path: Path | str | None) -> None:
    """Remove a staged file; failures are logged, never raised."""

    if path is None:
        return
    try:
        os.remove(path)
    except FileNotFoundError:
        return
    except OSError as exc:
        logger.warning("Unable to delete local file %s: %s", path, exc)


__all__ = [
    "AUDIO_MIME_TYPES",
    "VIDEO_MIME_TYPES",
    "StagedUpload",
    "UploadRejected",
    "discard_local_file",
    "resolve_content_type",
    "stage_upload",
]
