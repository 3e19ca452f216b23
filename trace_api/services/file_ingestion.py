"""Bounded readiness polling for files ingested by the generative backend."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

from trace_api.application.interfaces import GenerativeBackendInterface
from trace_api.domain.files import FileState, RemoteFile

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


class ProcessingTimeout(RuntimeError):
    """Raised when an upload never leaves the processing state within the bound."""


class ProcessingFailed(RuntimeError):
    """Raised when the backend reports that processing an upload failed."""


async def wait_until_active(
    backend: GenerativeBackendInterface,
    name: str,
    *,
    interval_seconds: float,
    max_attempts: int,
    sleep: SleepFn = asyncio.sleep,
) -> RemoteFile:
    """Poll ``name`` until it is active; at most ``max_attempts`` waits of ``interval_seconds``."""

    file = await backend.get_file(name)
    attempts = 0
    while file.state is FileState.PROCESSING and attempts < max_attempts:
        await sleep(interval_seconds)
        file = await backend.get_file(name)
        attempts += 1

    if file.state is FileState.FAILED:
        raise ProcessingFailed(
            f"File processing failed: {file.error_message or 'Unknown error'}"
        )
    if file.state is not FileState.ACTIVE:
        raise ProcessingTimeout(
            f"Timeout: file {name} still {file.state.value} after "
            f"{max_attempts * interval_seconds:.0f}s"
        )

    logger.debug("File %s is ACTIVE after %s poll(s)", name, attempts)
    return file


async def release_remote_file(backend: GenerativeBackendInterface, name: str | None) -> None:
    """Best-effort deletion of an uploaded file; failures are logged only."""

    if not name:
        return
    try:
        await backend.delete_file(name)
    except Exception as exc:
        logger.warning("Unable to delete remote file %s: %s", name, exc)


__all__ = [
    "ProcessingFailed",
    "ProcessingTimeout",
    "SleepFn",
    "release_remote_file",
    "wait_until_active",
]
