"""Thin Gemini client wrapper for content generation and file ingestion."""

from __future__ import annotations

import logging
from typing import Any, Optional

from google import genai
from google.genai import types

from trace_api.application.interfaces import GenerativeBackendInterface
from trace_api.domain.files import FileState, RemoteFile

logger = logging.getLogger(__name__)


class LlmInvocationError(RuntimeError):
    """Raised when a Gemini call fails at the transport or API level."""


class UploadFailure(LlmInvocationError):
    """Raised when a local file cannot be handed to the Gemini Files API."""


_STATE_MAP = {
    "PROCESSING": FileState.PROCESSING,
    "ACTIVE": FileState.ACTIVE,
    "FAILED": FileState.FAILED,
}


def _to_remote_file(file: Any) -> RemoteFile:
    raw_state = getattr(file, "state", None)
    state_name = getattr(raw_state, "name", None) or str(raw_state or "")
    # Unknown/unspecified states are treated as still processing.
    state = _STATE_MAP.get(state_name.upper(), FileState.PROCESSING)
    error = getattr(file, "error", None)
    return RemoteFile(
        name=file.name,
        uri=getattr(file, "uri", None),
        mime_type=getattr(file, "mime_type", None),
        state=state,
        error_message=getattr(error, "message", None) if error else None,
    )


class GeminiBackend(GenerativeBackendInterface):
    """Invoke Gemini models through the async (``client.aio``) surface."""

    def __init__(self, client: genai.Client) -> None:
        self._client = client

    @classmethod
    def from_api_key(cls, api_key: str) -> "GeminiBackend":
        return cls(genai.Client(api_key=api_key))

    async def upload_file(self, path: str, *, mime_type: str, display_name: str) -> RemoteFile:
        try:
            uploaded = await self._client.aio.files.upload(
                file=path,
                config=types.UploadFileConfig(mime_type=mime_type, display_name=display_name),
            )
        except Exception as exc:  # pragma: no cover - external dependency
            raise UploadFailure(f"Failed to upload {display_name}: {exc}") from exc
        logger.info("Upload ok: %s", uploaded.name)
        return _to_remote_file(uploaded)

    async def get_file(self, name: str) -> RemoteFile:
        try:
            file = await self._client.aio.files.get(name=name)
        except Exception as exc:  # pragma: no cover - external dependency
            raise LlmInvocationError(str(exc)) from exc
        return _to_remote_file(file)

    async def delete_file(self, name: str) -> None:
        try:
            await self._client.aio.files.delete(name=name)
        except Exception as exc:  # pragma: no cover - external dependency
            raise LlmInvocationError(str(exc)) from exc

    async def generate_from_file(
        self,
        remote_file: RemoteFile,
        prompt: str,
        *,
        model: str,
        response_mime_type: str = "application/json",
    ) -> Optional[str]:
        contents = [
            types.Content(
                role="user",
                parts=[
                    types.Part.from_uri(
                        file_uri=remote_file.uri,
                        mime_type=remote_file.mime_type,
                    ),
                    types.Part(text=prompt),
                ],
            )
        ]
        return await self._generate(model, contents, response_mime_type)

    async def generate_text(
        self,
        prompt: str,
        *,
        model: str,
        response_mime_type: str = "text/plain",
    ) -> Optional[str]:
        contents = [types.Content(role="user", parts=[types.Part(text=prompt)])]
        return await self._generate(model, contents, response_mime_type)

    async def _generate(
        self,
        model: str,
        contents: list[types.Content],
        response_mime_type: str,
    ) -> Optional[str]:
        try:
            response = await self._client.aio.models.generate_content(
                model=model,
                contents=contents,
                config=types.GenerateContentConfig(response_mime_type=response_mime_type),
            )
        except Exception as exc:
            raise LlmInvocationError(str(exc)) from exc

        text = getattr(response, "text", None)
        return text.strip() if text else None


__all__ = ["GeminiBackend", "LlmInvocationError", "UploadFailure"]
