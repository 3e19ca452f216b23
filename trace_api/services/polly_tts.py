"""Amazon Polly text-to-speech backend."""

from __future__ import annotations

import logging
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from trace_api.application.interfaces import SpeechBackendInterface

logger = logging.getLogger(__name__)

_MEDIA_TYPES = {
    "mp3": "audio/mpeg",
    "ogg_vorbis": "audio/ogg",
    "pcm": "audio/L16",
}


class SpeechSynthesisError(RuntimeError):
    """Raised when Polly cannot synthesize the requested text."""


class PollySpeechBackend(SpeechBackendInterface):
    """Generate spoken replies with Amazon Polly."""

    def __init__(
        self,
        client: Any,
        *,
        voice_id: str,
        engine: str = "neural",
        output_format: str = "mp3",
    ) -> None:
        self._client = client
        self._voice_id = voice_id
        self._engine = engine
        self._output_format = output_format
        self.media_type = _MEDIA_TYPES.get(output_format, "application/octet-stream")

    async def synthesize(self, text: str) -> Optional[bytes]:
        """Return encoded audio for ``text``, or ``None`` if Polly sent no stream."""

        try:
            response: dict[str, Any] = await run_in_threadpool(
                self._client.synthesize_speech,
                Text=text,
                VoiceId=self._voice_id,
                Engine=self._engine,
                OutputFormat=self._output_format,
            )
        except (BotoCoreError, ClientError) as exc:
            raise SpeechSynthesisError(f"Failed to synthesize speech: {exc}") from exc

        audio_stream = response.get("AudioStream")
        if audio_stream is None:
            return None
        audio_bytes = await run_in_threadpool(audio_stream.read)
        return audio_bytes or None


__all__ = ["PollySpeechBackend", "SpeechSynthesisError"]
