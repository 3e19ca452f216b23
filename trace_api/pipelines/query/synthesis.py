"""Speech synthesis stage. Never fails the request: any problem yields no audio."""

from __future__ import annotations

import logging
import re
from typing import Optional

from trace_api.application.interfaces import SpeechBackendInterface

from .types import SynthesizedAudio

logger = logging.getLogger("trace_api.pipelines.query")

_EMOJI_PATTERN = re.compile("[\U0001F300-\U0001FAFF\u2600-\u26FF\u2700-\u27BF]")
_BULLET_PATTERN = re.compile("(?m)^\\s*(?:[-*+]|\\d+[.)])\\s+|[\u2022\u25e6\u25aa\u2023]")
_WHITESPACE_PATTERN = re.compile(r"\s+")


def clean_for_speech(text: str) -> str:
    """Drop emoji, bullet markers and line breaks so the voice reads plain sentences."""

    cleaned = _EMOJI_PATTERN.sub("", text or "")
    cleaned = _BULLET_PATTERN.sub(" ", cleaned)
    cleaned = cleaned.replace("\r", " ").replace("\n", " ")
    return _WHITESPACE_PATTERN.sub(" ", cleaned).strip()


async def synthesize_reply(
    backend: SpeechBackendInterface,
    text: str,
) -> Optional[SynthesizedAudio]:
    cleaned = clean_for_speech(text)
    if not cleaned:
        return None

    try:
        audio = await backend.synthesize(cleaned)
    except Exception as exc:
        logger.warning("Speech synthesis failed: %s", exc)
        return None

    if not audio:
        logger.info("Speech backend returned no audio")
        return None

    logger.info("Audio generated (%s bytes)", len(audio))
    return SynthesizedAudio(data=audio, media_type=backend.media_type)


__all__ = ["clean_for_speech", "synthesize_reply"]
