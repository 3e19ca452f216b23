"""Response composition stage: turn the best match (or its absence) into prose."""

from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from typing import List, Optional

from trace_api.application.interfaces import GenerativeBackendInterface
from trace_api.domain.models import AnalysisRecord, ResponseType

from .extraction import format_clock_time
from .types import ComposedReply, ScoredMatch, TimeContext

logger = logging.getLogger("trace_api.pipelines.query")

OFF_TOPIC_TEXT = (
    "I appreciate you reaching out! I'm Trace, your personal memory assistant. "
    "I'm here specifically to help you remember past activities, find lost objects, "
    "or recall events captured by your smart glasses. Feel free to ask me things like "
    "'Where did I put my keys?' or 'What was I doing this morning?' "
    "I'm always here to help with your memories!"
)

NOT_FOUND_FALLBACK_TEXT = (
    "I understand you're looking for that memory. I don't have a recording of that "
    "specific moment yet, but try retracing your steps, and I'll keep listening for it."
)


def _localize(moment: datetime, tz: tzinfo) -> datetime:
    # Naive timestamps from the store are UTC.
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz)


def format_record_date(moment: datetime) -> str:
    """``Sunday, Oct 18, 2026``"""
    return f"{moment:%A, %b} {moment.day}, {moment.year}"


def relative_day(sent_at: datetime, now: datetime) -> str:
    """Describe ``sent_at`` relative to ``now`` by calendar day in ``now``'s timezone."""

    tz = now.tzinfo or timezone.utc
    event = _localize(sent_at, tz)
    today = now if now.tzinfo else now.replace(tzinfo=timezone.utc)
    days = (today.date() - event.date()).days

    if days == 0:
        return "today"
    if days == 1:
        return "yesterday"
    if 2 <= days <= 6:
        return f"{days} days ago"
    return f"on {format_record_date(event)}"


def build_match_facts(record: AnalysisRecord, now: datetime) -> List[str]:
    analysis = record.analysis
    facts: List[str] = []

    if record.sent_at is not None:
        event = _localize(record.sent_at, now.tzinfo or timezone.utc)
        facts.append(
            f"when: {relative_day(record.sent_at, now)} at {format_clock_time(event)} "
            f"({format_record_date(event)})"
        )
    if analysis.summary:
        facts.append(analysis.summary)
    if analysis.locations:
        facts.append(f"location: {', '.join(analysis.locations)}")
    if analysis.objects:
        facts.append(f"objects: {', '.join(analysis.objects)}")
    return facts


def found_fallback_text(facts: List[str]) -> str:
    return f"I found a recording that looks relevant: {'; '.join(facts)}."


async def compose_found_response(
    backend: GenerativeBackendInterface,
    transcription: str,
    best_match: ScoredMatch,
    time_context: TimeContext,
    now: datetime,
    *,
    model: str,
) -> ComposedReply:
    facts = build_match_facts(best_match.record, now)
    prompt = (
        "You are Trace, a friendly personal memory assistant. "
        f'The user asked: "{transcription}". '
        "I searched the database and found a likely match. Use the following facts to compose "
        "a warm, conversational reply. IMPORTANT: Always mention the time and relative date "
        '(e.g. "today around 2:30 PM", "yesterday at 9 AM", "3 days ago") so the user knows '
        "exactly when it happened. Do NOT use bullet lists or enumerations; write in full natural "
        "sentences like a real human conversation. Keep it short (2-4 sentences).\n\n"
        f"CURRENT TIME: {time_context.date} at {time_context.time}\n"
        f"FACTS: {' | '.join(facts)}\n\n"
        "Output only the assistant reply text."
    )
    text = await backend.generate_text(prompt, model=model, response_mime_type="text/plain")
    if not text or not text.strip():
        logger.info("Empty found-reply from model; using fact summary")
        text = found_fallback_text(facts)
    return ComposedReply(text=text.strip(), response_type=ResponseType.FOUND)


async def compose_not_found_response(
    backend: GenerativeBackendInterface,
    transcription: str,
    *,
    model: str,
) -> ComposedReply:
    prompt = (
        "You are Trace, a compassionate personal memory assistant. "
        f'The user asked: "{transcription}" but no matching recordings were found. '
        "Reply in a warm, human conversational tone without using bullet lists. Offer gentle, "
        "practical suggestions phrased as natural sentences (not a list). Keep the reply concise "
        "(2-4 sentences) and encouraging."
    )
    text = await backend.generate_text(prompt, model=model, response_mime_type="text/plain")
    if not text or not text.strip():
        text = NOT_FOUND_FALLBACK_TEXT
    return ComposedReply(text=text.strip(), response_type=ResponseType.NOT_FOUND)


def compose_off_topic_response() -> ComposedReply:
    return ComposedReply(text=OFF_TOPIC_TEXT, response_type=ResponseType.OFF_TOPIC)


async def compose_response(
    backend: GenerativeBackendInterface,
    transcription: str,
    best_match: Optional[ScoredMatch],
    time_context: TimeContext,
    now: datetime,
    *,
    model: str,
) -> ComposedReply:
    """Pick the found or not-found template depending on ``best_match``."""

    if best_match is not None:
        return await compose_found_response(
            backend, transcription, best_match, time_context, now, model=model
        )
    return await compose_not_found_response(backend, transcription, model=model)


__all__ = [
    "NOT_FOUND_FALLBACK_TEXT",
    "OFF_TOPIC_TEXT",
    "build_match_facts",
    "compose_found_response",
    "compose_not_found_response",
    "compose_off_topic_response",
    "compose_response",
    "format_record_date",
    "found_fallback_text",
    "relative_day",
]
