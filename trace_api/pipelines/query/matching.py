"""Relevance scoring of stored records against search parameters.

Scores are additive per record:

* action   +3 when any record action matches ``target_action``
* object   +2 per target object matched by any record object
* tag      +1 per target object matched by any record tag
* location +1 when any record location matches ``target_location``

Two strings match when either contains the other, ignoring case. A target
contributes to each rule at most once. ``time_context`` is not scored.
Scoring is a pure function of ``(params, record)``; corpus order breaks ties.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from trace_api.domain.models import AnalysisRecord, SearchParameters

from .types import ScoredMatch

ACTION_WEIGHT = 3
OBJECT_WEIGHT = 2
TAG_WEIGHT = 1
LOCATION_WEIGHT = 1


def strings_match(target: str, candidate: str) -> bool:
    """Case-insensitive substring match in either direction; blanks never match."""

    left = target.strip().lower()
    right = candidate.strip().lower()
    if not left or not right:
        return False
    return left in right or right in left


def _any_match(target: Optional[str], candidates: Iterable[str]) -> bool:
    if not target:
        return False
    return any(strings_match(target, candidate) for candidate in candidates)


def score_record(params: SearchParameters, record: AnalysisRecord) -> ScoredMatch:
    analysis = record.analysis
    score = 0
    matched: List[str] = []

    if _any_match(params.target_action, analysis.actions):
        score += ACTION_WEIGHT
        matched.append("action")

    for target in params.target_objects:
        if _any_match(target, analysis.objects):
            score += OBJECT_WEIGHT
            matched.append(f"object:{target}")

    for target in params.target_objects:
        if _any_match(target, analysis.tags):
            score += TAG_WEIGHT
            matched.append(f"tag:{target}")

    if _any_match(params.target_location, analysis.locations):
        score += LOCATION_WEIGHT
        matched.append("location")

    return ScoredMatch(record=record, score=score, matched_fields=tuple(matched))


def match_records(
    params: SearchParameters,
    corpus: Sequence[AnalysisRecord],
) -> List[ScoredMatch]:
    """Score every record, drop non-positive scores, order by descending score."""

    scored = (score_record(params, record) for record in corpus)
    # sorted() is stable with reverse=True, so equal scores keep corpus order.
    return sorted(
        (match for match in scored if match.score > 0),
        key=lambda match: match.score,
        reverse=True,
    )


__all__ = [
    "ACTION_WEIGHT",
    "LOCATION_WEIGHT",
    "OBJECT_WEIGHT",
    "TAG_WEIGHT",
    "match_records",
    "score_record",
    "strings_match",
]
