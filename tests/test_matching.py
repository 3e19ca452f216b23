"""Scoring and ordering of stored records against search parameters."""

from __future__ import annotations

from trace_api.domain.models import SearchParameters
from trace_api.pipelines.query import match_records, score_record, strings_match

from conftest import make_record


def test_strings_match_is_case_insensitive_both_directions() -> None:
    assert strings_match("keys", "Car Keys")
    assert strings_match("car keys", "KEYS")
    assert not strings_match("xyz", "abc")


def test_blank_strings_never_match() -> None:
    assert not strings_match("", "keys")
    assert not strings_match("keys", "   ")


def test_action_object_and_location_add_up() -> None:
    params = SearchParameters(
        target_action="left",
        target_objects=["keys"],
        target_location="kitchen",
    )
    record = make_record(actions=["left"], objects=["keys"], locations=["kitchen"])

    match = score_record(params, record)

    assert match.score == 6
    assert match.matched_fields == ("action", "object:keys", "location")


def test_object_and_tag_matches_are_additive() -> None:
    params = SearchParameters(target_objects=["wallet"])
    record = make_record(objects=["brown wallet"], tags=["wallet"])

    assert score_record(params, record).score == 3


def test_each_target_counts_once_per_rule() -> None:
    params = SearchParameters(target_objects=["keys"])
    record = make_record(objects=["keys", "car keys", "house keys"])

    assert score_record(params, record).score == 2


def test_missing_fields_contribute_nothing() -> None:
    params = SearchParameters(
        target_action="put",
        target_objects=["phone"],
        target_location="desk",
    )
    record = make_record(summary="You walked outside.")

    assert score_record(params, record).score == 0


def test_time_context_does_not_affect_score() -> None:
    record = make_record(objects=["keys"])
    today = SearchParameters(target_objects=["keys"], time_context="today")
    unknown = SearchParameters(target_objects=["keys"], time_context="unknown")

    assert score_record(today, record).score == score_record(unknown, record).score


def test_match_records_drops_zero_scores_and_sorts_descending() -> None:
    params = SearchParameters(target_action="left", target_objects=["keys"])
    corpus = [
        make_record("none", objects=["umbrella"]),
        make_record("object-only", objects=["keys"]),
        make_record("both", actions=["left"], objects=["car keys"]),
    ]

    matches = match_records(params, corpus)

    assert [match.record.id for match in matches] == ["both", "object-only"]
    assert [match.score for match in matches] == [5, 2]


def test_ties_keep_corpus_order() -> None:
    params = SearchParameters(target_objects=["keys"])
    corpus = [
        make_record("first", objects=["keys"]),
        make_record("second", objects=["keys"]),
        make_record("third", objects=["keys"]),
    ]

    matches = match_records(params, corpus)

    assert [match.record.id for match in matches] == ["first", "second", "third"]


def test_empty_parameters_match_nothing() -> None:
    corpus = [make_record(actions=["left"], objects=["keys"])]

    assert match_records(SearchParameters(), corpus) == []
