"""End-to-end behaviour of the voice query orchestrator with fake collaborators."""

from __future__ import annotations

import base64
from datetime import timedelta
from typing import List

import pytest

from trace_api.pipelines.query import OFF_TOPIC_TEXT, PipelineEvent, VoiceQueryOrchestrator
from trace_api.domain.files import FileState

from conftest import (
    FIXED_NOW,
    FakeAiBackend,
    FakeRecordStore,
    FakeSpeechBackend,
    make_record,
    search_json,
    transcription_json,
)


async def _collect(orchestrator: VoiceQueryOrchestrator, upload) -> List[PipelineEvent]:
    return [event async for event in orchestrator.run(upload)]


def _orchestrator(store, ai, speech, config, sleep) -> VoiceQueryOrchestrator:
    return VoiceQueryOrchestrator(store, ai, speech, config, clock=lambda: FIXED_NOW, sleep=sleep)


@pytest.mark.asyncio
async def test_keys_query_finds_the_matching_record(pipeline_config, staged_audio, no_sleep) -> None:
    store = FakeRecordStore(
        [
            make_record("umbrella", objects=["umbrella"]),
            make_record(
                "keys",
                sent_at=FIXED_NOW - timedelta(hours=2),
                actions=["left"],
                objects=["car keys"],
                summary="You left your car keys on the shelf.",
            ),
        ]
    )
    ai = FakeAiBackend(
        transcription=transcription_json("Where did I leave my keys?"),
        search=search_json("left", ["keys"]),
        reply="You left your car keys on the shelf today around 12:30 PM.",
    )
    speech = FakeSpeechBackend(audio=b"spoken")

    events = await _collect(_orchestrator(store, ai, speech, pipeline_config, no_sleep), staged_audio)

    assert [event.name for event in events] == ["transcription", "response", "done"]

    transcription = events[0].data
    assert transcription["success"] is True
    assert transcription["userQuery"] == "Where did I leave my keys?"
    assert transcription["topicCategory"] == "lost_object"
    assert transcription["isRelevant"] is True
    assert transcription["timestamp"] == "2026-10-18T14:30:00.000Z"

    response = events[1].data
    assert response["success"] is True
    assert response["matchCount"] == 1
    assert response["searchParams"]["target_action"] == "left"
    assert response["response"]["type"] == "found"
    assert response["response"]["text"].startswith("You left your car keys")
    assert base64.b64decode(response["response"]["audio"]) == b"spoken"
    assert response["response"]["audioMimeType"] == "audio/mpeg"
    assert response["conversation"]["user"]["text"] == "Where did I leave my keys?"
    assert response["conversation"]["assistant"]["type"] == "found"
    assert response["duration"].endswith("s")

    assert events[2].data == {}
    assert store.list_calls == 1
    assert "today at 12:30 PM" in ai.text_prompts[-1]
    assert ai.deleted == ["files/abc123"]


@pytest.mark.asyncio
async def test_no_match_composes_not_found(pipeline_config, staged_audio, no_sleep) -> None:
    store = FakeRecordStore([make_record(objects=["umbrella"])])
    ai = FakeAiBackend(search=search_json(None, ["bicycle"]), reply="I couldn't find your bicycle.")

    events = await _collect(
        _orchestrator(store, ai, FakeSpeechBackend(), pipeline_config, no_sleep), staged_audio
    )

    response = events[1].data
    assert response["matchCount"] == 0
    assert response["response"]["type"] == "not_found"
    assert response["response"]["text"] == "I couldn't find your bicycle."


@pytest.mark.asyncio
async def test_off_topic_query_skips_the_record_store(pipeline_config, staged_audio, no_sleep) -> None:
    store = FakeRecordStore([make_record(objects=["keys"])])
    ai = FakeAiBackend(
        transcription=transcription_json("Tell me a joke", relevant=False, category="off_topic")
    )
    speech = FakeSpeechBackend()

    events = await _collect(_orchestrator(store, ai, speech, pipeline_config, no_sleep), staged_audio)

    assert [event.name for event in events] == ["transcription", "response", "done"]
    response = events[1].data
    assert response["response"]["type"] == "off_topic"
    assert response["response"]["text"] == OFF_TOPIC_TEXT
    assert "searchParams" not in response
    assert "matchCount" not in response
    assert store.list_calls == 0
    assert ai.text_prompts == []
    assert speech.texts == [OFF_TOPIC_TEXT]
    assert ai.deleted == ["files/abc123"]


@pytest.mark.asyncio
async def test_failure_after_transcription_emits_error_last(pipeline_config, staged_audio, no_sleep) -> None:
    ai = FakeAiBackend(search_error=RuntimeError("model overloaded"))

    events = await _collect(
        _orchestrator(FakeRecordStore(), ai, FakeSpeechBackend(), pipeline_config, no_sleep),
        staged_audio,
    )

    assert [event.name for event in events] == ["transcription", "error"]
    assert events[1].data["success"] is False
    assert events[1].data["error"] == "model overloaded"
    assert ai.deleted == ["files/abc123"]


@pytest.mark.asyncio
async def test_upload_failure_emits_only_error(pipeline_config, staged_audio, no_sleep) -> None:
    ai = FakeAiBackend(upload_error=RuntimeError("upload rejected"))

    events = await _collect(
        _orchestrator(FakeRecordStore(), ai, FakeSpeechBackend(), pipeline_config, no_sleep),
        staged_audio,
    )

    assert [event.name for event in events] == ["error"]
    assert events[0].data["error"] == "upload rejected"
    assert ai.deleted == []


@pytest.mark.asyncio
async def test_processing_timeout_releases_the_file_once(pipeline_config, staged_audio, no_sleep) -> None:
    ai = FakeAiBackend(states=[FileState.PROCESSING])

    events = await _collect(
        _orchestrator(FakeRecordStore(), ai, FakeSpeechBackend(), pipeline_config, no_sleep),
        staged_audio,
    )

    assert [event.name for event in events] == ["error"]
    assert events[0].data["error"].startswith("Timeout")
    assert len(no_sleep.calls) == pipeline_config.poll_max_attempts
    assert ai.deleted == ["files/abc123"]


@pytest.mark.asyncio
async def test_speech_failure_still_completes_without_audio(pipeline_config, staged_audio, no_sleep) -> None:
    store = FakeRecordStore([make_record(actions=["left"], objects=["keys"])])
    speech = FakeSpeechBackend(error=RuntimeError("polly unavailable"))

    events = await _collect(
        _orchestrator(store, FakeAiBackend(), speech, pipeline_config, no_sleep), staged_audio
    )

    assert [event.name for event in events] == ["transcription", "response", "done"]
    assert events[1].data["response"]["audio"] is None
    assert events[1].data["response"]["audioMimeType"] is None


@pytest.mark.asyncio
async def test_failing_delete_does_not_fail_the_request(pipeline_config, staged_audio, no_sleep) -> None:
    ai = FakeAiBackend(delete_error=RuntimeError("gone"))

    events = await _collect(
        _orchestrator(FakeRecordStore(), ai, FakeSpeechBackend(), pipeline_config, no_sleep),
        staged_audio,
    )

    assert [event.name for event in events] == ["transcription", "response", "done"]
    assert ai.deleted == ["files/abc123"]
