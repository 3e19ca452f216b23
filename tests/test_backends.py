"""Adapters for the Gemini and Polly SDKs, exercised with stub clients."""

from __future__ import annotations

import io
from types import SimpleNamespace

import pytest
from botocore.exceptions import ClientError

from trace_api.domain.files import FileState
from trace_api.services.gemini_client import GeminiBackend, LlmInvocationError, _to_remote_file
from trace_api.services.polly_tts import PollySpeechBackend, SpeechSynthesisError


class StubPollyClient:
    def __init__(self, response=None, error=None) -> None:
        self.response = response
        self.error = error
        self.calls = []

    def synthesize_speech(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.mark.asyncio
async def test_polly_returns_audio_stream_bytes() -> None:
    client = StubPollyClient({"AudioStream": io.BytesIO(b"mp3-data")})
    backend = PollySpeechBackend(client, voice_id="Joanna")

    audio = await backend.synthesize("Your keys are on the counter.")

    assert audio == b"mp3-data"
    assert backend.media_type == "audio/mpeg"
    assert client.calls == [
        {
            "Text": "Your keys are on the counter.",
            "VoiceId": "Joanna",
            "Engine": "neural",
            "OutputFormat": "mp3",
        }
    ]


@pytest.mark.asyncio
async def test_polly_without_stream_returns_none() -> None:
    backend = PollySpeechBackend(StubPollyClient({}), voice_id="Joanna", output_format="ogg_vorbis")

    assert await backend.synthesize("Hello") is None
    assert backend.media_type == "audio/ogg"


@pytest.mark.asyncio
async def test_polly_client_error_is_wrapped() -> None:
    error = ClientError({"Error": {"Code": "ThrottlingException", "Message": "slow down"}}, "SynthesizeSpeech")
    backend = PollySpeechBackend(StubPollyClient(error=error), voice_id="Joanna")

    with pytest.raises(SpeechSynthesisError):
        await backend.synthesize("Hello")


def test_remote_file_state_mapping() -> None:
    active = _to_remote_file(
        SimpleNamespace(name="files/1", uri="gs://1", mime_type="audio/mpeg", state=SimpleNamespace(name="ACTIVE"))
    )
    failed = _to_remote_file(
        SimpleNamespace(
            name="files/2",
            uri=None,
            mime_type=None,
            state="FAILED",
            error=SimpleNamespace(message="bad codec"),
        )
    )
    unspecified = _to_remote_file(SimpleNamespace(name="files/3", state=SimpleNamespace(name="STATE_UNSPECIFIED")))

    assert active.state is FileState.ACTIVE
    assert failed.state is FileState.FAILED
    assert failed.error_message == "bad codec"
    assert unspecified.state is FileState.PROCESSING


def _stub_genai_client(generate):
    async def get(name):
        return SimpleNamespace(name=name, uri="gs://x", mime_type="audio/mpeg", state="ACTIVE")

    return SimpleNamespace(
        aio=SimpleNamespace(
            files=SimpleNamespace(get=get),
            models=SimpleNamespace(generate_content=generate),
        )
    )


@pytest.mark.asyncio
async def test_gemini_generate_text_strips_response() -> None:
    seen = {}

    async def generate(model, contents, config):
        seen["model"] = model
        seen["mime"] = config.response_mime_type
        return SimpleNamespace(text="  hello there \n")

    backend = GeminiBackend(_stub_genai_client(generate))

    text = await backend.generate_text("say hi", model="gemini-test", response_mime_type="application/json")

    assert text == "hello there"
    assert seen == {"model": "gemini-test", "mime": "application/json"}
    assert (await backend.get_file("files/9")).state is FileState.ACTIVE


@pytest.mark.asyncio
async def test_gemini_empty_response_is_none_and_errors_are_wrapped() -> None:
    async def empty(model, contents, config):
        return SimpleNamespace(text=None)

    async def boom(model, contents, config):
        raise ConnectionError("reset by peer")

    assert await GeminiBackend(_stub_genai_client(empty)).generate_text("x", model="m") is None
    with pytest.raises(LlmInvocationError, match="reset by peer"):
        await GeminiBackend(_stub_genai_client(boom)).generate_text("x", model="m")
