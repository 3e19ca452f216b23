"""Shared fakes for the pipeline and endpoint tests."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
import sys
from typing import List, Optional, Sequence

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from trace_api.application.interfaces import (  # noqa: E402
    GenerativeBackendInterface,
    RecordStoreInterface,
    SpeechBackendInterface,
)
from trace_api.domain.files import FileState, RemoteFile  # noqa: E402
from trace_api.domain.models import AnalysisRecord, NewAnalysisRecord  # noqa: E402
from trace_api.pipelines.ingestion import StagedUpload  # noqa: E402
from trace_api.pipelines.query import PipelineConfig  # noqa: E402

FIXED_NOW = datetime(2026, 10, 18, 14, 30, tzinfo=timezone.utc)


def transcription_json(text: str, *, relevant: bool = True, category: str = "lost_object") -> str:
    return json.dumps(
        {"transcription": text, "is_relevant": relevant, "topic_category": category}
    )


def search_json(
    action: Optional[str] = None,
    objects: Sequence[str] = (),
    location: Optional[str] = None,
    time_context: str = "recent",
) -> str:
    return json.dumps(
        {
            "search_parameters": {
                "target_action": action,
                "target_objects": list(objects),
                "target_location": location,
                "time_context": time_context,
            }
        }
    )


class FakeAiBackend(GenerativeBackendInterface):
    """Scripted stand-in for the Gemini backend."""

    def __init__(
        self,
        *,
        transcription: Optional[str] = None,
        search: Optional[str] = None,
        reply: Optional[str] = "Your keys are on the kitchen counter.",
        states: Sequence[FileState] = (FileState.ACTIVE,),
        upload_error: Optional[Exception] = None,
        delete_error: Optional[Exception] = None,
        search_error: Optional[Exception] = None,
    ) -> None:
        self.transcription = transcription if transcription is not None else transcription_json("Where are my keys?")
        self.search = search if search is not None else search_json("left", ["keys"])
        self.reply = reply
        self._states = list(states)
        self.upload_error = upload_error
        self.delete_error = delete_error
        self.search_error = search_error
        self.uploads: List[str] = []
        self.get_calls = 0
        self.deleted: List[str] = []
        self.text_prompts: List[str] = []
        self.file_prompts: List[str] = []

    def _file(self, state: FileState) -> RemoteFile:
        return RemoteFile(
            name="files/abc123",
            uri="https://example.com/files/abc123",
            mime_type="audio/mpeg",
            state=state,
            error_message="decoder error" if state is FileState.FAILED else None,
        )

    async def upload_file(self, path, *, mime_type, display_name):
        if self.upload_error is not None:
            raise self.upload_error
        self.uploads.append(display_name)
        return self._file(FileState.PROCESSING)

    async def get_file(self, name):
        self.get_calls += 1
        state = self._states.pop(0) if len(self._states) > 1 else self._states[0]
        return self._file(state)

    async def delete_file(self, name):
        self.deleted.append(name)
        if self.delete_error is not None:
            raise self.delete_error

    async def generate_from_file(self, remote_file, prompt, *, model, response_mime_type="application/json"):
        self.file_prompts.append(prompt)
        return self.transcription

    async def generate_text(self, prompt, *, model, response_mime_type="text/plain"):
        self.text_prompts.append(prompt)
        if response_mime_type == "application/json":
            if self.search_error is not None:
                raise self.search_error
            return self.search
        return self.reply


class FakeSpeechBackend(SpeechBackendInterface):
    media_type = "audio/mpeg"

    def __init__(self, audio: Optional[bytes] = b"ID3-fake-mp3", error: Optional[Exception] = None) -> None:
        self.audio = audio
        self.error = error
        self.texts: List[str] = []

    async def synthesize(self, text):
        self.texts.append(text)
        if self.error is not None:
            raise self.error
        return self.audio


class FakeRecordStore(RecordStoreInterface):
    def __init__(self, records: Sequence[AnalysisRecord] = ()) -> None:
        self.records = list(records)
        self.list_calls = 0
        self.inserted: List[NewAnalysisRecord] = []

    async def insert(self, record):
        self.inserted.append(record)
        return f"rec-{len(self.inserted)}"

    async def list_all(self):
        self.list_calls += 1
        return list(self.records)


def make_record(record_id: str = "rec-1", sent_at: datetime = FIXED_NOW, **analysis) -> AnalysisRecord:
    return AnalysisRecord(id=record_id, sent_at=sent_at, analysis=analysis)


@pytest.fixture
def pipeline_config() -> PipelineConfig:
    return PipelineConfig(
        transcription_model="test-transcribe",
        query_model="test-query",
        poll_interval_seconds=1.0,
        poll_max_attempts=30,
        timezone="UTC",
    )


@pytest.fixture
def staged_audio(tmp_path: Path) -> StagedUpload:
    path = tmp_path / "query.mp3"
    path.write_bytes(b"fake-audio")
    return StagedUpload(path=path, original_name="query.mp3", mime_type="audio/mpeg", size_bytes=10)


@pytest.fixture
def no_sleep():
    calls: List[float] = []

    async def _sleep(seconds: float) -> None:
        calls.append(seconds)

    _sleep.calls = calls
    return _sleep
