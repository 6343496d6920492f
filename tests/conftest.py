"""Shared fixtures: fake capture devices, temp stores, fake sleep."""
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import pytest

from moodjournal.domain.analyzer import KeywordEmotionAnalyzer
from moodjournal.domain.models import MediaKind, TranscriptionResult
from moodjournal.infra.journal_repo import YamlJournalStore
from moodjournal.recording.backends import CaptureBackend
from moodjournal.recording.registry import DeviceRegistry
from moodjournal.services.journal_service import JournalService


class FakeBackend(CaptureBackend):
    """Writes a few bytes instead of talking to a real device."""

    def __init__(
        self,
        kind: MediaKind = MediaKind.AUDIO,
        *,
        permission: bool = True,
        fail_open: Optional[Exception] = None,
        fail_close: Optional[Exception] = None,
    ):
        self.kind = kind
        self.extension = ".wav" if kind is MediaKind.AUDIO else ".mp4"
        self.permission = permission
        self.fail_open = fail_open
        self.fail_close = fail_close
        self.path: Optional[Path] = None
        self.calls: List[str] = []

    def check_permission(self) -> bool:
        self.calls.append("check_permission")
        return self.permission

    def open(self, path: Path) -> None:
        self.calls.append("open")
        self.path = path
        path.write_bytes(b"RIFF partial")
        if self.fail_open is not None:
            raise self.fail_open

    def close(self) -> None:
        self.calls.append("close")
        if self.fail_close is not None:
            raise self.fail_close
        self.path.write_bytes(b"RIFF complete recording")

    def abort(self) -> None:
        self.calls.append("abort")


class FakeTranscriber:
    """Returns a canned transcript or raises the configured error."""

    def __init__(self, text="", confidence=0.9, error=None):
        self.text = text
        self.confidence = confidence
        self.error = error
        self.calls = []

    async def transcribe(self, audio_uri):
        self.calls.append(audio_uri)
        if self.error is not None:
            raise self.error
        return TranscriptionResult(text=self.text, confidence=self.confidence, job_id="job-1")


class FakeSleep:
    """Records requested delays without waiting."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def registry() -> DeviceRegistry:
    return DeviceRegistry()


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()


@pytest.fixture
def analyzer() -> KeywordEmotionAnalyzer:
    return KeywordEmotionAnalyzer()


@pytest.fixture
def store(tmp_path) -> YamlJournalStore:
    return YamlJournalStore(tmp_path / "journal")


@pytest.fixture
def journal_service(store, analyzer) -> JournalService:
    return JournalService(store, analyzer)


@pytest.fixture
def audio_file(tmp_path) -> Path:
    path = tmp_path / "recording_1700000000000.m4a"
    path.write_bytes(b"\x00\x00\x00\x18ftypM4A fake audio payload")
    return path
