"""Tests for environment configuration and media file helpers."""
from __future__ import annotations

import wave
from pathlib import Path

import pytest

from moodjournal.core.config import load_recording_config, load_transcription_config, load_upload_config
from moodjournal.domain.models import MediaKind
from moodjournal.infra.media_files import content_type_for, file_size, media_kind_for, to_local_path
from moodjournal.infra.media_probe import probe_duration


class TestConfig:
    def test_transcription_defaults(self, monkeypatch):
        for name in ("ASSEMBLYAI_API_KEY", "ASSEMBLYAI_BASE_URL", "TRANSCRIPTION_MAX_ATTEMPTS"):
            monkeypatch.delenv(name, raising=False)
        config = load_transcription_config()
        assert config.api_key is None
        assert config.base_url == "https://api.assemblyai.com/v2"
        assert config.max_attempts == 30
        assert config.poll_interval == 2.0
        assert config.language_code == "fr"

    def test_transcription_env(self, monkeypatch):
        monkeypatch.setenv("ASSEMBLYAI_API_KEY", "  key  ")
        monkeypatch.setenv("ASSEMBLYAI_BASE_URL", "https://stt.test/v2/")
        monkeypatch.setenv("TRANSCRIPTION_MAX_ATTEMPTS", "not a number")
        config = load_transcription_config()
        assert config.api_key == "key"
        assert config.base_url == "https://stt.test/v2"
        assert config.max_attempts == 30

    @pytest.mark.parametrize("raw, expected", [("30", 90.0), ("100", 100.0), ("500", 120.0), (None, 90.0)])
    def test_upload_timeout_is_clamped(self, monkeypatch, raw, expected):
        if raw is None:
            monkeypatch.delenv("UPLOAD_TIMEOUT_SECONDS", raising=False)
        else:
            monkeypatch.setenv("UPLOAD_TIMEOUT_SECONDS", raw)
        assert load_upload_config().timeout == expected

    def test_recording_env(self, monkeypatch):
        monkeypatch.setenv("RECORDING_SAMPLE_RATE", "16000")
        monkeypatch.setenv("RECORDING_CHANNELS", "0")
        config = load_recording_config()
        assert config.sample_rate == 16000
        assert config.channels == 1


class TestMediaFiles:
    def test_file_uri(self, tmp_path):
        path = tmp_path / "mon enregistrement.m4a"
        assert to_local_path(path.as_uri()) == path
        assert to_local_path(str(path)) == path

    @pytest.mark.parametrize(
        "name, kind, ctype",
        [
            ("a.m4a", MediaKind.AUDIO, "audio/m4a"),
            ("a.WAV", MediaKind.AUDIO, "audio/wav"),
            ("a.mp4", MediaKind.VIDEO, "video/mp4"),
            ("a.mov", MediaKind.VIDEO, "video/quicktime"),
            ("a.bin", MediaKind.AUDIO, "application/octet-stream"),
        ],
    )
    def test_kind_and_content_type(self, name, kind, ctype):
        assert media_kind_for(Path(name)) is kind
        assert content_type_for(Path(name)) == ctype

    def test_file_size(self, tmp_path, audio_file):
        assert file_size(audio_file) > 0
        assert file_size(tmp_path / "absent") == 0
        assert file_size(tmp_path) == 0


class TestProbeDuration:
    def test_wav(self, tmp_path):
        path = tmp_path / "one_second.wav"
        with wave.open(str(path), "wb") as w:
            w.setnchannels(1)
            w.setsampwidth(2)
            w.setframerate(8000)
            w.writeframes(b"\x00\x00" * 8000)
        assert probe_duration(path) == pytest.approx(1.0)

    def test_unreadable(self, tmp_path, audio_file):
        assert probe_duration(audio_file) is None
        assert probe_duration(tmp_path / "absent.wav") is None
