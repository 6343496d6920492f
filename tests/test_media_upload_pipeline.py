"""Unit tests for the media upload pipeline, uploader and local media library."""
from __future__ import annotations

import asyncio
from datetime import date, datetime

import httpx
import pytest

from moodjournal.core.config import UploadConfig
from moodjournal.exceptions import (
    ConfigError,
    FileNotReadyError,
    MediaLibraryError,
    MediaUploadError,
    UploadError,
    UploadTimeoutError,
)
from moodjournal.infra.cloudinary_client import CloudinaryUploader
from moodjournal.infra.media_library import MediaLibrary
from moodjournal.services.media_upload_pipeline import MediaUploadPipeline

CONFIG = UploadConfig(cloud_url="https://media.test/v1_1/demo", timeout=90.0)


def _uploader(handler, config=CONFIG) -> CloudinaryUploader:
    return CloudinaryUploader(config, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


def _ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"secure_url": "https://media.test/demo/rec.m4a", "public_id": "rec"})


class TestCloudinaryUploader:
    def test_missing_url(self):
        with pytest.raises(ConfigError):
            CloudinaryUploader(UploadConfig(cloud_url=None))

    def test_endpoint_by_media_kind(self, tmp_path):
        uploader = _uploader(_ok)
        assert uploader.upload_url_for(tmp_path / "a.m4a").endswith("/raw/upload")
        assert uploader.upload_url_for(tmp_path / "a.MP4").endswith("/video/upload")

    def test_multipart_request(self, audio_file):
        seen = []

        def handler(request):
            seen.append(request)
            return _ok(request)

        url = asyncio.run(_uploader(handler).upload(audio_file, "journal/2024-11-28"))
        assert url == "https://media.test/demo/rec.m4a"

        body = seen[0].content
        assert seen[0].headers["content-type"].startswith("multipart/form-data")
        assert b"audio/m4a" in body
        assert b"expo-upload" in body
        assert b"journal/2024-11-28" in body

    @pytest.mark.parametrize(
        "response",
        [httpx.Response(500, text="boom"), httpx.Response(200, json={"public_id": "x"})],
    )
    def test_failures(self, audio_file, response):
        with pytest.raises(UploadError) as exc_info:
            asyncio.run(_uploader(lambda r: response).upload(audio_file, "f"))
        assert exc_info.value.stage == "upload"
        assert isinstance(exc_info.value, MediaUploadError)


class TestMediaLibrary:
    def test_copies_into_month_folder(self, tmp_path, audio_file):
        library = MediaLibrary(tmp_path / "library", now=lambda: datetime(2024, 11, 28, 10, 0))
        first = library.save(audio_file)
        second = library.save(audio_file)
        assert first.parent.name == "2024-11"
        assert first.read_bytes() == audio_file.read_bytes()
        assert second.name == f"{audio_file.stem}_1{audio_file.suffix}"

    def test_missing_source(self, tmp_path):
        library = MediaLibrary(tmp_path / "library")
        with pytest.raises(MediaLibraryError):
            library.save(tmp_path / "absent.m4a")


class BrokenLibrary:
    def save(self, path):
        raise MediaLibraryError("disk full")


def _pipeline(uploader, library=None, sleep=None, config=CONFIG):
    async def no_wait(delay):
        return None

    return MediaUploadPipeline(
        uploader,
        library,
        config=config,
        sleep=sleep or no_wait,
        today=lambda: date(2024, 11, 28),
    )


class TestMediaUploadPipeline:
    def test_success_deletes_temp_file(self, tmp_path, audio_file):
        library = MediaLibrary(tmp_path / "library", now=lambda: datetime(2024, 11, 28))
        report = asyncio.run(_pipeline(_uploader(_ok), library).upload_recording_report(audio_file))

        assert report.url == "https://media.test/demo/rec.m4a"
        assert report.library_path.exists()
        assert report.library_error is None
        assert not audio_file.exists()

    def test_default_folder(self, audio_file):
        seen = []

        def handler(request):
            seen.append(request.content)
            return _ok(request)

        url = asyncio.run(_pipeline(_uploader(handler)).upload_recording(audio_file.as_uri()))
        assert url.startswith("https://")
        assert b"journal/2024-11-28" in seen[0]

    def test_upload_failure_still_deletes_temp_and_keeps_library_copy(self, tmp_path, audio_file):
        library = MediaLibrary(tmp_path / "library", now=lambda: datetime(2024, 11, 28))
        pipeline = _pipeline(_uploader(lambda r: httpx.Response(502)), library)

        with pytest.raises(UploadError):
            asyncio.run(pipeline.upload_recording(audio_file, "journal/custom"))

        assert not audio_file.exists()
        assert list((tmp_path / "library" / "2024-11").iterdir())

    def test_library_failure_does_not_abort_upload(self, audio_file):
        report = asyncio.run(
            _pipeline(_uploader(_ok), BrokenLibrary()).upload_recording_report(audio_file)
        )
        assert report.url
        assert report.library_path is None
        assert "disk full" in report.library_error

    def test_file_not_ready_after_retries(self, tmp_path):
        delays = []

        async def record(delay):
            delays.append(delay)

        calls = []

        def handler(request):
            calls.append(request)
            return _ok(request)

        empty = tmp_path / "recording_1.m4a"
        empty.write_bytes(b"")
        with pytest.raises(FileNotReadyError):
            asyncio.run(_pipeline(_uploader(handler), sleep=record).upload_recording(empty))

        assert delays == [1.0, 1.0]
        assert calls == []
        assert not empty.exists()

    def test_file_appears_on_retry(self, tmp_path):
        late = tmp_path / "recording_2.m4a"

        async def finish_writing(delay):
            late.write_bytes(b"data")

        url = asyncio.run(_pipeline(_uploader(_ok), sleep=finish_writing).upload_recording(late))
        assert url
        assert not late.exists()

    def test_timeout(self, audio_file):
        config = UploadConfig(cloud_url="https://media.test/v1_1/demo", timeout=0.05)

        class StuckUploader:
            async def upload(self, path, folder):
                await asyncio.sleep(3600)

        with pytest.raises(UploadTimeoutError):
            asyncio.run(_pipeline(StuckUploader(), config=config).upload_recording(audio_file))
        assert not audio_file.exists()
