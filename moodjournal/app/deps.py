# moodjournal/app/deps.py
"""
라우트에서 쓰는 서비스 객체 공급자.

프로세스 전역 1회 생성 (요청마다 생성 금지). 테스트에서는
app.dependency_overrides 로 교체한다.
"""

from __future__ import annotations

from functools import lru_cache

from moodjournal.core.config import MEDIA_LIBRARY_ENABLED
from moodjournal.infra.cloudinary_client import CloudinaryUploader
from moodjournal.infra.media_library import MediaLibrary
from moodjournal.infra.transcription_client import TranscriptionClient
from moodjournal.recording.controller import RecordingController
from moodjournal.services.journal_service import JournalService
from moodjournal.services.media_upload_pipeline import MediaUploadPipeline
from moodjournal.services.voice_entry_pipeline import VoiceEntryPipeline


@lru_cache(maxsize=1)
def get_journal_service() -> JournalService:
    return JournalService()


@lru_cache(maxsize=1)
def get_recording_controller() -> RecordingController:
    return RecordingController()


@lru_cache(maxsize=1)
def get_voice_pipeline() -> VoiceEntryPipeline:
    # API 키가 없으면 ConfigError (캐시되지 않으므로 설정 후 재시도 가능)
    return VoiceEntryPipeline(TranscriptionClient())


@lru_cache(maxsize=1)
def get_upload_pipeline() -> MediaUploadPipeline:
    library = MediaLibrary() if MEDIA_LIBRARY_ENABLED else None
    return MediaUploadPipeline(CloudinaryUploader(), library)
