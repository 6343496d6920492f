# moodjournal/core/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# 프로젝트 루트 디렉토리
BASE_DIR = Path(__file__).resolve().parents[2]

# .env 로딩
ENV_PATH = BASE_DIR / ".env"
if ENV_PATH.exists():
    load_dotenv(ENV_PATH)

# 로그 레벨 (.env의 LOG_LEVEL로 조절, 기본 INFO)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# CORS 설정
# - .env 에 CORS_ORIGINS="http://localhost:19006,http://127.0.0.1:8000" 처럼 넣으면 그 값 사용
# - 없으면 기본으로 전부 허용(["*"])
_cors_raw = os.getenv("CORS_ORIGINS", "")
if _cors_raw:
    CORS_ORIGINS = [o.strip() for o in _cors_raw.split(",") if o.strip()]
else:
    CORS_ORIGINS = ["*"]


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    v = os.getenv(name)
    if v is None:
        return default
    try:
        return float(v)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None:
        return default
    try:
        return int(v)
    except ValueError:
        return default


@dataclass(frozen=True)
class TranscriptionConfig:
    """음성 인식(AssemblyAI 호환) 클라이언트 설정.

    - api_key: 서비스 인증 키 (없으면 클라이언트 생성 시 ConfigError)
    - base_url: API 루트 (업로드/작업 생성/조회 엔드포인트의 공통 prefix)
    - language_code: 작업 생성 시 넘기는 언어 힌트
    - poll_interval: 작업 상태 조회 간격(초)
    - max_attempts: 최대 조회 횟수 (2초 × 30회 = 60초 상한)
    - http_timeout: 개별 HTTP 요청 타임아웃(초)
    """

    api_key: Optional[str] = None
    base_url: str = "https://api.assemblyai.com/v2"
    language_code: str = "fr"
    poll_interval: float = 2.0
    max_attempts: int = 30
    http_timeout: float = 30.0


@dataclass(frozen=True)
class UploadConfig:
    """미디어 업로드(Cloudinary 호환) 파이프라인 설정."""

    cloud_url: Optional[str] = None
    upload_preset: str = "expo-upload"
    timeout: float = 90.0
    verify_attempts: int = 3
    verify_delay: float = 1.0
    folder_prefix: str = "journal"


@dataclass(frozen=True)
class RecordingConfig:
    """마이크/카메라 캡처 설정."""

    sample_rate: int = 44100
    channels: int = 1
    camera_index: int = 0
    video_fps: float = 30.0
    max_video_seconds: float = 60.0


def load_transcription_config() -> TranscriptionConfig:
    """
    환경변수
    - ASSEMBLYAI_API_KEY
    - ASSEMBLYAI_BASE_URL (default: https://api.assemblyai.com/v2)
    - TRANSCRIPTION_LANGUAGE (default: fr)
    - TRANSCRIPTION_POLL_INTERVAL (default: 2.0)
    - TRANSCRIPTION_MAX_ATTEMPTS (default: 30)
    - TRANSCRIPTION_HTTP_TIMEOUT (default: 30.0)
    """
    api_key = (os.getenv("ASSEMBLYAI_API_KEY") or "").strip() or None
    return TranscriptionConfig(
        api_key=api_key,
        base_url=os.getenv("ASSEMBLYAI_BASE_URL", "https://api.assemblyai.com/v2").rstrip("/"),
        language_code=os.getenv("TRANSCRIPTION_LANGUAGE", "fr"),
        poll_interval=_env_float("TRANSCRIPTION_POLL_INTERVAL", 2.0),
        max_attempts=max(1, _env_int("TRANSCRIPTION_MAX_ATTEMPTS", 30)),
        http_timeout=_env_float("TRANSCRIPTION_HTTP_TIMEOUT", 30.0),
    )


def load_upload_config() -> UploadConfig:
    """
    환경변수
    - CLOUDINARY_URL (예: https://api.cloudinary.com/v1_1/<cloud_name>)
    - CLOUDINARY_UPLOAD_PRESET (default: expo-upload)
    - UPLOAD_TIMEOUT_SECONDS (default: 90, 90~120 사이로 보정)
    - UPLOAD_VERIFY_ATTEMPTS (default: 3)
    - UPLOAD_VERIFY_DELAY (default: 1.0)
    - UPLOAD_FOLDER_PREFIX (default: journal)
    """
    cloud_url = (os.getenv("CLOUDINARY_URL") or "").strip().rstrip("/") or None
    timeout = min(120.0, max(90.0, _env_float("UPLOAD_TIMEOUT_SECONDS", 90.0)))
    return UploadConfig(
        cloud_url=cloud_url,
        upload_preset=os.getenv("CLOUDINARY_UPLOAD_PRESET", "expo-upload"),
        timeout=timeout,
        verify_attempts=max(1, _env_int("UPLOAD_VERIFY_ATTEMPTS", 3)),
        verify_delay=_env_float("UPLOAD_VERIFY_DELAY", 1.0),
        folder_prefix=os.getenv("UPLOAD_FOLDER_PREFIX", "journal").strip("/") or "journal",
    )


def load_recording_config() -> RecordingConfig:
    """
    환경변수
    - RECORDING_SAMPLE_RATE (default: 44100)
    - RECORDING_CHANNELS (default: 1)
    - RECORDING_CAMERA_INDEX (default: 0)
    - RECORDING_VIDEO_FPS (default: 30)
    - RECORDING_MAX_VIDEO_SECONDS (default: 60)
    """
    return RecordingConfig(
        sample_rate=_env_int("RECORDING_SAMPLE_RATE", 44100),
        channels=max(1, _env_int("RECORDING_CHANNELS", 1)),
        camera_index=_env_int("RECORDING_CAMERA_INDEX", 0),
        video_fps=_env_float("RECORDING_VIDEO_FPS", 30.0),
        max_video_seconds=_env_float("RECORDING_MAX_VIDEO_SECONDS", 60.0),
    )


# 미디어 라이브러리 복사 비활성화 (테스트/서버 환경)
MEDIA_LIBRARY_ENABLED = _env_bool("MEDIA_LIBRARY_ENABLED", True)
