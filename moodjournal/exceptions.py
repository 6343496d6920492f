# moodjournal/exceptions.py
"""
프로젝트 전역에서 공통으로 사용하는 예외 정의 모듈.

- ConfigError        : 설정/환경(.env, API 키 등) 문제
- LexiconLoadError   : 감정 키워드 사전 YAML 로딩 문제
- JournalEntryError  : 일기 입력 데이터 검증 실패
- RecordingError     : 녹음/녹화 세션 관련 실패
- TranscriptionError : 음성 → 텍스트 변환 서비스 실패
- MediaUploadError   : 미디어 업로드 파이프라인 실패

모든 도메인 예외는 JournalError 를 상속하고, 파이프라인이 예외를 위로 올릴 때
어느 단계(stage)에서 실패했는지를 `stage` 속성에 기록한다.
"""

from __future__ import annotations

from typing import Optional


class JournalError(RuntimeError):
    """모든 도메인 예외의 공통 부모."""

    def __init__(self, message: str = "", *, stage: Optional[str] = None):
        super().__init__(message)
        self.stage = stage


class ConfigError(JournalError):
    """환경 설정(.env, API 키 등) 문제."""
    pass


class LexiconLoadError(JournalError, OSError):
    """감정 키워드 사전 파일 로딩 실패."""
    pass


class JournalEntryError(JournalError, ValueError):
    """날짜/기분 점수/노트 등 입력 데이터 검증 실패."""
    pass


# ---------------------------
# 녹음 / 녹화
# ---------------------------

class RecordingError(JournalError):
    """녹음 세션 예외의 공통 부모."""
    pass


class DevicePermissionError(RecordingError, PermissionError):
    """마이크/카메라 접근 권한이 없음."""
    pass


class DeviceBusyError(RecordingError):
    """이미 다른 세션이 캡처 장치를 점유 중."""
    pass


class NoActiveRecordingError(RecordingError):
    """녹음 중이 아닌데 stop() 을 호출함."""
    pass


class RecordingStateError(RecordingError):
    """이미 사용이 끝난 일회용 세션을 다시 start() 하려 함."""
    pass


class CaptureDeviceError(RecordingError):
    """장치를 열거나 파일을 마무리하는 중 하드웨어 오류."""
    pass


# ---------------------------
# 음성 인식
# ---------------------------

class TranscriptionError(JournalError):
    """음성 인식 예외의 공통 부모."""
    pass


class MediaUploadError(JournalError):
    """미디어 업로드 파이프라인 예외의 공통 부모."""
    pass


class InvalidAudioFileError(TranscriptionError):
    """오디오 파일이 없거나 비어 있음."""
    pass


class UploadError(TranscriptionError, MediaUploadError):
    """원격 서비스로 바이트 업로드 실패 (음성 인식 / 미디어 업로드 공용)."""

    def __init__(
        self,
        message: str = "",
        *,
        status_code: Optional[int] = None,
        stage: Optional[str] = None,
    ):
        super().__init__(message, stage=stage)
        self.status_code = status_code


class JobSubmissionError(TranscriptionError):
    """변환 작업 생성 요청이 거절되었거나 작업 ID 가 없음."""
    pass


class TranscriptionFailedError(TranscriptionError):
    """서비스가 작업 상태를 error 로 돌려줌."""

    def __init__(self, detail: str = "", *, stage: Optional[str] = None):
        super().__init__(f"음성 인식 실패: {detail}", stage=stage)
        self.detail = detail


class TranscriptionTimeoutError(TranscriptionError):
    """최대 폴링 횟수 안에 작업이 끝나지 않음."""

    def __init__(self, attempts: int, *, stage: Optional[str] = None):
        super().__init__(
            f"음성 인식 시간 초과: {attempts}회 조회 후에도 완료되지 않았습니다.",
            stage=stage,
        )
        self.attempts = attempts


# ---------------------------
# 미디어 업로드
# ---------------------------

class FileNotReadyError(MediaUploadError):
    """재시도 후에도 파일이 없거나 크기가 0."""
    pass


class UploadTimeoutError(MediaUploadError):
    """전체 업로드 제한 시간 초과."""
    pass


class MediaLibraryError(MediaUploadError, OSError):
    """로컬 미디어 라이브러리 복사 실패 (보고만 하고 업로드는 계속)."""
    pass
