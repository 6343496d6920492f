from __future__ import annotations

import asyncio
import logging
import time
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union

from moodjournal.domain.models import MediaKind
from moodjournal.exceptions import (
    CaptureDeviceError,
    DeviceBusyError,
    DevicePermissionError,
    NoActiveRecordingError,
    RecordingStateError,
)
from moodjournal.infra.paths import MEDIA_TMP_DIR, ensure_dir
from moodjournal.recording.backends import CaptureBackend, default_backend
from moodjournal.recording.registry import DEFAULT_DEVICE_REGISTRY, DeviceLease, DeviceRegistry

logger = logging.getLogger(__name__)

BackendFactory = Callable[[MediaKind], CaptureBackend]


class RecordingStatus(str, Enum):
    IDLE = "idle"
    RECORDING = "recording"
    STOPPED = "stopped"
    FAILED = "failed"


class RecordingSession:
    """
    녹음/녹화 1회분의 생명주기: idle → recording → stopped (또는 failed).

    - 세션은 일회용이다. 새로 녹음하려면 새 세션을 만든다.
    - 장치 점유는 DeviceRegistry 의 단일 슬롯으로 관리한다.
    - recording 상태에서 버려지는 세션은 cancel() 로 장치를 놓고 부분 파일을 지운다.
      (`async with` 로 쓰면 빠져나갈 때 자동으로 cancel)
    """

    def __init__(
        self,
        *,
        registry: Optional[DeviceRegistry] = None,
        backend_factory: Optional[BackendFactory] = None,
        media_dir: Optional[Path] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._registry = registry or DEFAULT_DEVICE_REGISTRY
        self._backend_factory = backend_factory or default_backend
        self._media_dir = media_dir or MEDIA_TMP_DIR
        self._clock = clock

        self.status = RecordingStatus.IDLE
        self.media_kind: Optional[MediaKind] = None
        self.media_uri: Optional[Path] = None
        self.started_at: Optional[float] = None

        self._backend: Optional[CaptureBackend] = None
        self._lease: Optional[DeviceLease] = None

    @property
    def is_recording(self) -> bool:
        return self.status is RecordingStatus.RECORDING

    def _new_media_path(self, extension: str) -> Path:
        """타임스탬프 기반 파일명. 같은 이름이 있으면 번호를 붙인다."""
        media_dir = ensure_dir(self._media_dir)
        stamp = int(self._clock() * 1000)
        path = media_dir / f"recording_{stamp}{extension}"
        n = 1
        while path.exists():
            path = media_dir / f"recording_{stamp}_{n}{extension}"
            n += 1
        return path

    async def start(self, kind: Union[MediaKind, str]) -> Path:
        """
        캡처 시작. 녹음 파일 경로를 돌려준다.

        Raises:
            DeviceBusyError: 이 세션 또는 다른 세션이 이미 녹음 중
            RecordingStateError: 이미 끝난 세션
            DevicePermissionError: 마이크/카메라 권한 없음
            CaptureDeviceError: 장치 열기 실패
        """
        kind = MediaKind(kind)
        if self.status is RecordingStatus.RECORDING:
            raise DeviceBusyError("이미 녹음 중인 세션입니다.", stage="recording")
        if self.status is not RecordingStatus.IDLE:
            raise RecordingStateError(
                f"이미 사용한 세션입니다 (status={self.status.value}). 새 세션을 만들어 주세요.",
                stage="recording",
            )

        # await 전에 점유 → 동시에 들어온 두 번째 start 는 여기서 DeviceBusyError
        lease = self._registry.acquire(self)
        try:
            backend = self._backend_factory(kind)
            granted = await asyncio.to_thread(backend.check_permission)
            if not granted:
                raise DevicePermissionError(
                    "마이크/카메라 권한이 필요합니다." if kind is MediaKind.VIDEO
                    else "마이크 권한이 필요합니다.",
                    stage="recording",
                )

            path = self._new_media_path(backend.extension)
            self._lease, self._backend = lease, backend
            self.media_kind, self.media_uri = kind, path
            self.started_at = self._clock()
            self.status = RecordingStatus.RECORDING

            try:
                await asyncio.to_thread(backend.open, path)
            except BaseException as e:
                # 취소(CancelledError) 포함: 장치를 놓고 부분 파일 삭제
                self.status = RecordingStatus.FAILED
                backend.abort()
                self._discard_partial_file()
                if isinstance(e, Exception) and not isinstance(e, CaptureDeviceError):
                    raise CaptureDeviceError(f"캡처 장치를 열 수 없습니다: {e}", stage="recording") from e
                raise
        except BaseException:
            self._lease = None
            self._backend = None
            self._registry.release(lease)
            raise

        logger.info("녹음 시작: kind=%s, file=%s", kind.value, path)
        return path

    async def stop(self) -> Path:
        """녹음을 마무리하고 로컬 파일 경로를 돌려준다."""
        if self.status is not RecordingStatus.RECORDING:
            raise NoActiveRecordingError("진행 중인 녹음이 없습니다.", stage="recording")

        backend = self._backend
        try:
            await asyncio.to_thread(backend.close)
        except BaseException as e:
            # 취소(CancelledError) 포함: 장치를 놓은 세션은 failed 로 끝난다
            self.status = RecordingStatus.FAILED
            self._discard_partial_file()
            if isinstance(e, Exception):
                raise CaptureDeviceError(f"녹음 파일을 마무리하지 못했습니다: {e}", stage="recording") from e
            raise
        finally:
            self._release()

        self.status = RecordingStatus.STOPPED
        logger.info("녹음 종료: file=%s", self.media_uri)
        return self.media_uri

    async def cancel(self) -> None:
        """녹음 중이면 장치를 즉시 놓고 부분 파일을 지운다. 그 외 상태에서는 아무것도 하지 않는다."""
        if self.status is not RecordingStatus.RECORDING:
            return
        backend = self._backend
        try:
            await asyncio.to_thread(backend.abort)
        finally:
            self._release()
            self.status = RecordingStatus.FAILED
            self._discard_partial_file()
            logger.info("녹음 취소: 부분 파일 삭제")

    def _release(self) -> None:
        self._registry.release(self._lease)
        self._lease = None
        self._backend = None

    def _discard_partial_file(self) -> None:
        if self.media_uri is None:
            return
        try:
            self.media_uri.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("부분 파일 삭제 실패: %s (%s)", self.media_uri, e)
        self.media_uri = None

    async def __aenter__(self) -> "RecordingSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.cancel()
