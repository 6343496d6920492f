from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Optional

import soundfile as sf

from moodjournal.core.config import RecordingConfig, load_recording_config
from moodjournal.domain.models import MediaKind
from moodjournal.exceptions import CaptureDeviceError

logger = logging.getLogger(__name__)


class CaptureBackend:
    """
    캡처 장치 인터페이스.

    RecordingSession 은 이 인터페이스만 사용한다. 모든 메서드는 블로킹이며,
    세션 쪽에서 asyncio.to_thread 로 감싸서 호출한다.
    """

    kind: MediaKind = MediaKind.AUDIO
    extension: str = ".wav"

    def check_permission(self) -> bool:
        raise NotImplementedError

    def open(self, path: Path) -> None:
        """장치를 열고 path 에 기록을 시작한다."""
        raise NotImplementedError

    def close(self) -> None:
        """기록을 마무리(파일 flush/close)하고 장치를 놓는다."""
        raise NotImplementedError

    def abort(self) -> None:
        """파일 마무리 없이 장치만 즉시 놓는다. 예외를 던지지 않는다."""
        raise NotImplementedError


class SoundDeviceMicrophone(CaptureBackend):
    """sounddevice InputStream → soundfile WAV 기록."""

    kind = MediaKind.AUDIO
    extension = ".wav"

    def __init__(self, config: Optional[RecordingConfig] = None):
        self.config = config or load_recording_config()
        self.stream = None
        self.sndfile: Optional[sf.SoundFile] = None

    def check_permission(self) -> bool:
        # PortAudio 가 없는 환경에서도 모듈 import 는 가능하도록 여기서 import
        try:
            import sounddevice as sd
        except OSError as e:
            logger.warning("PortAudio 를 불러올 수 없습니다: %s", e)
            return False

        try:
            info = sd.query_devices(kind="input")
        except (sd.PortAudioError, ValueError) as e:
            logger.warning("입력 장치를 찾을 수 없습니다: %s", e)
            return False
        return int(info.get("max_input_channels", 0)) > 0

    def open(self, path: Path) -> None:
        import sounddevice as sd

        self.sndfile = sf.SoundFile(
            path,
            mode="w",
            samplerate=self.config.sample_rate,
            channels=self.config.channels,
            subtype="PCM_16",
        )
        try:
            self.stream = sd.InputStream(
                samplerate=self.config.sample_rate,
                channels=self.config.channels,
                dtype="float32",
                callback=self._on_audio,
                blocksize=0,
            )
            self.stream.start()
        except Exception as e:
            self.abort()
            raise CaptureDeviceError(f"마이크를 열 수 없습니다: {e}", stage="recording") from e

    def _on_audio(self, indata, frames, time_info, status) -> None:
        if status:
            logger.debug("오디오 콜백 상태: %s", status)
        if not self.sndfile:
            return
        self.sndfile.write(indata.copy())

    def close(self) -> None:
        try:
            if self.stream:
                self.stream.stop()
                self.stream.close()
        finally:
            self.stream = None
            if self.sndfile:
                self.sndfile.flush()
                self.sndfile.close()
                self.sndfile = None

    def abort(self) -> None:
        try:
            self.close()
        except Exception:
            logger.warning("마이크 정리 중 오류 (무시)", exc_info=True)
            self.stream = None
            self.sndfile = None


class OpenCVCamera(CaptureBackend):
    """
    OpenCV VideoCapture → VideoWriter(mp4v) 기록.

    - 프레임은 별도 스레드에서 읽어 파일에 쓴다.
    - max_video_seconds 에 도달하면 기록을 멈추고 close() 를 기다린다.
    - 오디오 트랙은 합치지 않는다. (권한 확인만 마이크까지 함께 수행)
    """

    kind = MediaKind.VIDEO
    extension = ".mp4"

    def __init__(
        self,
        config: Optional[RecordingConfig] = None,
        microphone: Optional[CaptureBackend] = None,
    ):
        self.config = config or load_recording_config()
        self.microphone = microphone or SoundDeviceMicrophone(self.config)
        self._cap = None
        self._writer = None
        self._thread: Optional[threading.Thread] = None
        self._stop = threading.Event()

    def check_permission(self) -> bool:
        import cv2

        cap = cv2.VideoCapture(self.config.camera_index)
        try:
            camera_ok = bool(cap.isOpened())
        finally:
            cap.release()
        if not camera_ok:
            logger.warning("카메라(index=%s)를 열 수 없습니다.", self.config.camera_index)
            return False
        return self.microphone.check_permission()

    def open(self, path: Path) -> None:
        import cv2

        cap = cv2.VideoCapture(self.config.camera_index)
        if not cap.isOpened():
            cap.release()
            raise CaptureDeviceError("카메라를 열 수 없습니다.", stage="recording")

        width = int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)) or 640
        height = int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)) or 480
        fourcc = cv2.VideoWriter_fourcc(*"mp4v")
        writer = cv2.VideoWriter(str(path), fourcc, self.config.video_fps, (width, height))
        if not writer.isOpened():
            cap.release()
            raise CaptureDeviceError(f"동영상 파일을 만들 수 없습니다: {path}", stage="recording")

        self._cap, self._writer = cap, writer
        self._stop.clear()
        self._thread = threading.Thread(target=self._frame_loop, name="camera-writer", daemon=True)
        self._thread.start()

    def _frame_loop(self) -> None:
        started = time.monotonic()
        while not self._stop.is_set():
            if time.monotonic() - started >= self.config.max_video_seconds:
                logger.info("최대 녹화 시간(%.0fs) 도달", self.config.max_video_seconds)
                break
            ok, frame = self._cap.read()
            if not ok:
                continue
            self._writer.write(frame)

    def close(self) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=5.0)
            self._thread = None
        if self._writer is not None:
            self._writer.release()
            self._writer = None
        if self._cap is not None:
            self._cap.release()
            self._cap = None

    def abort(self) -> None:
        try:
            self.close()
        except Exception:
            logger.warning("카메라 정리 중 오류 (무시)", exc_info=True)
            self._writer = None
            self._cap = None


def default_backend(kind: MediaKind) -> CaptureBackend:
    """미디어 종류에 맞는 기본 캡처 장치."""
    if MediaKind(kind) is MediaKind.VIDEO:
        return OpenCVCamera()
    return SoundDeviceMicrophone()
