from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional, Union

from moodjournal.core.config import UploadConfig, load_upload_config
from moodjournal.exceptions import FileNotReadyError, MediaLibraryError, UploadTimeoutError
from moodjournal.infra.cloudinary_client import CloudinaryUploader
from moodjournal.infra.media_files import file_size, to_local_path
from moodjournal.infra.media_library import MediaLibrary

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True)
class UploadReport:
    """업로드 결과.

    - url: 원격 secure_url
    - library_path: 로컬 미디어 라이브러리 사본 (실패 시 None)
    - library_error: 로컬 사본 실패 사유 (업로드는 계속 진행됨)
    """

    url: str
    library_path: Optional[Path] = None
    library_error: Optional[str] = None


class MediaUploadPipeline:
    """
    녹음 파일 검증 → 로컬 라이브러리 사본 → 원격 업로드.

    어떤 경로로 끝나든(성공/실패/시간 초과) 입력 임시 파일은 지운다.
    로컬 라이브러리 사본은 지우지 않는다.
    """

    def __init__(
        self,
        uploader: CloudinaryUploader,
        library: Optional[MediaLibrary] = None,
        *,
        config: Optional[UploadConfig] = None,
        sleep: SleepFn = asyncio.sleep,
        today: Callable[[], date] = date.today,
    ):
        self.uploader = uploader
        self.library = library
        self.config = config or uploader.config or load_upload_config()
        self._sleep = sleep
        self._today = today

    def default_folder(self) -> str:
        """예: journal/2024-11-28"""
        return f"{self.config.folder_prefix}/{self._today().isoformat()}"

    async def _verify_file(self, path: Path) -> None:
        """파일 쓰기가 늦게 끝나는 경우를 위해 몇 번 더 확인한다."""
        attempts = self.config.verify_attempts
        for attempt in range(1, attempts + 1):
            size = file_size(path)
            if size > 0:
                logger.info("파일 확인 완료(%s회차): %s bytes", attempt, size)
                return
            logger.debug("파일 확인 실패(%s/%s): %s", attempt, attempts, path)
            if attempt < attempts:
                await self._sleep(self.config.verify_delay)
        raise FileNotReadyError(f"파일이 없거나 비어 있습니다: {path}", stage="upload")

    async def _run(self, path: Path, folder: str) -> UploadReport:
        await self._verify_file(path)

        library_path: Optional[Path] = None
        library_error: Optional[str] = None
        if self.library is not None:
            try:
                library_path = await asyncio.to_thread(self.library.save, path)
            except MediaLibraryError as e:
                logger.warning("로컬 사본 저장 실패 (업로드는 계속): %s", e)
                library_error = str(e)

        url = await self.uploader.upload(path, folder)
        return UploadReport(url=url, library_path=library_path, library_error=library_error)

    async def upload_recording_report(
        self,
        local_uri: Union[str, Path],
        destination_folder: Optional[str] = None,
    ) -> UploadReport:
        path = to_local_path(local_uri)
        folder = destination_folder or self.default_folder()
        logger.info("업로드 시작: %s → %s", path, folder)
        try:
            return await asyncio.wait_for(self._run(path, folder), timeout=self.config.timeout)
        except asyncio.TimeoutError as e:
            raise UploadTimeoutError(
                f"업로드 제한 시간({self.config.timeout:.0f}초)을 넘었습니다.", stage="upload"
            ) from e
        finally:
            self.discard_temp(path)

    async def upload_recording(
        self,
        local_uri: Union[str, Path],
        destination_folder: Optional[str] = None,
    ) -> str:
        """원격 URL 만 필요할 때."""
        report = await self.upload_recording_report(local_uri, destination_folder)
        return report.url

    @staticmethod
    def discard_temp(path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
            logger.info("임시 파일 삭제: %s", path)
        except OSError as e:
            logger.error("임시 파일 삭제 실패: %s (%s)", path, e)
