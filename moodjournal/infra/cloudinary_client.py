# moodjournal/infra/cloudinary_client.py
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import httpx

from moodjournal.core.config import UploadConfig, load_upload_config
from moodjournal.domain.models import MediaKind
from moodjournal.exceptions import ConfigError, UploadError
from moodjournal.infra.media_files import content_type_for, media_kind_for

logger = logging.getLogger(__name__)


class CloudinaryUploader:
    """
    미디어 파일을 Cloudinary(unsigned preset) 로 multipart 업로드한다.

    - 비디오: {cloud_url}/video/upload
    - 오디오: {cloud_url}/raw/upload
    성공하면 응답의 secure_url 을 돌려준다.
    """

    def __init__(
        self,
        config: Optional[UploadConfig] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config or load_upload_config()
        if not self.config.cloud_url:
            raise ConfigError(
                "업로드 주소를 찾을 수 없습니다. 환경변수 CLOUDINARY_URL 을 설정해 주세요."
            )
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.config.timeout))
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def upload_url_for(self, path: Path) -> str:
        resource = "video" if media_kind_for(path) is MediaKind.VIDEO else "raw"
        return f"{self.config.cloud_url}/{resource}/upload"

    async def upload(self, path: Path, folder: str) -> str:
        content_type = content_type_for(path)
        url = self.upload_url_for(path)
        data = await asyncio.to_thread(path.read_bytes)

        logger.info("업로드 요청: %s (%s, %s bytes) → %s", path.name, content_type, len(data), url)
        try:
            response = await self._get_client().post(
                url,
                files={"file": (path.name, data, content_type)},
                data={"upload_preset": self.config.upload_preset, "folder": folder},
            )
        except httpx.HTTPError as e:
            raise UploadError(f"업로드 중 네트워크 오류: {e}", stage="upload") from e

        if not response.is_success:
            logger.error("업로드 실패: status=%s body=%s", response.status_code, response.text[:200])
            raise UploadError(
                f"업로드 실패: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
                stage="upload",
            )

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        secure_url = payload.get("secure_url") if isinstance(payload, dict) else None
        if not secure_url:
            raise UploadError("업로드 응답에 secure_url 이 없습니다.", stage="upload")

        logger.info("업로드 성공: public_id=%s", payload.get("public_id"))
        return str(secure_url)
