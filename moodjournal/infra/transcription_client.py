# moodjournal/infra/transcription_client.py
"""
원격 음성 인식 서비스(AssemblyAI 호환 REST API) 클라이언트.

흐름 (호출 1회 = 단일 시도, 자동 재시도 없음)
  1) 로컬 오디오 파일 검증 (존재 + 크기 > 0)
  2) POST {base}/upload            : 원본 바이트 업로드 → upload_url
  3) POST {base}/transcript        : {audio_url, language_code} → 작업 id
  4) GET  {base}/transcript/{id}   : 고정 간격으로 최대 N회 상태 조회

폴링 대기는 주입 가능한 sleep 함수로 수행하므로 테스트에서 실제 시간을 쓰지 않는다.
호출한 쪽에서 task 를 취소하면 로컬 대기는 즉시 멈추고, 서버 쪽 작업은 그대로 둔다.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional, Union

import httpx

from moodjournal.core.config import TranscriptionConfig, load_transcription_config
from moodjournal.domain.models import TranscriptionResult
from moodjournal.exceptions import (
    ConfigError,
    InvalidAudioFileError,
    JobSubmissionError,
    TranscriptionFailedError,
    TranscriptionTimeoutError,
    UploadError,
)
from moodjournal.infra.media_files import file_size, to_local_path

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[Any]]

# 서비스가 confidence 를 주지 않을 때 쓰는 값
DEFAULT_CONFIDENCE = 0.8


class PollState(str, Enum):
    WAITING = "waiting"
    COMPLETED = "completed"
    ERROR = "error"
    TIMED_OUT = "timed_out"


@dataclass
class TranscriptPoller:
    """작업 상태 조회 상태 머신.

    - observe(): 조회 응답 1건을 반영하고 다음 상태를 돌려준다
    - completed / error 는 즉시 종료, 그 외 상태는 max_attempts 에 닿으면 TIMED_OUT
    """

    max_attempts: int
    attempts: int = 0
    state: PollState = PollState.WAITING
    last_payload: Dict[str, Any] = field(default_factory=dict)

    def observe(self, payload: Dict[str, Any]) -> PollState:
        if self.state is not PollState.WAITING:
            raise RuntimeError(f"이미 종료된 폴링입니다: {self.state.value}")

        self.attempts += 1
        self.last_payload = payload
        status = str(payload.get("status") or "").lower()

        if status == "completed":
            self.state = PollState.COMPLETED
        elif status == "error":
            self.state = PollState.ERROR
        elif self.attempts >= self.max_attempts:
            self.state = PollState.TIMED_OUT
        return self.state


def _json_or_empty(response: httpx.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


class TranscriptionClient:
    def __init__(
        self,
        config: Optional[TranscriptionConfig] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.config = config or load_transcription_config()
        if not self.config.api_key:
            raise ConfigError(
                "음성 인식 API 키를 찾을 수 없습니다. 환경변수 ASSEMBLYAI_API_KEY 를 설정해 주세요."
            )
        self._client = client
        self._owns_client = client is None
        self._sleep = sleep

    # ---------------------------
    # HTTP client
    # ---------------------------

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.config.http_timeout))
            logger.info("음성 인식 HTTP 클라이언트가 초기화되었습니다.")
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "TranscriptionClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def _headers(self, content_type: Optional[str] = None) -> Dict[str, str]:
        h = {"authorization": self.config.api_key}
        if content_type:
            h["content-type"] = content_type
        return h

    # ---------------------------
    # 단계별 호출
    # ---------------------------

    @staticmethod
    def _validated_audio_path(audio_uri: Union[str, Path]) -> Path:
        path = to_local_path(audio_uri)
        if not path.is_file():
            raise InvalidAudioFileError(f"오디오 파일이 존재하지 않습니다: {path}")
        if file_size(path) == 0:
            raise InvalidAudioFileError(f"오디오 파일이 비어 있습니다: {path}")
        return path

    async def upload_audio(self, data: bytes) -> str:
        """원본 오디오 바이트 업로드 → 서비스 내부 upload_url"""
        url = f"{self.config.base_url}/upload"
        try:
            response = await self._get_client().post(
                url,
                content=data,
                headers=self._headers("application/octet-stream"),
            )
        except httpx.HTTPError as e:
            raise UploadError(f"오디오 업로드 중 네트워크 오류: {e}") from e

        if not response.is_success:
            raise UploadError(
                f"오디오 업로드 실패: {response.status_code} - {response.text[:200]}",
                status_code=response.status_code,
            )

        upload_url = _json_or_empty(response).get("upload_url")
        if not upload_url:
            raise UploadError("업로드 응답에 upload_url 이 없습니다.", status_code=response.status_code)
        return str(upload_url)

    async def submit_job(self, upload_url: str) -> str:
        """변환 작업 생성 → 작업 id"""
        url = f"{self.config.base_url}/transcript"
        body = {
            "audio_url": upload_url,
            "language_code": self.config.language_code,
            "punctuate": True,
            "format_text": True,
        }
        try:
            response = await self._get_client().post(
                url, json=body, headers=self._headers("application/json")
            )
        except httpx.HTTPError as e:
            raise JobSubmissionError(f"변환 작업 생성 중 네트워크 오류: {e}") from e

        if not response.is_success:
            raise JobSubmissionError(
                f"변환 작업 생성 실패: {response.status_code} - {response.text[:200]}"
            )

        job_id = _json_or_empty(response).get("id")
        if not job_id:
            raise JobSubmissionError("변환 작업 id 가 응답에 없습니다.")
        return str(job_id)

    async def _fetch_status(self, job_id: str) -> Dict[str, Any]:
        url = f"{self.config.base_url}/transcript/{job_id}"
        try:
            response = await self._get_client().get(url, headers=self._headers())
        except httpx.HTTPError as e:
            raise TranscriptionFailedError(f"작업 상태 조회 중 네트워크 오류: {e}") from e

        if not response.is_success:
            raise TranscriptionFailedError(
                f"작업 상태 조회 실패: {response.status_code} - {response.text[:200]}"
            )
        return _json_or_empty(response)

    async def wait_for_transcript(self, job_id: str) -> TranscriptionResult:
        """완료될 때까지 고정 간격으로 상태 조회 (최대 max_attempts 회)."""
        poller = TranscriptPoller(max_attempts=self.config.max_attempts)
        try:
            while True:
                payload = await self._fetch_status(job_id)
                state = poller.observe(payload)
                logger.debug(
                    "작업 상태 조회 %s/%s: %s",
                    poller.attempts,
                    poller.max_attempts,
                    payload.get("status"),
                )

                if state is PollState.COMPLETED:
                    confidence = payload.get("confidence")
                    return TranscriptionResult(
                        text=str(payload.get("text") or ""),
                        confidence=float(confidence) if confidence is not None else DEFAULT_CONFIDENCE,
                        job_id=job_id,
                    )
                if state is PollState.ERROR:
                    raise TranscriptionFailedError(str(payload.get("error") or "알 수 없는 오류"))
                if state is PollState.TIMED_OUT:
                    raise TranscriptionTimeoutError(poller.attempts)

                await self._sleep(self.config.poll_interval)
        except asyncio.CancelledError:
            logger.info("음성 인식 대기 취소: job_id=%s (서버 작업은 계속 진행)", job_id)
            raise

    async def transcribe(self, audio_uri: Union[str, Path]) -> TranscriptionResult:
        """
        로컬 오디오 파일 1개를 텍스트로 변환한다.

        Raises:
            InvalidAudioFileError, UploadError, JobSubmissionError,
            TranscriptionFailedError, TranscriptionTimeoutError
        """
        path = self._validated_audio_path(audio_uri)
        logger.info("음성 인식 시작: %s (%s bytes)", path, file_size(path))

        data = await asyncio.to_thread(path.read_bytes)
        upload_url = await self.upload_audio(data)
        job_id = await self.submit_job(upload_url)
        logger.info("변환 작업 생성: job_id=%s", job_id)

        result = await self.wait_for_transcript(job_id)
        logger.info("음성 인식 완료: job_id=%s, %s자", job_id, len(result.text))
        return result
