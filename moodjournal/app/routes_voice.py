# moodjournal/app/routes_voice.py
from __future__ import annotations
import asyncio
import logging
import shutil
import time
from pathlib import Path
from typing import Optional, Union
from fastapi import APIRouter, Depends, File, Form, UploadFile

from moodjournal.app.deps import get_journal_service, get_upload_pipeline, get_voice_pipeline
from moodjournal.app.schemas import ErrorResponse, OkResponse
from moodjournal.infra.media_files import MEDIA_TYPES
from moodjournal.infra.paths import MEDIA_TMP_DIR, ensure_dir
from moodjournal.services.journal_service import JournalService
from moodjournal.services.media_upload_pipeline import MediaUploadPipeline
from moodjournal.services.voice_entry_pipeline import VoiceEntryPipeline
from moodjournal.usecases.record_voice_entry import run_voice_entry_usecase

logger = logging.getLogger(__name__)
router = APIRouter()

Envelope = Union[OkResponse, ErrorResponse]


def _store_upload(upload: UploadFile, media_dir: Path) -> Path:
    """업로드된 파일을 임시 캡처 파일로 저장 (업로드 파이프라인이 나중에 지운다)."""
    suffix = Path(upload.filename or "").suffix.lower()
    if suffix not in MEDIA_TYPES:
        suffix = ".m4a"
    target = ensure_dir(media_dir) / f"upload_{int(time.time() * 1000)}{suffix}"
    with target.open("wb") as f:
        shutil.copyfileobj(upload.file, f)
    return target


@router.post("/voice-entries", response_model=Envelope)
async def voice_entry_route(
    audio: UploadFile = File(..., description="녹음 파일 (m4a/wav/mp4 ...)"),
    existing_note: str = Form(""),
    folder: Optional[str] = Form(None),
    user_id: Optional[str] = Form(None, description="있으면 업로드 URL 을 이 사용자의 일기에 첨부"),
    day: Optional[str] = Form(None, description="첨부할 일기 날짜 (YYYY-MM-DD, 기본: 오늘)"),
    pipeline: VoiceEntryPipeline = Depends(get_voice_pipeline),
    uploader: MediaUploadPipeline = Depends(get_upload_pipeline),
    journal: JournalService = Depends(get_journal_service),
):
    """
    음성 일기 API.

    - 입력: 녹음 파일 + (옵션) 기존 노트
    - 출력: 음성 인식 + 감정 분석 결과, 업로드 URL. 단계별 실패는 *_error 로 표시
    - user_id 를 주면 업로드 URL 을 그날 일기에 첨부 (attached / attach_error)
    """
    try:
        path = await asyncio.to_thread(_store_upload, audio, MEDIA_TMP_DIR)
    except OSError as e:
        logger.error("업로드 파일 저장 실패: %s", e)
        return ErrorResponse(error_type="storage_error", message=str(e))

    result = await run_voice_entry_usecase(
        path, existing_note, pipeline, uploader, folder, journal=journal, user_id=user_id, day=day
    )
    return OkResponse(result=result)
