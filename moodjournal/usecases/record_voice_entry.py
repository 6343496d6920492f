from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from moodjournal.exceptions import JournalError, MediaUploadError
from moodjournal.infra.media_files import media_kind_for, to_local_path
from moodjournal.services.journal_service import JournalService
from moodjournal.services.media_upload_pipeline import MediaUploadPipeline
from moodjournal.services.voice_entry_pipeline import VoiceEntryPipeline

logger = logging.getLogger(__name__)


def _error_payload(e: JournalError) -> Dict[str, Any]:
    return {"type": type(e).__name__, "stage": e.stage, "message": str(e)}


async def run_voice_entry_usecase(
    audio_uri: Union[str, Path],
    existing_note: str,
    pipeline: VoiceEntryPipeline,
    uploader: MediaUploadPipeline,
    folder: Optional[str] = None,
    *,
    journal: Optional[JournalService] = None,
    user_id: Optional[str] = None,
    day: Any = None,
) -> Dict[str, Any]:
    """음성 일기 1건: 분석 → 업로드 → (옵션) 일기에 미디어 첨부.

    업로드 단계가 임시 파일을 지우므로 분석이 먼저 돈다.
    분석이 실패해도 업로드는 실행한다. 단계별 실패는 결과 dict 에 담아서 돌려준다.
    journal 과 user_id 가 있으면 업로드 URL 을 해당 날짜(기본: 오늘) 일기에 붙인다.
    """
    result: Dict[str, Any] = {
        "analysis": None,
        "transcription_error": None,
        "media_url": None,
        "library_path": None,
        "library_error": None,
        "upload_error": None,
        "attached": False,
        "attach_error": None,
    }

    upload_started = False
    try:
        # 1) 음성 인식 + 감정 분석
        try:
            analysis = await pipeline.process_voice_entry(audio_uri, existing_note)
            result["analysis"] = analysis.to_dict()
        except JournalError as e:
            logger.warning("음성 일기 분석 실패 (stage=%s): %s", e.stage, e)
            result["transcription_error"] = _error_payload(e)

        # 2) 업로드 (임시 파일 정리 포함)
        upload_started = True
        try:
            report = await uploader.upload_recording_report(audio_uri, folder)
            result["media_url"] = report.url
            result["library_path"] = str(report.library_path) if report.library_path else None
            result["library_error"] = report.library_error
        except MediaUploadError as e:
            logger.warning("음성 일기 업로드 실패 (stage=%s): %s", e.stage, e)
            result["upload_error"] = _error_payload(e)
    finally:
        if not upload_started:
            # 분석 중 예상 밖 오류 / 취소: 업로드 없이 임시 파일만 지운다
            MediaUploadPipeline.discard_temp(to_local_path(audio_uri))

    # 3) 일기에 첨부
    if journal is not None and user_id and result["media_url"]:
        kind = media_kind_for(to_local_path(audio_uri))
        try:
            journal.attach_media(user_id, day or journal.today(), kind, result["media_url"])
            result["attached"] = True
        except JournalError as e:
            logger.warning("미디어 첨부 실패: %s", e)
            result["attach_error"] = _error_payload(e)

    return result
