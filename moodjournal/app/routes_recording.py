# moodjournal/app/routes_recording.py
from __future__ import annotations
import logging
from typing import Optional, Union
from fastapi import APIRouter, Depends

from moodjournal.app import deps
from moodjournal.app.deps import get_journal_service, get_recording_controller
from moodjournal.app.schemas import (
    ErrorResponse,
    OkResponse,
    RecordingStartRequest,
    RecordingStopRequest,
    error_response,
)
from moodjournal.exceptions import JournalError, RecordingError
from moodjournal.recording.controller import RecordingController
from moodjournal.services.journal_service import JournalService
from moodjournal.usecases.record_voice_entry import run_voice_entry_usecase

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/recordings")

Envelope = Union[OkResponse, ErrorResponse]


@router.post("/start", response_model=Envelope)
async def start_recording_route(
    req: RecordingStartRequest,
    controller: RecordingController = Depends(get_recording_controller),
):
    try:
        session = await controller.start(req.kind)
    except RecordingError as e:
        logger.warning("녹음 시작 실패: %s", e)
        return error_response(e)

    return OkResponse(
        result={
            "kind": session.media_kind.value,
            "media_uri": str(session.media_uri),
            "started_at": session.started_at,
        }
    )


@router.post("/stop", response_model=Envelope)
async def stop_recording_route(
    req: Optional[RecordingStopRequest] = None,
    controller: RecordingController = Depends(get_recording_controller),
    journal: JournalService = Depends(get_journal_service),
):
    """녹음 종료. process=True 면 이어서 음성 일기 처리(인식 + 업로드)까지 실행."""
    req = req or RecordingStopRequest()

    # 파이프라인을 못 만들면(API 키 없음 등) 녹음은 계속 진행 중인 상태로 둔다
    pipeline = uploader = None
    if req.process:
        try:
            pipeline, uploader = deps.get_voice_pipeline(), deps.get_upload_pipeline()
        except JournalError as e:
            logger.error("음성 일기 처리 불가: %s", e)
            return error_response(e)

    try:
        path = await controller.stop()
    except RecordingError as e:
        logger.warning("녹음 종료 실패: %s", e)
        return error_response(e)

    if not req.process:
        return OkResponse(result={"media_uri": str(path)})

    result = await run_voice_entry_usecase(
        path,
        req.existing_note,
        pipeline,
        uploader,
        journal=journal,
        user_id=req.user_id,
        day=req.day,
    )
    result["media_uri"] = str(path)
    return OkResponse(result=result)


@router.post("/cancel", response_model=Envelope)
async def cancel_recording_route(controller: RecordingController = Depends(get_recording_controller)):
    cancelled = await controller.cancel()
    return OkResponse(result={"cancelled": cancelled})
