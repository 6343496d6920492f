# moodjournal/app/routes_analysis.py
from __future__ import annotations
import logging
from typing import Union
from fastapi import APIRouter, Depends, Query

from moodjournal.app.deps import get_journal_service
from moodjournal.app.schemas import (
    AnalyzeRequest,
    EntryRequest,
    EntryView,
    MediaAttachRequest,
    ErrorResponse,
    OkResponse,
    StatsView,
    error_response,
)
from moodjournal.domain.aggregation import emotion_percentages, trend_series
from moodjournal.domain.models import JournalEntry
from moodjournal.domain.mood import mood_emoji, mood_label
from moodjournal.exceptions import JournalEntryError, JournalError
from moodjournal.services.journal_service import JournalService

logger = logging.getLogger(__name__)
router = APIRouter()

Envelope = Union[OkResponse, ErrorResponse]


def _entry_view(entry: JournalEntry) -> EntryView:
    data = entry.to_dict()
    return EntryView(
        date=data["date"],
        mood=entry.mood,
        mood_label=mood_label(entry.mood),
        mood_emoji=mood_emoji(entry.mood),
        note=entry.note,
        emotion_analysis=data["emotion_analysis"],
        timestamp=entry.timestamp,
        media=data["media"],
    )


def _internal_error() -> ErrorResponse:
    logger.exception("예상치 못한 내부 오류")
    return ErrorResponse(
        error_type="internal_error",
        message="서버 내부 오류가 발생했습니다. 잠시 후 다시 시도해 주세요.",
    )


@router.post("/analyze", response_model=Envelope)
async def analyze_route(req: AnalyzeRequest, service: JournalService = Depends(get_journal_service)):
    """노트 1건 감정 분석 (저장하지 않음)."""
    result = service.analyzer.analyze_text(req.text)
    return OkResponse(result=result.to_dict())


# marked-dates, media 는 /entries/{user_id}/{day} 보다 먼저 등록해야 한다
@router.get("/entries/{user_id}/marked-dates", response_model=Envelope)
async def marked_dates_route(user_id: str, service: JournalService = Depends(get_journal_service)):
    try:
        return OkResponse(result=service.marked_dates(user_id))
    except JournalError as e:
        logger.warning("일기 조회 오류: %s", e)
        return error_response(e)


@router.get("/entries/{user_id}/media", response_model=Envelope)
async def list_media_route(user_id: str, service: JournalService = Depends(get_journal_service)):
    """첨부된 녹음/녹화 목록 (갤러리)."""
    try:
        return OkResponse(result=service.list_media(user_id))
    except JournalError as e:
        logger.warning("미디어 조회 오류: %s", e)
        return error_response(e)


@router.get("/entries/{user_id}", response_model=Envelope)
async def list_entries_route(user_id: str, service: JournalService = Depends(get_journal_service)):
    try:
        entries = service.list_entries(user_id)
        return OkResponse(result=[_entry_view(e) for e in entries])
    except JournalError as e:
        logger.warning("일기 조회 오류: %s", e)
        return error_response(e)
    except Exception:
        return _internal_error()


@router.get("/entries/{user_id}/{day}", response_model=Envelope)
async def get_entry_route(user_id: str, day: str, service: JournalService = Depends(get_journal_service)):
    try:
        entry = service.get_entry(user_id, day)
        if entry is None:
            return ErrorResponse(error_type="not_found", message=f"{day} 일기가 없습니다.")
        return OkResponse(result=_entry_view(entry))
    except JournalError as e:
        logger.warning("일기 조회 오류: %s", e)
        return error_response(e)


@router.put("/entries/{user_id}/{day}", response_model=Envelope)
async def save_entry_route(
    user_id: str,
    day: str,
    req: EntryRequest,
    service: JournalService = Depends(get_journal_service),
):
    """일기 저장 (같은 날짜는 덮어씀)."""
    try:
        entry, created = service.save_entry(user_id, day, req.mood, req.note)
        return OkResponse(result={"created": created, "entry": _entry_view(entry)})
    except JournalEntryError as e:
        logger.warning("일기 입력 오류: %s", e)
        return error_response(e)
    except JournalError as e:
        logger.error("일기 저장 오류: %s", e)
        return error_response(e)
    except Exception:
        return _internal_error()


@router.delete("/entries/{user_id}/{day}", response_model=Envelope)
async def delete_entry_route(user_id: str, day: str, service: JournalService = Depends(get_journal_service)):
    try:
        return OkResponse(result={"deleted": service.delete_entry(user_id, day)})
    except JournalError as e:
        logger.warning("일기 삭제 오류: %s", e)
        return error_response(e)


@router.post("/entries/{user_id}/{day}/media", response_model=Envelope)
async def attach_media_route(
    user_id: str,
    day: str,
    req: MediaAttachRequest,
    service: JournalService = Depends(get_journal_service),
):
    """업로드된 미디어 URL 을 일기에 첨부."""
    try:
        entry = service.attach_media(user_id, day, req.kind, req.url)
        return OkResponse(result=_entry_view(entry))
    except JournalError as e:
        logger.warning("미디어 첨부 오류: %s", e)
        return error_response(e)


@router.get("/stats/{user_id}", response_model=Envelope)
async def stats_route(
    user_id: str,
    period: str = Query("week", description="week / month / year"),
    service: JournalService = Depends(get_journal_service),
):
    """기간 통계 + 차트용 데이터 (분포 백분율, 최근 7개 추이, 감정별 색상)."""
    try:
        stats = service.period_statistics(user_id, period)
    except ValueError as e:
        # 지원하지 않는 기간 / 잘못된 입력
        logger.warning("통계 요청 오류: %s", e)
        return ErrorResponse(error_type="invalid_period", message=str(e))
    except JournalError as e:
        return error_response(e)

    lexicon = service.analyzer.lexicon
    colors = {name: lexicon.color(name) for name in stats.emotion_distribution}
    return OkResponse(
        result=StatsView(
            period=period,
            statistics=stats.to_dict(),
            emotion_percentages=emotion_percentages(stats),
            trend=[
                {"date": p.date, "score": p.score, "emotion": p.emotion}
                for p in trend_series(stats)
            ],
            colors=colors,
        )
    )
