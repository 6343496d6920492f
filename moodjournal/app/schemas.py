# moodjournal/app/schemas.py
from __future__ import annotations

import re
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

# ---------------------------
# 요청(Request) 스키마
# ---------------------------

class AnalyzeRequest(BaseModel):
    text: str = Field(..., description="분석할 일기/노트 원문 (프랑스어)")


class EntryRequest(BaseModel):
    mood: int = Field(..., description="기분 점수 (1~10)")
    note: str = Field(..., description="노트 원문")


class RecordingStartRequest(BaseModel):
    kind: Literal["audio", "video"] = Field("audio", description="녹음(audio) / 녹화(video)")


class RecordingStopRequest(BaseModel):
    process: bool = Field(
        False,
        description="True 면 종료 직후 음성 인식 + 업로드까지 실행",
    )
    existing_note: str = Field("", description="음성 인식 결과 앞에 붙일 기존 노트")
    user_id: Optional[str] = Field(None, description="있으면 업로드 URL 을 이 사용자의 일기에 첨부")
    day: Optional[str] = Field(None, description="첨부할 일기 날짜 (YYYY-MM-DD, 기본: 오늘)")


class MediaAttachRequest(BaseModel):
    kind: Literal["audio", "video"] = Field("audio", description="녹음(audio) / 녹화(video)")
    url: str = Field(..., description="업로드된 미디어 URL")


# ---------------------------
# 응답(Response) 스키마
# ---------------------------

class OkResponse(BaseModel):
    status: Literal["ok"] = "ok"
    result: Any = None


class ErrorResponse(BaseModel):
    status: Literal["error"] = "error"
    error_type: str
    stage: Optional[str] = None
    message: str


class EntryView(BaseModel):
    date: str
    mood: int
    mood_label: str
    mood_emoji: str
    note: str
    emotion_analysis: Optional[Dict[str, Any]] = None
    timestamp: Optional[str] = None
    media: List[Dict[str, str]] = []


class StatsView(BaseModel):
    period: str
    statistics: Dict[str, Any]
    emotion_percentages: Dict[str, float]
    trend: List[Dict[str, Any]]
    colors: Dict[str, str]


def error_type_for(e: Exception) -> str:
    """JournalEntryError → journal_entry_error"""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", type(e).__name__).lower()


def error_response(e: Exception, message: Optional[str] = None) -> ErrorResponse:
    return ErrorResponse(
        error_type=error_type_for(e),
        stage=getattr(e, "stage", None),
        message=message or str(e),
    )
