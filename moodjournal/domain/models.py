# moodjournal/domain/models.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from moodjournal.domain.sentiment import sentiment_label

NEUTRAL_EMOTION = "neutre"


class MediaKind(str, Enum):
    AUDIO = "audio"
    VIDEO = "video"


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """snake_case / camelCase 키를 모두 허용해서 값을 찾는다."""
    for k in keys:
        if k in data and data[k] is not None:
            return data[k]
    return default


def parse_day(value: Any) -> date:
    """date / 'YYYY-MM-DD' / ISO datetime 문자열을 date 로 변환."""
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


@dataclass(frozen=True)
class EmotionScore:
    """카테고리별 매칭 결과: 횟수, 점수(횟수 × 기본 점수), 강도(0~1)."""

    count: int
    score: int
    intensity: float


@dataclass(frozen=True)
class KeywordHit:
    keyword: str
    emotion: str
    count: int


@dataclass(frozen=True)
class EmotionAnalysisResult:
    """텍스트 1건의 감정 분석 결과. 생성 후 변경하지 않는다."""

    dominant_emotion: str
    emotions: Mapping[str, EmotionScore]
    overall_score: int
    keywords: Tuple[KeywordHit, ...]
    sentiment: str

    @classmethod
    def neutral(cls, neutral_name: str = NEUTRAL_EMOTION) -> "EmotionAnalysisResult":
        return cls(
            dominant_emotion=neutral_name,
            emotions=MappingProxyType({}),
            overall_score=0,
            keywords=(),
            sentiment=sentiment_label(0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dominant_emotion": self.dominant_emotion,
            "emotions": {
                name: {"count": e.count, "score": e.score, "intensity": e.intensity}
                for name, e in self.emotions.items()
            },
            "overall_score": self.overall_score,
            "keywords": [
                {"keyword": k.keyword, "emotion": k.emotion, "count": k.count}
                for k in self.keywords
            ],
            "sentiment": self.sentiment,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EmotionAnalysisResult":
        """캐시된 분석 결과 복원. 모바일 앱 내보내기 형식(camelCase)도 허용."""
        emotions_raw = _pick(data, "emotions", default={}) or {}
        emotions = {
            str(name): EmotionScore(
                count=int(v["count"]),
                score=int(v["score"]),
                intensity=float(v["intensity"]),
            )
            for name, v in emotions_raw.items()
        }
        keywords = tuple(
            KeywordHit(
                keyword=str(k["keyword"]),
                emotion=str(k["emotion"]),
                count=int(k["count"]),
            )
            for k in _pick(data, "keywords", default=[]) or []
        )
        overall = int(_pick(data, "overall_score", "overallScore", default=0))
        return cls(
            dominant_emotion=str(
                _pick(data, "dominant_emotion", "dominantEmotion", default=NEUTRAL_EMOTION)
            ),
            emotions=MappingProxyType(emotions),
            overall_score=overall,
            keywords=keywords,
            sentiment=str(_pick(data, "sentiment", default=sentiment_label(overall))),
        )


@dataclass(frozen=True)
class MediaAttachment:
    kind: MediaKind
    url: str

    def to_dict(self) -> Dict[str, str]:
        return {"kind": self.kind.value, "url": self.url}


@dataclass(frozen=True)
class JournalEntry:
    """하루 1건의 일기. (사용자 + 날짜가 고유 키)

    - mood: 1~10 기분 점수
    - note: 노트 원문
    - emotion_analysis: 저장 시점의 분석 결과 캐시 (없으면 통계 계산 때 재분석)
    """

    date: date
    mood: int
    note: str
    emotion_analysis: Optional[EmotionAnalysisResult] = None
    timestamp: Optional[str] = None
    media: Tuple[MediaAttachment, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "mood": self.mood,
            "note": self.note,
            "emotion_analysis": (
                self.emotion_analysis.to_dict() if self.emotion_analysis else None
            ),
            "timestamp": self.timestamp,
            "media": [m.to_dict() for m in self.media],
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "JournalEntry":
        analysis_raw = _pick(data, "emotion_analysis", "emotionAnalysis")
        analysis = (
            EmotionAnalysisResult.from_dict(analysis_raw)
            if isinstance(analysis_raw, Mapping)
            else None
        )
        media = tuple(
            MediaAttachment(kind=MediaKind(m["kind"]), url=str(m["url"]))
            for m in _pick(data, "media", default=[]) or []
        )
        return cls(
            date=parse_day(data["date"]),
            mood=int(_pick(data, "mood", "mood_score", "moodScore", default=5)),
            note=str(_pick(data, "note", "text", "note_text", default="")),
            emotion_analysis=analysis,
            timestamp=_pick(data, "timestamp"),
            media=media,
        )


@dataclass(frozen=True)
class TrendPoint:
    date: str
    score: int
    emotion: str


@dataclass(frozen=True)
class PeriodStatistics:
    """기간 통계. 저장하지 않고 필요할 때마다 원본 일기에서 다시 계산한다."""

    average_score: float
    total_entries: int
    emotion_distribution: Mapping[str, int]
    trend_data: Tuple[TrendPoint, ...]
    most_frequent_emotion: str
    sentiment: str

    @classmethod
    def empty(cls, neutral_name: str = NEUTRAL_EMOTION) -> "PeriodStatistics":
        return cls(
            average_score=0,
            total_entries=0,
            emotion_distribution=MappingProxyType({}),
            trend_data=(),
            most_frequent_emotion=neutral_name,
            sentiment=sentiment_label(0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "average_score": self.average_score,
            "total_entries": self.total_entries,
            "emotion_distribution": dict(self.emotion_distribution),
            "trend_data": [
                {"date": t.date, "score": t.score, "emotion": t.emotion}
                for t in self.trend_data
            ],
            "most_frequent_emotion": self.most_frequent_emotion,
            "sentiment": self.sentiment,
        }


@dataclass(frozen=True)
class TranscriptionResult:
    text: str
    confidence: float
    job_id: Optional[str] = None


@dataclass(frozen=True)
class VoiceFeatures:
    """재생 길이만으로 추정한 근사 음성 특징 (실제 신호 분석 아님)."""

    duration: float
    estimated_speech_rate: float
    energy_level: float
    detected_stress: bool
    confidence: float
    silence_ratio: float
    average_intensity: float


@dataclass(frozen=True)
class CombinedScore:
    text_score: int
    voice_score: float
    combined_score: float
    confidence: float


@dataclass(frozen=True)
class VoiceAnalysisResult:
    transcription: str
    confidence: float
    full_text: str
    emotion_analysis: EmotionAnalysisResult
    voice_features: VoiceFeatures
    combined: CombinedScore

    @property
    def combined_score(self) -> float:
        return self.combined.combined_score

    def to_dict(self) -> Dict[str, Any]:
        f = self.voice_features
        return {
            "transcription": self.transcription,
            "confidence": self.confidence,
            "full_text": self.full_text,
            "emotion_analysis": self.emotion_analysis.to_dict(),
            "voice_features": {
                "duration": f.duration,
                "estimated_speech_rate": f.estimated_speech_rate,
                "energy_level": f.energy_level,
                "detected_stress": f.detected_stress,
                "confidence": f.confidence,
                "silence_ratio": f.silence_ratio,
                "average_intensity": f.average_intensity,
            },
            "combined_score": {
                "text_score": self.combined.text_score,
                "voice_score": self.combined.voice_score,
                "combined_score": self.combined.combined_score,
                "confidence": self.combined.confidence,
            },
        }
