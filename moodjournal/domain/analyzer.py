from __future__ import annotations

from collections import defaultdict
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from moodjournal.domain.lexicon import EmotionLexicon, default_lexicon
from moodjournal.domain.models import (
    EmotionAnalysisResult,
    EmotionScore,
    JournalEntry,
    KeywordHit,
    PeriodStatistics,
    TrendPoint,
    parse_day,
)
from moodjournal.domain.sentiment import round2, sentiment_label

# 카테고리 강도 정규화 기준: 3회 이상 매칭되면 강도 1.0
INTENSITY_SATURATION = 3

EntryLike = Union[JournalEntry, Mapping[str, Any]]


class KeywordEmotionAnalyzer:
    def __init__(self, lexicon: Optional[EmotionLexicon] = None):
        """
        키워드 기반 감정 분석기 초기화

        Args:
            lexicon: 감정 키워드 사전. 없으면 패키지 기본 사전을 사용
        """
        self.lexicon = lexicon if lexicon is not None else default_lexicon()

    @property
    def neutral(self) -> str:
        return self.lexicon.neutral_name

    def analyze_text(self, text: Any) -> EmotionAnalysisResult:
        """
        텍스트에서 감정 키워드 분석

        Args:
            text: 분석할 텍스트 (문자열이 아니거나 비어 있으면 중립 결과)

        Returns:
            EmotionAnalysisResult
        """
        if not text or not isinstance(text, str):
            return EmotionAnalysisResult.neutral(self.neutral)

        text_lower = text.lower()
        emotions: Dict[str, EmotionScore] = {}
        detected_keywords: List[KeywordHit] = []
        total_score = 0

        # 카테고리 선언 순서 → 키워드 선언 순서로 순회
        for category in self.lexicon:
            emotion_count = 0

            for keyword, pattern in zip(category.keywords, category.patterns):
                matches = len(pattern.findall(text_lower))
                if matches:
                    emotion_count += matches
                    detected_keywords.append(
                        KeywordHit(keyword=keyword, emotion=category.name, count=matches)
                    )

            if emotion_count > 0:
                emotions[category.name] = EmotionScore(
                    count=emotion_count,
                    score=emotion_count * category.score,
                    intensity=min(emotion_count / INTENSITY_SATURATION, 1.0),
                )
                total_score += emotion_count * category.score

        return EmotionAnalysisResult(
            dominant_emotion=self._dominant_emotion(emotions),
            emotions=MappingProxyType(emotions),
            overall_score=total_score,
            keywords=tuple(detected_keywords),
            sentiment=sentiment_label(total_score),
        )

    def _dominant_emotion(self, emotions: Mapping[str, EmotionScore]) -> str:
        # 강도가 "더 큰" 경우에만 교체 → 동점이면 먼저 나온 카테고리 유지
        dominant = self.neutral
        best: Optional[float] = None
        for name, e in emotions.items():
            if best is None or e.intensity > best:
                dominant, best = name, e.intensity
        return dominant

    def _analysis_for(self, entry: EntryLike) -> EmotionAnalysisResult:
        """캐시된 분석이 있으면 재사용, 없거나 깨져 있으면 노트를 다시 분석."""
        if isinstance(entry, JournalEntry):
            if entry.emotion_analysis is not None:
                return entry.emotion_analysis
            return self.analyze_text(entry.note)

        cached = entry.get("emotion_analysis") or entry.get("emotionAnalysis")
        if isinstance(cached, EmotionAnalysisResult):
            return cached
        if isinstance(cached, Mapping):
            try:
                return EmotionAnalysisResult.from_dict(cached)
            except (AttributeError, KeyError, TypeError, ValueError):
                pass
        return self.analyze_text(entry.get("text") or entry.get("note") or "")

    @staticmethod
    def _entry_date(entry: EntryLike) -> str:
        raw = entry.date if isinstance(entry, JournalEntry) else entry.get("date")
        try:
            return parse_day(raw).isoformat()
        except (TypeError, ValueError):
            return "" if raw is None else str(raw)

    def calculate_period_stats(self, entries: Optional[Iterable[EntryLike]]) -> PeriodStatistics:
        """
        일기 목록을 기간 통계로 집계

        - 빈 목록 → 전부 0 / 중립
        - 평균 점수는 소수 둘째 자리 반올림
        - 감정 분포는 각 일기의 대표 감정(중립 제외)만 센다
        """
        try:
            items = [e for e in (entries or []) if isinstance(e, (JournalEntry, Mapping))]
        except TypeError:
            items = []
        if not items:
            return PeriodStatistics.empty(self.neutral)

        total_score = 0
        emotion_counts: Dict[str, int] = defaultdict(int)
        trend_data: List[TrendPoint] = []

        for entry in items:
            analysis = self._analysis_for(entry)
            total_score += analysis.overall_score

            if analysis.dominant_emotion != self.neutral:
                emotion_counts[analysis.dominant_emotion] += 1

            trend_data.append(
                TrendPoint(
                    date=self._entry_date(entry),
                    score=analysis.overall_score,
                    emotion=analysis.dominant_emotion,
                )
            )

        average = total_score / len(items)

        most_frequent = self.neutral
        best = 0
        for emotion, count in emotion_counts.items():
            if count > best:
                most_frequent, best = emotion, count

        # 안정 정렬: 같은 날짜는 입력 순서 유지
        trend_data.sort(key=lambda t: t.date)

        return PeriodStatistics(
            average_score=round2(average),
            total_entries=len(items),
            emotion_distribution=MappingProxyType(dict(emotion_counts)),
            trend_data=tuple(trend_data),
            most_frequent_emotion=most_frequent,
            sentiment=sentiment_label(average),
        )


_default_analyzer: Optional[KeywordEmotionAnalyzer] = None


def get_analyzer() -> KeywordEmotionAnalyzer:
    """기본 사전을 쓰는 모듈 전역 analyzer (요청마다 새로 만들지 않음)."""
    global _default_analyzer
    if _default_analyzer is None:
        _default_analyzer = KeywordEmotionAnalyzer()
    return _default_analyzer


def analyze_text(text: Any) -> EmotionAnalysisResult:
    return get_analyzer().analyze_text(text)


def calculate_period_stats(entries: Optional[Iterable[EntryLike]]) -> PeriodStatistics:
    return get_analyzer().calculate_period_stats(entries)
