from __future__ import annotations
from datetime import date
from typing import Dict, Iterable, List, Optional, TypeVar, Union, Mapping, Any

from moodjournal.domain.models import JournalEntry, PeriodStatistics, TrendPoint, parse_day

# 기간 이름 → 포함할 최대 경과 일수
PERIOD_DAYS: Dict[str, int] = {
    "week": 7,
    "month": 30,
    "year": 365,
}

E = TypeVar("E", JournalEntry, Mapping[str, Any])


def filter_entries_by_period(
    entries: Iterable[E],
    period: str,
    today: Optional[date] = None,
) -> List[E]:
    """기간(week/month/year) 안에 들어오는 일기만 남긴다.

    경과 일수 = today - 일기 날짜 (일 단위). 미래 날짜는 음수라서 항상 포함된다.
    날짜를 읽을 수 없는 항목은 건너뛴다.
    """
    if period not in PERIOD_DAYS:
        raise ValueError(f"지원하지 않는 기간입니다: {period} (week/month/year)")

    max_days = PERIOD_DAYS[period]
    today = today or date.today()

    kept: List[E] = []
    for entry in entries:
        raw = entry.date if isinstance(entry, JournalEntry) else entry.get("date")
        try:
            day = parse_day(raw)
        except (TypeError, ValueError):
            continue
        if (today - day).days <= max_days:
            kept.append(entry)
    return kept


def emotion_percentages(stats: PeriodStatistics) -> Dict[str, float]:
    """감정 분포를 백분율(소수 1자리)로 변환한다."""
    total = sum(stats.emotion_distribution.values())
    if total <= 0:
        return {}
    return {
        emotion: round(count / total * 100, 1)
        for emotion, count in stats.emotion_distribution.items()
    }


def trend_series(
    stats: PeriodStatistics,
    last: int = 7,
    floor: Union[int, float] = -5,
) -> List[TrendPoint]:
    """추이 그래프용: 최근 N개 지점, 점수는 floor 아래로 내려가지 않게 자른다."""
    points = list(stats.trend_data)[-last:] if last > 0 else []
    return [
        TrendPoint(date=p.date, score=max(p.score, floor), emotion=p.emotion)
        for p in points
    ]
