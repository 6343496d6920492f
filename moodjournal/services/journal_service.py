from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Tuple

from moodjournal.domain.aggregation import filter_entries_by_period
from moodjournal.domain.analyzer import KeywordEmotionAnalyzer, get_analyzer
from moodjournal.domain.models import (
    JournalEntry,
    MediaAttachment,
    MediaKind,
    PeriodStatistics,
    parse_day,
)
from moodjournal.domain.mood import validate_mood
from moodjournal.exceptions import JournalEntryError
from moodjournal.infra.journal_repo import YamlJournalStore

logger = logging.getLogger(__name__)


def _validated_day(day: Any) -> date:
    try:
        return parse_day(day)
    except (TypeError, ValueError) as e:
        raise JournalEntryError(f"날짜 형식이 올바르지 않습니다 (YYYY-MM-DD): {day!r}") from e


class JournalService:
    """일기 저장/조회 + 기간 통계.

    저장할 때 노트를 분석해서 결과를 같이 캐시한다.
    """

    def __init__(
        self,
        store: Optional[YamlJournalStore] = None,
        analyzer: Optional[KeywordEmotionAnalyzer] = None,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store or YamlJournalStore()
        self.analyzer = analyzer or get_analyzer()
        self._clock = clock

    def save_entry(self, user_id: str, day: Any, mood: Any, note: str) -> Tuple[JournalEntry, bool]:
        """
        일기 저장 (같은 날짜면 덮어씀). 기존 첨부 미디어는 유지한다.

        Returns:
            (저장된 일기, 새로 만들었는지 여부)
        """
        d = _validated_day(day)
        mood = validate_mood(mood)
        note = note.strip() if isinstance(note, str) else ""
        if not note:
            raise JournalEntryError("노트 내용을 입력해 주세요.")

        existing = self.store.get(user_id, d)
        entry = JournalEntry(
            date=d,
            mood=mood,
            note=note,
            emotion_analysis=self.analyzer.analyze_text(note),
            timestamp=self._clock().isoformat(timespec="seconds"),
            media=existing.media if existing else (),
        )
        created = self.store.put(user_id, entry)
        return entry, created

    def get_entry(self, user_id: str, day: Any) -> Optional[JournalEntry]:
        return self.store.get(user_id, _validated_day(day))

    def list_entries(self, user_id: str) -> List[JournalEntry]:
        return self.store.list_all(user_id)

    def delete_entry(self, user_id: str, day: Any) -> bool:
        return self.store.delete(user_id, _validated_day(day))

    def marked_dates(self, user_id: str) -> List[str]:
        return self.store.marked_dates(user_id)

    def period_statistics(
        self,
        user_id: str,
        period: str = "week",
        today: Optional[date] = None,
    ) -> PeriodStatistics:
        """최근 week/month/year 일기에 대한 통계 (조회할 때마다 다시 계산)."""
        entries = filter_entries_by_period(self.store.list_all(user_id), period, today=today)
        return self.analyzer.calculate_period_stats(entries)

    def today(self) -> date:
        return self._clock().date()

    def attach_media(self, user_id: str, day: Any, kind: Any, url: str) -> JournalEntry:
        """업로드된 녹음/녹화 URL 을 해당 날짜 일기에 붙인다."""
        d = _validated_day(day)
        try:
            kind = MediaKind(kind)
        except ValueError as e:
            raise JournalEntryError(f"지원하지 않는 미디어 종류입니다: {kind!r}") from e
        entry = self.store.get(user_id, d)
        if entry is None:
            raise JournalEntryError(f"{d.isoformat()} 일기가 없습니다. 먼저 일기를 저장해 주세요.")
        if not url:
            raise JournalEntryError("미디어 URL 이 비어 있습니다.")

        updated = JournalEntry(
            date=entry.date,
            mood=entry.mood,
            note=entry.note,
            emotion_analysis=entry.emotion_analysis,
            timestamp=entry.timestamp,
            media=entry.media + (MediaAttachment(kind=kind, url=url),),
        )
        self.store.put(user_id, updated)
        logger.info("미디어 첨부: user=%s date=%s kind=%s", user_id, d.isoformat(), kind.value)
        return updated

    def list_media(self, user_id: str) -> List[Dict[str, str]]:
        """갤러리용 첨부 미디어 목록 (최신 날짜 먼저, 같은 날짜는 첨부 순서)."""
        return [
            {"date": entry.date.isoformat(), **media.to_dict()}
            for entry in self.store.list_all(user_id)
            for media in entry.media
        ]
