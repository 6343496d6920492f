# moodjournal/infra/journal_repo.py
from __future__ import annotations

import hashlib
import logging
import re
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from moodjournal.domain.models import JournalEntry, parse_day
from moodjournal.exceptions import JournalEntryError
from moodjournal.infra.paths import JOURNAL_DIR
from moodjournal.infra.yaml_io import load_yaml, save_yaml

logger = logging.getLogger(__name__)


def _slugify_user(user_id: str) -> str:
    """파일명에 안전하게 쓸 수 있도록 사용자 id 정리. 바뀐 경우 해시를 붙여 충돌을 막는다."""
    if not user_id or not str(user_id).strip():
        raise JournalEntryError("사용자 id 가 비어 있습니다.")
    raw = str(user_id).strip()
    s = re.sub(r"[^\w\-]", "_", raw)
    if s != raw:
        s = f"{s}_{hashlib.sha1(raw.encode('utf-8')).hexdigest()[:8]}"
    return s


class YamlJournalStore:
    """
    사용자별 일기 저장소. 사용자 1명 = YAML 파일 1개.

    파일 구조:
        user_id: "..."
        entries:
          "2024-11-28": {date, mood, note, emotion_analysis, timestamp, media, updated_at}
    """

    def __init__(self, root: Optional[Path] = None):
        self.root = root or JOURNAL_DIR
        self._lock = threading.Lock()

    def _path(self, user_id: str) -> Path:
        return self.root / f"{_slugify_user(user_id)}.yaml"

    def _load(self, user_id: str) -> Dict[str, Dict[str, Any]]:
        path = self._path(user_id)
        if not path.exists():
            return {}
        data = load_yaml(path) or {}
        entries = data.get("entries") or {}
        return {str(k): v for k, v in entries.items() if isinstance(v, dict)}

    def _save(self, user_id: str, entries: Dict[str, Dict[str, Any]]) -> None:
        ordered = {k: entries[k] for k in sorted(entries)}
        save_yaml(self._path(user_id), {"user_id": str(user_id), "entries": ordered})

    def put(self, user_id: str, entry: JournalEntry) -> bool:
        """저장(같은 날짜는 덮어씀). 새로 만들었으면 True."""
        key = entry.date.isoformat()
        with self._lock:
            entries = self._load(user_id)
            created = key not in entries
            payload = entry.to_dict()
            payload["updated_at"] = datetime.now().isoformat(timespec="seconds")
            entries[key] = payload
            self._save(user_id, entries)
        logger.info("일기 저장: user=%s date=%s (%s)", user_id, key, "new" if created else "update")
        return created

    def get(self, user_id: str, day: Any) -> Optional[JournalEntry]:
        key = parse_day(day).isoformat()
        raw = self._load(user_id).get(key)
        return JournalEntry.from_dict(raw) if raw else None

    def list_all(self, user_id: str) -> List[JournalEntry]:
        """전체 일기, 최신 날짜 먼저."""
        out: List[JournalEntry] = []
        for key, raw in self._load(user_id).items():
            try:
                out.append(JournalEntry.from_dict(raw))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("손상된 일기 건너뜀: user=%s key=%s (%s)", user_id, key, e)
        out.sort(key=lambda e: e.date, reverse=True)
        return out

    def delete(self, user_id: str, day: Any) -> bool:
        key = parse_day(day).isoformat()
        with self._lock:
            entries = self._load(user_id)
            if key not in entries:
                return False
            del entries[key]
            self._save(user_id, entries)
        logger.info("일기 삭제: user=%s date=%s", user_id, key)
        return True

    def marked_dates(self, user_id: str) -> List[str]:
        """달력 표시용: 일기가 있는 날짜 (오름차순)."""
        return sorted(self._load(user_id))
