from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

import yaml

from moodjournal.exceptions import LexiconLoadError
from moodjournal.infra.paths import EMOTION_KEYWORDS_PATH

NEUTRAL_EMOTION = "neutre"


@dataclass(frozen=True)
class EmotionCategory:
    """감정 카테고리 1개.

    - name: 카테고리 이름 (예: 'joie')
    - keywords: 접두어(stem) 목록. 선언 순서 유지
    - score: 키워드 1회 매칭당 부호 있는 점수
    - color/icon: 통계 화면용 표시 정보
    """

    name: str
    keywords: Tuple[str, ...]
    score: int
    color: str = "#808080"
    icon: str = "😐"
    patterns: Tuple["re.Pattern[str]", ...] = field(default=(), repr=False, compare=False)

    @classmethod
    def build(
        cls,
        name: str,
        keywords: List[str],
        score: int,
        color: str = "#808080",
        icon: str = "😐",
    ) -> "EmotionCategory":
        stems = tuple(k.strip().lower() for k in keywords if k and k.strip())
        # \b<stem> : 단어 시작 경계에서의 접두어 매칭
        patterns = tuple(re.compile(r"\b" + re.escape(s), re.IGNORECASE) for s in stems)
        return cls(
            name=name,
            keywords=stems,
            score=int(score),
            color=color,
            icon=icon,
            patterns=patterns,
        )


class EmotionLexicon:
    """정적 감정 키워드 테이블.

    생성 이후에는 변경되지 않는다. 카테고리 순회 순서 = 선언 순서.
    """

    def __init__(
        self,
        categories: List[EmotionCategory],
        neutral_name: str = NEUTRAL_EMOTION,
        neutral_color: str = "#808080",
        neutral_icon: str = "😐",
    ):
        ordered: Dict[str, EmotionCategory] = {}
        for c in categories:
            if c.name in ordered:
                raise LexiconLoadError(f"중복된 감정 카테고리: {c.name}")
            ordered[c.name] = c
        self._categories: Mapping[str, EmotionCategory] = MappingProxyType(ordered)
        self.neutral_name = neutral_name
        self._neutral_color = neutral_color
        self._neutral_icon = neutral_icon

    @property
    def categories(self) -> Mapping[str, EmotionCategory]:
        return self._categories

    def __iter__(self) -> Iterator[EmotionCategory]:
        return iter(self._categories.values())

    def __len__(self) -> int:
        return len(self._categories)

    def __contains__(self, name: object) -> bool:
        return name in self._categories

    def color(self, emotion: Optional[str]) -> str:
        """감정에 대응하는 차트 색상. 모르는 감정은 중립 색상."""
        c = self._categories.get(emotion or "")
        return c.color if c else self._neutral_color

    def icon(self, emotion: Optional[str]) -> str:
        """감정에 대응하는 아이콘. 모르는 감정은 중립 아이콘."""
        c = self._categories.get(emotion or "")
        return c.icon if c else self._neutral_icon

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "EmotionLexicon":
        """
        YAML 구조:
          emotion_keywords:
            neutral: {name, color, icon}
            categories: [{name, score, color, icon, keywords: [...]}, ...]
        """
        try:
            root = data["emotion_keywords"]
            neutral = root.get("neutral") or {}
            categories = [
                EmotionCategory.build(
                    name=str(item["name"]),
                    keywords=[str(k) for k in item.get("keywords") or []],
                    score=int(item["score"]),
                    color=str(item.get("color", "#808080")),
                    icon=str(item.get("icon", "😐")),
                )
                for item in root["categories"]
            ]
        except (KeyError, TypeError, ValueError) as e:
            raise LexiconLoadError(f"감정 키워드 사전 형식이 올바르지 않습니다: {e}") from e

        return cls(
            categories,
            neutral_name=str(neutral.get("name", NEUTRAL_EMOTION)),
            neutral_color=str(neutral.get("color", "#808080")),
            neutral_icon=str(neutral.get("icon", "😐")),
        )


def load_emotion_lexicon(path: Path = EMOTION_KEYWORDS_PATH) -> EmotionLexicon:
    """감정 키워드 YAML 로드"""
    try:
        with open(path, "r", encoding="utf-8") as file:
            data = yaml.safe_load(file)
    except (OSError, yaml.YAMLError) as e:
        raise LexiconLoadError(f"감정 키워드 사전을 읽을 수 없습니다: {path} ({e})") from e

    if not isinstance(data, dict):
        raise LexiconLoadError(f"감정 키워드 사전이 비어 있습니다: {path}")
    return EmotionLexicon.from_mapping(data)


@lru_cache(maxsize=1)
def default_lexicon() -> EmotionLexicon:
    """패키지 기본 사전. 프로세스당 1회만 로드."""
    return load_emotion_lexicon()
