from __future__ import annotations

from typing import Any

from moodjournal.exceptions import JournalEntryError

MOOD_MIN = 1
MOOD_MAX = 10

# (상한, 라벨, 이모지)
_MOOD_SCALE = (
    (2, "Très triste", "😢"),
    (4, "Triste", "😕"),
    (6, "Neutre", "😐"),
    (8, "Heureux", "🙂"),
)
_MOOD_TOP = ("Très heureux", "😊")


def validate_mood(score: Any) -> int:
    """기분 점수는 1~10 정수만 허용한다."""
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise JournalEntryError("기분 점수는 숫자여야 합니다.")
    if int(score) != score or not (MOOD_MIN <= score <= MOOD_MAX):
        raise JournalEntryError(f"기분 점수는 {MOOD_MIN}~{MOOD_MAX} 사이의 정수여야 합니다.")
    return int(score)


def mood_label(score: int) -> str:
    for upper, label, _ in _MOOD_SCALE:
        if score <= upper:
            return label
    return _MOOD_TOP[0]


def mood_emoji(score: int) -> str:
    for upper, _, emoji in _MOOD_SCALE:
        if score <= upper:
            return emoji
    return _MOOD_TOP[1]
