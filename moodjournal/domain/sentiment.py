from __future__ import annotations

import math

# (하한, 라벨): 위에서부터 순서대로 비교
SENTIMENT_THRESHOLDS = (
    (3, "Très positif"),
    (1, "Positif"),
    (-1, "Neutre"),
    (-3, "Négatif"),
)
VERY_NEGATIVE = "Très négatif"


def sentiment_label(score: float) -> str:
    """점수를 감성 라벨로 변환한다. (단일 일기 / 기간 평균 공용)"""
    for lower, label in SENTIMENT_THRESHOLDS:
        if score >= lower:
            return label
    return VERY_NEGATIVE


def round2(value: float) -> float:
    """소수 둘째 자리 반올림 (0.5 는 +무한대 방향으로 올림)."""
    return math.floor(value * 100 + 0.5) / 100
