"""Unit tests for mood helpers and period filtering."""
from __future__ import annotations

from datetime import date

import pytest

from moodjournal.domain.aggregation import emotion_percentages, filter_entries_by_period, trend_series
from moodjournal.domain.models import JournalEntry
from moodjournal.domain.mood import mood_emoji, mood_label, validate_mood
from moodjournal.exceptions import JournalEntryError


class TestMood:
    @pytest.mark.parametrize(
        "score, label",
        [(1, "Très triste"), (2, "Très triste"), (4, "Triste"), (6, "Neutre"), (8, "Heureux"), (10, "Très heureux")],
    )
    def test_label(self, score, label):
        assert mood_label(score) == label

    def test_emoji(self):
        assert mood_emoji(1) == "😢"
        assert mood_emoji(9) == "😊"

    @pytest.mark.parametrize("score", [0, 11, 5.5, "5", None, True])
    def test_invalid(self, score):
        with pytest.raises(JournalEntryError):
            validate_mood(score)

    def test_valid(self):
        assert validate_mood(7) == 7
        assert validate_mood(7.0) == 7


TODAY = date(2024, 11, 28)


def _entry(day: date) -> JournalEntry:
    return JournalEntry(date=day, mood=5, note="")


class TestFilterEntriesByPeriod:
    def test_week_boundary(self):
        entries = [_entry(date(2024, 11, 21)), _entry(date(2024, 11, 20))]
        kept = filter_entries_by_period(entries, "week", today=TODAY)
        assert [e.date for e in kept] == [date(2024, 11, 21)]

    def test_month_and_year(self):
        entries = [_entry(date(2024, 10, 29)), _entry(date(2024, 10, 28)), _entry(date(2023, 11, 29))]
        assert len(filter_entries_by_period(entries, "month", today=TODAY)) == 1
        assert len(filter_entries_by_period(entries, "year", today=TODAY)) == 3

    def test_future_entries_are_kept(self):
        kept = filter_entries_by_period([_entry(date(2024, 12, 25))], "week", today=TODAY)
        assert len(kept) == 1

    def test_mappings_and_bad_dates(self):
        entries = [{"date": "2024-11-27"}, {"date": "pas une date"}, {"note": "sans date"}]
        assert filter_entries_by_period(entries, "week", today=TODAY) == [{"date": "2024-11-27"}]

    def test_unknown_period(self):
        with pytest.raises(ValueError):
            filter_entries_by_period([], "decade", today=TODAY)


class TestChartHelpers:
    def test_percentages(self, analyzer):
        stats = analyzer.calculate_period_stats(
            [
                {"date": "2024-11-01", "note": "heureux"},
                {"date": "2024-11-02", "note": "heureux"},
                {"date": "2024-11-03", "note": "triste"},
            ]
        )
        assert emotion_percentages(stats) == {"joie": 66.7, "tristesse": 33.3}

    def test_percentages_empty(self, analyzer):
        assert emotion_percentages(analyzer.calculate_period_stats([])) == {}

    def test_trend_series_keeps_last_and_clamps(self, analyzer):
        entries = [{"date": f"2024-11-{d:02d}", "note": "heureux"} for d in range(1, 9)]
        entries.append({"date": "2024-11-09", "note": "peur peur peur peur peur peur"})
        points = trend_series(analyzer.calculate_period_stats(entries))
        assert len(points) == 7
        assert points[0].date == "2024-11-03"
        assert points[-1].score == -5
