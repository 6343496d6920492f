"""Unit tests for loading the emotion keyword table."""
from __future__ import annotations

import pytest

from moodjournal.domain.lexicon import EmotionLexicon, default_lexicon, load_emotion_lexicon
from moodjournal.exceptions import LexiconLoadError


class TestDefaultLexicon:
    def test_category_order(self):
        assert [c.name for c in default_lexicon()] == [
            "joie",
            "tristesse",
            "colère",
            "peur",
            "surprise",
            "dégoût",
            "amour",
            "satisfaction",
        ]

    def test_scores(self):
        scores = {c.name: c.score for c in default_lexicon()}
        assert scores["joie"] == 2
        assert scores["tristesse"] == -2
        assert scores["surprise"] == 1

    def test_color_and_icon_fallback(self):
        lexicon = default_lexicon()
        assert lexicon.color("joie") == "#FFD700"
        assert lexicon.icon("tristesse") == "😢"
        assert lexicon.color("inconnu") == "#808080"
        assert lexicon.icon(None) == "😐"
        assert lexicon.neutral_name == "neutre"

    def test_is_cached(self):
        assert default_lexicon() is default_lexicon()


class TestLoadLexicon:
    def test_missing_file(self, tmp_path):
        with pytest.raises(LexiconLoadError):
            load_emotion_lexicon(tmp_path / "absent.yaml")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(LexiconLoadError):
            load_emotion_lexicon(path)

    def test_malformed_structure(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("emotion_keywords:\n  categories:\n    - name: joie\n", encoding="utf-8")
        with pytest.raises(LexiconLoadError):
            load_emotion_lexicon(path)

    def test_duplicate_category(self):
        data = {
            "emotion_keywords": {
                "categories": [
                    {"name": "joie", "score": 2, "keywords": ["ravi"]},
                    {"name": "joie", "score": 1, "keywords": ["content"]},
                ]
            }
        }
        with pytest.raises(LexiconLoadError):
            EmotionLexicon.from_mapping(data)

    def test_custom_file(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text(
            "emotion_keywords:\n"
            "  neutral: {name: calme}\n"
            "  categories:\n"
            "    - {name: fatigue, score: -1, keywords: [fatigu, épuis]}\n",
            encoding="utf-8",
        )
        lexicon = load_emotion_lexicon(path)
        assert len(lexicon) == 1
        assert "fatigue" in lexicon
        assert lexicon.neutral_name == "calme"
        assert lexicon.categories["fatigue"].keywords == ("fatigu", "épuis")
