"""Unit tests for the keyword emotion analyzer."""
from __future__ import annotations

import random

import pytest

from moodjournal.domain.analyzer import KeywordEmotionAnalyzer, analyze_text
from moodjournal.domain.lexicon import EmotionCategory, EmotionLexicon, default_lexicon
from moodjournal.domain.sentiment import round2, sentiment_label


class TestAnalyzeText:
    def test_two_joy_keywords(self, analyzer):
        result = analyzer.analyze_text("Je suis très heureux et content aujourd'hui")
        assert result.dominant_emotion == "joie"
        assert result.overall_score == 4
        assert result.sentiment == "Très positif"
        assert result.emotions["joie"].count == 2
        assert [k.keyword for k in result.keywords] == ["heureux", "content"]

    def test_tie_goes_to_first_declared_category(self, analyzer):
        result = analyzer.analyze_text("Je suis triste et en colère")
        assert set(result.emotions) == {"tristesse", "colère"}
        assert result.emotions["tristesse"].score == -2
        assert result.emotions["colère"].score == -1
        assert result.emotions["tristesse"].intensity == pytest.approx(1 / 3)
        assert result.emotions["colère"].intensity == pytest.approx(1 / 3)
        assert result.overall_score == -3
        assert result.dominant_emotion == "tristesse"
        assert result.sentiment == "Négatif"

    @pytest.mark.parametrize("text", ["", None, 42, ["heureux"]])
    def test_empty_or_non_text_is_neutral(self, analyzer, text):
        result = analyzer.analyze_text(text)
        assert result.dominant_emotion == "neutre"
        assert result.overall_score == 0
        assert dict(result.emotions) == {}
        assert result.keywords == ()
        assert result.sentiment == "Neutre"

    def test_no_match_is_neutral(self, analyzer):
        result = analyzer.analyze_text("Rien de spécial, une journée ordinaire.")
        assert result.dominant_emotion == "neutre"
        assert result.overall_score == 0

    def test_case_insensitive_prefix_match(self, analyzer):
        result = analyzer.analyze_text("DÉPRIMÉE et déprimant")
        assert result.emotions["tristesse"].count == 2
        assert result.keywords[0].keyword == "déprim"
        assert result.keywords[0].count == 2

    def test_stem_must_start_at_word_boundary(self, analyzer):
        # "super" dans "insupportable" ne commence pas une frontière de mot
        result = analyzer.analyze_text("C'est insupportable")
        assert "joie" not in result.emotions

    def test_accented_stems_match_after_space(self, analyzer):
        result = analyzer.analyze_text("Je suis énervé, étonné et écœuré")
        assert set(result.emotions) == {"colère", "surprise", "dégoût"}
        assert [k.keyword for k in result.keywords] == ["énervé", "étonné", "écœur"]

    def test_intensity_saturates_at_one(self, analyzer):
        result = analyzer.analyze_text("peur peur peur peur peur")
        assert result.emotions["peur"].count == 5
        assert result.emotions["peur"].intensity == 1.0
        assert result.overall_score == -5
        assert result.sentiment == "Très négatif"

    def test_higher_intensity_wins_over_order(self, analyzer):
        result = analyzer.analyze_text("triste, mais amour et passion et tendresse")
        assert result.dominant_emotion == "amour"

    def test_module_level_helper_uses_default_lexicon(self):
        assert analyze_text("génial").dominant_emotion == "joie"

    def test_injected_lexicon(self):
        lexicon = EmotionLexicon([EmotionCategory.build("calme", ["serein"], 1)])
        result = KeywordEmotionAnalyzer(lexicon).analyze_text("Très serein")
        assert result.dominant_emotion == "calme"
        assert result.overall_score == 1


class TestSentiment:
    @pytest.mark.parametrize(
        "score, label",
        [
            (4, "Très positif"),
            (3, "Très positif"),
            (1, "Positif"),
            (0.5, "Neutre"),
            (-1, "Neutre"),
            (-1.5, "Négatif"),
            (-3, "Négatif"),
            (-3.01, "Très négatif"),
        ],
    )
    def test_thresholds(self, score, label):
        assert sentiment_label(score) == label

    def test_round2_half_up(self):
        assert round2(0.125) == 0.13
        assert round2(-0.125) == -0.12
        assert round2(4 * 0.7 + 1 * 0.3) == 3.1


_VOCAB = [k for c in default_lexicon() for k in c.keywords] + [
    "le", "la", "journée", "travail", "maison", "pluie", "soleil", "ami",
]


def _random_text(rng: random.Random) -> str:
    return " ".join(rng.choice(_VOCAB) for _ in range(rng.randint(0, 25)))


@pytest.mark.parametrize("seed", range(20))
def test_scores_are_consistent(analyzer, seed):
    rng = random.Random(seed)
    text = _random_text(rng)
    result = analyzer.analyze_text(text)

    assert result.overall_score == sum(e.score for e in result.emotions.values())
    for name, e in result.emotions.items():
        assert e.count == sum(k.count for k in result.keywords if k.emotion == name)
        assert 0 < e.intensity <= 1
    if result.emotions:
        assert result.dominant_emotion in result.emotions
    else:
        assert result.dominant_emotion == "neutre"
    assert result.sentiment == sentiment_label(result.overall_score)
    assert analyzer.analyze_text(text) == result
