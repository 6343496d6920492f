from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional, Union

from moodjournal.domain.analyzer import KeywordEmotionAnalyzer, get_analyzer
from moodjournal.domain.models import (
    CombinedScore,
    EmotionAnalysisResult,
    VoiceAnalysisResult,
    VoiceFeatures,
)
from moodjournal.domain.sentiment import round2
from moodjournal.exceptions import JournalError
from moodjournal.infra.media_files import to_local_path
from moodjournal.infra.media_probe import probe_duration
from moodjournal.infra.transcription_client import TranscriptionClient

logger = logging.getLogger(__name__)

# 재생 길이만 보고 추정하는 근사값들 (실제 음향 분석 아님)
ASSUMED_WORDS_PER_SECOND = 2.5
STRESS_SPEECH_RATE = 160
LONG_CLIP_SECONDS = 5

FALLBACK_VOICE_FEATURES = VoiceFeatures(
    duration=3,
    estimated_speech_rate=130,
    energy_level=0.5,
    detected_stress=False,
    confidence=0.4,
    silence_ratio=0.15,
    average_intensity=0.25,
)

TEXT_WEIGHT = 0.7
VOICE_WEIGHT = 0.3
VOICE_SCORE_LIMIT = 3


def estimate_voice_features(duration: Optional[float]) -> VoiceFeatures:
    """재생 길이(초)로 음성 특징을 추정한다. 길이를 모르면 기본값."""
    if not duration or duration <= 0:
        return FALLBACK_VOICE_FEATURES

    estimated_words = duration * ASSUMED_WORDS_PER_SECOND
    speech_rate = (estimated_words / duration) * 60  # 단어/분
    return VoiceFeatures(
        duration=duration,
        estimated_speech_rate=speech_rate,
        energy_level=0.7 if duration > LONG_CLIP_SECONDS else 0.5,
        detected_stress=speech_rate > STRESS_SPEECH_RATE,
        confidence=0.6,
        silence_ratio=0.1,
        average_intensity=0.3,
    )


def voice_emotion_score(features: VoiceFeatures) -> float:
    score = 0.0
    if features.energy_level > 0.7:
        score += 1
    if features.estimated_speech_rate > 140:
        score += 0.5
    if features.estimated_speech_rate < 100:
        score -= 0.5
    if features.detected_stress:
        score -= 1
    if features.average_intensity > 0.4:
        score += 0.5
    if features.silence_ratio > 0.3:
        score -= 0.5
    return max(-VOICE_SCORE_LIMIT, min(VOICE_SCORE_LIMIT, score))


def combined_score(text_score: float, voice_score: float) -> float:
    return round2(text_score * TEXT_WEIGHT + voice_score * VOICE_WEIGHT)


def combine_scores(analysis: EmotionAnalysisResult, features: VoiceFeatures) -> CombinedScore:
    voice_score = voice_emotion_score(features)
    keyword_confidence = 0.8 if analysis.keywords else 0.5
    return CombinedScore(
        text_score=analysis.overall_score,
        voice_score=voice_score,
        combined_score=combined_score(analysis.overall_score, voice_score),
        confidence=keyword_confidence * features.confidence,
    )


class VoiceEntryPipeline:
    """
    음성 일기 1건 처리: 음성 인식 → 기존 노트와 합치기 → 감정 재분석 → 음성 특징 → 통합 점수.

    음성 인식 단계의 예외만 (stage="transcription" 표시 후) 그대로 올린다.
    """

    def __init__(
        self,
        transcriber: TranscriptionClient,
        analyzer: Optional[KeywordEmotionAnalyzer] = None,
        *,
        duration_probe: Callable[[Path], Optional[float]] = probe_duration,
    ):
        self.transcriber = transcriber
        self.analyzer = analyzer or get_analyzer()
        self._duration_probe = duration_probe

    async def _voice_features(self, path: Path) -> VoiceFeatures:
        try:
            duration = await asyncio.to_thread(self._duration_probe, path)
        except Exception:
            logger.warning("음성 특징 추정 실패, 기본값 사용: %s", path, exc_info=True)
            return FALLBACK_VOICE_FEATURES
        return estimate_voice_features(duration)

    async def process_voice_entry(
        self,
        audio_uri: Union[str, Path],
        existing_note_text: str = "",
    ) -> VoiceAnalysisResult:
        try:
            transcript = await self.transcriber.transcribe(audio_uri)
        except JournalError as e:
            if e.stage is None:
                e.stage = "transcription"
            logger.warning("음성 인식 단계 실패: %s", e)
            raise

        existing = existing_note_text.strip() if isinstance(existing_note_text, str) else ""
        full_text = f"{existing} {transcript.text}".strip()

        emotion_analysis = self.analyzer.analyze_text(full_text)
        voice_features = await self._voice_features(to_local_path(audio_uri))
        combined = combine_scores(emotion_analysis, voice_features)

        logger.info(
            "음성 일기 분석 완료: dominant=%s, text=%s, voice=%s, combined=%s",
            emotion_analysis.dominant_emotion,
            combined.text_score,
            combined.voice_score,
            combined.combined_score,
        )
        return VoiceAnalysisResult(
            transcription=transcript.text,
            confidence=transcript.confidence,
            full_text=full_text,
            emotion_analysis=emotion_analysis,
            voice_features=voice_features,
            combined=combined,
        )
