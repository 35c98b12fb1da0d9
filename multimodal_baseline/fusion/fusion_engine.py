"""Fusion Scoring Engine

This module combines the clinical questionnaire score with the audio and visual
feature vectors into a single 0-100 baseline score. Each modality is normalized to
a 0-100 subscore scaled by its own quality estimate, then blended with the clinical
score under a weighting policy chosen by which modalities are available.

Weighting policies:
    - CLINICAL_ONLY: 100% clinical (both modalities unavailable)
    - CLINICAL_PLUS_AUDIO: 85% clinical + 15% audio
    - CLINICAL_PLUS_VISUAL: 85% clinical + 15% visual
    - CLINICAL_PLUS_BOTH: 70% clinical + 15% audio + 15% visual

The engine is a pure function of its inputs and never raises: degenerate inputs
(NaN subscores, non-finite scores) degrade to a lower policy instead.
"""

import logging
import math
from typing import List, Optional

import numpy as np

from multimodal_baseline.models.enums import WeightingPolicy
from multimodal_baseline.models.features import AudioFeatures, VisualFeatures
from multimodal_baseline.models.results import ScoringBreakdown


logger = logging.getLogger(__name__)

# Optimal points for the audio descriptor scores
OPTIMAL_PITCH = 165.0
OPTIMAL_SPEAKING_RATE = 150.0
OPTIMAL_PAUSE_FREQUENCY = 5.0
OPTIMAL_PAUSE_DURATION = 0.5

# Optimal points for the visual descriptor scores
OPTIMAL_EYEBROW_POSITION = 0.4
OPTIMAL_BLINK_RATE = 17.0
OPTIMAL_HEAD_MOVEMENT = 0.5

DEFAULT_QUALITY = 0.5
FALLBACK_CONFIDENCE = 0.5
NEUTRAL_SUBSCORE = 50.0

# Clinical scores outside this range lower confidence
EXTREME_CLINICAL_LOW = 20
EXTREME_CLINICAL_HIGH = 95
EXTREME_CLINICAL_PENALTY = 0.9


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def _is_missing(value: Optional[float]) -> bool:
    return value is None or math.isnan(value)


def _quality_or_default(value: Optional[float]) -> float:
    """Quality factor, falling back to 0.5 when unset, zero or NaN"""
    if _is_missing(value) or value == 0:
        return DEFAULT_QUALITY
    return value


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 rounded towards +infinity"""
    return int(math.floor(value + 0.5))


class FusionScoringEngine:
    """Fuses clinical, audio and visual signals into a baseline score.

    All scoring logic is implemented as methods that accept only data model inputs
    and return data model outputs, so the engine holds no state between calls and
    can be shared freely.
    """

    def compute_score(self, clinical_score: float,
                      audio_features: Optional[AudioFeatures],
                      visual_features: Optional[VisualFeatures],
                      audio_failed: bool = False,
                      visual_failed: bool = False) -> ScoringBreakdown:
        """Compute the fused score for one baseline assessment.

        Args:
            clinical_score: Clinical questionnaire score, nominally 0-100
            audio_features: Extracted audio features or None
            visual_features: Extracted visual features or None
            audio_failed: Audio extraction failed; audio is ignored
            visual_failed: Visual extraction failed; visual is ignored

        Returns:
            ScoringBreakdown with integer final score and per-modality subscores
        """
        if not math.isfinite(clinical_score):
            logger.warning(f"Non-finite clinical score {clinical_score}, treating as 0")
            clinical_score = 0.0

        audio_score = None
        if not audio_failed and audio_features is not None:
            audio_score = self._normalize_audio(audio_features)
            if math.isnan(audio_score):
                logger.warning("Audio subscore is NaN, treating audio as failed")
                audio_score = None

        visual_score = None
        if not visual_failed and visual_features is not None:
            visual_score = self._normalize_visual(visual_features)
            if math.isnan(visual_score):
                logger.warning("Visual subscore is NaN, treating visual as failed")
                visual_score = None

        policy = WeightingPolicy.select(audio_score is not None, visual_score is not None)
        if policy is WeightingPolicy.CLINICAL_ONLY:
            logger.warning("No multimodal signal available, using 100% clinical")
            return self._clinical_only(clinical_score)

        final_score = clinical_score * policy.clinical_weight
        if audio_score is not None:
            final_score += audio_score * policy.audio_weight
        if visual_score is not None:
            final_score += visual_score * policy.visual_weight

        subscores = [score for score in (audio_score, visual_score) if score is not None]
        multimodal_score = sum(subscores) / len(subscores)

        if not (math.isfinite(final_score) and math.isfinite(multimodal_score)):
            logger.warning(f"Invalid final score {final_score}, falling back to clinical only")
            return self._clinical_only(clinical_score)

        confidence = self._compute_confidence(
            audio_features if audio_score is not None else None,
            visual_features if visual_score is not None else None,
            clinical_score
        )

        breakdown = ScoringBreakdown(
            clinical_score=round_half_up(clinical_score),
            clinical_weight=policy.clinical_weight,
            audio_score=round_half_up(audio_score) if audio_score is not None else None,
            visual_score=round_half_up(visual_score) if visual_score is not None else None,
            multimodal_score=round_half_up(multimodal_score),
            multimodal_weight=policy.multimodal_weight,
            final_score=round_half_up(final_score),
            confidence=confidence,
            audio_weight=policy.audio_weight,
            visual_weight=policy.visual_weight,
            policy=policy,
        )

        logger.debug(
            f"Fused score {breakdown.final_score} ({policy.name}): clinical={clinical_score:.1f}, "
            f"audio={audio_score}, visual={visual_score}, confidence={confidence:.2f}"
        )
        return breakdown

    def _clinical_only(self, clinical_score: float) -> ScoringBreakdown:
        rounded = round_half_up(clinical_score)
        return ScoringBreakdown(
            clinical_score=rounded,
            clinical_weight=1.0,
            audio_score=None,
            visual_score=None,
            multimodal_score=None,
            multimodal_weight=0.0,
            final_score=rounded,
            confidence=FALLBACK_CONFIDENCE,
            policy=WeightingPolicy.CLINICAL_ONLY,
        )

    def _normalize_audio(self, features: AudioFeatures) -> float:
        """Map audio features to a 0-100 subscore scaled by audio quality.

        NaN descriptors are skipped; if none remain the unscaled subscore is 50.
        """
        candidates = [
            (features.mean_pitch, lambda v: 100 - abs(v - OPTIMAL_PITCH) / 2),
            (features.pitch_variability, lambda v: 100 - v * 2),
            (features.speaking_rate, lambda v: 100 - abs(v - OPTIMAL_SPEAKING_RATE) / 2),
            (features.pause_frequency, lambda v: 100 - abs(v - OPTIMAL_PAUSE_FREQUENCY) * 10),
            (features.pause_duration, lambda v: 100 - abs(v - OPTIMAL_PAUSE_DURATION) * 100),
            (features.voice_energy, lambda v: v * 100),
            (features.jitter, lambda v: (1 - v) * 100),
            (features.shimmer, lambda v: (1 - v) * 100),
            (features.harmonic_ratio, lambda v: v * 100),
        ]

        scores: List[float] = [
            _clamp(score_fn(value)) for value, score_fn in candidates if not _is_missing(value)
        ]
        if not scores:
            return NEUTRAL_SUBSCORE

        return float(np.mean(scores)) * _quality_or_default(features.quality)

    def _normalize_visual(self, features: VisualFeatures) -> float:
        """Map visual features to a 0-100 subscore scaled by overall quality.

        A NaN descriptor propagates to a NaN subscore, which marks visual as unusable.
        """
        scores = [
            _clamp(features.smile_frequency * 100),
            _clamp(features.smile_intensity * 100),
            _clamp(features.eye_contact * 100),
            _clamp(100 - abs(features.eyebrow_position - OPTIMAL_EYEBROW_POSITION) * 100),
            _clamp((1 - features.facial_tension) * 100),
            _clamp(100 - abs(features.blink_rate - OPTIMAL_BLINK_RATE) * 3),
            _clamp(100 - abs(features.head_movement - OPTIMAL_HEAD_MOVEMENT) * 100),
            _clamp((features.affect + 1) * 50),
        ]
        if any(math.isnan(value) for value in (
            features.smile_frequency, features.smile_intensity, features.eye_contact,
            features.eyebrow_position, features.facial_tension, features.blink_rate,
            features.head_movement, features.affect, features.overall_quality,
        )):
            return math.nan

        return float(np.mean(scores)) * features.overall_quality

    def _compute_confidence(self, audio_features: Optional[AudioFeatures],
                            visual_features: Optional[VisualFeatures],
                            clinical_score: float) -> float:
        confidence = 1.0

        if audio_features is not None:
            confidence *= _quality_or_default(audio_features.quality)

        if visual_features is not None:
            confidence *= _quality_or_default(visual_features.overall_quality)
            confidence *= _quality_or_default(visual_features.face_presence_quality)

        if clinical_score < EXTREME_CLINICAL_LOW or clinical_score > EXTREME_CLINICAL_HIGH:
            confidence *= EXTREME_CLINICAL_PENALTY

        if math.isnan(confidence):
            return FALLBACK_CONFIDENCE
        return _clamp(confidence, 0.0, 1.0)
