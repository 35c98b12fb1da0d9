"""Enrichment Orchestrator

This module coordinates one baseline enrichment: it packages the captured media,
runs audio and visual feature extraction concurrently, passes whatever succeeded to
the fusion scoring engine and returns an EnrichmentResult.

The orchestrator never raises. A failing modality is reported as a warning and
scored as unavailable; a failure of the whole pipeline returns the clinical-only
result with success=False.
"""

import asyncio
import logging
import time
from typing import List, Optional, Tuple

from multimodal_baseline.analysis.acoustic import AudioFeatureExtractor
from multimodal_baseline.analysis.visual import VisualFeatureExtractor
from multimodal_baseline.config.config_loader import Config, config as default_config
from multimodal_baseline.fusion.fusion_engine import FusionScoringEngine, round_half_up
from multimodal_baseline.models.enums import WeightingPolicy
from multimodal_baseline.models.errors import MultimodalError
from multimodal_baseline.models.features import AudioFeatures, VisualFeatures
from multimodal_baseline.models.interfaces import AudioExtractorInterface, VisualExtractorInterface
from multimodal_baseline.models.media import CapturedMedia
from multimodal_baseline.models.results import EnrichmentResult, ScoringBreakdown


logger = logging.getLogger(__name__)


class EnrichmentOrchestrator:
    """Enriches a clinical baseline score with audio and visual signals.

    Extractors hold only configuration, so one orchestrator can serve
    concurrent enrichments.

    Attributes:
        audio_extractor: Produces AudioFeatures from captured audio
        visual_extractor: Produces VisualFeatures from captured frames
        fusion_engine: Combines clinical and multimodal scores
    """

    def __init__(self, audio_extractor: Optional[AudioExtractorInterface] = None,
                 visual_extractor: Optional[VisualExtractorInterface] = None,
                 fusion_engine: Optional[FusionScoringEngine] = None,
                 cfg: Optional[Config] = None):
        cfg = cfg or default_config
        self.audio_extractor = audio_extractor or AudioFeatureExtractor(cfg)
        self.visual_extractor = visual_extractor or VisualFeatureExtractor(cfg=cfg)
        self.fusion_engine = fusion_engine or FusionScoringEngine()

        logger.info("EnrichmentOrchestrator initialized")

    async def enrich(self, clinical_score: float, audio: Optional[bytes] = None,
                     video_frames: Optional[List[bytes]] = None, duration: float = 0.0,
                     start_time: Optional[float] = None, end_time: Optional[float] = None,
                     visual_timeout: Optional[float] = None) -> EnrichmentResult:
        """Enrich a clinical score with raw captured media.

        Args:
            clinical_score: Clinical-only score, 0-100
            audio: Encoded audio recording
            video_frames: Encoded still frames in capture order
            duration: Recording duration in seconds
            start_time: Recording start (unix time)
            end_time: Recording end (unix time)
            visual_timeout: Seconds allowed for visual extraction, None for no limit

        Returns:
            EnrichmentResult, never raising
        """
        started = time.perf_counter()
        try:
            media = CapturedMedia(
                audio=audio,
                video_frames=video_frames,
                duration=duration,
                start_time=start_time,
                end_time=end_time
            )
        except Exception as e:
            logger.error(f"Invalid captured media: {e}", exc_info=True)
            return self._failure_result(clinical_score, e, started)

        return await self._run(clinical_score, media, visual_timeout, started)

    async def enrich_media(self, clinical_score: float, media: CapturedMedia,
                           visual_timeout: Optional[float] = None) -> EnrichmentResult:
        """Enrich a clinical score with already packaged media"""
        return await self._run(clinical_score, media, visual_timeout, time.perf_counter())

    async def _run(self, clinical_score: float, media: CapturedMedia,
                   visual_timeout: Optional[float], started: float) -> EnrichmentResult:
        try:
            logger.info(
                f"Enriching clinical score {clinical_score} "
                f"(audio={media.has_audio}, frames={len(media.video_frames or [])}, "
                f"duration={media.duration:.1f}s)"
            )

            (audio_features, audio_warnings), (visual_features, visual_warnings) = await asyncio.gather(
                self._extract_audio(media),
                self._extract_visual(media, visual_timeout)
            )
            warnings = audio_warnings + visual_warnings

            breakdown = self.fusion_engine.compute_score(
                clinical_score,
                audio_features,
                visual_features,
                audio_failed=audio_features is None,
                visual_failed=visual_features is None
            )

            result = EnrichmentResult(
                original_score=clinical_score,
                final_score=breakdown.final_score,
                scoring_breakdown=breakdown,
                audio_features=audio_features,
                visual_features=visual_features,
                success=True,
                processing_time_ms=self._elapsed_ms(started),
                warnings=warnings
            )

            logger.info(
                f"Enrichment complete: {clinical_score} -> {result.final_score} "
                f"({breakdown.policy.name}, confidence={breakdown.confidence:.2f}, "
                f"{result.processing_time_ms:.0f}ms)"
            )
            return result

        except Exception as e:
            logger.error(f"Multimodal enrichment failed: {e}", exc_info=True)
            return self._failure_result(clinical_score, e, started)

    async def _extract_audio(self, media: CapturedMedia) -> Tuple[Optional[AudioFeatures], List[str]]:
        if not media.has_audio:
            return None, ["No audio data available"]

        try:
            features = await self.audio_extractor.extract(media)
            logger.debug(f"Audio features extracted (quality={features.quality:.2f})")
            return features, []
        except MultimodalError as e:
            logger.warning(f"Audio extraction failed: {e}")
            return None, [f"Audio extraction failed ({e.code.value}): {e}"]
        except Exception as e:
            logger.error(f"Unexpected audio extraction error: {e}", exc_info=True)
            return None, [f"Audio extraction failed: {e}"]

    async def _extract_visual(self, media: CapturedMedia,
                              timeout: Optional[float]) -> Tuple[Optional[VisualFeatures], List[str]]:
        if not media.has_video:
            return None, ["No video data available"]

        try:
            features = await asyncio.wait_for(self.visual_extractor.extract(media), timeout=timeout)
            logger.debug(f"Visual features extracted (quality={features.overall_quality:.2f})")
            return features, []
        except asyncio.TimeoutError:
            logger.warning(f"Visual extraction timed out after {timeout}s")
            return None, [f"Visual extraction timed out after {timeout}s"]
        except MultimodalError as e:
            logger.warning(f"Visual extraction failed: {e}")
            return None, [f"Visual extraction failed ({e.code.value}): {e}"]
        except Exception as e:
            logger.error(f"Unexpected visual extraction error: {e}", exc_info=True)
            return None, [f"Visual extraction failed: {e}"]

    def _failure_result(self, clinical_score: float, error: Exception, started: float) -> EnrichmentResult:
        """Clinical-only result for a failure of the whole pipeline"""
        try:
            rounded = round_half_up(clinical_score)
        except (TypeError, ValueError, OverflowError):
            rounded = 0

        breakdown = ScoringBreakdown(
            clinical_score=rounded,
            clinical_weight=1.0,
            audio_score=None,
            visual_score=None,
            multimodal_score=None,
            multimodal_weight=0.0,
            final_score=rounded,
            confidence=0.5,
            policy=WeightingPolicy.CLINICAL_ONLY,
        )
        return EnrichmentResult(
            original_score=clinical_score,
            final_score=rounded,
            scoring_breakdown=breakdown,
            audio_features=None,
            visual_features=None,
            success=False,
            processing_time_ms=self._elapsed_ms(started),
            warnings=["Multimodal enrichment failed completely", str(error)]
        )

    @staticmethod
    def _elapsed_ms(started: float) -> float:
        return max(0.0, (time.perf_counter() - started) * 1000)
