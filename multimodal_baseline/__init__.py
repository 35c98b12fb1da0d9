"""Multimodal baseline enrichment

Enriches a clinical wellbeing baseline score with acoustic and facial signals
captured during the baseline conversation.
"""

from multimodal_baseline.enrichment.orchestrator import EnrichmentOrchestrator
from multimodal_baseline.fusion.fusion_engine import FusionScoringEngine
from multimodal_baseline.analysis.acoustic import AudioFeatureExtractor
from multimodal_baseline.analysis.visual import VisualFeatureExtractor
from multimodal_baseline.analysis.face_service import HttpFaceAttributeClient
from multimodal_baseline.sampling.media_sampler import MediaSampler
from multimodal_baseline.models import (
    CapturedMedia,
    FrameAttributes,
    AudioFeatures,
    VisualFeatures,
    ScoringBreakdown,
    EnrichmentResult,
    MultimodalErrorCode,
    WeightingPolicy,
    MultimodalError,
    FaceAttributeService,
)

__version__ = "0.1.0"

__all__ = [
    "EnrichmentOrchestrator",
    "FusionScoringEngine",
    "AudioFeatureExtractor",
    "VisualFeatureExtractor",
    "HttpFaceAttributeClient",
    "MediaSampler",
    "CapturedMedia",
    "FrameAttributes",
    "AudioFeatures",
    "VisualFeatures",
    "ScoringBreakdown",
    "EnrichmentResult",
    "MultimodalErrorCode",
    "WeightingPolicy",
    "MultimodalError",
    "FaceAttributeService",
]
