"""Data models and interfaces"""

from multimodal_baseline.models.media import CapturedMedia, FrameAttributes
from multimodal_baseline.models.features import AudioFeatures, VisualFeatures
from multimodal_baseline.models.results import ScoringBreakdown, EnrichmentResult
from multimodal_baseline.models.enums import MultimodalErrorCode, WeightingPolicy
from multimodal_baseline.models.errors import MultimodalError
from multimodal_baseline.models.interfaces import (
    FaceAttributeService,
    AudioExtractorInterface,
    VisualExtractorInterface
)

__all__ = [
    # Media
    "CapturedMedia",
    "FrameAttributes",
    # Features
    "AudioFeatures",
    "VisualFeatures",
    # Results
    "ScoringBreakdown",
    "EnrichmentResult",
    # Enums
    "MultimodalErrorCode",
    "WeightingPolicy",
    # Errors
    "MultimodalError",
    # Interfaces
    "FaceAttributeService",
    "AudioExtractorInterface",
    "VisualExtractorInterface",
]
