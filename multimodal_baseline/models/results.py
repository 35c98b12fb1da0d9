"""Data models for scoring and enrichment results"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from multimodal_baseline.models.enums import WeightingPolicy
from multimodal_baseline.models.features import AudioFeatures, VisualFeatures


@dataclass(frozen=True)
class ScoringBreakdown:
    """Fused score with per-modality contributions

    Attributes:
        clinical_score: Clinical component [0, 100]
        clinical_weight: Weight of the clinical component
        audio_score: Audio subscore [0, 100] or None if unavailable
        visual_score: Visual subscore [0, 100] or None if unavailable
        multimodal_score: Combined signal subscore or None if both unavailable
        multimodal_weight: Weight of the multimodal component
        audio_weight: Share of the multimodal weight given to audio
        visual_weight: Share of the multimodal weight given to visual
        final_score: Rounded weighted combination [0, 100]
        confidence: Trustworthiness of the final score [0, 1]
        policy: Weighting policy that produced the weights
    """
    clinical_score: int
    clinical_weight: float
    audio_score: Optional[int]
    visual_score: Optional[int]
    multimodal_score: Optional[int]
    multimodal_weight: float
    final_score: int
    confidence: float
    audio_weight: float = 0.0
    visual_weight: float = 0.0
    policy: WeightingPolicy = WeightingPolicy.CLINICAL_ONLY

    def __post_init__(self):
        """Validate weights and score types"""
        assert abs(self.clinical_weight + self.multimodal_weight - 1.0) < 1e-9, \
            "Clinical and multimodal weights must sum to 1.0"
        assert abs(self.audio_weight + self.visual_weight - self.multimodal_weight) < 1e-9, \
            "Audio and visual weights must sum to the multimodal weight"
        assert isinstance(self.final_score, int), "Final score must be an integer"
        assert isinstance(self.clinical_score, int), "Clinical score must be an integer"
        assert 0.0 <= self.confidence <= 1.0, "Confidence must be in [0, 1]"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["policy"] = self.policy.name
        return data


@dataclass(frozen=True)
class EnrichmentResult:
    """Outcome of enriching a clinical score with multimodal features

    Attributes:
        original_score: Clinical-only score supplied by the caller
        final_score: Fused score, always an integer
        scoring_breakdown: Weights and subscores behind final_score
        audio_features: Extracted audio features or None
        visual_features: Extracted visual features or None
        success: False only when enrichment failed as a whole
        processing_time_ms: Wall-clock time spent enriching
        warnings: Human-readable notes on degraded modalities
    """
    original_score: float
    final_score: int
    scoring_breakdown: ScoringBreakdown
    audio_features: Optional[AudioFeatures]
    visual_features: Optional[VisualFeatures]
    success: bool
    processing_time_ms: float
    warnings: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Validate result data"""
        assert isinstance(self.final_score, int), "Final score must be an integer"
        assert self.processing_time_ms >= 0, "Processing time must be non-negative"

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable representation for the persistence layer"""
        return {
            "original_score": self.original_score,
            "final_score": self.final_score,
            "scoring_breakdown": self.scoring_breakdown.to_dict(),
            "audio_features": asdict(self.audio_features) if self.audio_features else None,
            "visual_features": asdict(self.visual_features) if self.visual_features else None,
            "success": self.success,
            "processing_time_ms": self.processing_time_ms,
            "warnings": list(self.warnings),
        }
