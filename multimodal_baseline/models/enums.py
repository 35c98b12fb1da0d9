"""Enumerations for error codes and fusion weighting policies"""

from enum import Enum


class MultimodalErrorCode(Enum):
    """Failure categories reported by the capture and extraction layers"""
    PERMISSION_DENIED = "PERMISSION_DENIED"  # Capture layer only
    MEDIA_CAPTURE_FAILED = "MEDIA_CAPTURE_FAILED"
    FEATURE_EXTRACTION_FAILED = "FEATURE_EXTRACTION_FAILED"
    INSUFFICIENT_DATA = "INSUFFICIENT_DATA"
    QUALITY_TOO_LOW = "QUALITY_TOO_LOW"  # Reserved for stricter quality gating


class WeightingPolicy(Enum):
    """Dynamic weighting policy keyed by which modalities are available.

    Each member carries its weights as
    (clinical, multimodal, audio, visual); audio + visual == multimodal and
    clinical + multimodal == 1.0 for every member.
    """
    CLINICAL_ONLY = (1.0, 0.0, 0.0, 0.0)
    CLINICAL_PLUS_AUDIO = (0.85, 0.15, 0.15, 0.0)
    CLINICAL_PLUS_VISUAL = (0.85, 0.15, 0.0, 0.15)
    CLINICAL_PLUS_BOTH = (0.70, 0.30, 0.15, 0.15)

    @property
    def clinical_weight(self) -> float:
        return self.value[0]

    @property
    def multimodal_weight(self) -> float:
        return self.value[1]

    @property
    def audio_weight(self) -> float:
        return self.value[2]

    @property
    def visual_weight(self) -> float:
        return self.value[3]

    @classmethod
    def select(cls, has_audio: bool, has_visual: bool) -> "WeightingPolicy":
        """Pick the policy for a given modality availability"""
        if has_audio and has_visual:
            return cls.CLINICAL_PLUS_BOTH
        if has_audio:
            return cls.CLINICAL_PLUS_AUDIO
        if has_visual:
            return cls.CLINICAL_PLUS_VISUAL
        return cls.CLINICAL_ONLY
