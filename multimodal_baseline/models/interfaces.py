"""Base interfaces for feature extractors and the facial-attribute service"""

from abc import ABC, abstractmethod
from typing import List, Optional

from multimodal_baseline.models.features import AudioFeatures, VisualFeatures
from multimodal_baseline.models.media import CapturedMedia, FrameAttributes


class FaceAttributeService(ABC):
    """Boundary to the external per-frame facial-attribute analysis service"""

    @abstractmethod
    async def analyze_frames(self, frames_b64: List[str]) -> List[Optional[FrameAttributes]]:
        """Analyze a batch of still images

        Args:
            frames_b64: Base64-encoded images, in capture order

        Returns:
            One entry per requested frame; None where no face was detected
        """
        pass


class AudioExtractorInterface(ABC):
    """Interface for audio feature extraction"""

    @abstractmethod
    async def extract(self, media: CapturedMedia) -> AudioFeatures:
        """Extract audio features

        Raises:
            MultimodalError: If features cannot be produced
        """
        pass


class VisualExtractorInterface(ABC):
    """Interface for visual feature extraction"""

    @abstractmethod
    async def extract(self, media: CapturedMedia) -> VisualFeatures:
        """Extract visual features

        Raises:
            MultimodalError: If features cannot be produced
        """
        pass
