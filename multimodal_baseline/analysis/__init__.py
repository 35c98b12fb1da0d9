"""Feature extraction for the audio and visual modalities"""

from multimodal_baseline.analysis.acoustic import AudioFeatureExtractor
from multimodal_baseline.analysis.visual import VisualFeatureExtractor
from multimodal_baseline.analysis.face_service import HttpFaceAttributeClient, FaceServiceError

__all__ = ['AudioFeatureExtractor', 'VisualFeatureExtractor', 'HttpFaceAttributeClient', 'FaceServiceError']
