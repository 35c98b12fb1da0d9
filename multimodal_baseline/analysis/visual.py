"""Visual Feature Extraction

This module derives ten facial-attribute descriptors from video frames captured
during a baseline conversation. Frames are capped and evenly sampled, sent to the
external facial-attribute analysis service, and the per-frame attributes of the
primary face are aggregated into:

    1. Smile frequency and intensity
    2. Eye contact (open eyes with near-frontal head pose)
    3. Eyebrow position and facial tension (emotion-based proxies)
    4. Blink rate
    5. Head movement
    6. Overall affect
    7. Face presence and overall quality

The eyebrow and tension proxies are built from emotion classifier outputs since
no brow or jaw landmark measurement is available; the fusion scoring constants
are tuned against exactly these proxies.
"""

import base64
import logging
from typing import List, Optional, Sequence

import cv2
import numpy as np

from multimodal_baseline.analysis.face_service import HttpFaceAttributeClient
from multimodal_baseline.config.config_loader import Config, config as default_config
from multimodal_baseline.models.enums import MultimodalErrorCode
from multimodal_baseline.models.errors import MultimodalError
from multimodal_baseline.models.features import VisualFeatures
from multimodal_baseline.models.interfaces import FaceAttributeService, VisualExtractorInterface
from multimodal_baseline.models.media import CapturedMedia, FrameAttributes
from multimodal_baseline.sampling.media_sampler import MediaSampler


logger = logging.getLogger(__name__)

# Near-frontal gaze proxy (degrees)
EYE_CONTACT_MAX_YAW = 15.0
EYE_CONTACT_MAX_PITCH = 10.0

# Typical pose variance range is 0-100 degrees squared
HEAD_MOVEMENT_NORMALIZATION = 100.0

AFFECT_WEIGHTS = {
    'HAPPY': 1.0,
    'CALM': 0.5,
    'SAD': -1.0,
    'ANGRY': -0.8,
    'DISGUSTED': -0.7,
    'FEAR': -0.9,
}


def _mean(values: Sequence[float]) -> float:
    if len(values) == 0:
        return 0.0
    return float(np.mean(values))


class VisualFeatureExtractor(VisualExtractorInterface):
    """Extracts baseline visual descriptors via the facial-attribute service.

    Attributes:
        face_service: External per-frame facial-attribute analysis
        sampler: Caps and evenly samples frames before the service call
        max_payload_bytes: Base64 payload size above which frames are recompressed
        jpeg_quality: JPEG quality used when recompressing
        max_frame_width: Width frames are downscaled to when recompressing
    """

    def __init__(self, face_service: Optional[FaceAttributeService] = None,
                 cfg: Optional[Config] = None, sampler: Optional[MediaSampler] = None):
        cfg = cfg or default_config
        self.face_service = face_service or HttpFaceAttributeClient(cfg)
        self.sampler = sampler or MediaSampler(cfg)
        self.max_payload_bytes = cfg.get('visual.max_payload_bytes', 6 * 1024 * 1024)
        self.jpeg_quality = cfg.get('visual.jpeg_quality', 60)
        self.max_frame_width = cfg.get('visual.max_frame_width', 640)

        logger.info(f"VisualFeatureExtractor initialized with max_frames={self.sampler.max_video_frames}")

    async def extract(self, media: CapturedMedia) -> VisualFeatures:
        """Extract visual features from captured video frames.

        Raises:
            MultimodalError: INSUFFICIENT_DATA if there are no frames or no face
                was detected in any sampled frame, FEATURE_EXTRACTION_FAILED
                (recoverable) on service or parsing errors
        """
        if not media.has_video:
            raise MultimodalError(
                'No video frames available',
                MultimodalErrorCode.INSUFFICIENT_DATA,
                recoverable=False
            )

        try:
            frames = self.sampler.sample_frames(media.video_frames)
            frames_b64 = self._prepare_payload(frames)

            results = await self.face_service.analyze_frames(frames_b64)
            detections = [result for result in results if result is not None]

            if not detections:
                raise MultimodalError(
                    'No faces detected in video frames',
                    MultimodalErrorCode.INSUFFICIENT_DATA,
                    recoverable=False
                )

            features = self.features_from_detections(detections, len(frames), media.duration)
            logger.debug(
                f"Visual features from {len(detections)}/{len(frames)} frames: "
                f"affect={features.affect:.2f}, quality={features.overall_quality:.2f}"
            )
            return features

        except MultimodalError:
            raise
        except Exception as e:
            logger.error(f"Visual feature extraction failed: {e}", exc_info=True)
            raise MultimodalError(
                f'Failed to extract visual features: {e}',
                MultimodalErrorCode.FEATURE_EXTRACTION_FAILED,
                recoverable=True
            ) from e

    def features_from_detections(self, detections: List[FrameAttributes], sampled_count: int,
                                 duration: float) -> VisualFeatures:
        """Aggregate per-frame attributes into VisualFeatures.

        Args:
            detections: Usable per-frame results, in frame order (non-empty)
            sampled_count: Number of frames sent for analysis
            duration: Total recording duration in seconds
        """
        return VisualFeatures(
            smile_frequency=self._extract_smile_frequency(detections),
            smile_intensity=self._extract_smile_intensity(detections),
            eye_contact=self._extract_eye_contact(detections),
            eyebrow_position=self._extract_eyebrow_position(detections),
            facial_tension=self._extract_facial_tension(detections),
            blink_rate=self._extract_blink_rate(detections, duration),
            head_movement=self._extract_head_movement(detections),
            affect=self._extract_affect(detections),
            face_presence_quality=len(detections) / sampled_count if sampled_count > 0 else 0.0,
            overall_quality=self._extract_overall_quality(detections),
        )

    # ------------------------------------------------------------------
    # Payload
    # ------------------------------------------------------------------

    def _prepare_payload(self, frames: List[bytes]) -> List[str]:
        """Base64-encode frames, recompressing them if the payload is too large"""
        encoded = self._encode(frames)
        payload_size = sum(len(frame) for frame in encoded)

        if payload_size > self.max_payload_bytes:
            logger.warning(
                f"Frame payload {payload_size} bytes exceeds {self.max_payload_bytes}, recompressing"
            )
            encoded = self._encode([self._recompress(frame) for frame in frames])
            payload_size = sum(len(frame) for frame in encoded)
            if payload_size > self.max_payload_bytes:
                logger.warning(f"Frame payload still {payload_size} bytes, request may time out")

        return encoded

    def _encode(self, frames: List[bytes]) -> List[str]:
        return [base64.b64encode(frame).decode('ascii') for frame in frames]

    def _recompress(self, frame: bytes) -> bytes:
        """Re-encode a frame as a smaller JPEG; undecodable frames pass through"""
        if not frame:
            return frame

        image = cv2.imdecode(np.frombuffer(frame, dtype=np.uint8), cv2.IMREAD_COLOR)
        if image is None:
            return frame

        height, width = image.shape[:2]
        if width > self.max_frame_width:
            scale = self.max_frame_width / width
            image = cv2.resize(
                image,
                (self.max_frame_width, max(1, int(round(height * scale)))),
                interpolation=cv2.INTER_AREA
            )

        ok, buffer = cv2.imencode('.jpg', image, [int(cv2.IMWRITE_JPEG_QUALITY), int(self.jpeg_quality)])
        if not ok or len(buffer) >= len(frame):
            return frame
        return buffer.tobytes()

    # ------------------------------------------------------------------
    # Descriptors
    # ------------------------------------------------------------------

    def _extract_smile_frequency(self, detections: List[FrameAttributes]) -> float:
        smiling = sum(1 for d in detections if d.smile)
        return smiling / len(detections)

    def _extract_smile_intensity(self, detections: List[FrameAttributes]) -> float:
        return _mean([d.smile_confidence for d in detections if d.smile])

    def _extract_eye_contact(self, detections: List[FrameAttributes]) -> float:
        """Fraction of frames with open eyes and a near-frontal head pose"""
        contact = sum(
            1 for d in detections
            if d.eyes_open
            and abs(d.yaw) < EYE_CONTACT_MAX_YAW
            and abs(d.pitch) < EYE_CONTACT_MAX_PITCH
        )
        return contact / len(detections)

    def _extract_eyebrow_position(self, detections: List[FrameAttributes]) -> float:
        return _mean([d.emotion('SURPRISED') for d in detections])

    def _extract_facial_tension(self, detections: List[FrameAttributes]) -> float:
        """Closed mouth plus angry and confused expressions, capped per frame"""
        scores = []
        for d in detections:
            tension = 0.3 if d.mouth_open is False else 0.0
            tension += d.emotion('ANGRY') * 0.4
            tension += d.emotion('CONFUSED') * 0.3
            scores.append(min(1.0, tension))
        return _mean(scores)

    def _extract_blink_rate(self, detections: List[FrameAttributes], duration: float) -> float:
        """Open-to-closed eye transitions per minute"""
        if duration <= 0:
            return 0.0

        blinks = 0
        previous_open = True
        for d in detections:
            if previous_open and not d.eyes_open:
                blinks += 1
            previous_open = d.eyes_open

        return blinks / duration * 60

    def _extract_head_movement(self, detections: List[FrameAttributes]) -> float:
        if len(detections) < 2:
            return 0.0
        variances = [
            np.var([d.yaw for d in detections]),
            np.var([d.pitch for d in detections]),
            np.var([d.roll for d in detections]),
        ]
        movement = float(np.mean(variances)) / HEAD_MOVEMENT_NORMALIZATION
        return max(0.0, min(1.0, movement))

    def _extract_affect(self, detections: List[FrameAttributes]) -> float:
        """Signed emotion composite averaged over frames, in [-1, 1]"""
        scores = []
        for d in detections:
            scores.append(sum(weight * d.emotion(label) for label, weight in AFFECT_WEIGHTS.items()))
        return max(-1.0, min(1.0, _mean(scores)))

    def _extract_overall_quality(self, detections: List[FrameAttributes]) -> float:
        return (
            _mean([d.confidence for d in detections]) * 0.5
            + _mean([d.brightness for d in detections]) * 0.25
            + _mean([d.sharpness for d in detections]) * 0.25
        )
