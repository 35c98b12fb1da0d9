"""HTTP client for the external facial-attribute analysis service

The service accepts base64-encoded still images and returns one attribute record
per frame in which a face was detected. Frames without a face are omitted, so
records are realigned to the requested frames by their ``frameIndex``.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from multimodal_baseline.config.config_loader import Config, config as default_config
from multimodal_baseline.models.interfaces import FaceAttributeService
from multimodal_baseline.models.media import FrameAttributes


logger = logging.getLogger(__name__)


class FaceServiceError(Exception):
    """Exception raised for transport or response errors from the face service"""
    pass


def _field(record: Dict[str, Any], name: str) -> Any:
    """Read a key in either camelCase or PascalCase"""
    if name in record:
        return record[name]
    return record.get(name[0].upper() + name[1:])


def _percent(value: Any) -> float:
    """Convert a 0-100 service percentage to [0, 1]"""
    return float(value or 0.0) / 100.0


def _flag(record: Dict[str, Any], name: str) -> Tuple[Optional[bool], float]:
    """Read a {value, confidence} attribute as (value or None, confidence in [0, 1])"""
    attribute = _field(record, name) or {}
    value = _field(attribute, 'value')
    return (value if isinstance(value, bool) else None), _percent(_field(attribute, 'confidence'))


def parse_frame_record(record: Dict[str, Any], frame_index: int) -> FrameAttributes:
    """Build FrameAttributes from one service record.

    Raises:
        TypeError, ValueError: If the record is malformed
    """
    emotions = {}
    for emotion in _field(record, 'emotions') or []:
        label = str(_field(emotion, 'type')).upper()
        emotions[label] = _percent(_field(emotion, 'confidence'))

    smile, smile_confidence = _flag(record, 'smile')
    eyes_open, eyes_open_confidence = _flag(record, 'eyesOpen')
    mouth_open, _ = _flag(record, 'mouthOpen')
    pose = _field(record, 'pose') or {}

    return FrameAttributes(
        frame_index=frame_index,
        confidence=_percent(_field(record, 'confidence')),
        emotions=emotions,
        smile=smile is True,
        smile_confidence=smile_confidence,
        eyes_open=eyes_open is True,
        eyes_open_confidence=eyes_open_confidence,
        mouth_open=mouth_open,
        yaw=float(_field(pose, 'yaw') or 0.0),
        pitch=float(_field(pose, 'pitch') or 0.0),
        roll=float(_field(pose, 'roll') or 0.0),
        brightness=_percent(_field(record, 'brightness')),
        sharpness=_percent(_field(record, 'sharpness')),
    )


def align_analyses(analyses: List[Any], frame_count: int) -> List[Optional[FrameAttributes]]:
    """Map service records onto the requested frames.

    Records carry ``frameIndex``; without it, the record's position in the
    response is used. Records pointing outside the request are dropped.

    Raises:
        FaceServiceError: If a record is malformed
    """
    aligned: List[Optional[FrameAttributes]] = [None] * frame_count
    for position, record in enumerate(analyses):
        if record is None:
            continue
        if not isinstance(record, dict):
            raise FaceServiceError(f"Malformed analysis record at position {position}")

        index = _field(record, 'frameIndex')
        index = position if index is None else index
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < frame_count:
            logger.warning(f"Ignoring analysis record with out-of-range frame index {index}")
            continue

        try:
            aligned[index] = parse_frame_record(record, index)
        except (TypeError, ValueError, AttributeError) as e:
            raise FaceServiceError(f"Malformed analysis record for frame {index}: {e}") from e

    return aligned


class HttpFaceAttributeClient(FaceAttributeService):
    """Calls the facial-attribute analysis endpoint over HTTP.

    The request is a single POST carrying every frame; no retries are made.

    Attributes:
        service_url: Endpoint URL
        timeout: Per-request timeout in seconds
    """

    def __init__(self, cfg: Optional[Config] = None, service_url: Optional[str] = None,
                 timeout: Optional[float] = None):
        cfg = cfg or default_config
        self.service_url = service_url or cfg.get('visual.service_url')
        self.timeout = timeout or cfg.get('visual.request_timeout', 30)

        logger.info(f"HttpFaceAttributeClient initialized with service_url={self.service_url}")

    async def analyze_frames(self, frames_b64: List[str]) -> List[Optional[FrameAttributes]]:
        """Analyze frames, running the blocking request in a worker thread

        Raises:
            FaceServiceError: On transport errors, non-200 status or invalid response
        """
        return await asyncio.to_thread(self._post_frames, frames_b64)

    def _post_frames(self, frames_b64: List[str]) -> List[Optional[FrameAttributes]]:
        if not self.service_url:
            raise FaceServiceError("Face analysis service URL not configured")

        try:
            response = requests.post(
                self.service_url,
                json={"frames": frames_b64},
                timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error(f"Face analysis request failed: {e}")
            raise FaceServiceError(f"Face analysis request failed: {e}") from e

        if response.status_code != 200:
            try:
                details = response.json().get('error', response.text)
            except (ValueError, AttributeError):
                details = response.text
            logger.error(f"Face analysis service returned {response.status_code}: {details}")
            raise FaceServiceError(f"Face analysis service failed ({response.status_code}): {details}")

        try:
            payload = response.json()
        except ValueError as e:
            raise FaceServiceError("Face analysis service returned invalid JSON") from e

        analyses = payload.get('analyses') if isinstance(payload, dict) else None
        if not isinstance(analyses, list):
            raise FaceServiceError("Face analysis service returned invalid response structure")

        logger.debug(f"Face analysis returned {len(analyses)} records for {len(frames_b64)} frames")
        return align_analyses(analyses, len(frames_b64))
