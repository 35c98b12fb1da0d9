"""Data models for captured media and per-frame facial attributes"""

import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class CapturedMedia:
    """Media recorded during a baseline conversation

    Attributes:
        audio: Raw encoded audio (any container librosa can decode)
        video_frames: Independently decodable still images, in capture order
        duration: Recording duration in seconds
        start_time: Unix timestamp of recording start
        end_time: Unix timestamp of recording end
    """
    audio: Optional[bytes] = None
    video_frames: Optional[List[bytes]] = None
    duration: float = 0.0
    start_time: Optional[float] = None
    end_time: Optional[float] = None

    def __post_init__(self):
        """Validate media and fill in missing timestamps.

        Raises:
            AssertionError: If media is present but duration is not positive
        """
        if self.has_audio or self.has_video:
            assert self.duration > 0, "Duration must be positive when media is present"
        if self.end_time is None:
            self.end_time = time.time()
        if self.start_time is None:
            self.start_time = self.end_time - self.duration

    @property
    def has_audio(self) -> bool:
        return bool(self.audio)

    @property
    def has_video(self) -> bool:
        return bool(self.video_frames)


@dataclass(frozen=True)
class FrameAttributes:
    """Facial attributes of the primary face in one analysed frame

    All confidences, brightness and sharpness are normalized to [0, 1].
    Pose angles are in degrees.
    """
    frame_index: int
    confidence: float
    emotions: Dict[str, float] = field(default_factory=dict)
    smile: bool = False
    smile_confidence: float = 0.0
    eyes_open: bool = False
    eyes_open_confidence: float = 0.0
    mouth_open: Optional[bool] = None  # None when the service did not report it
    yaw: float = 0.0
    pitch: float = 0.0
    roll: float = 0.0
    brightness: float = 0.0
    sharpness: float = 0.0

    def emotion(self, label: str) -> float:
        """Confidence for an emotion label, 0.0 when not reported"""
        return self.emotions.get(label, 0.0)
