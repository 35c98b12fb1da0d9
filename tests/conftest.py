"""Pytest configuration and fixtures"""

import io
from typing import List, Optional

import av
import numpy as np
import pytest
import soundfile as sf
import yaml
from hypothesis import settings, Verbosity

from multimodal_baseline.config.config_loader import Config, DEFAULT_CONFIG_PATH
from multimodal_baseline.models.features import AudioFeatures, VisualFeatures
from multimodal_baseline.models.interfaces import FaceAttributeService
from multimodal_baseline.models.media import FrameAttributes

# Register Hypothesis profiles
settings.register_profile("ci", max_examples=100, verbosity=Verbosity.verbose, deadline=None)
settings.register_profile("dev", max_examples=20, verbosity=Verbosity.normal, deadline=None)
settings.register_profile("debug", max_examples=10, verbosity=Verbosity.verbose, deadline=None)

# Use CI profile by default
settings.load_profile("ci")


def sine_wave(frequency: float = 200.0, duration: float = 3.0, sample_rate: int = 16000,
              amplitude: float = 0.5) -> np.ndarray:
    """Generate a pure tone"""
    t = np.arange(int(duration * sample_rate)) / sample_rate
    return (amplitude * np.sin(2 * np.pi * frequency * t)).astype(np.float32)


def wav_bytes(samples: np.ndarray, sample_rate: int) -> bytes:
    """Encode samples as an in-memory WAV file"""
    buffer = io.BytesIO()
    sf.write(buffer, samples, sample_rate, format='WAV', subtype='PCM_16')
    return buffer.getvalue()


def webm_bytes(samples: np.ndarray, sample_rate: int = 48000) -> bytes:
    """Encode mono samples as in-memory WebM/Opus, as a browser MediaRecorder does"""
    buffer = io.BytesIO()
    with av.open(buffer, mode='w', format='webm') as container:
        stream = container.add_stream('libopus', rate=sample_rate)
        stream.codec_context.layout = 'mono'
        frame = av.AudioFrame.from_ndarray(
            np.asarray(samples, dtype=np.float32).reshape(1, -1), format='flt', layout='mono'
        )
        frame.sample_rate = sample_rate
        for packet in stream.encode(frame):
            container.mux(packet)
        for packet in stream.encode(None):
            container.mux(packet)
    return buffer.getvalue()


def make_audio_features(**overrides) -> AudioFeatures:
    values = dict(
        mean_pitch=165.0,
        pitch_variability=10.0,
        speaking_rate=150.0,
        pause_frequency=5.0,
        pause_duration=0.5,
        voice_energy=0.7,
        jitter=0.1,
        shimmer=0.1,
        harmonic_ratio=0.8,
        quality=0.9,
    )
    values.update(overrides)
    return AudioFeatures(**values)


def make_visual_features(**overrides) -> VisualFeatures:
    values = dict(
        smile_frequency=0.6,
        smile_intensity=0.5,
        eye_contact=0.8,
        eyebrow_position=0.4,
        facial_tension=0.2,
        blink_rate=17.0,
        head_movement=0.5,
        affect=0.5,
        face_presence_quality=0.9,
        overall_quality=0.85,
    )
    values.update(overrides)
    return VisualFeatures(**values)


def optimal_audio_features() -> AudioFeatures:
    return make_audio_features(
        pitch_variability=0.0, voice_energy=1.0, jitter=0.0, shimmer=0.0,
        harmonic_ratio=1.0, quality=1.0
    )


def optimal_visual_features() -> VisualFeatures:
    return make_visual_features(
        smile_frequency=1.0, smile_intensity=1.0, eye_contact=1.0, facial_tension=0.0,
        affect=1.0, face_presence_quality=1.0, overall_quality=1.0
    )


def make_frame(frame_index: int = 0, **overrides) -> FrameAttributes:
    values = dict(
        frame_index=frame_index,
        confidence=0.9,
        emotions={'HAPPY': 0.8, 'CALM': 0.2},
        smile=True,
        smile_confidence=0.9,
        eyes_open=True,
        eyes_open_confidence=0.95,
        mouth_open=False,
        yaw=2.0,
        pitch=1.0,
        roll=0.5,
        brightness=0.8,
        sharpness=0.6,
    )
    values.update(overrides)
    return FrameAttributes(**values)


class StubFaceService(FaceAttributeService):
    """Face service double returning canned per-frame results"""

    def __init__(self, results: Optional[List[Optional[FrameAttributes]]] = None, error: Exception = None):
        self.results = results
        self.error = error
        self.calls: List[List[str]] = []

    async def analyze_frames(self, frames_b64: List[str]) -> List[Optional[FrameAttributes]]:
        self.calls.append(list(frames_b64))
        if self.error is not None:
            raise self.error
        if self.results is None:
            return [make_frame(i) for i in range(len(frames_b64))]
        return list(self.results)


@pytest.fixture
def make_config(tmp_path):
    """Build a Config from the packaged defaults with selected overrides"""
    def _make(overrides: dict = None) -> Config:
        with open(DEFAULT_CONFIG_PATH) as f:
            data = yaml.safe_load(f)
        for key, value in (overrides or {}).items():
            section, name = key.split('.')
            data.setdefault(section, {})[name] = value
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump(data))
        return Config(str(path))
    return _make
