"""Property-based tests for determinism

Property 4: Feature extraction and frame aggregation are pure functions of
their input.
"""

import numpy as np
from hypothesis import given, strategies as st
from hypothesis.extra.numpy import arrays

from multimodal_baseline.analysis.acoustic import AudioFeatureExtractor
from multimodal_baseline.analysis.visual import VisualFeatureExtractor
from multimodal_baseline.config.config_loader import Config, DEFAULT_CONFIG_PATH
from multimodal_baseline.models import FrameAttributes
from conftest import StubFaceService


cfg = Config(str(DEFAULT_CONFIG_PATH))
audio_extractor = AudioFeatureExtractor(cfg)
visual_extractor = VisualFeatureExtractor(face_service=StubFaceService(), cfg=cfg)

unit = st.floats(min_value=0.0, max_value=1.0)
angle = st.floats(min_value=-90.0, max_value=90.0)


@st.composite
def frame_strategy(draw):
    labels = ['HAPPY', 'CALM', 'SAD', 'ANGRY', 'DISGUSTED', 'FEAR', 'SURPRISED', 'CONFUSED']
    emotions = draw(st.dictionaries(st.sampled_from(labels), unit, max_size=len(labels)))
    return FrameAttributes(
        frame_index=0,
        confidence=draw(unit),
        emotions=emotions,
        smile=draw(st.booleans()),
        smile_confidence=draw(unit),
        eyes_open=draw(st.booleans()),
        eyes_open_confidence=draw(unit),
        mouth_open=draw(st.one_of(st.none(), st.booleans())),
        yaw=draw(angle),
        pitch=draw(angle),
        roll=draw(angle),
        brightness=draw(unit),
        sharpness=draw(unit),
    )


@given(
    samples=arrays(
        dtype=np.float32,
        shape=st.integers(min_value=0, max_value=8192),
        elements=st.floats(min_value=-1.0, max_value=1.0, width=32)
    ),
    sample_rate=st.sampled_from([8000, 16000, 44100])
)
def test_audio_extraction_deterministic(samples, sample_rate):
    """Extracting the same samples twice gives identical features"""
    first = audio_extractor.extract_from_samples(samples, sample_rate)
    second = audio_extractor.extract_from_samples(samples.copy(), sample_rate)
    assert first == second


@given(
    detections=st.lists(frame_strategy(), min_size=1, max_size=25),
    extra=st.integers(min_value=0, max_value=10),
    duration=st.floats(min_value=0.1, max_value=600.0)
)
def test_visual_aggregation_deterministic_and_bounded(detections, extra, duration):
    """Aggregating the same detections twice gives identical, bounded features"""
    sampled = len(detections) + extra
    first = visual_extractor.features_from_detections(detections, sampled, duration)
    second = visual_extractor.features_from_detections(list(detections), sampled, duration)

    assert first == second
    for value in (first.smile_frequency, first.smile_intensity, first.eye_contact,
                  first.eyebrow_position, first.facial_tension, first.head_movement,
                  first.face_presence_quality, first.overall_quality):
        assert 0.0 <= value <= 1.0 + 1e-9
    assert -1.0 <= first.affect <= 1.0
    assert first.blink_rate >= 0.0
