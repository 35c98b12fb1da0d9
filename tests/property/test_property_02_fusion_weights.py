"""Property-based tests for fusion weighting

Property 2: For any inputs the weights sum to 1, the final score is an integer,
confidence is in [0, 1], and for in-range inputs the final score stays in [0, 100].
"""

import math

import pytest
from hypothesis import given, strategies as st

from multimodal_baseline.fusion.fusion_engine import FusionScoringEngine
from multimodal_baseline.models import AudioFeatures, VisualFeatures, WeightingPolicy


engine = FusionScoringEngine()

unit = st.floats(min_value=0.0, max_value=1.0)
any_float = st.floats(allow_nan=True, allow_infinity=True)


@st.composite
def audio_features_strategy(draw, value=None):
    """Generate AudioFeatures within nominal ranges, or arbitrary floats"""
    if value is not None:
        return AudioFeatures(*[draw(value) for _ in range(10)])
    return AudioFeatures(
        mean_pitch=draw(st.floats(min_value=85.0, max_value=300.0)),
        pitch_variability=draw(st.floats(min_value=0.0, max_value=100.0)),
        speaking_rate=draw(st.floats(min_value=80.0, max_value=200.0)),
        pause_frequency=draw(st.floats(min_value=0.0, max_value=60.0)),
        pause_duration=draw(st.floats(min_value=0.0, max_value=10.0)),
        voice_energy=draw(unit),
        jitter=draw(unit),
        shimmer=draw(unit),
        harmonic_ratio=draw(unit),
        quality=draw(unit),
    )


@st.composite
def visual_features_strategy(draw, value=None):
    """Generate VisualFeatures within nominal ranges, or arbitrary floats"""
    if value is not None:
        return VisualFeatures(*[draw(value) for _ in range(10)])
    return VisualFeatures(
        smile_frequency=draw(unit),
        smile_intensity=draw(unit),
        eye_contact=draw(unit),
        eyebrow_position=draw(unit),
        facial_tension=draw(unit),
        blink_rate=draw(st.floats(min_value=0.0, max_value=120.0)),
        head_movement=draw(unit),
        affect=draw(st.floats(min_value=-1.0, max_value=1.0)),
        face_presence_quality=draw(unit),
        overall_quality=draw(unit),
    )


@given(
    clinical=st.floats(min_value=0.0, max_value=100.0),
    audio=st.one_of(st.none(), audio_features_strategy()),
    visual=st.one_of(st.none(), visual_features_strategy()),
    audio_failed=st.booleans(),
    visual_failed=st.booleans()
)
def test_in_range_inputs(clinical, audio, visual, audio_failed, visual_failed):
    """For in-range inputs the breakdown is well formed and bounded"""
    result = engine.compute_score(clinical, audio, visual, audio_failed, visual_failed)

    assert result.clinical_weight + result.multimodal_weight == pytest.approx(1.0)
    assert isinstance(result.final_score, int)
    assert 0 <= result.final_score <= 100
    assert 0.0 <= result.confidence <= 1.0
    for score in (result.audio_score, result.visual_score, result.multimodal_score):
        assert score is None or 0 <= score <= 100


@given(
    clinical=any_float,
    audio=st.one_of(st.none(), audio_features_strategy(any_float)),
    visual=st.one_of(st.none(), visual_features_strategy(any_float)),
    audio_failed=st.booleans(),
    visual_failed=st.booleans()
)
def test_arbitrary_inputs_never_raise(clinical, audio, visual, audio_failed, visual_failed):
    """For any floats, including NaN and infinities, scoring degrades instead of raising"""
    result = engine.compute_score(clinical, audio, visual, audio_failed, visual_failed)

    assert result.clinical_weight + result.multimodal_weight == pytest.approx(1.0)
    assert isinstance(result.final_score, int)
    assert 0.0 <= result.confidence <= 1.0
    if result.policy is WeightingPolicy.CLINICAL_ONLY:
        assert result.confidence == 0.5
        assert result.multimodal_score is None


@given(
    clinical=st.floats(min_value=0.0, max_value=100.0),
    audio=audio_features_strategy(),
    visual=visual_features_strategy()
)
def test_failed_flags_force_clinical_only(clinical, audio, visual):
    """Both modalities failed always yields the clinical-only breakdown"""
    result = engine.compute_score(clinical, audio, visual, True, True)

    assert result.policy is WeightingPolicy.CLINICAL_ONLY
    assert result.final_score == math.floor(clinical + 0.5)
    assert result.audio_score is None
    assert result.visual_score is None
    assert result.confidence == 0.5


@given(
    clinical=st.floats(min_value=0.0, max_value=100.0),
    audio=audio_features_strategy(),
    visual=visual_features_strategy()
)
def test_deterministic(clinical, audio, visual):
    """Identical inputs give identical breakdowns"""
    assert engine.compute_score(clinical, audio, visual) == engine.compute_score(clinical, audio, visual)
