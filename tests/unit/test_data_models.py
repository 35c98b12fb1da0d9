"""Unit tests for data models"""

import json
import time

import pytest

from multimodal_baseline.models import (
    CapturedMedia,
    EnrichmentResult,
    MultimodalError,
    MultimodalErrorCode,
    ScoringBreakdown,
    WeightingPolicy,
)
from conftest import make_audio_features, make_frame


class TestCapturedMedia:
    """Tests for CapturedMedia"""

    def test_valid_media(self):
        media = CapturedMedia(audio=b"RIFF", video_frames=[b"jpg"], duration=12.5)
        assert media.has_audio
        assert media.has_video
        assert media.duration == 12.5

    def test_timestamps_default_from_duration(self):
        before = time.time()
        media = CapturedMedia(audio=b"RIFF", duration=10.0)
        assert media.end_time >= before
        assert media.start_time == pytest.approx(media.end_time - 10.0)

    def test_explicit_timestamps_kept(self):
        media = CapturedMedia(audio=b"RIFF", duration=5.0, start_time=100.0, end_time=105.0)
        assert media.start_time == 100.0
        assert media.end_time == 105.0

    def test_media_requires_positive_duration(self):
        with pytest.raises(AssertionError):
            CapturedMedia(audio=b"RIFF", duration=0.0)
        with pytest.raises(AssertionError):
            CapturedMedia(video_frames=[b"jpg"], duration=-1.0)

    def test_empty_media_allows_zero_duration(self):
        media = CapturedMedia()
        assert not media.has_audio
        assert not media.has_video

    def test_empty_frame_list_is_no_video(self):
        media = CapturedMedia(audio=b"RIFF", video_frames=[], duration=1.0)
        assert not media.has_video


class TestFrameAttributes:
    """Tests for FrameAttributes"""

    def test_emotion_lookup(self):
        frame = make_frame(emotions={'HAPPY': 0.7})
        assert frame.emotion('HAPPY') == 0.7
        assert frame.emotion('SAD') == 0.0

    def test_frozen(self):
        frame = make_frame()
        with pytest.raises(AttributeError):
            frame.smile = False


class TestWeightingPolicy:
    """Tests for WeightingPolicy"""

    @pytest.mark.parametrize("policy", list(WeightingPolicy))
    def test_weights_sum_to_one(self, policy):
        assert policy.clinical_weight + policy.multimodal_weight == pytest.approx(1.0)
        assert policy.audio_weight + policy.visual_weight == pytest.approx(policy.multimodal_weight)

    def test_select(self):
        assert WeightingPolicy.select(False, False) is WeightingPolicy.CLINICAL_ONLY
        assert WeightingPolicy.select(True, False) is WeightingPolicy.CLINICAL_PLUS_AUDIO
        assert WeightingPolicy.select(False, True) is WeightingPolicy.CLINICAL_PLUS_VISUAL
        assert WeightingPolicy.select(True, True) is WeightingPolicy.CLINICAL_PLUS_BOTH

    def test_both_weights(self):
        policy = WeightingPolicy.CLINICAL_PLUS_BOTH
        assert policy.clinical_weight == 0.70
        assert policy.audio_weight == 0.15
        assert policy.visual_weight == 0.15


class TestScoringBreakdown:
    """Tests for ScoringBreakdown"""

    def _breakdown(self, **overrides):
        values = dict(
            clinical_score=80,
            clinical_weight=0.85,
            audio_score=70,
            visual_score=None,
            multimodal_score=70,
            multimodal_weight=0.15,
            final_score=79,
            confidence=0.9,
            audio_weight=0.15,
            visual_weight=0.0,
            policy=WeightingPolicy.CLINICAL_PLUS_AUDIO,
        )
        values.update(overrides)
        return ScoringBreakdown(**values)

    def test_valid_breakdown(self):
        breakdown = self._breakdown()
        assert breakdown.final_score == 79

    def test_weights_must_sum_to_one(self):
        with pytest.raises(AssertionError):
            self._breakdown(clinical_weight=0.5)

    def test_modality_weights_must_match_multimodal_weight(self):
        with pytest.raises(AssertionError):
            self._breakdown(audio_weight=0.1)

    def test_final_score_must_be_integer(self):
        with pytest.raises(AssertionError):
            self._breakdown(final_score=79.5)

    def test_confidence_range(self):
        with pytest.raises(AssertionError):
            self._breakdown(confidence=1.5)

    def test_to_dict_names_policy(self):
        data = self._breakdown().to_dict()
        assert data["policy"] == "CLINICAL_PLUS_AUDIO"
        assert data["visual_score"] is None


class TestEnrichmentResult:
    """Tests for EnrichmentResult"""

    def _result(self, **overrides):
        breakdown = ScoringBreakdown(
            clinical_score=80, clinical_weight=1.0, audio_score=None, visual_score=None,
            multimodal_score=None, multimodal_weight=0.0, final_score=80, confidence=0.5
        )
        values = dict(
            original_score=80,
            final_score=80,
            scoring_breakdown=breakdown,
            audio_features=make_audio_features(),
            visual_features=None,
            success=True,
            processing_time_ms=12.0,
            warnings=["No video data available"],
        )
        values.update(overrides)
        return EnrichmentResult(**values)

    def test_to_dict_is_json_serializable(self):
        data = self._result().to_dict()
        encoded = json.loads(json.dumps(data))
        assert encoded["final_score"] == 80
        assert encoded["audio_features"]["mean_pitch"] == 165.0
        assert encoded["visual_features"] is None
        assert encoded["scoring_breakdown"]["policy"] == "CLINICAL_ONLY"
        assert encoded["warnings"] == ["No video data available"]

    def test_negative_processing_time_rejected(self):
        with pytest.raises(AssertionError):
            self._result(processing_time_ms=-1.0)

    def test_final_score_must_be_integer(self):
        with pytest.raises(AssertionError):
            self._result(final_score=80.0)


class TestMultimodalError:
    """Tests for MultimodalError"""

    def test_attributes(self):
        error = MultimodalError('No audio data available', MultimodalErrorCode.INSUFFICIENT_DATA)
        assert str(error) == 'No audio data available'
        assert error.code is MultimodalErrorCode.INSUFFICIENT_DATA
        assert error.recoverable is False

    def test_repr_includes_code(self):
        error = MultimodalError(
            'decode failed', MultimodalErrorCode.FEATURE_EXTRACTION_FAILED, recoverable=True
        )
        assert 'FEATURE_EXTRACTION_FAILED' in repr(error)
        assert 'recoverable=True' in repr(error)
