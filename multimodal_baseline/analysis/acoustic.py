"""Audio Feature Extraction

This module decodes a recorded conversation and derives ten acoustic descriptors
used as the audio half of the baseline multimodal score:

    - Pitch (mean, variability) from autocorrelation pitch tracking
    - Speaking rate from energy-threshold voice activity
    - Pauses (frequency, duration)
    - Voice quality (energy, jitter, shimmer, harmonic ratio)
    - Overall signal quality

Every descriptor helper tolerates samples shorter than one analysis frame and
returns its documented default instead of raising or producing NaN.
"""

import asyncio
import io
import logging
from typing import NamedTuple, Optional, Tuple

import av
import numpy as np
import librosa

from multimodal_baseline.config.config_loader import Config, config as default_config
from multimodal_baseline.models.enums import MultimodalErrorCode
from multimodal_baseline.models.errors import MultimodalError
from multimodal_baseline.models.features import AudioFeatures
from multimodal_baseline.models.interfaces import AudioExtractorInterface
from multimodal_baseline.models.media import CapturedMedia
from multimodal_baseline.sampling.media_sampler import MediaSampler


logger = logging.getLogger(__name__)

# Human voice F0 range (Hz)
MIN_PITCH_HZ = 85.0
MAX_PITCH_HZ = 300.0
DEFAULT_PITCH_HZ = 150.0

PITCH_FRAME_SECONDS = 0.04
PITCH_HOP_RATIO = 0.75
PITCH_FRAME_STRIDE = 3  # Only every third frame is analysed

VAD_FRAME_SECONDS = 0.02
THRESHOLD_FRAME_SIZE = 512
THRESHOLD_PERCENTILE = 0.25
DEFAULT_ENERGY_THRESHOLD = 0.001

WORDS_PER_VOICED_SECOND = 2.5
MIN_SPEAKING_RATE = 80.0
MAX_SPEAKING_RATE = 200.0

MIN_PAUSE_SECONDS = 0.2
DEFAULT_PAUSE_SECONDS = 0.5

SHIMMER_FRAME_SIZE = 1024
HARMONIC_FRAME_SIZE = 2048
JITTER_NORMALIZATION_HZ = 50.0

CLIPPING_AMPLITUDE = 0.95
CLIPPING_RATIO_LIMIT = 0.01
LOW_ENERGY_LIMIT = 0.01


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _energy(data: np.ndarray) -> float:
    """Mean squared amplitude, 0.0 for an empty buffer"""
    if len(data) == 0:
        return 0.0
    return float(np.mean(np.square(data)))


def _frame(data: np.ndarray, frame_length: int, hop_length: int) -> np.ndarray:
    """Split a signal into frames whose start index is below ``len - frame_length``.

    Returns:
        Array of shape (n_frames, frame_length); zero rows when the signal is
        not longer than one frame
    """
    if frame_length <= 0 or hop_length <= 0 or len(data) <= frame_length:
        return np.empty((0, max(frame_length, 0)), dtype=np.float64)

    n_frames = int(np.ceil((len(data) - frame_length) / hop_length))
    frames = librosa.util.frame(
        np.ascontiguousarray(data),
        frame_length=frame_length,
        hop_length=hop_length,
        axis=0
    )
    return frames[:n_frames]


def _frame_energies(data: np.ndarray, frame_length: int, hop_length: int) -> np.ndarray:
    frames = _frame(data, frame_length, hop_length)
    if len(frames) == 0:
        return np.empty(0, dtype=np.float64)
    return np.mean(np.square(frames), axis=1)


class VoiceActivity(NamedTuple):
    """Short-term energies shared by the speaking-rate and pause descriptors"""
    energies: np.ndarray
    hop_size: float
    threshold: float


class AudioFeatureExtractor(AudioExtractorInterface):
    """Extracts baseline acoustic descriptors from captured audio.

    The extractor holds configuration only, so a single instance can serve
    concurrent extractions.

    Attributes:
        sampler: Caps audio to the processing budget before analysis
        pitch_sample_rate: Rate the signal is decimated to for pitch tracking
    """

    def __init__(self, cfg: Optional[Config] = None, sampler: Optional[MediaSampler] = None):
        cfg = cfg or default_config
        self.sampler = sampler or MediaSampler(cfg)
        self.pitch_sample_rate = cfg.get('audio.pitch_sample_rate', 8000)

        logger.info(f"AudioFeatureExtractor initialized with pitch_sample_rate={self.pitch_sample_rate}")

    async def extract(self, media: CapturedMedia) -> AudioFeatures:
        """Extract audio features from captured media.

        Decoding and signal processing run in a worker thread so concurrent
        visual extraction is not blocked.

        Raises:
            MultimodalError: INSUFFICIENT_DATA if no audio is present,
                FEATURE_EXTRACTION_FAILED (recoverable) if decoding or
                extraction fails
        """
        if not media.has_audio:
            raise MultimodalError(
                'No audio data available',
                MultimodalErrorCode.INSUFFICIENT_DATA,
                recoverable=False
            )

        try:
            return await asyncio.to_thread(self._extract_encoded, media.audio)
        except MultimodalError:
            raise
        except Exception as e:
            logger.error(f"Audio feature extraction failed: {e}", exc_info=True)
            raise MultimodalError(
                f'Failed to extract audio features: {e}',
                MultimodalErrorCode.FEATURE_EXTRACTION_FAILED,
                recoverable=True
            ) from e

    def _extract_encoded(self, audio: bytes) -> AudioFeatures:
        samples, sample_rate = self._decode(audio)
        samples = self.sampler.sample_audio(samples, sample_rate)
        return self.extract_from_samples(samples, sample_rate)

    def _decode(self, audio: bytes) -> Tuple[np.ndarray, int]:
        """Decode an encoded audio container to first-channel PCM at its native rate.

        Any container and codec FFmpeg can demux is accepted (WebM/Opus from
        browser capture, WAV, Ogg, MP4/AAC).
        """
        with av.open(io.BytesIO(audio)) as container:
            stream = next((s for s in container.streams if s.type == 'audio'), None)
            if stream is None:
                raise ValueError('Recording has no audio stream')

            # Planar float keeps each channel in its own row of to_ndarray()
            resampler = av.AudioResampler(format='fltp')
            chunks = []
            sample_rate = stream.rate
            codec = stream.codec_context.name
            for frame in container.decode(stream):
                sample_rate = sample_rate or frame.sample_rate
                for planar in resampler.resample(frame):
                    chunks.append(planar.to_ndarray()[0])

        if not chunks or not sample_rate:
            raise ValueError('Recording contains no decodable audio')

        samples = np.concatenate(chunks).astype(np.float32)
        logger.debug(f"Decoded {len(samples)} samples at {sample_rate} Hz ({codec})")
        return np.ascontiguousarray(samples), int(sample_rate)

    def extract_from_samples(self, samples: np.ndarray, sample_rate: int) -> AudioFeatures:
        """Compute all ten descriptors from an already capped mono sample.

        Args:
            samples: Mono PCM samples in [-1, 1]
            sample_rate: Sample rate in Hz

        Returns:
            AudioFeatures; deterministic for identical input
        """
        data = np.asarray(samples, dtype=np.float64)
        duration = len(data) / sample_rate if sample_rate > 0 else 0.0

        pitches = self._track_pitch(data, sample_rate)
        pitch_variability = self._pitch_variability(pitches)
        activity = self._voice_activity(data, sample_rate)

        features = AudioFeatures(
            mean_pitch=self._mean_pitch(pitches),
            pitch_variability=pitch_variability,
            speaking_rate=self._estimate_speaking_rate(activity, sample_rate, duration),
            pause_frequency=self._extract_pause_frequency(activity, sample_rate, duration),
            pause_duration=self._extract_pause_duration(activity, sample_rate),
            voice_energy=self._extract_voice_energy(data),
            jitter=self._extract_jitter(pitch_variability),
            shimmer=self._extract_shimmer(data),
            harmonic_ratio=self._extract_harmonic_ratio(data),
            quality=self._assess_quality(data, duration),
        )

        logger.debug(
            f"Audio features: pitch={features.mean_pitch:.1f}Hz, "
            f"rate={features.speaking_rate:.0f}wpm, quality={features.quality:.2f}"
        )
        return features

    # ------------------------------------------------------------------
    # Pitch
    # ------------------------------------------------------------------

    def _decimate(self, data: np.ndarray, sample_rate: int) -> np.ndarray:
        """Downsample by picking every ``sample_rate / pitch_sample_rate``-th sample"""
        if sample_rate <= 0 or len(data) == 0:
            return np.empty(0, dtype=np.float64)
        ratio = sample_rate / self.pitch_sample_rate
        length = int(np.floor(len(data) / ratio))
        indices = np.floor(np.arange(length) * ratio).astype(np.int64)
        return data[np.minimum(indices, len(data) - 1)]

    def _track_pitch(self, data: np.ndarray, sample_rate: int) -> np.ndarray:
        """Per-frame F0 estimates within the voice range.

        Frames are 40 ms with 75% overlap at the decimated rate, and only every
        third frame is analysed.
        """
        downsampled = self._decimate(data, sample_rate)
        rate = self.pitch_sample_rate
        frame_size = int(rate * PITCH_FRAME_SECONDS)
        hop_size = int(frame_size * PITCH_HOP_RATIO)

        frames = _frame(downsampled, frame_size, hop_size * PITCH_FRAME_STRIDE)
        if len(frames) == 0:
            return np.empty(0, dtype=np.float64)

        pitches = self._autocorrelation_pitch(frames, rate)
        return pitches[(pitches >= MIN_PITCH_HZ) & (pitches <= MAX_PITCH_HZ)]

    def _autocorrelation_pitch(self, frames: np.ndarray, sample_rate: int) -> np.ndarray:
        """Estimate pitch per frame from the strongest autocorrelation lag.

        Lags are restricted to the 85-300 Hz range and to less than half the
        frame length. Silent frames yield 0.
        """
        frame_size = frames.shape[1]
        min_lag = int(sample_rate / MAX_PITCH_HZ)
        max_lag = min(int(sample_rate / MIN_PITCH_HZ), (frame_size + 1) // 2)
        if max_lag <= min_lag:
            return np.zeros(len(frames))

        corr = librosa.autocorrelate(frames, max_size=max_lag, axis=-1)
        window = corr[:, min_lag:max_lag]
        best = np.argmax(window, axis=1)
        best_corr = window[np.arange(len(frames)), best]
        lags = best + min_lag

        voiced = (corr[:, 0] > 1e-10) & (best_corr > -1.0)
        pitches = np.zeros(len(frames))
        pitches[voiced] = sample_rate / lags[voiced]
        return pitches

    def _mean_pitch(self, pitches: np.ndarray) -> float:
        if len(pitches) == 0:
            return DEFAULT_PITCH_HZ
        return float(np.mean(pitches))

    def _pitch_variability(self, pitches: np.ndarray) -> float:
        if len(pitches) < 2:
            return 0.0
        return float(np.std(pitches))

    def _extract_jitter(self, pitch_variability: float) -> float:
        # Cycle-to-cycle period analysis is approximated by pitch variability
        return _clamp(pitch_variability / JITTER_NORMALIZATION_HZ, 0.0, 1.0)

    # ------------------------------------------------------------------
    # Voice activity and pauses
    # ------------------------------------------------------------------

    def _energy_threshold(self, data: np.ndarray) -> float:
        """Voice-activity threshold at the 25th percentile of frame energies"""
        energies = np.sort(_frame_energies(data, THRESHOLD_FRAME_SIZE, THRESHOLD_FRAME_SIZE))
        if len(energies) == 0:
            return DEFAULT_ENERGY_THRESHOLD
        threshold = float(energies[int(len(energies) * THRESHOLD_PERCENTILE)])
        return threshold if threshold > 0 else DEFAULT_ENERGY_THRESHOLD

    def _vad_energies(self, data: np.ndarray, sample_rate: int) -> Tuple[np.ndarray, float]:
        """Short-term energies on 20 ms frames with a 50% hop, and the hop in samples.

        The hop is half the frame length and may be fractional (220.5 samples at
        22050 Hz); each frame starts at the floor of its fractional offset.
        """
        frame_size = int(sample_rate * VAD_FRAME_SECONDS)
        hop_size = frame_size / 2
        if frame_size <= 0 or len(data) <= frame_size:
            return np.empty(0, dtype=np.float64), hop_size

        n_frames = int(np.ceil((len(data) - frame_size) / hop_size))
        starts = np.floor(np.arange(n_frames) * hop_size).astype(np.int64)
        frames = data[starts[:, np.newaxis] + np.arange(frame_size)]
        return np.mean(np.square(frames), axis=1), hop_size

    def _voice_activity(self, data: np.ndarray, sample_rate: int) -> VoiceActivity:
        energies, hop_size = self._vad_energies(data, sample_rate)
        return VoiceActivity(energies, hop_size, self._energy_threshold(data))

    def _estimate_speaking_rate(self, activity: VoiceActivity, sample_rate: int, duration: float) -> float:
        """Words per minute estimated from voiced time"""
        if duration <= 0:
            return MIN_SPEAKING_RATE

        voiced_frames = int(np.count_nonzero(activity.energies > activity.threshold))

        voiced_seconds = voiced_frames * activity.hop_size / sample_rate
        estimated_words = voiced_seconds * WORDS_PER_VOICED_SECOND
        words_per_minute = estimated_words / duration * 60
        return _clamp(words_per_minute, MIN_SPEAKING_RATE, MAX_SPEAKING_RATE)

    def _extract_pause_frequency(self, activity: VoiceActivity, sample_rate: int, duration: float) -> float:
        """Pauses per minute; a pause starts after 200 ms below threshold"""
        if duration <= 0 or len(activity.energies) == 0:
            return 0.0

        threshold = activity.threshold
        min_pause_frames = int(sample_rate * MIN_PAUSE_SECONDS / activity.hop_size)

        pause_count = 0
        in_pause = False
        pause_frames = 0
        for energy in activity.energies:
            if energy < threshold:
                pause_frames += 1
                if not in_pause and pause_frames >= min_pause_frames:
                    in_pause = True
                    pause_count += 1
            else:
                in_pause = False
                pause_frames = 0

        return pause_count / duration * 60

    def _extract_pause_duration(self, activity: VoiceActivity, sample_rate: int) -> float:
        """Mean duration of pauses of at least 200 ms that end in speech"""
        if sample_rate <= 0:
            return DEFAULT_PAUSE_SECONDS

        durations = []
        pause_frames = 0
        for energy in activity.energies:
            if energy < activity.threshold:
                pause_frames += 1
            elif pause_frames > 0:
                pause_seconds = pause_frames * activity.hop_size / sample_rate
                if pause_seconds >= MIN_PAUSE_SECONDS:
                    durations.append(pause_seconds)
                pause_frames = 0

        if not durations:
            return DEFAULT_PAUSE_SECONDS
        return float(np.mean(durations))

    # ------------------------------------------------------------------
    # Voice quality
    # ------------------------------------------------------------------

    def _extract_voice_energy(self, data: np.ndarray) -> float:
        return _clamp(_energy(data) * 10, 0.0, 1.0)

    def _extract_shimmer(self, data: np.ndarray) -> float:
        """Amplitude variability across 1024-sample frames"""
        energies = _frame_energies(data, SHIMMER_FRAME_SIZE, SHIMMER_FRAME_SIZE)
        if len(energies) < 2:
            return 0.0
        amplitudes = np.sqrt(energies)
        return _clamp(float(np.std(amplitudes)) * 10, 0.0, 1.0)

    def _extract_harmonic_ratio(self, data: np.ndarray) -> float:
        """Energy-weighted periodicity strength over 2048-sample frames"""
        frames = _frame(data, HARMONIC_FRAME_SIZE, HARMONIC_FRAME_SIZE)
        if len(frames) == 0:
            return 0.0

        energies = np.mean(np.square(frames), axis=1)
        total_energy = float(np.sum(energies))
        if total_energy <= 0:
            return 0.0

        max_lag = HARMONIC_FRAME_SIZE // 4
        corr = librosa.autocorrelate(frames, max_size=max_lag, axis=-1)
        periodicity = np.max(np.abs(corr[:, 1:max_lag]), axis=1) / (HARMONIC_FRAME_SIZE * 0.5)

        ratio = float(np.sum(energies * periodicity)) / total_energy
        return _clamp(ratio, 0.0, 1.0)

    def _clipping_ratio(self, data: np.ndarray) -> float:
        if len(data) == 0:
            return 0.0
        return float(np.count_nonzero(np.abs(data) > CLIPPING_AMPLITUDE)) / len(data)

    def _assess_quality(self, data: np.ndarray, duration: float) -> float:
        """Assess overall audio quality in [0, 1]"""
        quality_score = 1.0

        # Short recordings give less reliable voice statistics
        if duration < 30:
            quality_score *= 0.7
        if duration < 15:
            quality_score *= 0.5

        if _energy(data) < LOW_ENERGY_LIMIT:
            quality_score *= 0.6
            logger.debug("Low energy detected, reducing quality score")

        if self._clipping_ratio(data) > CLIPPING_RATIO_LIMIT:
            quality_score *= 0.8
            logger.debug("Clipping detected, reducing quality score")

        return _clamp(quality_score, 0.0, 1.0)
