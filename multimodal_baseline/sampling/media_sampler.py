"""Media Sampler

Bounds the amount of raw audio and video processed per enrichment while keeping
the sample representative of the whole conversation. Voice and facial patterns
are consistent across a conversation, so evenly spread chunks and frames carry
the same information as the full recording at a fraction of the cost.
"""

import logging
from typing import List, Optional, Sequence, TypeVar

import numpy as np

from multimodal_baseline.config.config_loader import Config, config as default_config


logger = logging.getLogger(__name__)

T = TypeVar("T")


class MediaSampler:
    """Caps audio duration and video frame counts.

    Both capping operations are deterministic, never exceed the configured
    maximum and never return an empty result for non-empty input.

    Attributes:
        max_audio_seconds: Longest audio sample passed to feature extraction
        audio_chunk_seconds: Length of each contiguous chunk taken from long audio
        max_video_frames: Largest number of frames sent for facial analysis
    """

    def __init__(self, cfg: Optional[Config] = None):
        cfg = cfg or default_config
        self.max_audio_seconds = cfg.get('sampling.max_audio_seconds', 30)
        self.audio_chunk_seconds = cfg.get('sampling.audio_chunk_seconds', 2)
        self.max_video_frames = cfg.get('sampling.max_video_frames', 25)

    def sample_audio(self, samples: np.ndarray, sample_rate: int) -> np.ndarray:
        """Cap audio to the maximum duration using evenly spaced chunks.

        The first and last chunks are always kept for onset and closing context;
        the remaining chunks are spread with an even stride across the recording.

        Args:
            samples: Mono PCM samples
            sample_rate: Sample rate in Hz

        Returns:
            The input unchanged if short enough, otherwise the concatenated chunks
        """
        total = len(samples)
        if total == 0 or sample_rate <= 0:
            return samples
        if total / sample_rate <= self.max_audio_seconds:
            return samples

        max_samples = int(self.max_audio_seconds * sample_rate)
        chunk_samples = min(int(self.audio_chunk_seconds * sample_rate), max_samples)
        num_chunks = int(self.max_audio_seconds // self.audio_chunk_seconds)
        if chunk_samples <= 0 or num_chunks <= 0:
            return samples[:max_samples]

        last_start = total - chunk_samples
        if num_chunks == 1:
            starts = [0]
        else:
            stride = last_start / (num_chunks - 1)
            starts = [int(np.floor(i * stride)) for i in range(num_chunks - 1)]
            starts.append(last_start)
        # dict preserves order while dropping coinciding starts
        starts = list(dict.fromkeys(starts))

        sampled = np.concatenate([samples[start:start + chunk_samples] for start in starts])
        logger.debug(
            f"Sampled audio from {total / sample_rate:.1f}s to "
            f"{len(sampled) / sample_rate:.1f}s using {len(starts)} chunks"
        )
        return sampled

    def sample_frame_indices(self, count: int) -> List[int]:
        """Indices of frames to analyze out of ``count`` captured frames.

        Always includes the first and last frame; the remaining slots are filled
        at even fractional steps across the sequence.
        """
        max_frames = self.max_video_frames
        if count <= max_frames:
            return list(range(count))
        if max_frames <= 1:
            return [0]

        step = count / max_frames
        last = count - 1
        selected = {0, last}
        for i in range(1, max_frames - 1):
            index = int(np.floor(i * step))
            if index not in selected:
                selected.add(index)
            if len(selected) >= max_frames:
                break

        # Fill any slots lost to duplicates with the earliest unused frames
        if len(selected) < max_frames:
            for index in range(count):
                if len(selected) >= max_frames:
                    break
                selected.add(index)

        return sorted(selected)

    def sample_frames(self, frames: Sequence[T]) -> List[T]:
        """Cap a frame sequence to the maximum frame count, preserving order"""
        indices = self.sample_frame_indices(len(frames))
        if len(indices) < len(frames):
            logger.debug(f"Sampled {len(indices)} of {len(frames)} video frames")
        return [frames[i] for i in indices]
