"""Data models for extracted features"""

from dataclasses import dataclass


@dataclass(frozen=True)
class AudioFeatures:
    """Acoustic descriptors extracted from one audio sample

    Attributes:
        mean_pitch: Mean fundamental frequency (F0) in Hz
        pitch_variability: Standard deviation of F0 in Hz
        speaking_rate: Estimated words per minute
        pause_frequency: Pauses per minute
        pause_duration: Mean pause duration in seconds
        voice_energy: Mean squared amplitude, scaled to [0, 1]
        jitter: Pitch instability proxy [0, 1], higher is less stable
        shimmer: Amplitude instability proxy [0, 1]
        harmonic_ratio: Energy-weighted periodicity [0, 1]
        quality: Signal quality [0, 1]
    """
    mean_pitch: float
    pitch_variability: float
    speaking_rate: float
    pause_frequency: float
    pause_duration: float
    voice_energy: float
    jitter: float
    shimmer: float
    harmonic_ratio: float
    quality: float


@dataclass(frozen=True)
class VisualFeatures:
    """Facial-attribute descriptors extracted from sampled video frames

    Attributes:
        smile_frequency: Fraction of frames smiling [0, 1]
        smile_intensity: Mean smile confidence over smiling frames [0, 1]
        eye_contact: Fraction of frames with open eyes and near-frontal pose [0, 1]
        eyebrow_position: Eyebrow-raise proxy from the surprised emotion [0, 1]
        facial_tension: Tension proxy from closed mouth and negative emotions [0, 1]
        blink_rate: Open-to-closed eye transitions per minute
        head_movement: Normalized pose variance [0, 1]
        affect: Composite emotion valence [-1, 1]
        face_presence_quality: Fraction of sampled frames with a usable face [0, 1]
        overall_quality: Detection confidence, brightness and sharpness blend [0, 1]
    """
    smile_frequency: float
    smile_intensity: float
    eye_contact: float
    eyebrow_position: float
    facial_tension: float
    blink_rate: float
    head_movement: float
    affect: float
    face_presence_quality: float
    overall_quality: float
