"""Configuration loader for multimodal baseline enrichment"""

import yaml
from pathlib import Path
from typing import Any, Dict
import os


DEFAULT_CONFIG_PATH = Path(__file__).with_name("default.yaml")


class Config:
    """Configuration manager for multimodal baseline enrichment"""

    def __init__(self, config_path: str = None):
        if config_path is None:
            config_path = os.getenv('BASELINE_CONFIG')
        if config_path is None:
            env = os.getenv('BASELINE_ENV', 'development')
            # Try environment-specific config first, fall back to packaged default
            env_config = Path(f"config/config.{env}.yaml")
            if env_config.exists():
                config_path = str(env_config)
            else:
                config_path = str(DEFAULT_CONFIG_PATH)

        self.config_path = Path(config_path)
        self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file"""
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        with open(self.config_path, 'r') as f:
            return yaml.safe_load(f) or {}

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value using dot notation

        Args:
            key: Configuration key in dot notation (e.g., 'sampling.max_video_frames')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split('.')
        value = self._config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
            else:
                return default

        return value if value is not None else default

    def __getitem__(self, key: str) -> Any:
        """Allow dictionary-style access"""
        return self.get(key)

    def validate(self) -> None:
        """Validate configuration values"""
        for key in ('sampling.max_audio_seconds', 'sampling.audio_chunk_seconds',
                    'sampling.max_video_frames', 'audio.pitch_sample_rate'):
            value = self.get(key)
            if value is not None and value <= 0:
                raise ValueError(f"Invalid {key}: {value}, must be positive")

        max_audio = self.get('sampling.max_audio_seconds')
        chunk = self.get('sampling.audio_chunk_seconds')
        if max_audio is not None and chunk is not None and chunk > max_audio:
            raise ValueError(
                f"Invalid audio_chunk_seconds: {chunk}, must not exceed max_audio_seconds ({max_audio})"
            )

        quality = self.get('visual.jpeg_quality')
        if quality is not None and not 1 <= quality <= 100:
            raise ValueError(f"Invalid jpeg_quality: {quality}, must be in [1, 100]")


# Global config instance
config = Config()
