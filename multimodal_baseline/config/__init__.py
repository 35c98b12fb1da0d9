"""Configuration and logging setup"""

from multimodal_baseline.config.config_loader import Config, config
from multimodal_baseline.config.logging_config import configure_logging

__all__ = ['Config', 'config', 'configure_logging']
