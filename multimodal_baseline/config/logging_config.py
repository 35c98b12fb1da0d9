"""Logging setup driven by the ``logging`` configuration section"""

import logging
import sys
from typing import Optional

from multimodal_baseline.config.config_loader import Config, config as default_config


def configure_logging(cfg: Optional[Config] = None, log_file: Optional[str] = None) -> None:
    """Configure root logging for applications embedding the enrichment core.

    Args:
        cfg: Configuration to read ``logging.level`` and ``logging.format`` from
        log_file: Optional file to write logs to in addition to stdout
    """
    cfg = cfg or default_config
    level_name = str(cfg.get('logging.level', 'INFO')).upper()
    level = getattr(logging, level_name, logging.INFO)

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format=cfg.get('logging.format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s'),
        handlers=handlers,
        force=True
    )
