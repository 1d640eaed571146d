"""Logging setup for host applications."""

import logging
import sys
from typing import Any, Dict, Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(config: Optional[Dict[str, Any]] = None) -> None:
    """
    Configure root logging from the 'logging' config section.

    Args:
        config: Full configuration dict; uses config['logging']['level']
                and optional config['logging']['file']
    """
    log_config = (config or {}).get('logging', {}) or {}
    level_name = str(log_config.get('level', 'INFO')).upper()
    level = getattr(logging, level_name, None)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {level_name}")

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_config.get('file'):
        handlers.append(logging.FileHandler(log_config['file']))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )
