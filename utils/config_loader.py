"""Configuration management utilities."""

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)


DEFAULT_CONFIG: Dict[str, Any] = {
    'models': {
        'pose': {
            'model_complexity': 1,
            'min_detection_confidence': 0.5,
            'min_tracking_confidence': 0.5,
        },
        'face': {
            'model_selection': 0,
            'min_detection_confidence': 0.5,
        },
        'hands': {
            'max_num_hands': 2,
            'model_complexity': 1,
            'min_detection_confidence': 0.5,
            'min_tracking_confidence': 0.5,
        },
    },
    'pipeline': {
        'history_length': 10,
    },
    'loop': {
        'target_fps': 30,
    },
    'camera': {
        'source': 0,
        'resolution': [640, 480],
    },
    'logging': {
        'level': 'INFO',
        'file': None,
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[Any] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML file, merged over DEFAULT_CONFIG.

    Args:
        config_path: Path to YAML configuration file (str or Path).
                     None returns the defaults.

    Returns:
        Dictionary containing configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If config file is malformed
    """
    if config_path is None:
        return copy.deepcopy(DEFAULT_CONFIG)

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.info(f"Loading configuration from {config_path}")

    with open(config_path, 'r') as f:
        loaded = yaml.safe_load(f) or {}

    if not isinstance(loaded, dict):
        raise ValueError(f"Config root must be a mapping, got {type(loaded).__name__}")

    logger.debug(f"Loaded config keys: {list(loaded.keys())}")

    return _deep_merge(DEFAULT_CONFIG, loaded)


def get_nested_config(config: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """
    Get nested configuration value using dot notation.

    Example:
        get_nested_config(config, 'models.pose.model_complexity', default=1)

    Args:
        config: Configuration dictionary
        key_path: Dot-separated path to value
        default: Default value if path not found

    Returns:
        Configuration value or default
    """
    keys = key_path.split('.')
    value = config

    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value
