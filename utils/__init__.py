"""Shared utilities for the live behavior tracker."""

from .config_loader import load_config, get_nested_config
from .geometry import round_half_up, distance, midpoint, mean_point_distance
from .logging_config import setup_logging

__all__ = [
    'load_config',
    'get_nested_config',
    'round_half_up',
    'distance',
    'midpoint',
    'mean_point_distance',
    'setup_logging',
]
