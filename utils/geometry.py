"""Small 2D geometry and rounding helpers used by the metric calculators."""

import math
from typing import Sequence, Tuple

import numpy as np


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves rounded up.

    Python's round() uses banker's rounding (round(2.5) == 2); the metric
    formulas are defined with halves rounding up.
    """
    return int(math.floor(value + 0.5))


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Euclidean distance between two (x, y) points."""
    return float(np.hypot(a[0] - b[0], a[1] - b[1]))


def midpoint(a: Sequence[float], b: Sequence[float]) -> Tuple[float, float]:
    return ((a[0] + b[0]) / 2, (a[1] + b[1]) / 2)


def mean_point_distance(current: np.ndarray, previous: np.ndarray) -> float:
    """
    Mean per-point Euclidean distance between two (N, 2) arrays.

    Returns 0.0 when shapes differ or the arrays are empty.
    """
    if current.shape != previous.shape or len(current) == 0:
        return 0.0
    return float(np.mean(np.linalg.norm(current - previous, axis=1)))
