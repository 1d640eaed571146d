"""
Temporal smoothing of per-frame behavior metrics.

Single-frame metrics jump around whenever a detection flickers (faces and
hands have no identity across frames), so the emitted vector is a linearly
weighted moving average over the most recent raw vectors:

    weight(i) = i + 1    for the i-th entry, oldest first
    smoothed  = sum(weight(i) * value(i)) / sum(weight)

Boolean flags and the expression label are not averaged; they are copied
from the newest raw vector.
"""

import copy
import logging
from collections import deque
from dataclasses import fields
from typing import List

from behavior_core import MetricsVector, empty_metrics
from behavior_core.metrics import GROUP_KEYS
from utils.geometry import round_half_up

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LENGTH = 10


def _is_numeric(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class TemporalSmoother:
    """
    Bounded, recency-weighted moving average over MetricsVectors.

    Usage:
        smoother = TemporalSmoother(history_length=10)
        smoothed = smoother.update(raw_metrics)
    """

    def __init__(self, history_length: int = DEFAULT_HISTORY_LENGTH):
        """
        Args:
            history_length: Maximum number of raw vectors kept (FIFO)
        """
        if history_length < 1:
            raise ValueError(f"history_length must be >= 1, got {history_length}")

        self.history_length = history_length
        self._history = deque(maxlen=history_length)
        self._current = empty_metrics()

    @property
    def history(self) -> List[MetricsVector]:
        """Raw vectors in history, oldest first."""
        return list(self._history)

    @property
    def current(self) -> MetricsVector:
        """Latest smoothed vector (baseline before any update)."""
        return self._current

    def update(self, raw: MetricsVector) -> MetricsVector:
        """
        Push a raw vector and compute the smoothed vector.

        Args:
            raw: Freshly computed metrics for the newest frame

        Returns:
            Smoothed MetricsVector
        """
        self._history.append(raw)

        weights = [i + 1 for i in range(len(self._history))]
        total_weight = sum(weights)

        smoothed = empty_metrics()
        for group_name in GROUP_KEYS:
            newest_group = getattr(raw, group_name)
            smoothed_group = getattr(smoothed, group_name)

            for f in fields(newest_group):
                newest_value = getattr(newest_group, f.name)
                if not _is_numeric(newest_value):
                    setattr(smoothed_group, f.name, copy.copy(newest_value))
                    continue

                accumulated = 0.0
                for weight, metrics in zip(weights, self._history):
                    value = getattr(getattr(metrics, group_name), f.name)
                    accumulated += value * (weight / total_weight)
                setattr(smoothed_group, f.name, round_half_up(accumulated))

        self._current = smoothed
        logger.debug(f"Smoothed metrics over {len(self._history)} frames")
        return smoothed

    def reset(self):
        """Clear history and return to the baseline vector."""
        self._history.clear()
        self._current = empty_metrics()
        logger.info("Metrics history reset")
