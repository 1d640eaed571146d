"""
Per-frame detection-to-metrics pipeline.

One pass:
    frame -> models (concurrent) -> DetectionFrame -> calculators
          -> raw MetricsVector -> TemporalSmoother -> emitted MetricsVector

The pipeline instance owns all mutable state (previous DetectionFrame and
the smoother's history). It is not safe to run two passes concurrently on
the same instance; the detection loop serializes them.
"""

import logging
import time
from typing import Optional

import numpy as np

from behavior_core import DetectionFrame, MetricsVector
from scoring import compute_behavior_metrics
from .detection_adapter import build_detection_frame
from .perception_models import PerceptionModels
from .temporal_smoother import DEFAULT_HISTORY_LENGTH, TemporalSmoother

logger = logging.getLogger(__name__)


class BehaviorPipeline:
    """
    Detection-to-metrics pipeline with owned smoothing state.

    Usage:
        pipeline = BehaviorPipeline(models)
        detection = await pipeline.process_frame(rgb_frame)
        print(pipeline.metrics.to_dict())
    """

    def __init__(
        self,
        models: PerceptionModels,
        history_length: int = DEFAULT_HISTORY_LENGTH
    ):
        self.models = models
        self.smoother = TemporalSmoother(history_length=history_length)
        self.previous_frame: Optional[DetectionFrame] = None
        self.dropped_frames = 0

    @classmethod
    def from_config(cls, config: dict) -> 'BehaviorPipeline':
        models = PerceptionModels(config.get('models', {}))
        history_length = config.get('pipeline', {}).get('history_length', DEFAULT_HISTORY_LENGTH)
        return cls(models, history_length=history_length)

    @property
    def metrics(self) -> MetricsVector:
        """Latest smoothed metrics snapshot."""
        return self.smoother.current

    async def detect(self, frame: np.ndarray, timestamp: Optional[float] = None) -> Optional[DetectionFrame]:
        """
        Run the models on one frame and adapt the results.

        Args:
            frame: RGB frame (H, W, 3)
            timestamp: Capture time in seconds (defaults to now)

        Returns:
            DetectionFrame, or None if the frame was dropped (models not
            ready, or a model call or result conversion failed)
        """
        if timestamp is None:
            timestamp = time.time()

        if not self.models.is_ready:
            logger.debug(f"Models not ready ({self.models.state.value}), skipping frame")
            return None

        try:
            raw = await self.models.detect(frame)
            if raw is None:
                return None
            height, width = frame.shape[:2]
            return build_detection_frame(raw, (width, height), timestamp)
        except Exception as e:
            self.dropped_frames += 1
            logger.warning(f"Detection failed, dropping frame: {e}")
            return None

    def update(self, detection: DetectionFrame) -> MetricsVector:
        """
        Compute, smooth and publish metrics for an adapted frame.

        The frame becomes the previous frame for the next update.

        Returns:
            Smoothed MetricsVector
        """
        raw_metrics = compute_behavior_metrics(detection, self.previous_frame)
        smoothed = self.smoother.update(raw_metrics)
        self.previous_frame = detection
        return smoothed

    async def process_frame(self, frame: np.ndarray, timestamp: Optional[float] = None) -> DetectionFrame:
        """
        One full pipeline pass.

        Dropped frames return an empty DetectionFrame and leave metrics and
        the previous frame untouched.
        """
        if timestamp is None:
            timestamp = time.time()

        detection = await self.detect(frame, timestamp)
        if detection is None:
            return DetectionFrame.empty(timestamp)

        self.update(detection)
        return detection

    def reset_metrics(self, clear_previous_frame: bool = False):
        """
        Clear metrics history and zero the emitted vector.

        Args:
            clear_previous_frame: Also forget the previous frame, so the next
                                  pass starts cold (no motion deltas)
        """
        self.smoother.reset()
        if clear_previous_frame:
            self.previous_frame = None
