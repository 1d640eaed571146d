"""
The set of three perception models (pose, face, hands).

Engineering decisions:
- Models load concurrently in worker threads (MediaPipe graph construction
  blocks), driven from asyncio
- A failed load is terminal: state goes to FAILED and detection stays a no-op
- Per-frame inference also runs the three models concurrently; the call
  returns only once all three have finished, so a model is never invoked
  again while a previous call on it is still running
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

import numpy as np

from behavior_core import ModelState
from .face_analyzer import FaceAnalyzer
from .hand_analyzer import HandAnalyzer
from .pose_analyzer import PoseAnalyzer

logger = logging.getLogger(__name__)

MODEL_NAMES = ('pose', 'face', 'hands')

DEFAULT_FACTORIES: Dict[str, Callable[..., Any]] = {
    'pose': PoseAnalyzer,
    'face': FaceAnalyzer,
    'hands': HandAnalyzer,
}


@dataclass
class RawDetections:
    """Untouched model outputs for one frame."""
    pose: Any
    face: Any
    hands: Any


class PerceptionModels:
    """
    Loads and runs the pose, face and hand models.

    Usage:
        models = PerceptionModels(config['models'])
        await models.load()
        raw = await models.detect(rgb_frame)  # None until loaded
    """

    def __init__(
        self,
        config: Optional[Dict[str, Dict[str, Any]]] = None,
        factories: Optional[Dict[str, Callable[..., Any]]] = None
    ):
        """
        Args:
            config: Per-model keyword arguments keyed by 'pose', 'face', 'hands'
            factories: Callables building each model (defaults to the
                       MediaPipe analyzers); each product needs detect(frame)
                       and close()
        """
        self.config = config or {}
        self.factories = dict(DEFAULT_FACTORIES)
        if factories:
            self.factories.update(factories)

        self.state = ModelState.NOT_LOADED
        self.error: Optional[str] = None
        self._analyzers: Dict[str, Any] = {}

    @property
    def is_ready(self) -> bool:
        return self.state == ModelState.READY

    async def load(self) -> ModelState:
        """
        Load all three models concurrently.

        Loading happens once; later calls return the current state.

        Returns:
            READY on success, FAILED if any model failed to initialize
        """
        if self.state != ModelState.NOT_LOADED:
            return self.state

        self.state = ModelState.LOADING
        logger.info("Loading perception models...")

        results = await asyncio.gather(
            *(asyncio.to_thread(self.factories[name], **self.config.get(name, {}))
              for name in MODEL_NAMES),
            return_exceptions=True
        )

        failures = {
            name: result for name, result in zip(MODEL_NAMES, results)
            if isinstance(result, BaseException)
        }

        if failures:
            for result in results:
                if not isinstance(result, BaseException):
                    result.close()
            self.error = "; ".join(f"{name}: {exc}" for name, exc in failures.items())
            self.state = ModelState.FAILED
            logger.error(f"Failed to initialize perception models: {self.error}")
            return self.state

        self._analyzers = dict(zip(MODEL_NAMES, results))
        self.state = ModelState.READY
        logger.info("Perception models loaded")
        return self.state

    async def detect(self, frame: np.ndarray) -> Optional[RawDetections]:
        """
        Run all three models on one RGB frame.

        Returns:
            RawDetections, or None if the models are not ready

        Raises:
            Exception: The first exception raised by any model, after all
                       three calls have finished
        """
        if not self.is_ready:
            return None

        results = await asyncio.gather(
            *(asyncio.to_thread(self._analyzers[name].detect, frame) for name in MODEL_NAMES),
            return_exceptions=True
        )

        for result in results:
            if isinstance(result, BaseException):
                raise result

        pose, face, hands = results
        return RawDetections(pose=pose, face=face, hands=hands)

    def close(self):
        """Release all loaded models."""
        for name, analyzer in self._analyzers.items():
            analyzer.close()
            logger.debug(f"Closed {name} model")
        self._analyzers = {}
        if self.state == ModelState.READY:
            self.state = ModelState.NOT_LOADED
