"""
Detection loop driver.

Runs the behavior pipeline once per tick on an asyncio task:
1. Apply a queued metrics reset, if any
2. Read the current frame from the frame source
3. Run the models concurrently and adapt the results
4. Compute + smooth metrics and publish them to the callback
5. Schedule the next tick (sleep to the target frame interval)

Iterations never overlap and the next tick is scheduled only after the
current one finishes, so published vectors are strictly ordered.

Pause / stop cancel a pending tick. A model call already in flight is
allowed to finish; its result is discarded and no metrics update happens.
Only one loop task exists at a time: start() and resume() raise while a
pause or stop is still waiting for that call.
There is no timeout on model calls: a hung model stalls the loop.
"""

import asyncio
import contextlib
import logging
import time
from typing import Any, Callable, Dict, Optional

from behavior_core import DetectionFrame, LoopState, MetricsVector, ModelState
from .behavior_pipeline import BehaviorPipeline

logger = logging.getLogger(__name__)

MetricsCallback = Callable[[MetricsVector, DetectionFrame], None]


class DetectionLoop:
    """
    Cancellable, strictly sequential per-frame processing loop.

    Usage:
        loop = DetectionLoop(pipeline, frame_source, target_fps=30,
                             on_metrics=lambda metrics, frame: ...)
        loop.start()
        ...
        await loop.pause()
        loop.resume()
        await loop.stop()
    """

    def __init__(
        self,
        pipeline: BehaviorPipeline,
        frame_source: Any,
        target_fps: float = 30.0,
        on_metrics: Optional[MetricsCallback] = None
    ):
        """
        Args:
            pipeline: Pipeline owning detection and smoothing state
            frame_source: Object with read() -> RGB frame or None
            target_fps: Upper bound on iterations per second (<= 0 = no wait)
            on_metrics: Called with (smoothed metrics, detection) after each
                        completed iteration
        """
        self.pipeline = pipeline
        self.frame_source = frame_source
        self.frame_interval = 1.0 / target_fps if target_fps > 0 else 0.0
        self.on_metrics = on_metrics

        self.state = LoopState.IDLE
        self._task: Optional[asyncio.Task] = None
        self._in_flight = False
        self._reset_requested = False

        self.iterations = 0
        self.not_ready_frames = 0
        self.missing_frames = 0
        self.failed_iterations = 0
        self.discarded_results = 0
        self.last_latency_ms = 0.0

    @classmethod
    def from_config(
        cls,
        pipeline: BehaviorPipeline,
        frame_source: Any,
        config: dict,
        on_metrics: Optional[MetricsCallback] = None
    ) -> 'DetectionLoop':
        target_fps = config.get('loop', {}).get('target_fps', 30.0)
        return cls(pipeline, frame_source, target_fps=target_fps, on_metrics=on_metrics)

    @property
    def is_running(self) -> bool:
        return self.state == LoopState.RUNNING

    @property
    def dropped_frames(self) -> int:
        """Frames dropped because a model call or result conversion failed."""
        return self.pipeline.dropped_frames

    def start(self) -> asyncio.Task:
        """
        Start (or resume) the loop on the running event loop.

        Raises:
            RuntimeError: If the perception models failed to load, the loop
                          is already running, or a pause / stop is still
                          waiting for an in-flight model call
        """
        if self.pipeline.models.state == ModelState.FAILED:
            raise RuntimeError(
                f"Cannot start detection: models failed to load ({self.pipeline.models.error})"
            )
        if self.is_running:
            raise RuntimeError("Detection loop is already running")
        if self._task is not None and not self._task.done():
            raise RuntimeError("Detection loop is still halting, await pause() or stop() first")

        self.state = LoopState.RUNNING
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info("Detection loop started")
        return self._task

    def resume(self) -> asyncio.Task:
        if self.state != LoopState.PAUSED:
            raise RuntimeError(f"Cannot resume from state {self.state.value}")
        return self.start()

    async def pause(self):
        """Stop scheduling iterations, keeping metrics and history."""
        if self.is_running:
            await self._halt(LoopState.PAUSED)
            logger.info("Detection loop paused")

    async def stop(self):
        """Stop the loop; no metrics are published after this returns."""
        if self.state in (LoopState.RUNNING, LoopState.PAUSED):
            await self._halt(LoopState.STOPPED)
            logger.info("Detection loop stopped")

    def request_reset(self):
        """
        Reset metrics history.

        Applied immediately when the loop is not running, otherwise queued
        and applied between iterations.
        """
        if self.is_running:
            self._reset_requested = True
            logger.debug("Metrics reset queued")
        else:
            self.pipeline.reset_metrics()

    def stats(self) -> Dict[str, Any]:
        """Loop health counters."""
        return {
            'state': self.state.value,
            'iterations': self.iterations,
            'dropped_frames': self.dropped_frames,
            'not_ready_frames': self.not_ready_frames,
            'missing_frames': self.missing_frames,
            'failed_iterations': self.failed_iterations,
            'discarded_results': self.discarded_results,
            'last_latency_ms': self.last_latency_ms,
        }

    async def _halt(self, new_state: LoopState):
        self.state = new_state
        task = self._task
        if task is None:
            return

        # A pending tick is cancelled; an in-flight model call runs to completion.
        # The task reference is kept until it finishes so start() cannot overlap it.
        if not self._in_flight:
            task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        if self._task is task:
            self._task = None

    async def _run(self):
        while self.is_running:
            started = time.perf_counter()
            try:
                await self._iterate()
            except Exception as e:
                self.failed_iterations += 1
                logger.error(f"Detection iteration failed: {e}", exc_info=True)

            if not self.is_running:
                break

            self.last_latency_ms = (time.perf_counter() - started) * 1000
            delay = max(0.0, self.frame_interval - (time.perf_counter() - started))
            await asyncio.sleep(delay)

    async def _iterate(self):
        if self._reset_requested:
            self._reset_requested = False
            self.pipeline.reset_metrics()

        frame = self.frame_source.read()
        if frame is None:
            self.missing_frames += 1
            return

        self._in_flight = True
        try:
            detection = await self.pipeline.detect(frame)
        finally:
            self._in_flight = False

        if not self.is_running:
            self.discarded_results += 1
            logger.debug("Discarding detection that completed after stop")
            return

        if detection is None:
            # Failed model calls are counted by the pipeline
            if not self.pipeline.models.is_ready:
                self.not_ready_frames += 1
            return

        metrics = self.pipeline.update(detection)
        self.iterations += 1

        if self.on_metrics is not None:
            try:
                self.on_metrics(metrics, detection)
            except Exception as e:
                logger.error(f"Metrics callback failed: {e}")
