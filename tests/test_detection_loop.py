"""
Tests for the cancellable detection loop.

Covers start / pause / resume / stop transitions, queued resets, missing
frames, discarding a model call that completes after stop, refusing to
resume while a halt is pending, and containment of per-iteration failures.
"""

import asyncio
import threading
import time
import pytest
import numpy as np
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from behavior_core import LoopState, ModelState, empty_metrics
from video_pipeline import BehaviorPipeline, DetectionLoop, PerceptionModels

from synthetic_detections import (
    FakeAnalyzer,
    default_fake_factories,
    fake_face_results,
    fake_factories,
    fake_pose_results,
    malformed_pose_results,
    unclassified_hand_results,
)


class StaticFrameSource:
    """Frame source returning the same frame, or None once exhausted."""

    def __init__(self, frames: int = -1):
        self.remaining = frames
        self.frame = np.zeros((48, 64, 3), dtype=np.uint8)

    def read(self):
        if self.remaining == 0:
            return None
        if self.remaining > 0:
            self.remaining -= 1
        return self.frame


class GatedAnalyzer(FakeAnalyzer):
    """Pose model whose detect() blocks until released."""

    def __init__(self, **kwargs):
        super().__init__(result=fake_pose_results(), **kwargs)
        self.started = threading.Event()
        self.release = threading.Event()

    def detect(self, frame):
        self.started.set()
        self.release.wait(timeout=5)
        return super().detect(frame)


async def wait_until(predicate, timeout: float = 5.0):
    deadline = time.monotonic() + timeout
    while not predicate():
        if time.monotonic() > deadline:
            raise AssertionError("Condition not reached in time")
        await asyncio.sleep(0.005)


async def loaded_pipeline(factories=None) -> BehaviorPipeline:
    models = PerceptionModels(factories=factories or default_fake_factories())
    await models.load()
    return BehaviorPipeline(models)


class TestDetectionLoop:
    """Test loop lifecycle and publication."""

    def test_runs_and_stops(self):
        published = []

        async def scenario():
            pipeline = await loaded_pipeline()
            loop = DetectionLoop(pipeline, StaticFrameSource(), target_fps=0,
                                 on_metrics=lambda m, d: published.append(m))

            loop.start()
            assert loop.is_running
            await wait_until(lambda: len(published) >= 3)
            await loop.stop()

            count = len(published)
            await asyncio.sleep(0.05)
            return loop, count

        loop, count = asyncio.run(scenario())

        assert loop.state == LoopState.STOPPED
        assert len(published) == count
        assert loop.stats()['iterations'] == count

    def test_start_after_failed_load(self):
        async def scenario():
            factories = fake_factories()

            def broken(**kwargs):
                raise RuntimeError("no weights")

            factories['pose'] = broken
            models = PerceptionModels(factories=factories)
            await models.load()
            loop = DetectionLoop(BehaviorPipeline(models), StaticFrameSource())

            assert models.state == ModelState.FAILED
            with pytest.raises(RuntimeError, match="no weights"):
                loop.start()
            return loop

        loop = asyncio.run(scenario())
        assert loop.state == LoopState.IDLE

    def test_double_start(self):
        async def scenario():
            pipeline = await loaded_pipeline()
            loop = DetectionLoop(pipeline, StaticFrameSource(), target_fps=100)
            loop.start()
            try:
                with pytest.raises(RuntimeError):
                    loop.start()
            finally:
                await loop.stop()

        asyncio.run(scenario())

    def test_pause_and_resume(self):
        published = []

        async def scenario():
            pipeline = await loaded_pipeline()
            loop = DetectionLoop(pipeline, StaticFrameSource(), target_fps=0,
                                 on_metrics=lambda m, d: published.append(m))
            loop.start()
            await wait_until(lambda: len(published) >= 2)

            await loop.pause()
            assert loop.state == LoopState.PAUSED
            paused_count = len(published)
            history_length = len(pipeline.smoother.history)
            await asyncio.sleep(0.05)
            assert len(published) == paused_count
            assert len(pipeline.smoother.history) == history_length
            assert pipeline.metrics != empty_metrics()

            loop.resume()
            await wait_until(lambda: len(published) > paused_count)
            await loop.stop()

        asyncio.run(scenario())

    def test_resume_requires_pause(self):
        async def scenario():
            pipeline = await loaded_pipeline()
            loop = DetectionLoop(pipeline, StaticFrameSource())
            with pytest.raises(RuntimeError):
                loop.resume()

        asyncio.run(scenario())

    def test_reset_when_idle_is_immediate(self):
        async def scenario():
            pipeline = await loaded_pipeline()
            await pipeline.process_frame(StaticFrameSource().read())
            loop = DetectionLoop(pipeline, StaticFrameSource())

            loop.request_reset()

            assert pipeline.smoother.history == []
            assert pipeline.metrics == empty_metrics()

        asyncio.run(scenario())

    def test_reset_while_running_is_queued(self):
        history_sizes = []

        async def scenario():
            pipeline = await loaded_pipeline()
            loop = DetectionLoop(
                pipeline, StaticFrameSource(), target_fps=0,
                on_metrics=lambda m, d: history_sizes.append(len(pipeline.smoother.history))
            )
            loop.start()
            await wait_until(lambda: len(history_sizes) >= 4)

            loop.request_reset()
            reset_at = len(history_sizes)
            await wait_until(lambda: len(history_sizes) >= reset_at + 2)
            await loop.stop()
            return reset_at

        reset_at = asyncio.run(scenario())

        assert history_sizes[:4] == [1, 2, 3, 4]
        # Applied at the start of the next iteration, never mid-iteration
        assert 1 in history_sizes[reset_at:reset_at + 2]

    def test_missing_frames_are_skipped(self):
        published = []

        async def scenario():
            pipeline = await loaded_pipeline()
            loop = DetectionLoop(pipeline, StaticFrameSource(frames=2), target_fps=0,
                                 on_metrics=lambda m, d: published.append(m))
            loop.start()
            await wait_until(lambda: loop.missing_frames >= 3)
            await loop.stop()
            return loop

        loop = asyncio.run(scenario())

        assert len(published) == 2
        assert loop.iterations == 2

    def test_model_errors_do_not_stop_loop(self):
        async def scenario():
            factories = default_fake_factories(errors={'face': RuntimeError("flaky")})
            pipeline = await loaded_pipeline(factories)
            loop = DetectionLoop(pipeline, StaticFrameSource(), target_fps=0)
            loop.start()
            await wait_until(lambda: loop.dropped_frames >= 3)
            await loop.stop()
            return loop, pipeline

        loop, pipeline = asyncio.run(scenario())

        assert loop.iterations == 0
        assert pipeline.dropped_frames >= 3
        assert pipeline.metrics == empty_metrics()

    def test_callback_errors_are_contained(self):
        calls = []

        def callback(metrics, detection):
            calls.append(metrics)
            raise ValueError("display gone")

        async def scenario():
            pipeline = await loaded_pipeline()
            loop = DetectionLoop(pipeline, StaticFrameSource(), target_fps=0, on_metrics=callback)
            loop.start()
            await wait_until(lambda: len(calls) >= 3)
            await loop.stop()

        asyncio.run(scenario())
        assert len(calls) >= 3

    def test_in_flight_result_discarded_after_stop(self):
        published = []
        gate = {}

        async def scenario():
            factories = default_fake_factories()

            def gated_pose(**kwargs):
                gate['pose'] = GatedAnalyzer(**kwargs)
                return gate['pose']

            factories['pose'] = gated_pose
            pipeline = await loaded_pipeline(factories)
            loop = DetectionLoop(pipeline, StaticFrameSource(), target_fps=0,
                                 on_metrics=lambda m, d: published.append(m))
            loop.start()
            await wait_until(lambda: gate['pose'].started.is_set())

            stop_task = asyncio.create_task(loop.stop())
            await asyncio.sleep(0.02)
            assert not stop_task.done()

            gate['pose'].release.set()
            await asyncio.wait_for(stop_task, timeout=5)
            return loop, pipeline

        loop, pipeline = asyncio.run(scenario())

        assert published == []
        assert loop.discarded_results == 1
        assert loop.iterations == 0
        assert pipeline.metrics == empty_metrics()
        assert pipeline.previous_frame is None

    def test_resume_while_pause_pending(self):
        """resume() must not start a second task while pause() waits on a model call."""
        published = []
        gate = {}

        async def scenario():
            factories = default_fake_factories()

            def gated_pose(**kwargs):
                gate['pose'] = GatedAnalyzer(**kwargs)
                return gate['pose']

            factories['pose'] = gated_pose
            pipeline = await loaded_pipeline(factories)
            loop = DetectionLoop(pipeline, StaticFrameSource(), target_fps=0,
                                 on_metrics=lambda m, d: published.append(m))
            loop.start()
            await wait_until(lambda: gate['pose'].started.is_set())

            pause_task = asyncio.create_task(loop.pause())
            await asyncio.sleep(0.02)
            assert not pause_task.done()

            with pytest.raises(RuntimeError, match="halting"):
                loop.resume()
            assert loop.state == LoopState.PAUSED

            gate['pose'].release.set()
            await asyncio.wait_for(pause_task, timeout=5)
            assert loop.state == LoopState.PAUSED
            assert loop.discarded_results == 1
            assert published == []

            resumed = loop.resume()
            await wait_until(lambda: len(published) >= 3)
            await asyncio.wait_for(loop.stop(), timeout=5)
            return loop, resumed

        loop, resumed = asyncio.run(scenario())

        assert resumed.done()
        assert loop.state == LoopState.STOPPED
        assert loop.iterations == len(published)

    def test_unconvertible_results_do_not_stop_loop(self):
        async def scenario():
            factories = fake_factories(
                pose=malformed_pose_results(),
                face=fake_face_results([(0.4, 0.4, 0.2, 0.2, 0.95)])
            )
            pipeline = await loaded_pipeline(factories)
            loop = DetectionLoop(pipeline, StaticFrameSource(), target_fps=0)
            task = loop.start()
            await wait_until(lambda: loop.dropped_frames >= 3)
            still_running = not task.done() and loop.is_running
            await loop.stop()
            return loop, still_running

        loop, still_running = asyncio.run(scenario())

        assert still_running
        assert loop.iterations == 0
        assert loop.stats()['dropped_frames'] >= 3

    def test_unclassified_hands_are_skipped(self):
        published = []

        async def scenario():
            factories = fake_factories(pose=fake_pose_results(), hands=unclassified_hand_results())
            pipeline = await loaded_pipeline(factories)
            loop = DetectionLoop(pipeline, StaticFrameSource(), target_fps=0,
                                 on_metrics=lambda m, d: published.append(d))
            loop.start()
            await wait_until(lambda: len(published) >= 3)
            await loop.stop()
            return loop

        loop = asyncio.run(scenario())

        assert all(detection.hands == [] for detection in published)
        assert loop.dropped_frames == 0

    def test_iteration_errors_are_contained(self):
        class BrokenFrameSource:
            def read(self):
                raise OSError("camera unplugged")

        async def scenario():
            pipeline = await loaded_pipeline()
            loop = DetectionLoop(pipeline, BrokenFrameSource(), target_fps=0)
            task = loop.start()
            await wait_until(lambda: loop.failed_iterations >= 3)
            still_running = not task.done() and loop.is_running
            await loop.stop()
            return loop, still_running

        loop, still_running = asyncio.run(scenario())

        assert still_running
        assert loop.stats()['failed_iterations'] >= 3

    def test_not_ready_frames_counted_separately(self):
        async def scenario():
            models = PerceptionModels(factories=default_fake_factories())
            pipeline = BehaviorPipeline(models)
            loop = DetectionLoop(pipeline, StaticFrameSource(), target_fps=0)
            loop.start()
            await wait_until(lambda: loop.not_ready_frames >= 3)
            await loop.stop()
            return loop

        loop = asyncio.run(scenario())

        stats = loop.stats()
        assert stats['not_ready_frames'] >= 3
        assert stats['dropped_frames'] == 0
        assert stats['iterations'] == 0

    def test_from_config(self):
        async def scenario():
            pipeline = await loaded_pipeline()
            return DetectionLoop.from_config(pipeline, StaticFrameSource(), {'loop': {'target_fps': 10}})

        loop = asyncio.run(scenario())
        assert loop.frame_interval == pytest.approx(0.1)
        assert loop.stats()['state'] == 'idle'


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
