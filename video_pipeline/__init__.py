"""
Live video pipeline for behavior metrics.

This package turns video frames into smoothed behavior metrics:
1. Perception models (MediaPipe pose, face detection, hands)
2. Detection adapter (raw model results -> DetectionFrame)
3. Temporal smoothing (recency-weighted moving average of metric vectors)
4. Pipeline + loop driver (concurrent inference, sequential iterations)

Engineering rationale:
- Single-frame landmarks are noisy and detections flicker -> smooth metrics
- The three models are independent -> run them concurrently per frame
- Iterations must not overlap -> one owned state instance, one loop task
"""

from .pose_analyzer import PoseAnalyzer, POSE_LANDMARK_INDICES
from .face_analyzer import FaceAnalyzer
from .hand_analyzer import HandAnalyzer
from .perception_models import PerceptionModels, RawDetections
from .detection_adapter import (
    adapt_pose,
    adapt_faces,
    adapt_hands,
    build_detection_frame,
)
from .temporal_smoother import TemporalSmoother
from .behavior_pipeline import BehaviorPipeline
from .detection_loop import DetectionLoop

__all__ = [
    'PoseAnalyzer',
    'POSE_LANDMARK_INDICES',
    'FaceAnalyzer',
    'HandAnalyzer',
    'PerceptionModels',
    'RawDetections',
    'adapt_pose',
    'adapt_faces',
    'adapt_hands',
    'build_detection_frame',
    'TemporalSmoother',
    'BehaviorPipeline',
    'DetectionLoop',
]
