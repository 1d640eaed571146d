"""
Core types for the live behavior tracker.

- Detection data models (pose keypoints, faces, hands, per-frame container)
- Behavior metric groups and the per-frame metrics vector
- Shared enumerations
"""

from .data_models import (
    POSE_PARTS,
    NUM_HAND_LANDMARKS,
    Keypoint,
    PoseDetection,
    FaceDetection,
    HandLandmark,
    HandDetection,
    DetectionFrame,
)
from .metrics import (
    PostureMetrics,
    AttentionMetrics,
    HandActivityMetrics,
    FaceAnalysisMetrics,
    OverallMetrics,
    MetricsVector,
    empty_metrics,
)
from .enums import Handedness, FacialExpression, ModelState, LoopState

__all__ = [
    'POSE_PARTS',
    'NUM_HAND_LANDMARKS',
    'Keypoint',
    'PoseDetection',
    'FaceDetection',
    'HandLandmark',
    'HandDetection',
    'DetectionFrame',
    'PostureMetrics',
    'AttentionMetrics',
    'HandActivityMetrics',
    'FaceAnalysisMetrics',
    'OverallMetrics',
    'MetricsVector',
    'empty_metrics',
    'Handedness',
    'FacialExpression',
    'ModelState',
    'LoopState',
]
