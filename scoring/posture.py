"""
Posture metrics from the body pose.

Metrics:
- confidence: overall pose score (0-100)
- alignment / slouching: deviation of the nose-to-hip-center line from
  vertical, doubled and clamped
- stability: 100 minus the mean keypoint displacement (pixels) since the
  previous frame; 50 when there is no previous pose

All values are rounded half up once, at the end.
"""

import logging
import math
from typing import Optional

from behavior_core import PoseDetection, PostureMetrics
from utils.geometry import distance, midpoint, round_half_up

logger = logging.getLogger(__name__)

DEFAULT_STABILITY = 50.0


def mean_keypoint_movement(
    current: PoseDetection,
    previous: PoseDetection,
    min_score: Optional[float] = None
) -> Optional[float]:
    """
    Mean displacement of keypoints matched by part name.

    Args:
        current: Current pose
        previous: Previous pose
        min_score: If set, only keypoints scoring above it in both frames count

    Returns:
        Mean displacement in pixels, or None if no keypoint matched
    """
    total = 0.0
    matched = 0

    for keypoint in current.keypoints:
        prev_keypoint = previous.get(keypoint.part)
        if prev_keypoint is None:
            continue
        if min_score is not None and (keypoint.score <= min_score or prev_keypoint.score <= min_score):
            continue
        total += distance(keypoint.position, prev_keypoint.position)
        matched += 1

    if matched == 0:
        return None
    return total / matched


def compute_posture_metrics(
    pose: Optional[PoseDetection],
    previous_pose: Optional[PoseDetection] = None
) -> PostureMetrics:
    """
    Compute posture metrics for one frame.

    Args:
        pose: Current pose (None if not detected)
        previous_pose: Pose from the previous processed frame

    Returns:
        PostureMetrics
    """
    if pose is None or not pose.keypoints:
        return PostureMetrics()

    confidence = pose.score * 100

    nose = pose.get('nose')
    left_hip = pose.get('leftHip')
    right_hip = pose.get('rightHip')

    alignment = 0.0
    slouching = 0.0

    if nose and left_hip and right_hip:
        hip_center = midpoint(left_hip.position, right_hip.position)
        spine_angle = math.atan2(nose.y - hip_center[1], abs(nose.x - hip_center[0]))
        deviation_deg = math.degrees(abs(spine_angle - math.pi / 2))

        alignment = max(0.0, 100 - deviation_deg * 2)
        slouching = min(100.0, deviation_deg * 2)

    stability = DEFAULT_STABILITY
    if previous_pose is not None:
        movement = mean_keypoint_movement(pose, previous_pose)
        if movement is not None:
            stability = max(0.0, 100 - movement)

    return PostureMetrics(
        confidence=round_half_up(confidence),
        stability=round_half_up(stability),
        alignment=round_half_up(alignment),
        slouching=round_half_up(slouching),
    )
