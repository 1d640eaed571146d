"""
Attention metrics from face and pose detections.

Two independent estimates are computed and combined:
1. Face-based: size and centering of the first face box, face-center drift
2. Pose-based: keypoint visibility, nose-to-eye-center offset, keypoint motion

When both sources are present each field is the plain average of the two;
otherwise the available source is used as-is.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from behavior_core import AttentionMetrics, FaceDetection, PoseDetection
from utils.geometry import distance, midpoint, round_half_up
from .posture import mean_keypoint_movement

logger = logging.getLogger(__name__)

VISIBLE_SCORE_THRESHOLD = 0.3
FRAME_CENTER = (0.5, 0.5)


@dataclass
class _Estimate:
    level: float
    focus: float
    engagement: float
    distraction: float


def pose_stability(current: PoseDetection, previous: PoseDetection) -> float:
    """Keypoint stability over visible keypoints (50 when none qualify)."""
    movement = mean_keypoint_movement(current, previous, min_score=VISIBLE_SCORE_THRESHOLD)
    if movement is None:
        return 50.0
    return max(0.0, 100 - movement * 2)


def pose_movement(current: PoseDetection, previous: PoseDetection) -> float:
    """Mean displacement of visible keypoints (0 when none qualify)."""
    movement = mean_keypoint_movement(current, previous, min_score=VISIBLE_SCORE_THRESHOLD)
    return movement if movement is not None else 0.0


def _face_estimate(
    face: FaceDetection,
    previous_faces: Optional[List[FaceDetection]]
) -> _Estimate:
    size_score = min(100.0, face.area * 1000)
    position_score = max(0.0, 100 - distance(face.center, FRAME_CENTER) * 200)

    level = round_half_up((size_score + position_score) / 2)
    focus = round_half_up(level * 0.9)
    engagement = round_half_up(level * 0.8)

    distraction = 0.0
    if previous_faces:
        drift = distance(face.center, previous_faces[0].center)
        distraction = min(100.0, drift * 100)

    return _Estimate(level, focus, engagement, distraction)


def _pose_estimate(
    pose: PoseDetection,
    previous_pose: Optional[PoseDetection]
) -> _Estimate:
    keypoints = pose.keypoints
    visible = sum(1 for kp in keypoints if kp.score > VISIBLE_SCORE_THRESHOLD)
    visibility_score = visible / len(keypoints) * 100

    nose = pose.get('nose')
    left_eye = pose.get('leftEye')
    right_eye = pose.get('rightEye')

    focus = 0.0
    if nose and left_eye and right_eye:
        eye_center = midpoint(left_eye.position, right_eye.position)
        focus = max(0.0, 100 - distance(nose.position, eye_center) * 2)

    engagement = visibility_score * 0.7
    distraction = 0.0
    if previous_pose is not None:
        engagement += pose_stability(pose, previous_pose) * 0.3
        distraction = min(100.0, pose_movement(pose, previous_pose) * 10)

    return _Estimate(visibility_score, focus, engagement, distraction)


def compute_attention_metrics(
    faces: List[FaceDetection],
    previous_faces: Optional[List[FaceDetection]] = None,
    pose: Optional[PoseDetection] = None,
    previous_pose: Optional[PoseDetection] = None
) -> AttentionMetrics:
    """
    Compute attention metrics for one frame.

    Args:
        faces: Current faces (only the first is used)
        previous_faces: Faces from the previous frame
        pose: Current pose
        previous_pose: Pose from the previous frame

    Returns:
        AttentionMetrics
    """
    has_face = len(faces) > 0
    has_pose = pose is not None and len(pose.keypoints) > 0

    if not has_face and not has_pose:
        return AttentionMetrics()

    estimates = []
    if has_face:
        estimates.append(_face_estimate(faces[0], previous_faces))
    if has_pose:
        estimates.append(_pose_estimate(pose, previous_pose))

    def combine(name: str) -> int:
        values = [getattr(e, name) for e in estimates]
        return round_half_up(sum(values) / len(values))

    return AttentionMetrics(
        level=combine('level'),
        focus=combine('focus'),
        engagement=combine('engagement'),
        distraction=combine('distraction'),
    )
