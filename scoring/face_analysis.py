"""
Face analysis metrics: confidence, eye contact, head movement, expression.

Mirrors the attention calculator: a face-based and a pose-based estimate,
averaged when both exist. The expression label only comes from the face
branch.

Expression heuristic:
    Face landmarks 3 and 4 are read as the mouth corners and landmark 5 as
    the mouth-center proxy. These positions are an opaque contract with the
    upstream face model's 6-point landmark ordering and are not validated.
    mouth_height / mouth_width > 0.3 -> surprised, > 0.1 -> happy.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from behavior_core import FaceAnalysisMetrics, FaceDetection, FacialExpression, PoseDetection
from utils.geometry import distance, midpoint, round_half_up

logger = logging.getLogger(__name__)

VISIBLE_SCORE_THRESHOLD = 0.3

MOUTH_LEFT_INDEX = 3
MOUTH_RIGHT_INDEX = 4
MOUTH_CENTER_INDEX = 5
MIN_EXPRESSION_LANDMARKS = 6

SURPRISED_RATIO = 0.3
HAPPY_RATIO = 0.1


def classify_expression(landmarks: Optional[Sequence[Tuple[float, float]]]) -> FacialExpression:
    """
    Classify the expression from mouth landmark geometry.

    Args:
        landmarks: Ordered face landmarks (at least 6 needed)

    Returns:
        FacialExpression (NEUTRAL when landmarks are missing)
    """
    if not landmarks or len(landmarks) < MIN_EXPRESSION_LANDMARKS:
        return FacialExpression.NEUTRAL

    mouth_left = landmarks[MOUTH_LEFT_INDEX]
    mouth_right = landmarks[MOUTH_RIGHT_INDEX]
    mouth_center = landmarks[MOUTH_CENTER_INDEX]

    mouth_width = distance(mouth_right, mouth_left)
    mouth_height = abs(mouth_center[1] - (mouth_left[1] + mouth_right[1]) / 2)

    if mouth_height > mouth_width * SURPRISED_RATIO:
        return FacialExpression.SURPRISED
    if mouth_height > mouth_width * HAPPY_RATIO:
        return FacialExpression.HAPPY
    return FacialExpression.NEUTRAL


def _face_estimate(face: FaceDetection, previous_faces: Optional[List[FaceDetection]]):
    confidence = round_half_up(face.score * 100)
    center = face.center
    eye_contact = max(0.0, 100 - abs(center[0] - 0.5) * 200)

    head_movement = 0.0
    if previous_faces:
        head_movement = min(100.0, distance(center, previous_faces[0].center) * 100)

    return confidence, eye_contact, head_movement


def _pose_estimate(pose: PoseDetection, previous_pose: Optional[PoseDetection]):
    nose = pose.get('nose')
    left_eye = pose.get('leftEye')
    right_eye = pose.get('rightEye')

    visible = [kp for kp in (nose, left_eye, right_eye)
               if kp is not None and kp.score > VISIBLE_SCORE_THRESHOLD]
    confidence = round_half_up(len(visible) / 3 * 100)

    eye_contact = 0.0
    if nose and left_eye and right_eye:
        eye_center = midpoint(left_eye.position, right_eye.position)
        eye_contact = max(0.0, 100 - distance(nose.position, eye_center) * 5)

    head_movement = 0.0
    if previous_pose is not None and nose is not None:
        previous_nose = previous_pose.get('nose')
        if previous_nose is not None:
            head_movement = min(100.0, distance(nose.position, previous_nose.position) * 10)

    return confidence, eye_contact, head_movement


def compute_face_analysis_metrics(
    faces: List[FaceDetection],
    previous_faces: Optional[List[FaceDetection]] = None,
    pose: Optional[PoseDetection] = None,
    previous_pose: Optional[PoseDetection] = None
) -> FaceAnalysisMetrics:
    """
    Compute face analysis metrics for one frame.

    Args:
        faces: Current faces (only the first is used)
        previous_faces: Faces from the previous frame
        pose: Current pose
        previous_pose: Pose from the previous frame

    Returns:
        FaceAnalysisMetrics
    """
    has_face = len(faces) > 0
    has_pose = pose is not None and len(pose.keypoints) > 0

    if not has_face and not has_pose:
        return FaceAnalysisMetrics()

    estimates = []
    expression = FacialExpression.NEUTRAL

    if has_face:
        estimates.append(_face_estimate(faces[0], previous_faces))
        expression = classify_expression(faces[0].landmarks)
    if has_pose:
        estimates.append(_pose_estimate(pose, previous_pose))

    confidence, eye_contact, head_movement = (
        round_half_up(sum(values) / len(values)) for values in zip(*estimates)
    )

    return FaceAnalysisMetrics(
        confidence=confidence,
        eye_contact=eye_contact,
        head_movement=head_movement,
        facial_expression=expression,
    )
