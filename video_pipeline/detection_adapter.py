"""
Detection adapter: MediaPipe results -> DetectionFrame.

Pure field / unit renaming, no filtering or smoothing:
- Pose: the 17 PoseNet-style keypoints, normalized coordinates scaled to
  pixels; keypoint score = landmark visibility; pose score = mean keypoint
  visibility (MediaPipe Pose reports no overall score)
- Faces: relative bounding box -> (x_min, y_min, x_max, y_max) fractions;
  relative keypoints -> normalized (x, y) landmarks; score = detection score
- Hands: normalized (x, y, z) landmarks; handedness label and score from
  the hand's top classification

If the models are not loaded (no raw results) the frame is empty.
"""

import logging
import time
from typing import List, Optional, Tuple

import numpy as np

from behavior_core import (
    DetectionFrame,
    FaceDetection,
    HandDetection,
    HandLandmark,
    Handedness,
    Keypoint,
    PoseDetection,
)
from .perception_models import RawDetections
from .pose_analyzer import POSE_LANDMARK_INDICES

logger = logging.getLogger(__name__)


def adapt_pose(results, frame_size: Tuple[int, int]) -> Optional[PoseDetection]:
    """
    Convert MediaPipe Pose results.

    Args:
        results: MediaPipe Pose results (pose_landmarks may be None)
        frame_size: (width, height) in pixels

    Returns:
        PoseDetection or None if no person was found
    """
    if results is None or not getattr(results, 'pose_landmarks', None):
        return None

    width, height = frame_size
    landmarks = results.pose_landmarks.landmark

    keypoints = []
    for part, idx in POSE_LANDMARK_INDICES.items():
        if idx >= len(landmarks):
            continue
        lm = landmarks[idx]
        keypoints.append(Keypoint(
            part=part,
            x=float(lm.x * width),
            y=float(lm.y * height),
            score=float(lm.visibility)
        ))

    score = float(np.mean([kp.score for kp in keypoints])) if keypoints else 0.0
    return PoseDetection(keypoints=keypoints, score=score)


def adapt_faces(results) -> List[FaceDetection]:
    """Convert MediaPipe Face Detection results (model order preserved)."""
    detections = getattr(results, 'detections', None) if results is not None else None
    if not detections:
        return []

    faces = []
    for detection in detections:
        location = detection.location_data
        box = location.relative_bounding_box
        landmarks = [(float(kp.x), float(kp.y)) for kp in location.relative_keypoints]
        faces.append(FaceDetection(
            x_min=float(box.xmin),
            y_min=float(box.ymin),
            x_max=float(box.xmin + box.width),
            y_max=float(box.ymin + box.height),
            score=float(detection.score[0]) if len(detection.score) else 0.0,
            landmarks=landmarks or None
        ))
    return faces


def adapt_hands(results) -> List[HandDetection]:
    """Convert MediaPipe Hands results (model order preserved)."""
    if results is None:
        return []
    hand_landmarks = getattr(results, 'multi_hand_landmarks', None)
    handedness = getattr(results, 'multi_handedness', None)
    if not hand_landmarks or not handedness:
        return []

    hands = []
    for landmarks, classification_list in zip(hand_landmarks, handedness):
        if not classification_list.classification:
            logger.debug("Skipping hand without handedness classification")
            continue
        top = classification_list.classification[0]
        try:
            label = Handedness(top.label)
        except ValueError:
            logger.debug(f"Skipping hand with unknown handedness label: {top.label}")
            continue
        hands.append(HandDetection(
            landmarks=[HandLandmark(x=float(lm.x), y=float(lm.y), z=float(lm.z))
                       for lm in landmarks.landmark],
            score=float(top.score),
            handedness=label
        ))
    return hands


def build_detection_frame(
    raw: Optional[RawDetections],
    frame_size: Tuple[int, int],
    timestamp: Optional[float] = None
) -> DetectionFrame:
    """
    Assemble a DetectionFrame from one frame's raw model outputs.

    Args:
        raw: Raw outputs, or None if the models are not loaded
        frame_size: (width, height) of the analyzed frame in pixels
        timestamp: Capture time in seconds (defaults to now)

    Returns:
        DetectionFrame (empty when raw is None)
    """
    if timestamp is None:
        timestamp = time.time()

    if raw is None:
        return DetectionFrame.empty(timestamp)

    return DetectionFrame(
        pose=adapt_pose(raw.pose, frame_size),
        faces=adapt_faces(raw.face),
        hands=adapt_hands(raw.hands),
        timestamp=timestamp
    )
