"""
Per-frame behavior metrics: runs the four calculators and the aggregator.
"""

import logging
from typing import Optional

from behavior_core import DetectionFrame, MetricsVector, empty_metrics
from .attention import compute_attention_metrics
from .face_analysis import compute_face_analysis_metrics
from .hand_activity import compute_hand_activity_metrics
from .overall import compute_overall_metrics
from .posture import compute_posture_metrics

logger = logging.getLogger(__name__)


def compute_behavior_metrics(
    current: DetectionFrame,
    previous: Optional[DetectionFrame] = None
) -> MetricsVector:
    """
    Compute the raw (unsmoothed) metrics vector for one frame.

    A frame with no detections at all yields the all-zero baseline, including
    the overall group.

    Args:
        current: Detections for this frame
        previous: Detections for the previously processed frame

    Returns:
        MetricsVector
    """
    if current.is_empty:
        logger.debug("No detections in frame, returning baseline metrics")
        return empty_metrics()

    previous_pose = previous.pose if previous is not None else None
    previous_faces = previous.faces if previous is not None else None
    previous_hands = previous.hands if previous is not None else None

    posture = compute_posture_metrics(current.pose, previous_pose)
    attention = compute_attention_metrics(current.faces, previous_faces, current.pose, previous_pose)
    hand_activity = compute_hand_activity_metrics(current.hands, previous_hands)
    face_analysis = compute_face_analysis_metrics(current.faces, previous_faces, current.pose, previous_pose)
    overall = compute_overall_metrics(posture, attention, hand_activity, face_analysis)

    return MetricsVector(
        posture=posture,
        attention=attention,
        hand_activity=hand_activity,
        face_analysis=face_analysis,
        overall=overall,
    )
