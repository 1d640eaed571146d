"""Overall summary metrics, a pure function of the four metric groups."""

from behavior_core import (
    AttentionMetrics,
    FaceAnalysisMetrics,
    HandActivityMetrics,
    OverallMetrics,
    PostureMetrics,
)
from utils.geometry import round_half_up


def compute_overall_metrics(
    posture: PostureMetrics,
    attention: AttentionMetrics,
    hand_activity: HandActivityMetrics,
    face_analysis: FaceAnalysisMetrics
) -> OverallMetrics:
    """
    Combine the per-domain groups.

    Formula:
        confidence = (posture.confidence + face.confidence) / 2
        engagement = (attention.engagement + hands.gesture_intensity) / 2
        activity   = (hands.hand_movement + attention.level) / 2
        stability  = (posture.stability + (100 - attention.distraction)) / 2
    """
    return OverallMetrics(
        confidence=round_half_up((posture.confidence + face_analysis.confidence) / 2),
        engagement=round_half_up((attention.engagement + hand_activity.gesture_intensity) / 2),
        activity=round_half_up((hand_activity.hand_movement + attention.level) / 2),
        stability=round_half_up((posture.stability + (100 - attention.distraction)) / 2),
    )
