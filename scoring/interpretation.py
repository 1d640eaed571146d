"""
Display-oriented interpretation of detections and metrics.

Score bands:
- high:   > 70
- medium: > 40
- low:    otherwise

Alerts:
- slouching:  posture.slouching > 50
- distracted: attention.distraction > 50
"""

from typing import Dict, List, Optional, Union

from behavior_core import DetectionFrame, MetricsVector
from utils.geometry import round_half_up

HIGH_BAND_THRESHOLD = 70
MEDIUM_BAND_THRESHOLD = 40
ALERT_THRESHOLD = 50


def confidence_band(value: float) -> str:
    """Map a 0-100 score to 'high', 'medium' or 'low'."""
    if value > HIGH_BAND_THRESHOLD:
        return 'high'
    if value > MEDIUM_BAND_THRESHOLD:
        return 'medium'
    return 'low'


def behavior_alerts(metrics: MetricsVector) -> List[str]:
    alerts = []
    if metrics.posture.slouching > ALERT_THRESHOLD:
        alerts.append('slouching')
    if metrics.attention.distraction > ALERT_THRESHOLD:
        alerts.append('distracted')
    return alerts


def detection_status(frame: DetectionFrame) -> Dict[str, Union[bool, int, Optional[int]]]:
    """
    Summarize what the models found in a frame.

    Returns:
        Dict with pose_detected, face_count, hand_count, and the first
        face / hand score as a rounded percentage (None when absent)
    """
    return {
        'pose_detected': frame.pose is not None,
        'face_count': len(frame.faces),
        'hand_count': len(frame.hands),
        'face_confidence': round_half_up(frame.faces[0].score * 100) if frame.faces else None,
        'hand_confidence': round_half_up(frame.hands[0].score * 100) if frame.hands else None,
    }
