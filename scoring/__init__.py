"""
Behavioral scoring module.

This package maps detections to interpretable per-frame behavior metrics:
1. Posture (confidence, stability, alignment, slouching)
2. Attention (level, focus, engagement, distraction)
3. Hand activity (active flags, gesture intensity, hand movement)
4. Face analysis (confidence, eye contact, head movement, expression)
5. Overall summary of the four groups

All scores are:
- Heuristic (geometric formulas over landmark positions, not learned)
- Deterministic (pure functions of the current and previous frame)
- Bounded (0-100 integers)
"""

from .posture import compute_posture_metrics
from .attention import compute_attention_metrics
from .hand_activity import compute_hand_activity_metrics
from .face_analysis import compute_face_analysis_metrics, classify_expression
from .overall import compute_overall_metrics
from .behavior_metrics import compute_behavior_metrics
from .interpretation import confidence_band, behavior_alerts, detection_status

__all__ = [
    'compute_posture_metrics',
    'compute_attention_metrics',
    'compute_hand_activity_metrics',
    'compute_face_analysis_metrics',
    'classify_expression',
    'compute_overall_metrics',
    'compute_behavior_metrics',
    'confidence_band',
    'behavior_alerts',
    'detection_status',
]
