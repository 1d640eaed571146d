"""
Behavior metric groups.

Percentage fields are integers in [0, 100]. The hand activity flags and the
facial expression label are carried alongside and are never averaged.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict

from .enums import FacialExpression


@dataclass
class PostureMetrics:
    confidence: int = 0
    stability: int = 0
    alignment: int = 0
    slouching: int = 0


@dataclass
class AttentionMetrics:
    level: int = 0
    focus: int = 0
    engagement: int = 0
    distraction: int = 0


@dataclass
class HandActivityMetrics:
    left_hand_active: bool = False
    right_hand_active: bool = False
    gesture_intensity: int = 0
    hand_movement: int = 0


@dataclass
class FaceAnalysisMetrics:
    confidence: int = 0
    eye_contact: int = 0
    head_movement: int = 0
    facial_expression: FacialExpression = FacialExpression.NEUTRAL


@dataclass
class OverallMetrics:
    confidence: int = 0
    engagement: int = 0
    activity: int = 0
    stability: int = 0


# Serialized group names, in output order
GROUP_KEYS = {
    'posture': 'posture',
    'attention': 'attention',
    'hand_activity': 'handActivity',
    'face_analysis': 'faceAnalysis',
    'overall': 'overall',
}


def _camel(name: str) -> str:
    head, *rest = name.split('_')
    return head + ''.join(part.title() for part in rest)


@dataclass
class MetricsVector:
    """One frame's worth of behavior metrics (raw or smoothed)."""
    posture: PostureMetrics = field(default_factory=PostureMetrics)
    attention: AttentionMetrics = field(default_factory=AttentionMetrics)
    hand_activity: HandActivityMetrics = field(default_factory=HandActivityMetrics)
    face_analysis: FaceAnalysisMetrics = field(default_factory=FaceAnalysisMetrics)
    overall: OverallMetrics = field(default_factory=OverallMetrics)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """
        Render as nested camelCase dict.

        Example:
            {'handActivity': {'leftHandActive': False, ...}, ...}
        """
        result = {}
        for group_name, key in GROUP_KEYS.items():
            group = getattr(self, group_name)
            values = {}
            for f in fields(group):
                value = getattr(group, f.name)
                if isinstance(value, FacialExpression):
                    value = value.value
                values[_camel(f.name)] = value
            result[key] = values
        return result


def empty_metrics() -> MetricsVector:
    """All-zero / neutral baseline."""
    return MetricsVector()
