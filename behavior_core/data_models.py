"""
Detection data models.

A DetectionFrame is the normalized result of running the pose, face and hand
models on one video frame. Frames are snapshots: faces and hands carry no
identity across frames, so any cross-frame comparison is positional
(first face, first hand of a handedness, keypoint of the same name).
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .enums import Handedness


# PoseNet-style part names, in model order
POSE_PARTS = (
    'nose',
    'leftEye',
    'rightEye',
    'leftEar',
    'rightEar',
    'leftShoulder',
    'rightShoulder',
    'leftElbow',
    'rightElbow',
    'leftWrist',
    'rightWrist',
    'leftHip',
    'rightHip',
    'leftKnee',
    'rightKnee',
    'leftAnkle',
    'rightAnkle',
)

NUM_HAND_LANDMARKS = 21


@dataclass
class Keypoint:
    """
    Named 2D body keypoint.

    Attributes:
        part: Part name (see POSE_PARTS)
        x: Horizontal position (pixels)
        y: Vertical position (pixels)
        score: Detection confidence (0-1)
    """
    part: str
    x: float
    y: float
    score: float

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass
class PoseDetection:
    """Single-person pose: named keypoints plus an overall score."""
    keypoints: List[Keypoint]
    score: float

    def get(self, part: str) -> Optional[Keypoint]:
        """Return the first keypoint with the given part name, if any."""
        for keypoint in self.keypoints:
            if keypoint.part == part:
                return keypoint
        return None


@dataclass
class FaceDetection:
    """
    Detected face.

    Attributes:
        x_min, y_min, x_max, y_max: Bounding box as fractions of frame size
        score: Detection confidence (0-1)
        landmarks: Optional ordered (x, y) landmark points
    """
    x_min: float
    y_min: float
    x_max: float
    y_max: float
    score: float
    landmarks: Optional[List[Tuple[float, float]]] = None

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.x_min + self.x_max) / 2, (self.y_min + self.y_max) / 2)

    @property
    def area(self) -> float:
        return (self.x_max - self.x_min) * (self.y_max - self.y_min)


@dataclass
class HandLandmark:
    """Hand landmark; z is passed through but unused by the metrics."""
    x: float
    y: float
    z: Optional[float] = None


@dataclass
class HandDetection:
    """Detected hand with its 21 ordered landmarks."""
    landmarks: List[HandLandmark]
    score: float
    handedness: Handedness


@dataclass
class DetectionFrame:
    """
    Normalized detections for one processed video frame.

    Attributes:
        pose: Single-person pose or None
        faces: Detected faces (possibly empty)
        hands: Detected hands (possibly empty)
        timestamp: Capture time in seconds
    """
    pose: Optional[PoseDetection] = None
    faces: List[FaceDetection] = field(default_factory=list)
    hands: List[HandDetection] = field(default_factory=list)
    timestamp: float = 0.0

    @classmethod
    def empty(cls, timestamp: float = 0.0) -> 'DetectionFrame':
        return cls(pose=None, faces=[], hands=[], timestamp=timestamp)

    @property
    def is_empty(self) -> bool:
        return self.pose is None and not self.faces and not self.hands
