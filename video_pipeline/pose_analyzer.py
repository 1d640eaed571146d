"""
Body pose model wrapper (MediaPipe Pose).

Engineering decisions:
- MediaPipe Pose: 33 landmarks, efficient on CPU
- Only the 17 PoseNet-style keypoints are kept (see POSE_LANDMARK_INDICES)
- Raw results are returned untouched; unit conversion happens in the
  detection adapter
- No temporal state here: cross-frame deltas belong to the metric calculators
"""

import logging
import warnings

import numpy as np

logger = logging.getLogger(__name__)

# Suppress MediaPipe warnings
warnings.filterwarnings('ignore', category=UserWarning, module='google.protobuf')

try:
    import mediapipe as mp
    MEDIAPIPE_AVAILABLE = True
except ImportError:
    MEDIAPIPE_AVAILABLE = False
    logger.warning("MediaPipe not installed. Pose detection unavailable.")


# PoseNet part name -> MediaPipe Pose landmark index
# See: https://google.github.io/mediapipe/solutions/pose.html
POSE_LANDMARK_INDICES = {
    'nose': 0,
    'leftEye': 2,
    'rightEye': 5,
    'leftEar': 7,
    'rightEar': 8,
    'leftShoulder': 11,
    'rightShoulder': 12,
    'leftElbow': 13,
    'rightElbow': 14,
    'leftWrist': 15,
    'rightWrist': 16,
    'leftHip': 23,
    'rightHip': 24,
    'leftKnee': 25,
    'rightKnee': 26,
    'leftAnkle': 27,
    'rightAnkle': 28,
}


class PoseAnalyzer:
    """
    Single-person pose detector.

    Usage:
        analyzer = PoseAnalyzer()
        results = analyzer.detect(rgb_frame)
        landmarks = results.pose_landmarks  # None if no person
    """

    def __init__(
        self,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
        model_complexity: int = 1,
        static_image_mode: bool = False
    ):
        """
        Initialize pose detector.

        Args:
            min_detection_confidence: Minimum confidence for pose detection
            min_tracking_confidence: Minimum confidence for landmark tracking
            model_complexity: Model complexity (0=lite, 1=full, 2=heavy)
            static_image_mode: If True, treat each frame independently
        """
        if not MEDIAPIPE_AVAILABLE:
            raise ImportError("MediaPipe not installed. Install with: pip install mediapipe")

        self.mp_pose = mp.solutions.pose
        self.pose = self.mp_pose.Pose(
            static_image_mode=static_image_mode,
            model_complexity=model_complexity,
            smooth_landmarks=False,  # Temporal smoothing happens on the metrics
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence
        )

        logger.info(f"Pose analyzer initialized (MediaPipe Pose, complexity={model_complexity})")

    def detect(self, frame: np.ndarray):
        """
        Run pose detection on an RGB frame (H, W, 3).

        Returns:
            MediaPipe results object (pose_landmarks may be None)
        """
        return self.pose.process(frame)

    def close(self):
        """Release resources."""
        if self.pose is not None:
            self.pose.close()
            self.pose = None
