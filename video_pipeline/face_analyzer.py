"""
Face model wrapper (MediaPipe Face Detection).

Engineering decisions:
- MediaPipe Face Detection (BlazeFace): relative bounding box plus 6
  keypoints in fixed order (right eye, left eye, nose tip, mouth center,
  right ear tragion, left ear tragion)
- Multiple faces are reported; downstream metrics only look at the first
- Raw results are returned untouched
"""

import logging
import warnings

import numpy as np

logger = logging.getLogger(__name__)

warnings.filterwarnings('ignore', category=UserWarning, module='google.protobuf')

try:
    import mediapipe as mp
    MEDIAPIPE_AVAILABLE = True
except ImportError:
    MEDIAPIPE_AVAILABLE = False
    logger.warning("MediaPipe not installed. Face detection unavailable.")


class FaceAnalyzer:
    """
    Face detector.

    Usage:
        analyzer = FaceAnalyzer()
        results = analyzer.detect(rgb_frame)
        detections = results.detections or []
    """

    def __init__(
        self,
        min_detection_confidence: float = 0.5,
        model_selection: int = 0
    ):
        """
        Initialize face detector.

        Args:
            min_detection_confidence: Minimum confidence for face detection
            model_selection: 0 for faces within ~2m of the camera,
                             1 for faces within ~5m
        """
        if not MEDIAPIPE_AVAILABLE:
            raise ImportError("MediaPipe not installed. Install with: pip install mediapipe")

        self.mp_face_detection = mp.solutions.face_detection
        self.face_detection = self.mp_face_detection.FaceDetection(
            model_selection=model_selection,
            min_detection_confidence=min_detection_confidence
        )

        logger.info(f"Face analyzer initialized (MediaPipe Face Detection, model={model_selection})")

    def detect(self, frame: np.ndarray):
        """
        Run face detection on an RGB frame (H, W, 3).

        Returns:
            MediaPipe results object (detections may be None)
        """
        return self.face_detection.process(frame)

    def close(self):
        """Release resources."""
        if self.face_detection is not None:
            self.face_detection.close()
            self.face_detection = None
