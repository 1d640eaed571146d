"""
Hand model wrapper (MediaPipe Hands).

Each detected hand has 21 normalized landmarks (x, y, z) and a handedness
classification ('Left' / 'Right' with a score). MediaPipe assumes a
mirrored (selfie) image when labelling handedness; the label is passed
through as reported.
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
    logger.warning("MediaPipe not installed. Hand detection unavailable.")


class HandAnalyzer:
    """
    Hand landmark detector.

    Usage:
        analyzer = HandAnalyzer(max_num_hands=2)
        results = analyzer.detect(rgb_frame)
    """

    def __init__(
        self,
        max_num_hands: int = 2,
        model_complexity: int = 1,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
        static_image_mode: bool = False
    ):
        """
        Initialize hand detector.

        Args:
            max_num_hands: Maximum number of hands to detect
            model_complexity: Model complexity (0=lite, 1=full)
            min_detection_confidence: Minimum confidence for hand detection
            min_tracking_confidence: Minimum confidence for landmark tracking
            static_image_mode: If True, treat each frame independently
        """
        if not MEDIAPIPE_AVAILABLE:
            raise ImportError("MediaPipe not installed. Install with: pip install mediapipe")

        self.mp_hands = mp.solutions.hands
        self.hands = self.mp_hands.Hands(
            static_image_mode=static_image_mode,
            max_num_hands=max_num_hands,
            model_complexity=model_complexity,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence
        )

        logger.info(f"Hand analyzer initialized (MediaPipe Hands, max_num_hands={max_num_hands})")

    def detect(self, frame: np.ndarray):
        """
        Run hand detection on an RGB frame (H, W, 3).

        Returns:
            MediaPipe results object (multi_hand_landmarks may be None)
        """
        return self.hands.process(frame)

    def close(self):
        """Release resources."""
        if self.hands is not None:
            self.hands.close()
            self.hands = None
