"""
Live frame source for the detection loop.

Engineering decisions:
- OpenCV for capture (camera index or file/stream URL)
- On-demand reads: the loop asks for the current frame once per tick
- RGB output (what the MediaPipe models expect)
- Automatic resource cleanup via context manager
"""

import logging
from typing import Optional, Tuple, Union

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class FrameSource:
    """
    Camera or video stream reader that returns the current frame on demand.

    Usage:
        with FrameSource(0, resolution=(640, 480)) as source:
            frame = source.read()
    """

    def __init__(
        self,
        source: Union[int, str] = 0,
        resolution: Optional[Tuple[int, int]] = None,
        color_mode: str = 'RGB'
    ):
        """
        Open a capture device.

        Args:
            source: Camera index or path / URL of a video stream
            resolution: Requested (width, height); the device may ignore it
            color_mode: 'RGB' or 'BGR' (OpenCV default)

        Raises:
            RuntimeError: If the source cannot be opened
        """
        self.source = source
        self.color_mode = color_mode
        self.cap = cv2.VideoCapture(source)

        if not self.cap.isOpened():
            raise RuntimeError(f"Failed to open video source: {source}")

        if resolution is not None:
            self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, resolution[0])
            self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, resolution[1])

        self.frames_read = 0
        self.failed_reads = 0

        logger.info(
            f"Opened video source {source}: "
            f"{int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))}x"
            f"{int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))}"
        )

    @classmethod
    def from_config(cls, config: dict) -> 'FrameSource':
        camera = config.get('camera', {})
        resolution = camera.get('resolution')
        return cls(
            source=camera.get('source', 0),
            resolution=tuple(resolution) if resolution else None
        )

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - cleanup resources."""
        self.release()

    def release(self):
        """Release video capture resources."""
        if self.cap is not None:
            self.cap.release()
            self.cap = None
            logger.info(f"Released video source {self.source}")

    def read(self) -> Optional[np.ndarray]:
        """
        Read the current frame.

        Returns:
            Frame as numpy array (H, W, 3) or None if no frame is available
        """
        if self.cap is None:
            return None

        ret, frame = self.cap.read()

        if not ret or frame is None:
            self.failed_reads += 1
            logger.debug(f"Failed to read frame from {self.source}")
            return None

        self.frames_read += 1

        if self.color_mode == 'RGB':
            frame = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)

        return frame
