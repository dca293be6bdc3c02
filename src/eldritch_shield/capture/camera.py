"""
Camera Capture
===============

Threaded OpenCV capture that keeps only the newest frame. Frames are
delivered unmirrored; the overlay mirrors them for display.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Optional, Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class CameraConfig:
    """Camera configuration settings."""
    device_id: int = 0
    width: int = 1280
    height: int = 720
    fps: int = 30
    buffer_size: int = 1
    threaded: bool = True
    warmup_frames: int = 5

    @classmethod
    def from_dict(cls, config: dict) -> "CameraConfig":
        """Create config from dictionary (YAML parsed)."""
        return cls(
            device_id=config.get("device_id", 0),
            width=config.get("width", 1280),
            height=config.get("height", 720),
            fps=config.get("fps", 30),
            buffer_size=config.get("buffer_size", 1),
            threaded=config.get("threaded", True),
            warmup_frames=config.get("warmup_frames", 5),
        )


@dataclass
class Frame:
    """Captured BGR frame with metadata."""
    image: np.ndarray
    timestamp: float
    frame_number: int

    @property
    def rgb(self) -> np.ndarray:
        """Convert BGR to RGB."""
        return cv2.cvtColor(self.image, cv2.COLOR_BGR2RGB)

    @property
    def timestamp_ms(self) -> int:
        return int(self.timestamp * 1000)


class Camera:
    """
    Webcam capture with an optional background reader thread.

    Example:
        >>> with Camera(CameraConfig()) as camera:
        ...     frame = camera.read()
    """

    def __init__(self, config: Optional[CameraConfig] = None):
        self.config = config or CameraConfig()
        self._cap: Optional[cv2.VideoCapture] = None
        self._frame_number = 0
        self._running = False

        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._latest_frame: Optional[Frame] = None

    def start(self) -> bool:
        """
        Open the device and begin capturing.

        Returns:
            True if camera started successfully
        """
        logger.info("Starting camera (device={}, {}x{}@{}fps)".format(
            self.config.device_id, self.config.width, self.config.height, self.config.fps))

        self._cap = cv2.VideoCapture(self.config.device_id)
        if not self._cap.isOpened():
            logger.error("Failed to open camera device {}".format(self.config.device_id))
            self._cap = None
            return False

        self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.width)
        self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.height)
        self._cap.set(cv2.CAP_PROP_FPS, self.config.fps)
        self._cap.set(cv2.CAP_PROP_BUFFERSIZE, self.config.buffer_size)

        for _ in range(self.config.warmup_frames):
            self._cap.read()

        self._running = True
        self._frame_number = 0

        if self.config.threaded:
            self._thread = threading.Thread(target=self._capture_loop, name="camera", daemon=True)
            self._thread.start()

        return True

    def stop(self) -> None:
        """Stop capture and release the device."""
        self._running = False

        if self._thread:
            self._thread.join(timeout=1.0)
            self._thread = None

        if self._cap:
            self._cap.release()
            self._cap = None
            logger.info("Camera stopped")

    def read(self) -> Optional[Frame]:
        """
        Latest frame (threaded mode) or a freshly captured one.

        Returns:
            Frame or None if nothing is available
        """
        if not self._running:
            return None

        if self.config.threaded:
            with self._lock:
                return self._latest_frame
        return self._capture_frame()

    def _capture_frame(self) -> Optional[Frame]:
        if not self._cap:
            return None

        ret, image = self._cap.read()
        if not ret or image is None:
            logger.warning("Failed to capture frame")
            return None

        self._frame_number += 1
        return Frame(image=image, timestamp=time.time(), frame_number=self._frame_number)

    def _capture_loop(self) -> None:
        while self._running:
            frame = self._capture_frame()
            if frame:
                with self._lock:
                    self._latest_frame = frame

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def resolution(self) -> Tuple[int, int]:
        return (self.config.width, self.config.height)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
