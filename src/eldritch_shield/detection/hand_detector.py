"""
Hand Detection Module - MediaPipe Tasks API
============================================

Wraps the MediaPipe HandLandmarker and reduces its output to a single
hand's landmark set, or None when no hand is in frame.
"""

import logging
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import numpy as np
import mediapipe as mp
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

from eldritch_shield.detection.landmarks import HandLandmarks, Landmark

logger = logging.getLogger(__name__)

HAND_LANDMARKER_MODEL_URL = "https://storage.googleapis.com/mediapipe-models/hand_landmarker/hand_landmarker/float16/1/hand_landmarker.task"
DEFAULT_MODEL_PATH = Path(__file__).parent.parent.parent.parent / "models" / "hand_landmarker.task"


@dataclass
class HandDetectorConfig:
    """Configuration for hand detector."""
    model_path: str = ""
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5
    min_presence_confidence: float = 0.5

    @classmethod
    def from_dict(cls, d: dict) -> "HandDetectorConfig":
        """Create config from dictionary."""
        return cls(
            model_path=d.get("model_path", ""),
            min_detection_confidence=d.get("min_detection_confidence", 0.5),
            min_tracking_confidence=d.get("min_tracking_confidence", 0.5),
            min_presence_confidence=d.get("min_presence_confidence", 0.5),
        )


def download_model(url: str, save_path: Path) -> bool:
    """Download the hand landmarker model if not present."""
    if save_path.exists():
        return True

    try:
        save_path.parent.mkdir(parents=True, exist_ok=True)
        logger.info(f"Downloading hand landmarker model to {save_path}...")
        urllib.request.urlretrieve(url, save_path)
        logger.info("Model download complete")
        return True
    except OSError as e:
        logger.error(f"Failed to download model: {e}")
        return False


class HandDetector:
    """
    Single-hand detector on top of MediaPipe HandLandmarker (VIDEO mode).

    Example:
        >>> detector = HandDetector(HandDetectorConfig())
        >>> detector.start()
        >>> hand = detector.detect(frame.rgb, frame.timestamp_ms)  # HandLandmarks or None
        >>> detector.stop()
    """

    def __init__(self, config: Optional[HandDetectorConfig] = None):
        self.config = config or HandDetectorConfig()
        self._landmarker: Optional[vision.HandLandmarker] = None
        self._last_timestamp_ms = -1

    def start(self) -> bool:
        """Initialize the hand landmarker."""
        model_path = self.config.model_path or str(DEFAULT_MODEL_PATH)

        if not Path(model_path).exists():
            if not download_model(HAND_LANDMARKER_MODEL_URL, Path(model_path)):
                logger.error("Could not download hand landmarker model")
                return False

        try:
            options = vision.HandLandmarkerOptions(
                base_options=python.BaseOptions(model_asset_path=model_path),
                running_mode=vision.RunningMode.VIDEO,
                num_hands=1,
                min_hand_detection_confidence=self.config.min_detection_confidence,
                min_hand_presence_confidence=self.config.min_presence_confidence,
                min_tracking_confidence=self.config.min_tracking_confidence,
            )
            self._landmarker = vision.HandLandmarker.create_from_options(options)
        except (RuntimeError, ValueError) as e:
            logger.error(f"Failed to initialize HandLandmarker: {e}")
            return False

        logger.info(f"HandLandmarker initialized with model: {model_path}")
        return True

    def stop(self) -> None:
        """Release resources."""
        if self._landmarker:
            self._landmarker.close()
            self._landmarker = None
            logger.info("HandLandmarker stopped")

    @property
    def is_running(self) -> bool:
        return self._landmarker is not None

    def detect(self, image: np.ndarray, timestamp_ms: int) -> Optional[HandLandmarks]:
        """
        Detect the first hand in an RGB image.

        Args:
            image: RGB image as numpy array (H, W, 3), not mirrored
            timestamp_ms: Frame timestamp in milliseconds

        Returns:
            HandLandmarks for the detected hand, or None if no hand was found
        """
        if self._landmarker is None:
            logger.warning("HandLandmarker not initialized. Call start() first.")
            return None

        # VIDEO mode rejects non-increasing timestamps
        timestamp_ms = max(int(timestamp_ms), self._last_timestamp_ms + 1)
        self._last_timestamp_ms = timestamp_ms

        height, width = image.shape[:2]
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=image)
        result = self._landmarker.detect_for_video(mp_image, timestamp_ms)

        if not result.hand_landmarks:
            return None

        handedness, confidence = "Right", 0.0
        if result.handedness:
            handedness = result.handedness[0][0].category_name
            confidence = result.handedness[0][0].score

        return HandLandmarks(
            landmarks=[Landmark(x=lm.x, y=lm.y, z=lm.z) for lm in result.hand_landmarks[0]],
            handedness=handedness,
            confidence=confidence,
            image_width=width,
            image_height=height,
        )

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
