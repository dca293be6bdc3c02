"""
Hand landmark types shared by detection and interpretation.

Kept free of MediaPipe imports so the interpreter can be used on
landmarks from any source.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import List, NamedTuple

import numpy as np


class LandmarkIndex(IntEnum):
    """Hand landmark indices following MediaPipe convention."""
    WRIST = 0
    THUMB_CMC = 1
    THUMB_MCP = 2
    THUMB_IP = 3
    THUMB_TIP = 4
    INDEX_MCP = 5
    INDEX_PIP = 6
    INDEX_DIP = 7
    INDEX_TIP = 8
    MIDDLE_MCP = 9
    MIDDLE_PIP = 10
    MIDDLE_DIP = 11
    MIDDLE_TIP = 12
    RING_MCP = 13
    RING_PIP = 14
    RING_DIP = 15
    RING_TIP = 16
    PINKY_MCP = 17
    PINKY_PIP = 18
    PINKY_DIP = 19
    PINKY_TIP = 20


class Landmark(NamedTuple):
    """A single landmark point with normalized coordinates."""
    x: float  # 0.0 to 1.0, left to right in the raw (unmirrored) image
    y: float  # 0.0 to 1.0, top to bottom
    z: float = 0.0  # Depth relative to wrist

    def is_finite(self) -> bool:
        return bool(np.isfinite(self.x) and np.isfinite(self.y) and np.isfinite(self.z))


@dataclass
class HandLandmarks:
    """Container for one detected hand."""
    landmarks: List[Landmark]
    handedness: str = "Right"
    confidence: float = 0.0
    image_width: int = 1280
    image_height: int = 720

    def __len__(self) -> int:
        return len(self.landmarks)
