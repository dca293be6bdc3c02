"""
Landmark Interpreter
=====================

Turns one frame's hand landmarks into a HandObservation: a mirrored NDC
wrist position, an in-plane orientation and an OPEN/FIST gesture.

Stateless; every call depends only on its input.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Union

import numpy as np

from eldritch_shield.detection.landmarks import HandLandmarks, Landmark, LandmarkIndex
from eldritch_shield.utils.geometry import UP, identity_quaternion, normalize, quaternion_from_unit_vectors

logger = logging.getLogger(__name__)

LandmarkInput = Union[HandLandmarks, Sequence[Landmark], None]


class GestureType(Enum):
    """Hand gestures the interpreter can report."""
    OPEN = "open"
    FIST = "fist"


@dataclass(frozen=True, eq=False)
class HandObservation:
    """Per-frame interpretation of a detected hand."""
    position: np.ndarray     # (3,) NDC, z always 0
    orientation: np.ndarray  # (4,) unit quaternion [w, x, y, z]
    gesture: GestureType

    @property
    def is_open(self) -> bool:
        return self.gesture is GestureType.OPEN

    def is_finite(self) -> bool:
        return bool(np.all(np.isfinite(self.position)) and np.all(np.isfinite(self.orientation)))


@dataclass
class InterpreterConfig:
    """Interpreter tuning."""
    # Tip must be this many times farther from the wrist than the knuckle to count as OPEN
    open_threshold: float = 1.8
    # Wrist->knuckle vectors shorter than this fall back to straight up
    direction_epsilon: float = 1e-6

    @classmethod
    def from_dict(cls, config: dict) -> "InterpreterConfig":
        """Create config from dictionary."""
        return cls(
            open_threshold=config.get("open_threshold", 1.8),
            direction_epsilon=config.get("direction_epsilon", 1e-6),
        )


def planar_distance(a: Landmark, b: Landmark) -> float:
    """Euclidean distance in the image plane, ignoring depth."""
    return math.hypot(a.x - b.x, a.y - b.y)


def classify_gesture(wrist: Landmark, middle_mcp: Landmark, middle_tip: Landmark,
                     threshold: float = 1.8) -> GestureType:
    """OPEN when the middle fingertip reaches well past its base knuckle, FIST otherwise."""
    d_tip = planar_distance(middle_tip, wrist)
    d_base = planar_distance(middle_mcp, wrist)
    return GestureType.OPEN if d_tip > d_base * threshold else GestureType.FIST


def map_position(wrist: Landmark) -> np.ndarray:
    """Map a raw-image landmark to mirrored, y-up NDC on the z=0 plane."""
    ndc_x = (1.0 - wrist.x) * 2.0 - 1.0
    ndc_y = -(wrist.y * 2.0 - 1.0)
    return np.array([ndc_x, ndc_y, 0.0])


def map_orientation(wrist: Landmark, middle_mcp: Landmark, epsilon: float = 1e-6) -> np.ndarray:
    """Rotation taking +Y onto the mirrored wrist->middle-knuckle direction."""
    direction = np.array([
        (1.0 - middle_mcp.x) - (1.0 - wrist.x),
        -(middle_mcp.y - wrist.y),
        0.0,
    ])
    unit = normalize(direction, epsilon)
    if unit is None:
        return identity_quaternion()
    return quaternion_from_unit_vectors(UP, unit)


class LandmarkInterpreter:
    """
    Per-frame hand interpreter.

    Example:
        >>> interpreter = LandmarkInterpreter()
        >>> observation = interpreter.interpret(hand)  # None if no usable hand
        >>> if observation and observation.is_open:
        ...     cast_shield(observation.position)
    """

    _REQUIRED = (LandmarkIndex.WRIST, LandmarkIndex.MIDDLE_MCP, LandmarkIndex.MIDDLE_TIP)

    def __init__(self, config: Optional[InterpreterConfig] = None):
        self.config = config or InterpreterConfig()

    def interpret(self, landmarks: LandmarkInput) -> Optional[HandObservation]:
        """
        Interpret a landmark set.

        Args:
            landmarks: HandLandmarks, a sequence of Landmark/(x, y[, z]) tuples,
                or None when the detector found no hand

        Returns:
            HandObservation, or None when there is no usable hand
        """
        if landmarks is None:
            return None
        if isinstance(landmarks, HandLandmarks):
            landmarks = landmarks.landmarks
        if len(landmarks) == 0:
            return None
        if len(landmarks) <= LandmarkIndex.MIDDLE_TIP:
            logger.debug("Ignoring partial landmark set (%d points)", len(landmarks))
            return None

        wrist, middle_mcp, middle_tip = (Landmark(*landmarks[i]) for i in self._REQUIRED)

        if not (wrist.is_finite() and middle_mcp.is_finite() and middle_tip.is_finite()):
            logger.warning("Rejecting frame with non-finite landmark coordinates")
            return None

        return HandObservation(
            position=map_position(wrist),
            orientation=map_orientation(wrist, middle_mcp, self.config.direction_epsilon),
            gesture=classify_gesture(wrist, middle_mcp, middle_tip, self.config.open_threshold),
        )
