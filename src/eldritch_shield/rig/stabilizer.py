"""
Pose Stabilizer (Rig)
======================

Smooths the latest HandObservation into the pose the overlay is drawn at.

Called once per render tick with whatever observation is current; the
same observation may be seen on many consecutive ticks. Position and
activation are lerped, orientation is slerped, all with the same factor.

With the default "fixed" smoothing mode the factor is applied per tick,
so the perceived lag depends on the render rate. The "exponential" mode
derives the factor from the tick delta instead.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import NamedTuple, Optional

import numpy as np

from eldritch_shield.recognition.interpreter import HandObservation
from eldritch_shield.utils.geometry import identity_quaternion, lerp, slerp

logger = logging.getLogger(__name__)

# Matches alpha=0.1 per tick at 60 Hz
DEFAULT_DECAY_RATE = -math.log(0.9) * 60.0


class SmoothingMode(Enum):
    FIXED = "fixed"
    EXPONENTIAL = "exponential"


class RigPhase(Enum):
    """Coarse view of the activation scalar."""
    INACTIVE = "inactive"
    ACTIVATING = "activating"
    ACTIVE = "active"
    DEACTIVATING = "deactivating"


class ViewportExtent(NamedTuple):
    """Half extents of the visible overlay plane, in world units."""
    half_width: float
    half_height: float

    @classmethod
    def from_camera(cls, fov_deg: float, distance: float, aspect: float) -> "ViewportExtent":
        """Visible plane at `distance` in front of a perspective camera with vertical fov."""
        half_height = distance * math.tan(math.radians(fov_deg) / 2.0)
        return cls(half_width=half_height * aspect, half_height=half_height)

    def is_valid(self) -> bool:
        return all(math.isfinite(v) and v > 0.0 for v in self)


@dataclass
class StabilizerConfig:
    """Rig smoothing configuration."""
    alpha: float = 0.1
    deactivation_cutoff: float = 0.01
    mode: SmoothingMode = SmoothingMode.FIXED
    decay_rate: float = DEFAULT_DECAY_RATE  # 1/s, exponential mode only
    rest_on_release: bool = False

    @classmethod
    def from_dict(cls, config: dict) -> "StabilizerConfig":
        """Create config from dictionary."""
        smoothing = config.get("smoothing")
        if not isinstance(smoothing, dict):
            smoothing = {}

        mode_name = str(smoothing.get("mode", "fixed")).lower()
        try:
            mode = SmoothingMode(mode_name)
        except ValueError:
            logger.warning("Unknown smoothing mode %r, using 'fixed'", smoothing.get("mode"))
            mode = SmoothingMode.FIXED

        return cls(
            alpha=smoothing.get("alpha", 0.1),
            deactivation_cutoff=config.get("deactivation_cutoff", 0.01),
            mode=mode,
            decay_rate=smoothing.get("decay_rate", DEFAULT_DECAY_RATE),
            rest_on_release=config.get("rest_on_release", False),
        )


@dataclass
class StabilizedPose:
    """Smoothed overlay pose. Written only by PoseStabilizer."""
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    orientation: np.ndarray = field(default_factory=identity_quaternion)
    activation: float = 0.0
    visible: bool = False
    phase: RigPhase = RigPhase.INACTIVE
    ticks: int = 0

    def copy(self) -> "StabilizedPose":
        return StabilizedPose(
            position=self.position.copy(),
            orientation=self.orientation.copy(),
            activation=self.activation,
            visible=self.visible,
            phase=self.phase,
            ticks=self.ticks,
        )


class PoseStabilizer:
    """
    Owns the StabilizedPose and advances it once per render tick.

    Example:
        >>> rig = PoseStabilizer()
        >>> while rendering:
        ...     rig.update(slot.read(), clock.tick(), viewport)
        ...     draw(rig.pose)
    """

    def __init__(self, config: Optional[StabilizerConfig] = None):
        self.config = config or StabilizerConfig()
        self._pose = StabilizedPose()
        # Last non-finite observation warned about; the slot repeats it every tick
        self._rejected: Optional[HandObservation] = None

    @property
    def pose(self) -> StabilizedPose:
        """Live pose. Treat as read-only."""
        return self._pose

    def snapshot(self) -> StabilizedPose:
        return self._pose.copy()

    def reset(self) -> None:
        """Return to the neutral startup pose."""
        self._pose = StabilizedPose()

    def smoothing_factor(self, delta: float) -> float:
        """Blend factor for one tick."""
        if self.config.mode is SmoothingMode.FIXED:
            return self.config.alpha
        if not math.isfinite(delta) or delta <= 0.0:
            return 0.0
        return 1.0 - math.exp(-self.config.decay_rate * delta)

    def update(self, observation: Optional[HandObservation], delta: float,
               viewport: Optional[ViewportExtent]) -> None:
        """
        Advance the rig by one render tick.

        Args:
            observation: Latest interpreter output, None when no hand is present
            delta: Seconds since the previous tick
            viewport: Current half extents of the overlay plane
        """
        pose = self._pose
        pose.ticks += 1

        if observation is not None and not observation.is_finite():
            if observation is not self._rejected:
                logger.warning("Skipping tick %d: observation has non-finite components", pose.ticks)
                self._rejected = observation
            else:
                logger.debug("Skipping tick %d: same non-finite observation", pose.ticks)
            return

        target_active = observation is not None and observation.is_open
        alpha = self.smoothing_factor(delta)

        if target_active:
            if viewport is not None and viewport.is_valid():
                target = np.array([
                    observation.position[0] * viewport.half_width,
                    observation.position[1] * viewport.half_height,
                    0.0,
                ])
                pose.position = lerp(pose.position, target, alpha)
            else:
                logger.debug("No valid viewport extent, holding position")
            pose.orientation = slerp(pose.orientation, observation.orientation, alpha)
        elif self.config.rest_on_release:
            pose.position = lerp(pose.position, np.zeros(3), alpha)
            pose.orientation = slerp(pose.orientation, identity_quaternion(), alpha)

        target_activation = 1.0 if target_active else 0.0
        pose.activation += alpha * (target_activation - pose.activation)

        if not target_active and pose.activation < self.config.deactivation_cutoff:
            if pose.visible:
                logger.debug("Shield hidden")
            pose.activation = 0.0
            pose.visible = False
            pose.phase = RigPhase.INACTIVE
            return

        if not pose.visible:
            logger.debug("Shield shown")
        pose.visible = True
        if not target_active:
            pose.phase = RigPhase.DEACTIVATING
        elif pose.activation >= 1.0 - self.config.deactivation_cutoff:
            pose.phase = RigPhase.ACTIVE
        else:
            pose.phase = RigPhase.ACTIVATING
