"""Pose stabilization and the observation hand-off."""
from .handoff import ObservationSlot, get_observation_slot, init_observation_slot
from .stabilizer import (
    PoseStabilizer,
    RigPhase,
    SmoothingMode,
    StabilizedPose,
    StabilizerConfig,
    ViewportExtent,
)

__all__ = [
    "ObservationSlot",
    "get_observation_slot",
    "init_observation_slot",
    "PoseStabilizer",
    "RigPhase",
    "SmoothingMode",
    "StabilizedPose",
    "StabilizerConfig",
    "ViewportExtent",
]
