"""Landmark interpretation module."""
from .interpreter import GestureType, HandObservation, InterpreterConfig, LandmarkInterpreter

__all__ = [
    "GestureType",
    "HandObservation",
    "InterpreterConfig",
    "LandmarkInterpreter",
]
