"""Hand landmark types. The MediaPipe detector lives in detection.hand_detector."""
from .landmarks import HandLandmarks, Landmark, LandmarkIndex

__all__ = ["HandLandmarks", "Landmark", "LandmarkIndex"]
