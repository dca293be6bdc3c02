"""
Eldritch Shield
================

Particle shield overlay on a live webcam feed, cast with an open palm.

Modules:
    - capture: Camera frame acquisition
    - detection: MediaPipe hand landmarks and the background landmark worker
    - recognition: Landmark interpretation (gesture, position, orientation)
    - rig: Observation hand-off and pose stabilization
    - overlay: Particle shield rendering
    - utils: Configuration, logging, timing, geometry
"""

__version__ = "1.0.0"
