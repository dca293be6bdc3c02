"""
Background producer: camera frame -> hand landmarks -> observation slot.

Runs at whatever rate the camera and model allow, independent of the
render loop. Each processed frame replaces the slot's value, including
with None when the hand has left the frame.
"""

import logging
import threading
import time
from typing import Optional

from eldritch_shield.recognition.interpreter import LandmarkInterpreter
from eldritch_shield.rig.handoff import ObservationSlot

logger = logging.getLogger(__name__)


class LandmarkWorker:
    """
    Detection thread feeding an ObservationSlot.

    Args:
        camera: Source with read() -> Frame or None (capture.camera.Camera)
        detector: Object with detect(rgb, timestamp_ms) -> HandLandmarks or None
        interpreter: LandmarkInterpreter
        slot: ObservationSlot receiving every interpretation
    """

    def __init__(self, camera, detector,
                 interpreter: LandmarkInterpreter, slot: ObservationSlot,
                 idle_sleep: float = 0.002):
        self._camera = camera
        self._detector = detector
        self._interpreter = interpreter
        self._slot = slot
        self._idle_sleep = idle_sleep

        self._thread: Optional[threading.Thread] = None
        self._running = False
        self._last_frame_number = -1
        self._frames_processed = 0

    def start(self) -> None:
        self._running = True
        self._thread = threading.Thread(target=self._run, name="landmarks", daemon=True)
        self._thread.start()
        logger.info("Landmark worker started")

    def stop(self) -> None:
        """Stop the thread and close the slot so in-flight results are dropped."""
        self._running = False
        self._slot.close()
        if self._thread:
            self._thread.join(timeout=1.0)
            self._thread = None
        logger.info("Landmark worker stopped after %d frames", self._frames_processed)

    def process_next(self) -> bool:
        """
        Handle the newest unseen camera frame, if any.

        Returns:
            True if a frame was processed
        """
        frame = self._camera.read()
        if frame is None or frame.frame_number == self._last_frame_number:
            return False
        self._last_frame_number = frame.frame_number

        try:
            observation = self._interpreter.interpret(
                self._detector.detect(frame.rgb, frame.timestamp_ms))
        except Exception as e:
            logger.error("Landmark processing failed on frame %d: %s", frame.frame_number, e)
            observation = None

        self._slot.publish(observation)
        self._frames_processed += 1
        return True

    def _run(self) -> None:
        while self._running:
            if not self.process_next():
                time.sleep(self._idle_sleep)

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def frames_processed(self) -> int:
        return self._frames_processed
