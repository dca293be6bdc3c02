"""
Latest-observation hand-off between the landmark worker and the render loop.

The worker publishes at camera/inference rate, the render loop reads at
display rate. Only the newest value is kept; older ones are overwritten,
never queued.
"""

import logging
import threading
import time
from typing import Optional

from eldritch_shield.recognition.interpreter import HandObservation

logger = logging.getLogger(__name__)


class ObservationSlot:
    """
    Lock-guarded single value with last-write-wins semantics.

    Example:
        >>> slot = ObservationSlot()
        >>> slot.publish(observation)      # producer thread
        >>> latest = slot.read()           # render loop
        >>> slot.close()                   # later publishes are ignored
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._observation: Optional[HandObservation] = None
        self._timestamp = 0.0
        self._sequence = 0
        self._closed = False

    def publish(self, observation: Optional[HandObservation]) -> bool:
        """Replace the held observation. Returns False once the slot is closed."""
        with self._lock:
            if self._closed:
                return False
            self._observation = observation
            self._timestamp = time.time()
            self._sequence += 1
            return True

    def read(self) -> Optional[HandObservation]:
        """Most recent observation, or None if the hand is absent."""
        with self._lock:
            return self._observation

    def read_with_sequence(self) -> tuple:
        """(observation, sequence) read under one lock acquisition."""
        with self._lock:
            return self._observation, self._sequence

    def close(self) -> None:
        """Stop accepting observations. The last value stays readable."""
        with self._lock:
            self._closed = True

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    @property
    def sequence(self) -> int:
        """Number of accepted publishes."""
        with self._lock:
            return self._sequence

    @property
    def age_seconds(self) -> float:
        with self._lock:
            if self._sequence == 0:
                return float("inf")
            return time.time() - self._timestamp


_slot: Optional[ObservationSlot] = None


def init_observation_slot() -> ObservationSlot:
    """Create the process-wide slot. Call once at startup."""
    global _slot
    if _slot is not None and not _slot.closed:
        logger.warning("Observation slot already initialized; replacing it")
    _slot = ObservationSlot()
    return _slot


def get_observation_slot() -> ObservationSlot:
    """Process-wide slot created by init_observation_slot()."""
    if _slot is None:
        raise RuntimeError("Observation slot not initialized. Call init_observation_slot() first.")
    return _slot
