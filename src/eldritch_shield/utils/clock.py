"""
Render-loop clock: per-tick delta and rolling FPS.
"""

import time
from collections import deque
from typing import Callable, Optional


class FrameClock:
    """
    Measures time between render ticks.

    Example:
        >>> clock = FrameClock()
        >>> while running:
        ...     delta = clock.tick()
        ...     rig.update(observation, delta, viewport)
    """

    def __init__(self, max_delta: float = 0.1, window: int = 30,
                 time_fn: Callable[[], float] = time.perf_counter):
        self._max_delta = max_delta
        self._time_fn = time_fn
        self._last: Optional[float] = None
        self._deltas = deque(maxlen=window)

    def tick(self) -> float:
        """
        Seconds since the previous tick, clamped to max_delta.

        The first tick returns 0.0.
        """
        now = self._time_fn()
        if self._last is None:
            self._last = now
            return 0.0

        delta = min(max(now - self._last, 0.0), self._max_delta)
        self._last = now
        self._deltas.append(delta)
        return delta

    @property
    def fps(self) -> float:
        total = sum(self._deltas)
        if total <= 0.0:
            return 0.0
        return len(self._deltas) / total

    def reset(self) -> None:
        self._last = None
        self._deltas.clear()
