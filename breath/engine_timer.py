import time
from typing import Callable, Optional


class EngineTimer:
    """
    Logical stopwatch.
    - No background thread
    - Explicit start / pause / reset
    - Monotonic time source (injectable, so simulated clocks work too)
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._running = False
        self._accum = 0.0
        self._last_start: Optional[float] = None

    def start(self):
        if not self._running:
            self._last_start = self._clock()
            self._running = True

    def pause(self):
        if self._running:
            self._accum += self._clock() - self._last_start
            self._last_start = None
            self._running = False

    def reset(self):
        self._running = False
        self._accum = 0.0
        self._last_start = None

    def restart(self):
        self.reset()
        self.start()

    @property
    def running(self) -> bool:
        return self._running

    def elapsed(self) -> float:
        if self._running:
            return self._accum + (self._clock() - self._last_start)
        return self._accum
