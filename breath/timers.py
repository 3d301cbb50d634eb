# breath/timers.py
from __future__ import annotations

import heapq
import itertools
import threading
import time

from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple

from system.log_utils import warn, verbose


class TimerHandle:
    """Cancellable handle for a scheduled callback."""

    def __init__(self, callback: Callable[[], None], interval: Optional[float] = None):
        self.callback = callback
        self.interval = interval
        self._cancelled = threading.Event()

    @property
    def repeating(self) -> bool:
        return self.interval is not None

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()


class TimerFacility(ABC):
    """Host timer facility the engine schedules against."""

    @abstractmethod
    def schedule_once(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...

    @abstractmethod
    def schedule_repeating(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        ...

    def cancel(self, handle: Optional[TimerHandle]) -> None:
        if handle is not None:
            handle.cancel()

    @abstractmethod
    def now(self) -> float:
        """Monotonic seconds."""
        ...


class ThreadingTimerFacility(TimerFacility):
    """
    Real-time facility.
    - one daemon thread per scheduled timer
    - repeating timers are paced against absolute deadlines (no drift)
    - monotonic time source
    """

    def __init__(self, name: str = "breath-timer"):
        self._name = name
        self._counter = itertools.count(1)

    def now(self) -> float:
        return time.monotonic()

    def schedule_once(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(callback)
        due = time.monotonic() + max(0.0, delay)
        self._spawn(handle, due)
        return handle

    def schedule_repeating(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        handle = TimerHandle(callback, interval)
        self._spawn(handle, time.monotonic() + interval)
        return handle

    def _spawn(self, handle: TimerHandle, due: float) -> None:
        t = threading.Thread(
            target=self._run,
            args=(handle, due),
            daemon=True,
            name=f"{self._name}-{next(self._counter)}",
        )
        t.start()

    def _run(self, handle: TimerHandle, due: float) -> None:
        while True:
            remaining = due - time.monotonic()
            # wait() returns True when cancelled
            if remaining > 0 and handle._cancelled.wait(remaining):
                return
            if handle.cancelled:
                return
            try:
                handle.callback()
            except Exception as e:
                warn(f"[TIMER] callback error: {e}")
            if not handle.repeating:
                return
            due += handle.interval


class ManualTimerFacility(TimerFacility):
    """
    Simulated clock. Nothing fires until advance() is called.
    Timers due at the same instant fire in the order they were armed.
    """

    def __init__(self, start: float = 0.0):
        self._now = float(start)
        self._queue: List[Tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()
        self._lock = threading.RLock()

    def now(self) -> float:
        return self._now

    def schedule_once(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(callback)
        self._push(self._now + max(0.0, delay), handle)
        return handle

    def schedule_repeating(self, interval: float, callback: Callable[[], None]) -> TimerHandle:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        handle = TimerHandle(callback, interval)
        self._push(self._now + interval, handle)
        return handle

    def _push(self, due: float, handle: TimerHandle) -> None:
        with self._lock:
            heapq.heappush(self._queue, (due, next(self._seq), handle))

    def pending(self) -> int:
        """Number of armed, uncancelled timers."""
        with self._lock:
            return sum(1 for _, _, h in self._queue if not h.cancelled)

    def next_due(self) -> Optional[float]:
        with self._lock:
            for due, _, h in sorted(self._queue):
                if not h.cancelled:
                    return due
        return None

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing every timer that falls due on the way."""
        if seconds < 0:
            raise ValueError("cannot move time backwards")
        target = self._now + seconds
        while True:
            with self._lock:
                if not self._queue or self._queue[0][0] > target:
                    break
                due, _, handle = heapq.heappop(self._queue)
                if handle.cancelled:
                    continue
                self._now = due
                if handle.repeating:
                    heapq.heappush(self._queue, (due + handle.interval, next(self._seq), handle))
            verbose(f"[TIMER] fire at t={due}")
            handle.callback()
        self._now = target

