# breath/engine.py
# One parameterized breathing-phase state machine shared by every exercise.
#
# Notes:
# - Per active phase there is a repeating 1s countdown tick and a one-shot phase deadline.
# - The deadline (not tick counting) governs transitions, so tick granularity never drifts the cycle.
# - Timer callbacks carry the epoch they were armed in; anything armed before the last
#   start/pause/dispose/phase change is inert when it fires.

from __future__ import annotations

import dataclasses
import threading

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Union

from breath.engine_timer import EngineTimer
from breath.phase import PhaseDefinition, PhaseSequence
from breath.progress import Progress
from breath.session_event import SessionEvent
from breath.timers import TimerFacility, TimerHandle
from system.log_utils import debug, info, warn

TICK_INTERVAL_SEC = 1.0


@dataclass
class EngineState:
    running: bool
    current_phase_index: int
    remaining_seconds: float
    sound_enabled: bool


class BreathCycleEngine:
    """
    Runs an ordered, looping PhaseSequence in real time.

    Callback sink (supplied at construction):
    - on_phase_change(phase) when a phase is entered (immediately on start())
    - on_tick(remaining_seconds) once per second within a phase

    Observers (subscribe / subscribe_session_event) receive Progress snapshots
    and discrete SessionEvents. The engine never touches audio; the presentation
    layer follows running/sound_enabled through these notifications.
    """

    def __init__(
        self,
        sequence: Union[PhaseSequence, Iterable[PhaseDefinition]],
        timers: TimerFacility,
        sound_enabled: bool = True,
        on_phase_change: Optional[Callable[[PhaseDefinition], None]] = None,
        on_tick: Optional[Callable[[float], None]] = None,
        name: str = "custom",
    ):
        # Validation happens here, before anything can be scheduled
        self.sequence = sequence if isinstance(sequence, PhaseSequence) else PhaseSequence(sequence)
        self.name = name

        self._timers = timers
        self._on_phase_change = on_phase_change
        self._on_tick = on_tick
        self._lock = threading.RLock()

        self._state = EngineState(
            running=False,
            current_phase_index=0,
            remaining_seconds=self.sequence[0].duration_seconds,
            sound_enabled=bool(sound_enabled),
        )
        self._epoch = 0
        self._tick_handle: Optional[TimerHandle] = None
        self._deadline_handle: Optional[TimerHandle] = None
        self._disposed = False
        self._cycles_completed = 0
        self._stopwatch = EngineTimer(clock=timers.now)

        self.progress = Progress(name)
        self.progress.phase_total = len(self.sequence)
        self._progress_subs: List[Callable[[Progress], None]] = []
        self._event_subs: List[Callable[[SessionEvent], None]] = []
        self._sync_progress()

    # -----------------------------
    # Read-only state
    # -----------------------------
    @property
    def running(self) -> bool:
        return self._state.running

    @property
    def current_phase_index(self) -> int:
        return self._state.current_phase_index

    @property
    def remaining_seconds(self) -> float:
        return self._state.remaining_seconds

    @property
    def sound_enabled(self) -> bool:
        return self._state.sound_enabled

    @property
    def current_phase(self) -> PhaseDefinition:
        return self.sequence[self._state.current_phase_index]

    @property
    def cycles_completed(self) -> int:
        return self._cycles_completed

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def state(self) -> EngineState:
        """Copy of the current state; callers never mutate the engine's own."""
        with self._lock:
            return dataclasses.replace(self._state)

    def snapshot(self) -> dict:
        with self._lock:
            self._sync_progress()
            return self.progress.to_dict()

    # -----------------------------
    # Observers
    # -----------------------------
    def subscribe(self, cb: Callable[[Progress], None]) -> None:
        self._progress_subs.append(cb)

    def subscribe_session_event(self, cb: Callable[[SessionEvent], None]) -> None:
        self._event_subs.append(cb)

    # -----------------------------
    # Public API
    # -----------------------------
    def start(self) -> tuple[bool, str]:
        with self._lock:
            if self._disposed:
                warn(f"[ENGINE] start requested on closed session '{self.name}'")
                return False, "Session closed"
            if self._state.running:
                debug(f"[ENGINE] start ignored, '{self.name}' already running")
                return False, "Session already running"

            self._state.running = True
            self._cycles_completed = 0
            self._stopwatch.restart()
            info(f"[ENGINE] start: exercise={self.name} phases={len(self.sequence)} "
                 f"cycle={self.sequence.cycle_seconds:g}s sound={'on' if self._state.sound_enabled else 'off'}")

            self._enter_phase(0)
            if self._state.running:
                self._emit_session_event(SessionEvent.SESSION_STARTED)
            return True, "Session started"

    def pause(self) -> tuple[bool, str]:
        with self._lock:
            if not self._state.running:
                debug(f"[ENGINE] pause ignored, '{self.name}' not running")
                return False, "Not running"

            self._state.running = False
            self._cancel_timers()
            self._stopwatch.pause()
            # Display returns to the first phase, not the paused moment
            self._state.current_phase_index = 0
            self._state.remaining_seconds = self.sequence[0].duration_seconds
            info(f"[ENGINE] paused '{self.name}' after {self._stopwatch.elapsed():.1f}s")

            self._emit_session_event(SessionEvent.SESSION_PAUSED)
            self._emit_progress_event()
            return True, "Session paused"

    def toggle_sound(self) -> bool:
        with self._lock:
            if self._disposed:
                warn(f"[ENGINE] sound toggle ignored, '{self.name}' closed")
                return self._state.sound_enabled

            self._state.sound_enabled = not self._state.sound_enabled
            info(f"[ENGINE] sound -> {'on' if self._state.sound_enabled else 'off'}")

            self._emit_session_event(SessionEvent.SOUND_TOGGLED)
            self._emit_progress_event()
            return self._state.sound_enabled

    def dispose(self) -> None:
        with self._lock:
            if self._disposed:
                return

            self._state.running = False
            self._cancel_timers()
            self._stopwatch.pause()
            self._disposed = True
            info(f"[ENGINE] disposed '{self.name}'")

            self._emit_session_event(SessionEvent.SESSION_DISPOSED)
            self._on_phase_change = None
            self._on_tick = None
            self._progress_subs.clear()
            self._event_subs.clear()

    # -----------------------------
    # Scheduling loop
    # -----------------------------
    def _enter_phase(self, index: int) -> None:
        # caller holds the lock
        self._epoch += 1
        epoch = self._epoch

        phase = self.sequence[index]
        self._state.current_phase_index = index
        self._state.remaining_seconds = phase.duration_seconds
        debug(f"[ENGINE] phase -> {phase.key}", duration=phase.duration_seconds)

        self._deliver(self._on_phase_change, phase, "on_phase_change")
        self._emit_session_event(SessionEvent.PHASE_CHANGED)
        self._emit_progress_event()

        if not self._is_current(epoch):
            return  # stopped from inside a callback

        # Deadline is armed first so it wins a same-instant tie with the last tick
        self._deadline_handle = self._timers.schedule_once(
            phase.duration_seconds, lambda: self._on_deadline(epoch)
        )
        self._tick_handle = self._timers.schedule_repeating(
            TICK_INTERVAL_SEC, lambda: self._on_countdown(epoch)
        )

    def _on_countdown(self, epoch: int) -> None:
        with self._lock:
            if not self._is_current(epoch):
                return

            remaining = max(0, self._state.remaining_seconds - TICK_INTERVAL_SEC)
            self._state.remaining_seconds = remaining
            if remaining <= 0:
                self._timers.cancel(self._tick_handle)
                self._tick_handle = None

            self._deliver(self._on_tick, remaining, "on_tick")
            self._emit_progress_event()

    def _on_deadline(self, epoch: int) -> None:
        with self._lock:
            if not self._is_current(epoch):
                return

            self._timers.cancel(self._tick_handle)
            self._tick_handle = None
            self._deadline_handle = None

            next_index = self.sequence.next_index(self._state.current_phase_index)
            if next_index == 0:
                self._cycles_completed += 1
                debug(f"[ENGINE] cycle {self._cycles_completed} complete")
                self._emit_session_event(SessionEvent.CYCLE_COMPLETED)
                if not self._is_current(epoch):
                    return

            self._enter_phase(next_index)

    def _is_current(self, epoch: int) -> bool:
        return self._state.running and not self._disposed and epoch == self._epoch

    def _cancel_timers(self) -> None:
        self._epoch += 1
        self._timers.cancel(self._tick_handle)
        self._timers.cancel(self._deadline_handle)
        self._tick_handle = None
        self._deadline_handle = None

    # -----------------------------
    # Notification helpers
    # -----------------------------
    def _deliver(self, cb, arg, label: str) -> None:
        if cb is None:
            return
        try:
            cb(arg)
        except Exception as e:
            warn(f"[ENGINE] {label} error: {e}")

    def _emit_progress_event(self) -> None:
        self._sync_progress()
        for cb in list(self._progress_subs):
            try:
                cb(self.progress)
            except Exception as e:
                warn(f"[ENGINE] notify error: {e}")

    def _emit_session_event(self, event: SessionEvent) -> None:
        for cb in list(self._event_subs):
            try:
                cb(event)
            except Exception as e:
                warn(f"[ENGINE] session event {event.name} error: {e}")

    def _sync_progress(self) -> None:
        phase = self.current_phase
        p = self.progress
        p.running = self._state.running
        p.sound_enabled = self._state.sound_enabled
        p.phase_index = self._state.current_phase_index
        p.phase_key = phase.key
        p.phase_label = phase.label
        p.phase_color = phase.color
        p.phase_duration = phase.duration_seconds
        p.remaining_seconds = self._state.remaining_seconds
        p.cycles_completed = self._cycles_completed
        p.elapsed_seconds = round(self._stopwatch.elapsed(), 3)
