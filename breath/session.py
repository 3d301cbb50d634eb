# breath/session.py
from __future__ import annotations

import threading

from typing import Callable, List, Mapping, Optional

from breath.audio import AudioPlayer, AudioSync
from breath.composition import build_engine
from breath.engine import BreathCycleEngine
from breath.exercises import get_exercise
from breath.phase import ConfigurationError
from breath.progress import Progress
from breath.timers import TimerFacility
from system.log_utils import info, debug, warn
from system.preferences import (
    Preferences,
    KEY_CUSTOM_DURATIONS,
    KEY_DEFAULT_EXERCISE,
    KEY_SOUND_ENABLED,
)

DEFAULT_EXERCISE = "samavritti"


class SessionManager:
    """
    Screen lifecycle for breathing sessions.
    - exactly one engine per open session
    - opening a new session tears the previous one down (dispose)
    - progress subscribers follow whichever engine is current
    """

    def __init__(self, timers: TimerFacility, audio_player: AudioPlayer,
                 preferences: Optional[Preferences] = None):
        self._timers = timers
        self._player = audio_player
        self._prefs = preferences
        self._engine: Optional[BreathCycleEngine] = None
        self._lock = threading.RLock()
        self._progress_subs: List[Callable[[Progress], None]] = []

        if preferences is not None:
            preferences.register_callback(KEY_SOUND_ENABLED, self._on_sound_pref)

    @property
    def current(self) -> Optional[BreathCycleEngine]:
        return self._engine

    @property
    def audio_player(self) -> AudioPlayer:
        return self._player

    def subscribe(self, cb: Callable[[Progress], None]) -> None:
        with self._lock:
            self._progress_subs.append(cb)
            if self._engine is not None:
                self._engine.subscribe(cb)

    def open(self, exercise_id: Optional[str] = None,
             durations: Optional[Mapping[str, float]] = None,
             sound_enabled: Optional[bool] = None) -> BreathCycleEngine:
        """Build a stopped engine for an exercise. Raises ConfigurationError on bad input."""
        exercise_id = exercise_id or self._pref(KEY_DEFAULT_EXERCISE, DEFAULT_EXERCISE)
        exercise = get_exercise(exercise_id)

        if durations is None and exercise.customizable:
            durations = self._pref(KEY_CUSTOM_DURATIONS, None)
        if sound_enabled is None:
            sound_enabled = self._prefs.get_bool(KEY_SOUND_ENABLED, True) if self._prefs else True
        elif not isinstance(sound_enabled, bool):
            raise ConfigurationError(f"sound_enabled must be true or false, got {sound_enabled!r}")

        # Built first so a bad request leaves the current session untouched
        engine = build_engine(exercise_id, self._timers, sound_enabled=sound_enabled, durations=durations)

        with self._lock:
            self._close_locked()
            AudioSync(engine, self._player)
            for cb in self._progress_subs:
                engine.subscribe(cb)
            self._engine = engine

        info(f"[SESSION] opened '{exercise_id}'", phases=len(engine.sequence),
             cycle=f"{engine.sequence.cycle_seconds:g}s")
        engine.snapshot()
        self._publish(engine.progress)
        return engine

    def close(self) -> bool:
        with self._lock:
            closed = self._close_locked()
        if closed:
            # Subscribers would otherwise keep the disposed engine's last snapshot
            self._publish(Progress())
        return closed

    def _close_locked(self) -> bool:
        if self._engine is None:
            return False
        debug(f"[SESSION] closing '{self._engine.name}'")
        self._engine.dispose()
        self._engine = None
        return True

    def _publish(self, progress: Progress) -> None:
        for cb in list(self._progress_subs):
            try:
                cb(progress)
            except Exception as e:
                warn(f"[SESSION] progress subscriber error: {e}")

    def _on_sound_pref(self, enabled) -> None:
        """Settings switch follows through to the open session."""
        engine = self._engine
        if engine is None or engine.disposed or engine.sound_enabled == bool(enabled):
            return
        debug(f"[SESSION] sound preference -> {bool(enabled)}")
        engine.toggle_sound()

    def _pref(self, key, default):
        if self._prefs is None:
            return default
        return self._prefs.get(key, default)
