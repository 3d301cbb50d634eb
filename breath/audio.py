# breath/audio.py
from __future__ import annotations

import threading

from abc import ABC, abstractmethod
from typing import Any, Dict

from breath.session_event import SessionEvent
from system.log_utils import debug, info


class AudioPlayer(ABC):
    """Background music collaborator owned by the presentation layer."""

    @abstractmethod
    def play(self) -> None: ...

    @abstractmethod
    def pause(self) -> None: ...

    @abstractmethod
    def stop(self) -> None: ...

    @abstractmethod
    def set_looping(self, looping: bool) -> None: ...

    @abstractmethod
    def state(self) -> Dict[str, Any]: ...


class SimAudioPlayer(AudioPlayer):
    """
    Stand-in player for headless hosts and tests.
    Tracks playback state and logs every transition; clients render the real audio.
    """

    STOPPED = "stopped"
    PLAYING = "playing"
    PAUSED = "paused"

    def __init__(self, track: str = "calm_music.mp3"):
        self.track = track
        self.status = self.STOPPED
        self.looping = False
        self.play_count = 0
        self._lock = threading.Lock()

    def play(self) -> None:
        with self._lock:
            if self.status == self.PLAYING:
                return
            self.status = self.PLAYING
            self.play_count += 1
        info(f"[AUDIO] play {self.track}", looping=self.looping)

    def pause(self) -> None:
        with self._lock:
            if self.status != self.PLAYING:
                return
            self.status = self.PAUSED
        info(f"[AUDIO] pause {self.track}")

    def stop(self) -> None:
        with self._lock:
            if self.status == self.STOPPED:
                return
            self.status = self.STOPPED
        info(f"[AUDIO] stop {self.track}")

    def set_looping(self, looping: bool) -> None:
        with self._lock:
            self.looping = bool(looping)
        debug(f"[AUDIO] looping -> {self.looping}")

    def state(self) -> Dict[str, Any]:
        with self._lock:
            return {"track": self.track, "status": self.status, "looping": self.looping}


class AudioSync:
    """
    Keeps a looping background track in step with an engine's
    running / sound_enabled state, observed through its session events.
    The engine itself never holds an audio handle.
    """

    def __init__(self, engine, player: AudioPlayer):
        self._engine = engine
        self._player = player
        self._player.set_looping(True)
        engine.subscribe_session_event(self._on_event)

    def _on_event(self, event: SessionEvent) -> None:
        if event is SessionEvent.SESSION_STARTED:
            if self._engine.sound_enabled:
                self._player.play()
        elif event is SessionEvent.SESSION_PAUSED:
            self._player.pause()
        elif event is SessionEvent.SOUND_TOGGLED:
            if self._engine.sound_enabled and self._engine.running:
                self._player.play()
            else:
                self._player.pause()
        elif event is SessionEvent.SESSION_DISPOSED:
            self._player.stop()
