from __future__ import annotations
from typing import Dict, Any


class SseDeltaTracker:
    """
    Tracks the last-sent audio snapshot to include it in SSE payloads only when it changed.

    Usage:
        tracker = SseDeltaTracker()
        state = tracker.build(progress, audio)
    """

    def __init__(self) -> None:
        self._last_audio: Dict[str, Any] | None = None

    def build(
        self,
        progress: Dict[str, Any] | None,
        audio: Dict[str, Any] | None,
    ) -> Dict[str, Any]:
        """Return SSE state including audio only when changed, along with current progress."""
        audio_changed = audio is not None and audio != self._last_audio
        if audio_changed:
            self._last_audio = audio

        return SseDeltaTracker.build_state(progress, audio if audio_changed else None)

    @staticmethod
    def build_state(
        progress: Dict[str, Any] | None,
        audio: Dict[str, Any] | None,
    ) -> Dict[str, Any]:
        """
        Assemble SSE state payload from component snapshots.

        Strategy: Always send progress (countdown changes every second), only send audio when changed.
        Frontend uses `?? null` checks to handle the missing field.
        """
        state = dict(progress or {})

        if audio is not None:
            state["audio"] = audio

        return state
