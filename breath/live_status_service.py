# live_status_service.py
from __future__ import annotations
import threading
from typing import Dict, Any, Tuple

from system.log_utils import warn
from system import services
from breath.progress import Progress


class LiveStatusService:
    """Latest session progress plus background audio state, for SSE consumers."""

    def __init__(self):
        self.latest_progress_snapshot: Dict[str, Any] = {"exercise": None, "running": False}
        self._lock = threading.Lock()
        self._sessions = None

    def attach_sessions(self, sessions) -> None:
        self._sessions = sessions
        sessions.subscribe(self._on_progress)

    def _on_progress(self, progress: Progress) -> None:
        try:
            snapshot = progress.to_dict()
            with self._lock:
                self.latest_progress_snapshot = snapshot
        except Exception as e:
            warn(f"[live] progress update error: {e}")

    def get_audio_snapshot(self) -> Dict[str, Any] | None:
        if self._sessions is None:
            return None
        return self._sessions.audio_player.state()

    def get_live_snapshots(self) -> Tuple[Dict[str, Any], Dict[str, Any] | None]:
        with self._lock:
            progress = self.latest_progress_snapshot.copy()
        return progress, self.get_audio_snapshot()


# -----------------------------------------------------------------------------
# Module-level delegates to instance in system.services
# -----------------------------------------------------------------------------

def _get_service() -> LiveStatusService | None:
    return getattr(services, "live_status_service", None)


def get_live_snapshots() -> Tuple[Dict[str, Any], Dict[str, Any] | None]:
    svc = _get_service()
    if svc is None:
        return {}, None
    return svc.get_live_snapshots()
