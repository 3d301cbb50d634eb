# breath/actions.py
from system.log_utils import info, warn
from breath.session import SessionManager


class EngineActions:
    """
    Canonical session commands.
    All user-triggered engine control MUST go through here.
    """

    def __init__(self, sessions: SessionManager):
        self._sessions = sessions

    def _engine(self):
        engine = self._sessions.current
        if engine is None:
            warn("[ACTIONS] no open session")
        return engine

    def start(self) -> tuple[bool, str]:
        info("[ACTIONS] Start requested")
        engine = self._engine()
        if engine is None:
            return False, "No open session"
        ok, msg = engine.start()
        if not ok:
            warn(f"[ACTIONS] Start rejected: {msg}")
        return ok, msg

    def pause(self) -> tuple[bool, str]:
        info("[ACTIONS] Pause requested")
        engine = self._engine()
        if engine is None:
            return False, "No open session"
        ok, msg = engine.pause()
        if not ok:
            warn(f"[ACTIONS] Pause rejected: {msg}")
        return ok, msg

    def toggle(self) -> tuple[bool, str]:
        """
        Play/pause button semantics:
        - stopped → start (always from the first phase)
        - running → pause
        """
        engine = self._engine()
        if engine is None:
            return False, "No open session"
        if engine.running:
            return self.pause()
        return self.start()

    def toggle_sound(self) -> tuple[bool, str]:
        info("[ACTIONS] Sound toggle requested")
        engine = self._engine()
        if engine is None:
            return False, "No open session"
        if engine.disposed:
            return False, "Session closed"
        enabled = engine.toggle_sound()
        return True, "Sound on" if enabled else "Sound off"

    def perform_action(self, action: str) -> tuple[bool, str]:
        """
        Perform an action by name.
        """
        action_map = {
            "start": self.start,
            "pause": self.pause,
            "toggle": self.toggle,
            "toggle_sound": self.toggle_sound,
        }

        if action not in action_map:
            warn(f"[ACTIONS] Unknown action requested: {action}")
            return False, "Unknown action"

        return action_map[action]()
