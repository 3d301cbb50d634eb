# breath/session_event.py

from enum import Enum, auto


class SessionEvent(Enum):
    """
    Discrete, semantic UI-relevant moments emitted by the engine.
    NOT continuous state (countdown ticks go through Progress).
    """
    SESSION_STARTED = auto()
    PHASE_CHANGED = auto()
    CYCLE_COMPLETED = auto()   # sequence wrapped back to the first phase
    SESSION_PAUSED = auto()
    SOUND_TOGGLED = auto()
    SESSION_DISPOSED = auto()  # owning screen torn down
