from typing import Optional


class Progress:
    """
    Frontend contract (keep stable).
    Snapshot-safe: do NOT add non-serializable fields.
    """

    def __init__(self, exercise: Optional[str] = None):
        self.exercise = exercise
        self.phase_total = 0
        self.sound_enabled = True
        self.reset_runtime()

    def reset_runtime(self):
        """Reset progress state for a new session."""
        self.running = False
        self.phase_index = 0
        self.phase_key: Optional[str] = None
        self.phase_label: Optional[str] = None
        self.phase_color: Optional[str] = None
        self.phase_duration = 0.0
        self.remaining_seconds = 0.0
        # cycles_completed: full passes through the sequence since start()
        self.cycles_completed = 0
        self.elapsed_seconds = 0.0

    def to_dict(self) -> dict:
        return dict(self.__dict__)
