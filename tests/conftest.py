import pytest

from breath.phase import PhaseDefinition
from breath.timers import ManualTimerFacility


@pytest.fixture
def timers():
    return ManualTimerFacility()


@pytest.fixture
def two_phase():
    return [
        PhaseDefinition("A", "Inhale", 4),
        PhaseDefinition("B", "Exhale", 8),
    ]


class Recorder:
    """Collects (time, kind, value) tuples from an engine's callback sink."""

    def __init__(self, timers):
        self.timers = timers
        self.events = []

    def on_phase_change(self, phase):
        self.events.append((self.timers.now(), "phase", phase.key))

    def on_tick(self, remaining):
        self.events.append((self.timers.now(), "tick", remaining))

    def phases(self):
        return [(t, v) for t, kind, v in self.events if kind == "phase"]

    def ticks(self):
        return [(t, v) for t, kind, v in self.events if kind == "tick"]


@pytest.fixture
def recorder(timers):
    return Recorder(timers)
