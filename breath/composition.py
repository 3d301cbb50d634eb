# breath/composition.py
from typing import Mapping, Optional

from breath.engine import BreathCycleEngine
from breath.exercises import build_sequence
from breath.timers import TimerFacility


def build_engine(
    exercise_id: str,
    timers: TimerFacility,
    sound_enabled: bool = True,
    durations: Optional[Mapping[str, float]] = None,
    on_phase_change=None,
    on_tick=None,
) -> BreathCycleEngine:
    sequence = build_sequence(exercise_id, durations)
    return BreathCycleEngine(
        sequence,
        timers,
        sound_enabled=sound_enabled,
        on_phase_change=on_phase_change,
        on_tick=on_tick,
        name=exercise_id,
    )
