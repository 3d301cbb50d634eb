# breath/exercises.py
from __future__ import annotations

import math

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

from breath.phase import ConfigurationError, PhaseDefinition, PhaseSequence

# Custom exercise slider range (seconds, whole numbers)
CUSTOM_MIN_SECONDS = 1
CUSTOM_MAX_SECONDS = 12
CUSTOM_DEFAULTS = {"inhale": 4, "hold": 4, "exhale": 6}

CUSTOM_ID = "custom"


@dataclass(frozen=True)
class Exercise:
    id: str
    name: str
    english_name: str
    level: str
    categories: Tuple[str, ...]
    phases: Tuple[PhaseDefinition, ...]
    description: str = ""
    customizable: bool = field(default=False)

    def sequence(self) -> PhaseSequence:
        return PhaseSequence(self.phases)

    def to_dict(self) -> dict:
        seq = self.sequence()
        return {
            "id": self.id,
            "name": self.name,
            "english_name": self.english_name,
            "level": self.level,
            "categories": list(self.categories),
            "description": self.description,
            "customizable": self.customizable,
            "cycle_seconds": seq.cycle_seconds,
            "phases": seq.to_list(),
        }


def _p(key: str, label: str, seconds: float, color: str) -> PhaseDefinition:
    return PhaseDefinition(key=key, label=label, duration_seconds=seconds, color=color)


_CATALOGUE: List[Exercise] = [
    Exercise(
        id="ujjayi", name="Ujjayi", english_name="Ocean Breath", level="Beginner",
        categories=("Focus", "Calm", "Energy"),
        description="Slow, even breaths through a slightly constricted throat.",
        phases=(
            _p("INHALE", "Inhale", 5, "#66BB6A"),
            _p("EXHALE", "Exhale", 5, "#42A5F5"),
        ),
    ),
    Exercise(
        id="bhramari", name="Bhramari", english_name="Humming Bee", level="Beginner",
        categories=("Calm", "Sleep"),
        description="Long humming exhale after a comfortable inhale.",
        phases=(
            _p("INHALE", "Inhale", 4, "#4CAF50"),
            _p("EXHALE_HUM", "Exhale & Hum", 8, "#2196F3"),
        ),
    ),
    Exercise(
        id="nadi_shodhana", name="Nadi Shodhana", english_name="Alternate Nostril", level="Beginner",
        categories=("Calm", "Focus", "Balance"),
        description="Alternate nostrils with a short hold between sides.",
        phases=(
            _p("INHALE_LEFT", "Inhale Left", 4, "#4CAF50"),
            _p("HOLD_1", "Hold", 4, "#FFC107"),
            _p("EXHALE_RIGHT", "Exhale Right", 6, "#2196F3"),
            _p("INHALE_RIGHT", "Inhale Right", 4, "#4CAF50"),
            _p("HOLD_2", "Hold", 4, "#FFC107"),
            _p("EXHALE_LEFT", "Exhale Left", 6, "#2196F3"),
        ),
    ),
    Exercise(
        id="samavritti", name="Samavritti", english_name="Box Breathing", level="Beginner",
        categories=("Calm", "Focus"),
        description="Four equal sides: inhale, hold, exhale, hold.",
        phases=(
            _p("INHALE", "Inhale", 4, "#4CAF50"),
            _p("HOLD_FULL", "Hold", 4, "#FFEB3B"),
            _p("EXHALE", "Exhale", 4, "#2196F3"),
            _p("HOLD_EMPTY", "Hold", 4, "#90CAF9"),
        ),
    ),
    Exercise(
        id="surya_bhedana", name="Surya Bhedana", english_name="Right Nostril", level="Intermediate",
        categories=("Energy",),
        description="Inhale through the right nostril, exhale through the left.",
        phases=(
            _p("INHALE_RIGHT", "Inhale Right", 4, "#FF9800"),
            _p("HOLD", "Hold", 6, "#FFC107"),
            _p("EXHALE_LEFT", "Exhale Left", 8, "#03A9F4"),
        ),
    ),
    Exercise(
        id="chandra_bhedana", name="Chandra Bhedana", english_name="Left Nostril", level="Intermediate",
        categories=("Sleep", "Calm"),
        description="Inhale through the left nostril, exhale through the right.",
        phases=(
            _p("INHALE_LEFT", "Inhale Left", 4, "#81D4FA"),
            _p("HOLD", "Hold", 6, "#E1BEE7"),
            _p("EXHALE_RIGHT", "Exhale Right", 8, "#4FC3F7"),
        ),
    ),
    Exercise(
        id=CUSTOM_ID, name="Mindful Breath", english_name="Custom", level="Beginner",
        categories=("Calm",),
        description="Inhale, hold and exhale with your own timings.",
        customizable=True,
        phases=(
            _p("INHALE", "Inhale", CUSTOM_DEFAULTS["inhale"], "#4CAF50"),
            _p("HOLD", "Hold", CUSTOM_DEFAULTS["hold"], "#FFC107"),
            _p("EXHALE", "Exhale", CUSTOM_DEFAULTS["exhale"], "#2196F3"),
        ),
    ),
]

_BY_ID: Dict[str, Exercise] = {ex.id: ex for ex in _CATALOGUE}


def list_exercises(category: Optional[str] = None) -> List[Exercise]:
    if not category:
        return list(_CATALOGUE)
    wanted = category.strip().lower()
    return [ex for ex in _CATALOGUE if wanted in (c.lower() for c in ex.categories)]


def get_exercise(exercise_id: str) -> Exercise:
    try:
        return _BY_ID[exercise_id]
    except KeyError:
        raise ConfigurationError(f"Unknown exercise '{exercise_id}'") from None


def _custom_seconds(name: str, value) -> int:
    if (isinstance(value, bool) or not isinstance(value, (int, float))
            or not math.isfinite(value) or float(value) != int(value)):
        raise ConfigurationError(f"Custom {name} must be a whole number of seconds, got {value!r}")
    value = int(value)
    if not CUSTOM_MIN_SECONDS <= value <= CUSTOM_MAX_SECONDS:
        raise ConfigurationError(
            f"Custom {name} must be between {CUSTOM_MIN_SECONDS} and {CUSTOM_MAX_SECONDS} seconds, got {value}"
        )
    return value


def build_custom_sequence(inhale=CUSTOM_DEFAULTS["inhale"],
                          hold=CUSTOM_DEFAULTS["hold"],
                          exhale=CUSTOM_DEFAULTS["exhale"]) -> PhaseSequence:
    seconds = {
        "INHALE": _custom_seconds("inhale", inhale),
        "HOLD": _custom_seconds("hold", hold),
        "EXHALE": _custom_seconds("exhale", exhale),
    }
    base = _BY_ID[CUSTOM_ID].phases
    return PhaseSequence(p.with_duration(seconds[p.key]) for p in base)


def build_sequence(exercise_id: str, durations: Optional[Mapping[str, float]] = None) -> PhaseSequence:
    """
    Sequence for an exercise. Only the custom exercise takes durations
    ({"inhale", "hold", "exhale"}; missing entries use the defaults).
    """
    exercise = get_exercise(exercise_id)
    if not exercise.customizable:
        if durations:
            raise ConfigurationError(f"Exercise '{exercise_id}' has fixed timings")
        return exercise.sequence()

    if durations is not None and not isinstance(durations, Mapping):
        raise ConfigurationError(f"Custom durations must be an object, got {type(durations).__name__}")

    merged = dict(CUSTOM_DEFAULTS)
    for k, v in (durations or {}).items():
        if k not in merged:
            raise ConfigurationError(f"Unknown custom phase '{k}'")
        merged[k] = v
    return build_custom_sequence(**merged)
