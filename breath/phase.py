# breath/phase.py
from __future__ import annotations

import math
from dataclasses import dataclass, asdict
from typing import Iterable, Iterator, Optional


class ConfigurationError(ValueError):
    """Invalid phase sequence or exercise configuration. Never recoverable."""


@dataclass(frozen=True)
class PhaseDefinition:
    key: str
    label: str
    duration_seconds: float
    color: Optional[str] = None

    def with_duration(self, seconds: float) -> "PhaseDefinition":
        return PhaseDefinition(self.key, self.label, seconds, self.color)

    def to_dict(self) -> dict:
        return asdict(self)


def _valid_duration(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value) and value > 0


class PhaseSequence:
    """
    Ordered, cyclic list of phases. After the last entry the sequence
    restarts at the first. Validated once, immutable afterwards.
    """

    def __init__(self, phases: Iterable[PhaseDefinition]):
        self._phases = tuple(phases)
        self._validate()

    def _validate(self) -> None:
        if not self._phases:
            raise ConfigurationError("Phase sequence must not be empty")

        seen = set()
        for i, phase in enumerate(self._phases):
            if not isinstance(phase, PhaseDefinition):
                raise ConfigurationError(f"Entry {i} is not a PhaseDefinition: {phase!r}")
            if not isinstance(phase.key, str) or not phase.key:
                raise ConfigurationError(f"Entry {i} has an empty key")
            if not isinstance(phase.label, str) or not phase.label:
                raise ConfigurationError(f"Phase '{phase.key}' has an empty label")
            if not _valid_duration(phase.duration_seconds):
                raise ConfigurationError(
                    f"Phase '{phase.key}' has invalid duration {phase.duration_seconds!r}; must be > 0"
                )
            if phase.key in seen:
                raise ConfigurationError(f"Duplicate phase key '{phase.key}'")
            seen.add(phase.key)

    def __len__(self) -> int:
        return len(self._phases)

    def __getitem__(self, index: int) -> PhaseDefinition:
        return self._phases[index]

    def __iter__(self) -> Iterator[PhaseDefinition]:
        return iter(self._phases)

    def next_index(self, index: int) -> int:
        return (index + 1) % len(self._phases)

    @property
    def cycle_seconds(self) -> float:
        return float(sum(p.duration_seconds for p in self._phases))

    def to_list(self) -> list[dict]:
        return [p.to_dict() for p in self._phases]

    def __repr__(self) -> str:
        keys = ", ".join(f"{p.key}={p.duration_seconds}" for p in self._phases)
        return f"PhaseSequence({keys})"
