# puzzles/sequences.py
from __future__ import annotations

from typing import Sequence, Tuple

from core.system import Simulation


class PeriodicSequence(Simulation):
    """Emits values[0], values[1], ... and wraps around; the phase is the whole state."""

    def __init__(self, values: Sequence[int]):
        if len(values) == 0:
            raise ValueError("PeriodicSequence needs at least one value")
        self.values = tuple(int(v) for v in values)

    def initial_state(self) -> int:
        return 0

    def run_step(self, phase: int) -> Tuple[int, int, int]:
        return (phase + 1) % len(self.values), phase, self.values[phase]


class CumulativeSequence(Simulation):
    """Running total of a repeating delta pattern: start + d0, start + d0 + d1, ..."""

    def __init__(self, deltas: Sequence[int], start: int = 0):
        if len(deltas) == 0:
            raise ValueError("CumulativeSequence needs at least one delta")
        self.deltas = tuple(int(d) for d in deltas)
        self.start = int(start)

    def initial_state(self) -> Tuple[int, int]:
        return (0, self.start)

    def run_step(self, state: Tuple[int, int]):
        phase, total = state
        total += self.deltas[phase]
        nxt = (phase + 1) % len(self.deltas)
        return (nxt, total), nxt, total
