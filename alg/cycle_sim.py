# alg/cycle_sim.py
from __future__ import annotations

from typing import Dict, Hashable, List, Optional

from core.results import CycleDescriptor
from core.system import Simulation


class CycleNotFoundError(RuntimeError):
    pass


class CycleAcceleratedSimulator:
    """
    Answers value_at(n) for huge n by simulating until a fingerprint repeats.

    Step i is the (i+1)-th call to run_step from the initial state; value_at(i) is its measurement.
    When the fingerprint of step i was first seen at step j, the trajectory repeats with period i-j,
    and every later value is value[j] + cycles * (value[i] - value[j]) + table[offset].

    The fingerprint is trusted: a colliding one gives wrong answers, not an error.
    Use validate_against_direct() on a prefix to check it.
    """
    def __init__(self, simulation: Simulation, max_steps: int = 100_000, progress_every: int = 0):
        if int(max_steps) <= 0:
            raise ValueError("max_steps must be > 0")
        self.simulation = simulation
        self.max_steps = int(max_steps)
        self.progress_every = int(progress_every)

        self.steps_simulated = 0
        self._values: List[int] = []
        self._cycle: Optional[CycleDescriptor] = None

    @property
    def cycle(self) -> Optional[CycleDescriptor]:
        return self._cycle

    def find_cycle(self) -> CycleDescriptor:
        if self._cycle is not None:
            return self._cycle

        first_seen: Dict[Hashable, int] = {}
        values: List[int] = []
        state = self.simulation.initial_state()

        for i in range(self.max_steps):
            state, fp, value = self.simulation.run_step(state)
            self.steps_simulated += 1
            values.append(value)

            if self.progress_every and ((i + 1) % self.progress_every == 0):
                print(f"[cycle] simulated={i + 1}  fingerprints={len(first_seen)}")

            j = first_seen.get(fp)
            if j is not None:
                length = i - j
                base = values[j]
                self._values = values
                self._cycle = CycleDescriptor(
                    offset_before_cycle=j,
                    cycle_length=length,
                    value_at_offset_before_cycle=base,
                    value_at_cycle_end=values[i],
                    cycle_step_values=tuple(values[j + m] - base for m in range(length)),
                    last_simulated_step=i,
                )
                return self._cycle
            first_seen[fp] = i

        raise CycleNotFoundError(f"cycle not found within {self.max_steps} steps")

    def value_at(self, n: int) -> int:
        n = int(n)
        if n < 0:
            raise ValueError(f"value_at: step must be >= 0, got {n}")
        cyc = self.find_cycle()

        if n <= cyc.last_simulated_step:
            return self._values[n]

        steps_into_cycle = n - cyc.offset_before_cycle
        n_cycles, remainder = divmod(steps_into_cycle, cyc.cycle_length)
        return (
            cyc.value_at_offset_before_cycle
            + n_cycles * cyc.cycle_delta
            + cyc.cycle_step_values[remainder]
        )


def validate_against_direct(simulator: CycleAcceleratedSimulator, n_steps: int) -> Optional[int]:
    """
    Compare value_at(0..n_steps-1) with a plain rollout of the same simulation.
    Returns the first mismatching step, or None when all agree.
    """
    direct = simulator.simulation.rollout(int(n_steps)).measurements
    for i, expected in enumerate(direct):
        if simulator.value_at(i) != expected:
            return i
    return None
