# core/system.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Hashable, List, Optional, Protocol, Tuple


class Expander(Protocol):
    def __call__(self, state: Any) -> List[Any]: ...


class SearchProblem:
    """
    Base class for an implicit, maximizing state graph:
      expand(s)    -> successor states (one decision each)
      signature(s) -> hashable key; states sharing it are interchangeable apart from score
      score(s)     -> concrete score already secured by s
      bound(s)     -> optimistic upper bound on any final score reachable from s
    Soundness requires bound(s) >= best final score reachable from s.
    """
    def initial_state(self) -> Any:
        raise NotImplementedError

    def expand(self, state: Any) -> List[Any]:
        raise NotImplementedError

    def signature(self, state: Any) -> Hashable:
        raise NotImplementedError

    def score(self, state: Any) -> int:
        raise NotImplementedError

    def bound(self, state: Any) -> int:
        raise NotImplementedError


class FunctionProblem(SearchProblem):
    """Wraps five plain callables as a SearchProblem."""

    def __init__(
        self,
        initial: Any,
        expand: Expander,
        signature: Callable[[Any], Hashable],
        score: Callable[[Any], int],
        bound: Callable[[Any], int],
    ):
        self._initial = initial
        self._expand = expand
        self._signature = signature
        self._score = score
        self._bound = bound

    def initial_state(self) -> Any:
        return self._initial

    def expand(self, state: Any) -> List[Any]:
        return list(self._expand(state))

    def signature(self, state: Any) -> Hashable:
        return self._signature(state)

    def score(self, state: Any) -> int:
        return self._score(state)

    def bound(self, state: Any) -> int:
        return self._bound(state)


@dataclass
class RolloutResult:
    measurements: List[int]
    fingerprints: Optional[List[Hashable]] = None


class Simulation:
    """
    Base class for a deterministic step simulation:
      (s_{t+1}, fingerprint_t, measurement_t) = run_step(s_t)
    Equal fingerprints must imply equal future trajectories.
    """
    def initial_state(self) -> Any:
        raise NotImplementedError

    def run_step(self, state: Any) -> Tuple[Any, Hashable, int]:
        raise NotImplementedError

    def rollout(self, n_steps: int, record_fingerprints: bool = False) -> RolloutResult:
        state = self.initial_state()
        measurements: List[int] = []
        fingerprints: Optional[List[Hashable]] = [] if record_fingerprints else None

        for _ in range(int(n_steps)):
            state, fp, value = self.run_step(state)
            measurements.append(value)
            if record_fingerprints:
                fingerprints.append(fp)

        return RolloutResult(measurements=measurements, fingerprints=fingerprints)
