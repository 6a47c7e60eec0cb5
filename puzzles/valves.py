# puzzles/valves.py
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple
import numpy as np

from alg.bound_search import SearchParams, run_bound_search
from alg.partition_search import PartitionSearchParams, partition_search
from core.partitions import cartesian_product
from core.results import PartitionResult
from core.system import SearchProblem


@dataclass(frozen=True)
class Valve:
    name: str
    flow_rate: int
    tunnels: Tuple[str, ...]


class ValveNetwork:
    """
    Valves joined by unit-length tunnels. Shortest distances are computed lazily per source,
    so a tunnel to a valve that does not exist surfaces (KeyError) the first time it is walked.
    """
    def __init__(self, valves: Iterable[Valve], start: str = "AA"):
        self.valves: Dict[str, Valve] = {}
        for v in valves:
            if int(v.flow_rate) < 0:
                raise ValueError(f"Valve {v.name}: negative flow rate {v.flow_rate}")
            self.valves[v.name] = v
        if start not in self.valves:
            raise ValueError(f"Start valve {start!r} not in network")
        self.start = start

        # positive-flow valves, highest rate first
        ranked = sorted((v for v in self.valves.values() if v.flow_rate > 0), key=lambda v: (-v.flow_rate, v.name))
        self.useful_valves: Tuple[str, ...] = tuple(v.name for v in ranked)

        self._dist: Dict[str, Dict[str, int]] = {}

    @classmethod
    def from_table(cls, table: Mapping[str, Tuple[int, Sequence[str]]], start: str = "AA") -> "ValveNetwork":
        """table: name -> (flow_rate, tunnel names)"""
        return cls([Valve(name, int(rate), tuple(tunnels)) for name, (rate, tunnels) in table.items()], start=start)

    def valve(self, name: str) -> Valve:
        try:
            return self.valves[name]
        except KeyError:
            raise KeyError(f"unknown valve {name!r}") from None

    def rate(self, name: str) -> int:
        return self.valve(name).flow_rate

    def distances_from(self, name: str) -> Dict[str, int]:
        cached = self._dist.get(name)
        if cached is not None:
            return cached

        self.valve(name)
        dist = {name: 0}
        queue = deque([name])
        while queue:
            cur = queue.popleft()
            for nb in self.valve(cur).tunnels:
                self.valve(nb)
                if nb not in dist:
                    dist[nb] = dist[cur] + 1
                    queue.append(nb)

        self._dist[name] = dist
        return dist

    def distance(self, a: str, b: str) -> Optional[int]:
        """Tunnel distance a -> b, None when b cannot be reached."""
        self.valve(b)
        return self.distances_from(a).get(b)


def _slot_relaxation(rates: Sequence[int], slot_starts: Sequence[int], n: int) -> int:
    """
    Upper bound on what valves with the given rates can still release: an actor whose next opening
    can release at most `start` minutes of flow opens its following valves at least 2 minutes apart.
    Pairing the largest rates with the largest slots dominates any real schedule (rearrangement).
    """
    if n <= 0 or not rates:
        return 0
    slots = []
    for start in slot_starts:
        slots.extend(int(start) - 2 * np.arange(n))
    slots = np.sort(np.maximum(np.asarray(slots, dtype=np.int64), 0))[::-1]
    r = np.sort(np.asarray(rates, dtype=np.int64))[::-1]
    m = min(n, len(r), len(slots))
    return int(np.dot(r[:m], slots[:m]))


# -----------------------------
# One actor
# -----------------------------
@dataclass(frozen=True)
class ValveState:
    minute: int
    position: str
    closed: Tuple[str, ...]   # useful valves still closed, network rank order
    flow: int                 # pressure released per minute right now
    released: int             # pressure released up to `minute`


class ValveProblem(SearchProblem):
    """
    Open valves within `time_limit` minutes to maximize released pressure.

    A decision is "walk to a closed valve and open it" (distance + 1 minutes) or "wait until the end",
    which reaps flow * remaining and is the only way a state reaches the time limit.
    """
    def __init__(self, network: ValveNetwork, time_limit: int, valves: Optional[Iterable[str]] = None):
        if int(time_limit) < 0:
            raise ValueError("time_limit must be >= 0")
        self.network = network
        self.time_limit = int(time_limit)
        if valves is None:
            self.targets = network.useful_valves
        else:
            chosen = set(valves)
            for name in chosen:
                network.valve(name)
            self.targets = tuple(v for v in network.useful_valves if v in chosen)

    def initial_state(self) -> ValveState:
        return ValveState(minute=0, position=self.network.start, closed=self.targets, flow=0, released=0)

    def expand(self, state: ValveState) -> List[ValveState]:
        T = self.time_limit
        if state.minute >= T:
            return []

        out: List[ValveState] = []
        for name in state.closed:
            d = self.network.distance(state.position, name)
            if d is None:
                continue
            opened_at = state.minute + d + 1
            if opened_at >= T:
                continue
            out.append(ValveState(
                minute=opened_at,
                position=name,
                closed=tuple(v for v in state.closed if v != name),
                flow=state.flow + self.network.rate(name),
                released=state.released + state.flow * (d + 1),
            ))

        out.append(ValveState(
            minute=T,
            position=state.position,
            closed=state.closed,
            flow=state.flow,
            released=state.released + state.flow * (T - state.minute),
        ))
        return out

    def signature(self, state: ValveState):
        # flow is implied by the closed set
        return (state.minute, state.position, state.closed)

    def score(self, state: ValveState) -> int:
        return state.released

    def bound(self, state: ValveState) -> int:
        remaining = self.time_limit - state.minute
        total = state.released + state.flow * max(remaining, 0)
        if remaining <= 0 or not state.closed:
            return total

        dists = self.network.distances_from(state.position)
        rates, reach = [], []
        for name in state.closed:
            d = dists.get(name)
            if d is not None and d + 1 < remaining:
                rates.append(self.network.rate(name))
                reach.append(d)
        if not rates:
            return total
        first = remaining - (min(reach) + 1)
        return total + _slot_relaxation(rates, [first], len(rates))


# -----------------------------
# Two actors
# -----------------------------
Actor = Tuple[str, int, int]   # (position or target, ready minute, rate opened on arrival)


@dataclass(frozen=True)
class DuoValveState:
    minute: int
    actors: Tuple[Actor, Actor]   # sorted: the two actors are interchangeable
    closed: Tuple[str, ...]       # useful valves neither opened nor claimed
    flow: int
    released: int


_RETIRE = ("retire",)


class DuoValveProblem(SearchProblem):
    """
    Two actors opening valves together. Each actor carries its pending action (target valve and the
    minute it will be open); time jumps straight to the next minute an actor becomes free.
    A free actor either claims a reachable closed valve or retires for the rest of the run.
    """
    def __init__(self, network: ValveNetwork, time_limit: int):
        if int(time_limit) < 0:
            raise ValueError("time_limit must be >= 0")
        self.network = network
        self.time_limit = int(time_limit)

    def initial_state(self) -> DuoValveState:
        a: Actor = (self.network.start, 0, 0)
        return DuoValveState(minute=0, actors=(a, a), closed=self.network.useful_valves, flow=0, released=0)

    def _choices(self, state: DuoValveState, actor: Actor) -> List[Tuple]:
        if actor[1] != state.minute:
            return [None]   # busy: keeps its pending action
        out: List[Tuple] = []
        for name in state.closed:
            d = self.network.distance(actor[0], name)
            if d is not None and state.minute + d + 1 < self.time_limit:
                out.append(("claim", name, state.minute + d + 1))
        out.append(_RETIRE)
        return out

    def _advance(self, minute: int, actors: List[Actor], closed: Tuple[str, ...], flow: int, released: int) -> DuoValveState:
        nxt = min(a[1] for a in actors)
        released += flow * (nxt - minute)
        settled: List[Actor] = []
        for pos, ready, pending in actors:
            if ready == nxt and pending:
                flow += pending
                pending = 0
            settled.append((pos, ready, pending))
        return DuoValveState(minute=nxt, actors=tuple(sorted(settled)), closed=closed, flow=flow, released=released)

    def expand(self, state: DuoValveState) -> List[DuoValveState]:
        T = self.time_limit
        if state.minute >= T:
            return []

        options = [self._choices(state, a) for a in state.actors]
        seen: Set[DuoValveState] = set()
        out: List[DuoValveState] = []
        for combo in cartesian_product(*options):
            claimed = [c[1] for c in combo if c is not None and c[0] == "claim"]
            if len(claimed) != len(set(claimed)):
                continue   # one valve cannot be opened twice

            actors: List[Actor] = []
            for actor, choice in zip(state.actors, combo):
                if choice is None:
                    actors.append(actor)
                elif choice is _RETIRE:
                    actors.append((actor[0], T, 0))
                else:
                    _, name, ready = choice
                    actors.append((name, ready, self.network.rate(name)))

            closed = tuple(v for v in state.closed if v not in claimed)
            succ = self._advance(state.minute, actors, closed, state.flow, state.released)
            # symmetric combinations collapse here, distinct outcomes never do
            if succ not in seen:
                seen.add(succ)
                out.append(succ)
        return out

    def signature(self, state: DuoValveState):
        return (state.minute, state.actors, state.closed)

    def score(self, state: DuoValveState) -> int:
        return state.released

    def bound(self, state: DuoValveState) -> int:
        T = self.time_limit
        remaining = T - state.minute
        total = state.released + state.flow * max(remaining, 0)
        for _, ready, pending in state.actors:
            total += pending * max(T - ready, 0)
        if remaining <= 0 or not state.closed:
            return total

        active = [a for a in state.actors if a[1] < T]
        rates: List[int] = []
        starts: List[int] = []
        nearest: Dict[int, int] = {}
        for name in state.closed:
            usable = False
            for k, (pos, ready, _) in enumerate(active):
                d = self.network.distances_from(pos).get(name)
                if d is None or ready + d + 1 >= T:
                    continue
                usable = True
                if k not in nearest or d < nearest[k]:
                    nearest[k] = d
            if usable:
                rates.append(self.network.rate(name))
        if not rates:
            return total
        for k, d in nearest.items():
            starts.append(T - active[k][1] - d - 1)
        return total + _slot_relaxation(rates, starts, len(rates))


# -----------------------------
# Entry points
# -----------------------------
def max_pressure(network: ValveNetwork, time_limit: int = 30, params: Optional[SearchParams] = None) -> int:
    return run_bound_search(ValveProblem(network, time_limit), params=params)["best_score"]


def max_pressure_with_helper(network: ValveNetwork, time_limit: int = 26, params: Optional[SearchParams] = None) -> int:
    return run_bound_search(DuoValveProblem(network, time_limit), params=params)["best_score"]


class SubsetPressureSolver:
    """Picklable single-actor solve restricted to a subset of valves."""

    def __init__(self, network: ValveNetwork, time_limit: int, params: Optional[SearchParams] = None):
        self.network = network
        self.time_limit = int(time_limit)
        self.params = params

    def __call__(self, subset: List[str]) -> int:
        problem = ValveProblem(self.network, self.time_limit, valves=subset)
        return run_bound_search(problem, params=self.params)["best_score"]


def max_pressure_by_partition(
    network: ValveNetwork,
    time_limit: int = 26,
    slack: Optional[int] = 1,
    workers: int = 1,
    params: Optional[SearchParams] = None,
) -> PartitionResult:
    """Two actors as two independent single-actor searches over disjoint valve sets."""
    solver = SubsetPressureSolver(network, time_limit, params=params)
    return partition_search(
        network.useful_valves,
        solver,
        PartitionSearchParams(slack=slack, workers=workers),
    )
