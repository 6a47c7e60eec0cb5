# puzzles/blueprints.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
import multiprocessing as mp
import numpy as np

from alg.bound_search import SearchParams, run_bound_search
from core.system import SearchProblem

ORE, CLAY, OBSIDIAN, GEODE = 0, 1, 2, 3
RESOURCES = ("ore", "clay", "obsidian", "geode")


@dataclass(frozen=True, eq=False)
class Blueprint:
    """
    costs[robot, resource]: how much of `resource` one robot of kind `robot` costs.
    """
    id: int
    costs: np.ndarray  # (4, 4)

    def __post_init__(self):
        c = np.asarray(self.costs, dtype=np.int64)
        if c.shape != (4, 4):
            raise ValueError(f"Blueprint {self.id}: costs must be 4x4, got {c.shape}")
        if np.any(c < 0):
            raise ValueError(f"Blueprint {self.id}: negative cost")
        object.__setattr__(self, "costs", c)

    @classmethod
    def from_costs(
        cls,
        id: int,
        ore_robot_ore: int,
        clay_robot_ore: int,
        obsidian_robot_ore: int,
        obsidian_robot_clay: int,
        geode_robot_ore: int,
        geode_robot_obsidian: int,
    ) -> "Blueprint":
        c = np.zeros((4, 4), dtype=np.int64)
        c[ORE, ORE] = ore_robot_ore
        c[CLAY, ORE] = clay_robot_ore
        c[OBSIDIAN, ORE] = obsidian_robot_ore
        c[OBSIDIAN, CLAY] = obsidian_robot_clay
        c[GEODE, ORE] = geode_robot_ore
        c[GEODE, OBSIDIAN] = geode_robot_obsidian
        return cls(id=int(id), costs=c)

    def max_robots_needed(self, time_limit: int) -> Tuple[int, int, int, int]:
        # at most one robot is built per minute, so more producers than the priciest recipe is waste
        caps = self.costs.max(axis=0)
        return (int(caps[ORE]), int(caps[CLAY]), int(caps[OBSIDIAN]), int(time_limit))


@dataclass(frozen=True)
class FactoryState:
    minute: int
    robots: Tuple[int, int, int, int]
    resources: Tuple[int, int, int, int]


class BlueprintProblem(SearchProblem):
    """
    Maximize geodes opened in `time_limit` minutes. A decision is "wait until the next robot of some
    kind is affordable, then build it", or "idle to the end", which collects everything the current
    robots will still produce.
    """
    def __init__(self, blueprint: Blueprint, time_limit: int):
        if int(time_limit) < 0:
            raise ValueError("time_limit must be >= 0")
        self.blueprint = blueprint
        self.time_limit = int(time_limit)
        self._costs: List[List[int]] = blueprint.costs.tolist()
        self._caps = blueprint.max_robots_needed(self.time_limit)

    def initial_state(self) -> FactoryState:
        return FactoryState(minute=0, robots=(1, 0, 0, 0), resources=(0, 0, 0, 0))

    def expand(self, state: FactoryState) -> List[FactoryState]:
        T = self.time_limit
        m = state.minute
        if m >= T:
            return []

        robots, res = state.robots, state.resources
        out: List[FactoryState] = []
        for kind in (GEODE, OBSIDIAN, CLAY, ORE):
            if robots[kind] >= self._caps[kind]:
                continue
            cost = self._costs[kind]

            wait = 0
            feasible = True
            for r in range(4):
                need = cost[r] - res[r]
                if need <= 0:
                    continue
                if robots[r] == 0:
                    feasible = False
                    break
                wait = max(wait, -(-need // robots[r]))
            if not feasible:
                continue

            done = m + wait + 1
            if done >= T:
                continue
            new_robots = tuple(n + 1 if r == kind else n for r, n in enumerate(robots))
            new_res = tuple(res[r] + robots[r] * (wait + 1) - cost[r] for r in range(4))
            out.append(FactoryState(minute=done, robots=new_robots, resources=new_res))

        out.append(FactoryState(
            minute=T,
            robots=robots,
            resources=tuple(res[r] + robots[r] * (T - m) for r in range(4)),
        ))
        return out

    def signature(self, state: FactoryState):
        """
        Geodes are left out (they are the score). Ore, clay and obsidian above what can still be
        spent are clamped: no plan spends more than the cap per minute, so the excess never matters.
        """
        rem = self.time_limit - state.minute
        stock = []
        for r in (ORE, CLAY, OBSIDIAN):
            cap = self._caps[r]
            spendable = 0 if rem <= 0 else max(cap, cap * rem - state.robots[r] * (rem - 1))
            stock.append(min(state.resources[r], spendable))
        return (state.minute, state.robots, tuple(stock))

    def score(self, state: FactoryState) -> int:
        return state.resources[GEODE]

    def bound(self, state: FactoryState) -> int:
        """
        Relaxation: ore is free and every minute may build one robot of each kind it can afford;
        a clay robot is built every minute. Building as early as possible is optimal there.
        """
        remaining = self.time_limit - state.minute
        clay, obs, geo = state.resources[CLAY], state.resources[OBSIDIAN], state.resources[GEODE]
        clay_r, obs_r, geo_r = state.robots[CLAY], state.robots[OBSIDIAN], state.robots[GEODE]
        obs_cost_clay = self._costs[OBSIDIAN][CLAY]
        geode_cost_obs = self._costs[GEODE][OBSIDIAN]

        for _ in range(max(remaining, 0)):
            build_geode = obs >= geode_cost_obs
            build_obs = clay >= obs_cost_clay
            clay += clay_r
            obs += obs_r
            geo += geo_r
            if build_geode:
                obs -= geode_cost_obs
                geo_r += 1
            if build_obs:
                clay -= obs_cost_clay
                obs_r += 1
            clay_r += 1
        return geo


def max_geodes(blueprint: Blueprint, time_limit: int, params: Optional[SearchParams] = None) -> int:
    return run_bound_search(BlueprintProblem(blueprint, time_limit), params=params)["best_score"]


def _max_geodes_worker(args):
    blueprint, time_limit, params = args
    return max_geodes(blueprint, time_limit, params=params)


def _all_max_geodes(
    blueprints: Sequence[Blueprint],
    time_limit: int,
    workers: int,
    params: Optional[SearchParams],
) -> List[int]:
    jobs = [(bp, int(time_limit), params) for bp in blueprints]
    if int(workers) <= 1 or len(jobs) <= 1:
        return [_max_geodes_worker(j) for j in jobs]

    # Prefer fork on Linux (no pickling of the caller's module), keep spawn as fallback.
    try:
        ctx = mp.get_context("fork")
    except ValueError:
        ctx = mp.get_context("spawn")
    with ctx.Pool(processes=int(workers)) as pool:
        return list(pool.map(_max_geodes_worker, jobs))


def quality_level_sum(
    blueprints: Sequence[Blueprint],
    time_limit: int = 24,
    workers: int = 1,
    params: Optional[SearchParams] = None,
) -> int:
    maxes = _all_max_geodes(blueprints, time_limit, workers, params)
    return sum(bp.id * g for bp, g in zip(blueprints, maxes))


def geode_product(
    blueprints: Sequence[Blueprint],
    time_limit: int = 32,
    count: int = 3,
    workers: int = 1,
    params: Optional[SearchParams] = None,
) -> int:
    maxes = _all_max_geodes(list(blueprints)[: int(count)], time_limit, workers, params)
    product = 1
    for g in maxes:
        product *= int(g)
    return product
