# puzzles/library.py
from __future__ import annotations

from typing import Any, Dict, Optional
import time

from alg.bound_search import SearchParams
from alg.cycle_sim import CycleAcceleratedSimulator
from puzzles.blizzards import BlizzardValley, fastest_crossing, fastest_round_trip
from puzzles.blueprints import Blueprint, geode_product, quality_level_sum
from puzzles.hiking import Heightmap, fewest_steps_from_lowest, fewest_steps_from_start
from puzzles.rocks import parse_jets, tower_height
from puzzles.sequences import PeriodicSequence
from puzzles.valves import (
    ValveNetwork,
    max_pressure,
    max_pressure_by_partition,
    max_pressure_with_helper,
)

EXAMPLE_VALVES = {
    "AA": (0, ["DD", "II", "BB"]),
    "BB": (13, ["CC", "AA"]),
    "CC": (2, ["DD", "BB"]),
    "DD": (20, ["CC", "AA", "EE"]),
    "EE": (3, ["FF", "DD"]),
    "FF": (0, ["EE", "GG"]),
    "GG": (0, ["FF", "HH"]),
    "HH": (22, ["GG"]),
    "II": (0, ["AA", "JJ"]),
    "JJ": (21, ["II"]),
}

EXAMPLE_JETS = ">>><<><>><<<>><>>><<<>>><<<><<<>><>><<>>"

EXAMPLE_HEIGHTMAP = """
Sabqponm
abcryxxl
accszExk
acctuvwj
abdefghi
"""

EXAMPLE_VALLEY = """
#.######
#>>.<^<#
#.<..<<#
#>v.><>#
#<^v^^>#
######.#
"""


def example_blueprints():
    return [
        Blueprint.from_costs(1, 4, 2, 3, 14, 2, 7),
        Blueprint.from_costs(2, 2, 3, 3, 8, 3, 12),
    ]


def _example_valves_two_node() -> Dict[str, Any]:
    network = ValveNetwork.from_table({"A": (0, ["B"]), "B": (10, ["A"])}, start="A")
    return {"kind": "valves", "network": network, "time_limit": 3, "expected": 10}


def _example_valves_30() -> Dict[str, Any]:
    return {"kind": "valves", "network": ValveNetwork.from_table(EXAMPLE_VALVES), "time_limit": 30, "expected": 1651}


def _example_valves_duo_26() -> Dict[str, Any]:
    return {"kind": "valves_duo", "network": ValveNetwork.from_table(EXAMPLE_VALVES), "time_limit": 26, "expected": 1707}


def _example_valves_partition_26() -> Dict[str, Any]:
    return {
        "kind": "valves_partition",
        "network": ValveNetwork.from_table(EXAMPLE_VALVES),
        "time_limit": 26,
        "slack": 1,
        "expected": 1707,
    }


def _example_blueprints_24() -> Dict[str, Any]:
    return {"kind": "blueprints_quality", "blueprints": example_blueprints(), "time_limit": 24, "expected": 33}


def _example_blueprints_32() -> Dict[str, Any]:
    return {"kind": "blueprints_product", "blueprints": example_blueprints(), "time_limit": 32, "expected": 56 * 62}


def _example_rocks_2022() -> Dict[str, Any]:
    return {"kind": "rocks", "jets": parse_jets(EXAMPLE_JETS), "n_rocks": 2022, "expected": 3068}


def _example_rocks_trillion() -> Dict[str, Any]:
    return {"kind": "rocks", "jets": parse_jets(EXAMPLE_JETS), "n_rocks": 1_000_000_000_000, "expected": 1514285714288}


def _example_blizzards_crossing() -> Dict[str, Any]:
    return {"kind": "blizzards_crossing", "valley": BlizzardValley.from_text(EXAMPLE_VALLEY), "expected": 18}


def _example_blizzards_round_trip() -> Dict[str, Any]:
    return {"kind": "blizzards_round_trip", "valley": BlizzardValley.from_text(EXAMPLE_VALLEY), "trips": 3, "expected": 54}


def _example_hiking_from_start() -> Dict[str, Any]:
    return {"kind": "hiking_from_start", "heightmap": Heightmap.from_text(EXAMPLE_HEIGHTMAP), "expected": 31}


def _example_hiking_from_lowest() -> Dict[str, Any]:
    return {"kind": "hiking_from_lowest", "heightmap": Heightmap.from_text(EXAMPLE_HEIGHTMAP), "expected": 29}


def _example_sequence_123() -> Dict[str, Any]:
    return {"kind": "sequence", "values": [1, 2, 3], "step": 1_000_000, "expected": 2}


EXAMPLES = {
    "valves_two_node": _example_valves_two_node,
    "valves_30": _example_valves_30,
    "valves_duo_26": _example_valves_duo_26,
    "valves_partition_26": _example_valves_partition_26,
    "blueprints_24": _example_blueprints_24,
    "blueprints_32": _example_blueprints_32,
    "rocks_2022": _example_rocks_2022,
    "rocks_trillion": _example_rocks_trillion,
    "blizzards_crossing": _example_blizzards_crossing,
    "blizzards_round_trip": _example_blizzards_round_trip,
    "hiking_from_start": _example_hiking_from_start,
    "hiking_from_lowest": _example_hiking_from_lowest,
    "sequence_123": _example_sequence_123,
}


def run_example(
    name: str,
    order: str = "best_first",
    use_memo: bool = True,
    enable_pruning: bool = True,
    compact_every: int = 1000,
    progress_every: int = 0,
    workers: int = 1,
    max_steps: int = 100_000,
    params: Optional[SearchParams] = None,
) -> Dict[str, Any]:
    """Evaluate one named example. `params`, when given, overrides the individual search knobs."""
    if name not in EXAMPLES:
        raise ValueError(f"Unknown example: {name}")
    if params is None:
        params = SearchParams(
            order=order,
            enable_pruning=enable_pruning,
            use_memo=use_memo,
            compact_every=compact_every,
            progress_every=progress_every,
        )
    inst = EXAMPLES[name]()
    kind = inst["kind"]

    t0 = time.perf_counter()
    meta: Dict[str, Any] = {}
    if kind == "valves":
        answer = max_pressure(inst["network"], inst["time_limit"], params=params)
    elif kind == "valves_duo":
        answer = max_pressure_with_helper(inst["network"], inst["time_limit"], params=params)
    elif kind == "valves_partition":
        res = max_pressure_by_partition(
            inst["network"], inst["time_limit"], slack=inst["slack"], workers=workers, params=params
        )
        answer = res.best_score
        meta = {
            "partitions_evaluated": res.partitions_evaluated,
            "partitions_skipped": res.partitions_skipped,
            "subsets_solved": res.subsets_solved,
        }
    elif kind == "blueprints_quality":
        answer = quality_level_sum(inst["blueprints"], inst["time_limit"], workers=workers, params=params)
    elif kind == "blueprints_product":
        answer = geode_product(inst["blueprints"], inst["time_limit"], workers=workers, params=params)
    elif kind == "rocks":
        answer = tower_height(inst["jets"], inst["n_rocks"], max_steps=max_steps)
    elif kind == "blizzards_crossing":
        answer = fastest_crossing(inst["valley"], params=params)
    elif kind == "blizzards_round_trip":
        answer = fastest_round_trip(inst["valley"], trips=inst["trips"], params=params)
    elif kind == "hiking_from_start":
        answer = fewest_steps_from_start(inst["heightmap"], params=params)
    elif kind == "hiking_from_lowest":
        answer = fewest_steps_from_lowest(inst["heightmap"], params=params)
    elif kind == "sequence":
        sim = CycleAcceleratedSimulator(PeriodicSequence(inst["values"]), max_steps=max_steps)
        answer = sim.value_at(inst["step"])
        meta = {"cycle_length": sim.cycle.cycle_length, "steps_simulated": sim.steps_simulated}
    else:
        raise ValueError(f"Unknown example kind: {kind}")

    return {
        "example": name,
        "kind": kind,
        "order": params.order,
        "answer": answer,
        "expected": inst.get("expected"),
        "ok": inst.get("expected") is None or answer == inst["expected"],
        "runtime_sec": float(time.perf_counter() - t0),
        **meta,
    }
