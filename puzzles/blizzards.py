# puzzles/blizzards.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from alg.bound_search import SearchParams, run_bound_search
from core.system import SearchProblem

Position = Tuple[int, int]  # (column, row) in the input text, row 0 = top wall

# blizzard symbol -> (dx, dy) per minute
DIRECTIONS = {">": (1, 0), "<": (-1, 0), "v": (0, 1), "^": (0, -1)}
MOVES: Tuple[Position, ...] = ((0, 1), (1, 0), (0, 0), (-1, 0), (0, -1))


class BlizzardValley:
    """
    Walled rectangular valley with one opening in the top wall (entrance) and one in the bottom wall
    (exit). Blizzards move one cell per minute and wrap around inside the walls, so the whole
    pattern repeats every lcm(width, height) minutes; occupied[t % period, iy, ix] holds it.
    """
    def __init__(self, width: int, height: int, entrance: Position, exit: Position, blizzards):
        if width <= 0 or height <= 0:
            raise ValueError("Valley interior must be non-empty")
        self.width = int(width)
        self.height = int(height)
        self.entrance = entrance
        self.exit = exit
        self.period = int(np.lcm(self.width, self.height))

        t = np.arange(self.period)
        occ = np.zeros((self.period, self.height, self.width), dtype=bool)
        for ix, iy, symbol in blizzards:
            dx, dy = DIRECTIONS[symbol]
            occ[t, (iy + dy * t) % self.height, (ix + dx * t) % self.width] = True
        self.occupied = occ

    @classmethod
    def from_text(cls, text: str) -> "BlizzardValley":
        rows = [line.strip() for line in text.strip().splitlines() if line.strip()]
        if len(rows) < 3:
            raise ValueError("Valley needs a top wall, at least one interior row and a bottom wall")
        cols = len(rows[0])
        if cols < 3 or any(len(r) != cols for r in rows):
            raise ValueError("Valley rows must share one width of at least 3")

        blizzards = []
        for y, row in enumerate(rows):
            for x, ch in enumerate(row):
                if ch not in "#." and ch not in DIRECTIONS:
                    raise ValueError(f"Unknown valley cell {ch!r} at row {y}, column {x}")
                on_wall = y in (0, len(rows) - 1) or x in (0, cols - 1)
                if on_wall and ch in DIRECTIONS:
                    raise ValueError(f"Blizzard on the wall at row {y}, column {x}")
                if not on_wall and ch == "#":
                    raise ValueError(f"Wall inside the valley at row {y}, column {x}")
                if ch in DIRECTIONS:
                    blizzards.append((x - 1, y - 1, ch))

        top = [x for x, ch in enumerate(rows[0]) if ch == "."]
        bottom = [x for x, ch in enumerate(rows[-1]) if ch == "."]
        if len(top) != 1 or len(bottom) != 1:
            raise ValueError("Top and bottom walls need exactly one opening each")
        if any(row[0] == "." or row[-1] == "." for row in rows):
            raise ValueError("Side walls cannot have openings")

        return cls(
            width=cols - 2,
            height=len(rows) - 2,
            entrance=(top[0], 0),
            exit=(bottom[0], len(rows) - 1),
            blizzards=blizzards,
        )

    def is_free(self, position: Position, minute: int) -> bool:
        if position == self.entrance or position == self.exit:
            return True
        x, y = position
        if not (1 <= x <= self.width and 1 <= y <= self.height):
            return False
        return not self.occupied[minute % self.period, y - 1, x - 1]


@dataclass(frozen=True)
class TripState:
    minute: int
    position: Position


class BlizzardProblem(SearchProblem):
    """
    Earliest arrival at `goal`, leaving `start` at `start_minute`. Each minute the walker moves one
    cell or waits, and must never share a cell with a blizzard.

    Scores are negated minutes so that earlier is better: -minute at the goal, and below every
    reachable goal score elsewhere. The signature is (position, minute % period), as the valley
    repeats with that period and the earlier of two such arrivals reaches everything the later does.
    """
    def __init__(
        self,
        valley: BlizzardValley,
        start: Position,
        goal: Position,
        start_minute: int = 0,
        max_minutes: int = 10_000,
    ):
        if int(max_minutes) < 0:
            raise ValueError("max_minutes must be >= 0")
        self.valley = valley
        self.start = start
        self.goal = goal
        self.start_minute = int(start_minute)
        self.max_minutes = int(max_minutes)

    def initial_state(self) -> TripState:
        return TripState(minute=self.start_minute, position=self.start)

    def expand(self, state: TripState) -> List[TripState]:
        if state.position == self.goal or state.minute - self.start_minute >= self.max_minutes:
            return []
        x, y = state.position
        nxt = state.minute + 1
        out = []
        for dx, dy in MOVES:
            cell = (x + dx, y + dy)
            if self.valley.is_free(cell, nxt):
                out.append(TripState(minute=nxt, position=cell))
        return out

    def signature(self, state: TripState):
        return (state.position, state.minute % self.valley.period)

    def score(self, state: TripState) -> int:
        if state.position == self.goal:
            return -state.minute
        return -(state.minute + self.max_minutes + 1)

    def bound(self, state: TripState) -> int:
        x, y = state.position
        gx, gy = self.goal
        return -(state.minute + abs(gx - x) + abs(gy - y))


def fastest_trip(
    valley: BlizzardValley,
    start: Position,
    goal: Position,
    start_minute: int = 0,
    max_minutes: int = 10_000,
    params: Optional[SearchParams] = None,
) -> int:
    """Absolute minute of the earliest arrival at `goal`."""
    if params is None:
        params = SearchParams(order="fifo")
    problem = BlizzardProblem(valley, start, goal, start_minute=start_minute, max_minutes=max_minutes)
    res = run_bound_search(problem, params=params)
    best = res["best_state"]
    if best is None or best.position != goal:
        raise RuntimeError(f"Goal {goal} not reachable within {max_minutes} minutes of minute {start_minute}")
    return best.minute


def fastest_crossing(valley: BlizzardValley, params: Optional[SearchParams] = None) -> int:
    return fastest_trip(valley, valley.entrance, valley.exit, params=params)


def fastest_round_trip(valley: BlizzardValley, trips: int = 3, params: Optional[SearchParams] = None) -> int:
    """
    Entrance to exit, back, and so on for `trips` crossings; each leg starts when the previous one
    arrives. Waiting at an opening is always safe, so arriving early never hurts the next leg.
    """
    if int(trips) < 1:
        raise ValueError("trips must be >= 1")
    minute = 0
    ends = (valley.entrance, valley.exit)
    for i in range(int(trips)):
        minute = fastest_trip(valley, ends[i % 2], ends[(i + 1) % 2], start_minute=minute, params=params)
    return minute
