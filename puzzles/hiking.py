# puzzles/hiking.py
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from alg.bound_search import SearchParams, run_bound_search
from core.system import SearchProblem

Position = Tuple[int, int]  # (row, column)


class Heightmap:
    """Letter grid a..z; S is the start at height a, E the summit at height z."""

    def __init__(self, heights: np.ndarray, start: Position, summit: Position):
        self.heights = np.asarray(heights, dtype=np.int64)
        if self.heights.ndim != 2 or self.heights.size == 0:
            raise ValueError("Heightmap must be a non-empty 2D grid")
        self.start = start
        self.summit = summit

    @classmethod
    def from_text(cls, text: str) -> "Heightmap":
        rows = [line.strip() for line in text.strip().splitlines() if line.strip()]
        if not rows or any(len(r) != len(rows[0]) for r in rows):
            raise ValueError("Heightmap rows must be non-empty and share one width")
        heights = np.zeros((len(rows), len(rows[0])), dtype=np.int64)
        start = summit = None
        for r, row in enumerate(rows):
            for c, ch in enumerate(row):
                if ch == "S":
                    start, ch = (r, c), "a"
                elif ch == "E":
                    summit, ch = (r, c), "z"
                if not ("a" <= ch <= "z"):
                    raise ValueError(f"Unknown height {ch!r} at row {r}, column {c}")
                heights[r, c] = ord(ch) - ord("a")
        if start is None or summit is None:
            raise ValueError("Heightmap needs both S and E")
        return cls(heights, start, summit)


@dataclass(frozen=True)
class WalkState:
    steps: int
    position: Position


class DescentProblem(SearchProblem):
    """
    Fewest steps between the summit and any target cell, walked backwards from the summit: a step
    may go down at most one unit and up any amount. Score is -steps at a target, and below every
    target score elsewhere; the signature is the position.
    """
    def __init__(self, heightmap: Heightmap, targets: List[Position]):
        if not targets:
            raise ValueError("DescentProblem needs at least one target")
        self.heightmap = heightmap
        self.targets = set(targets)
        self._target_rc = np.array(sorted(self.targets), dtype=np.int64)
        self._lowest_target = int(min(heightmap.heights[t] for t in self.targets))
        self._cells = int(heightmap.heights.size)

    def initial_state(self) -> WalkState:
        return WalkState(steps=0, position=self.heightmap.summit)

    def expand(self, state: WalkState) -> List[WalkState]:
        if state.position in self.targets:
            return []
        h = self.heightmap.heights
        r, c = state.position
        out = []
        for dr, dc in ((1, 0), (-1, 0), (0, 1), (0, -1)):
            nr, nc = r + dr, c + dc
            if 0 <= nr < h.shape[0] and 0 <= nc < h.shape[1] and h[nr, nc] >= h[r, c] - 1:
                out.append(WalkState(steps=state.steps + 1, position=(nr, nc)))
        return out

    def signature(self, state: WalkState):
        return state.position

    def score(self, state: WalkState) -> int:
        if state.position in self.targets:
            return -state.steps
        return -(state.steps + self._cells)

    def bound(self, state: WalkState) -> int:
        if state.position in self.targets:
            return -state.steps
        r, c = state.position
        # each step covers one cell and descends at most one unit
        dist = int((np.abs(self._target_rc[:, 0] - r) + np.abs(self._target_rc[:, 1] - c)).min())
        drop = int(self.heightmap.heights[r, c]) - self._lowest_target
        return -(state.steps + max(dist, drop))


def _fewest_steps(heightmap: Heightmap, targets: List[Position], params: Optional[SearchParams]) -> int:
    if params is None:
        params = SearchParams(order="fifo")
    res = run_bound_search(DescentProblem(heightmap, targets), params=params)
    best = res["best_state"]
    if best is None or best.position not in set(targets):
        raise RuntimeError("No path between the summit and the targets")
    return best.steps


def fewest_steps_from_start(heightmap: Heightmap, params: Optional[SearchParams] = None) -> int:
    return _fewest_steps(heightmap, [heightmap.start], params)


def fewest_steps_from_lowest(heightmap: Heightmap, params: Optional[SearchParams] = None) -> int:
    """Best starting cell at height a."""
    lows = [(int(r), int(c)) for r, c in np.argwhere(heightmap.heights == 0)]
    return _fewest_steps(heightmap, lows, params)
