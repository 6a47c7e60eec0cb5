# puzzles/rocks.py
from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, List, Sequence, Tuple

from alg.cycle_sim import CycleAcceleratedSimulator
from core.system import Simulation

WIDTH = 7

# cell offsets (x, y) from the bottom-left corner, in falling order
ROCK_SHAPES: Tuple[Tuple[Tuple[int, int], ...], ...] = (
    ((0, 0), (1, 0), (2, 0), (3, 0)),             # horizontal bar
    ((1, 0), (0, 1), (1, 1), (2, 1), (1, 2)),     # plus
    ((0, 0), (1, 0), (2, 0), (2, 1), (2, 2)),     # reversed L
    ((0, 0), (0, 1), (0, 2), (0, 3)),             # vertical bar
    ((0, 0), (1, 0), (0, 1), (1, 1)),             # square
)

FINGERPRINT_MODES = ("surface", "skyline")


def parse_jets(text: str) -> List[int]:
    jets = []
    for ch in text.strip():
        if ch == "<":
            jets.append(-1)
        elif ch == ">":
            jets.append(1)
        else:
            raise ValueError(f"Unknown jet direction {ch!r}")
    if not jets:
        raise ValueError("Empty jet pattern")
    return jets


@dataclass(frozen=True)
class ChamberState:
    rock_index: int
    jet_index: int
    tops: Tuple[int, ...]         # per column: height of the highest occupied cell + 1 (0 = floor)
    cells: FrozenSet[Tuple[int, int]]   # occupied cells a later rock can still touch


class RockChamber(Simulation):
    """
    Rocks fall one per step into a 7-wide chamber: pushed by the next jet, then one unit down,
    until moving down would collide. Measurement = tower height after the rock settles.

    Only occupied cells that a later rock could still touch are kept (see reachable_boundary).

    Fingerprints:
      surface: rock index, jet index, and those kept cells relative to the tower height.
               Equal surfaces evolve identically.
      skyline: rock index, jet index, and column heights relative to the lowest one.
               Cheaper, but two different surfaces may share it.
    """
    def __init__(self, jets: Sequence[int], fingerprint: str = "surface"):
        if not jets:
            raise ValueError("Empty jet pattern")
        if fingerprint not in FINGERPRINT_MODES:
            raise ValueError(f"Unknown fingerprint mode: {fingerprint}")
        self.jets = tuple(int(j) for j in jets)
        self.fingerprint_mode = fingerprint

    def initial_state(self) -> ChamberState:
        return ChamberState(rock_index=0, jet_index=0, tops=(0,) * WIDTH, cells=frozenset())

    def _fits(self, cells, shape, x: int, y: int) -> bool:
        for dx, dy in shape:
            cx, cy = x + dx, y + dy
            if cx < 0 or cx >= WIDTH or cy < 0 or (cx, cy) in cells:
                return False
        return True

    def run_step(self, state: ChamberState):
        shape = ROCK_SHAPES[state.rock_index]
        cells = set(state.cells)
        height = max(state.tops)
        x, y = 2, height + 3
        jet_index = state.jet_index

        while True:
            push = self.jets[jet_index]
            jet_index = (jet_index + 1) % len(self.jets)
            if self._fits(cells, shape, x + push, y):
                x += push
            if self._fits(cells, shape, x, y - 1):
                y -= 1
            else:
                break

        tops = list(state.tops)
        for dx, dy in shape:
            cx, cy = x + dx, y + dy
            cells.add((cx, cy))
            if cy + 1 > tops[cx]:
                tops[cx] = cy + 1

        nxt = ChamberState(
            rock_index=(state.rock_index + 1) % len(ROCK_SHAPES),
            jet_index=jet_index,
            tops=tuple(tops),
            cells=reachable_boundary(cells, max(tops)),
        )
        return nxt, self._fingerprint(nxt), max(tops)

    def _fingerprint(self, state: ChamberState):
        if self.fingerprint_mode == "skyline":
            floor = min(state.tops)
            return (state.rock_index, state.jet_index, tuple(t - floor for t in state.tops))
        height = max(state.tops)
        surface = frozenset((cx, cy - height) for cx, cy in state.cells)
        return (state.rock_index, state.jet_index, surface)


def reachable_boundary(cells, height: int) -> FrozenSet[Tuple[int, int]]:
    """
    Occupied cells next to (left of, right of, or below) some empty cell a falling rock cell can still
    reach, moving left, right or down from row `height`. Collisions only ever test these cells.
    """
    seen = set()
    boundary = set()
    stack = [(x, height) for x in range(WIDTH)]
    while stack:
        x, y = stack.pop()
        if (x, y) in seen:
            continue
        seen.add((x, y))
        for nx, ny in ((x - 1, y), (x + 1, y), (x, y - 1)):
            if nx < 0 or nx >= WIDTH or ny < 0:
                continue
            if (nx, ny) in cells:
                boundary.add((nx, ny))
            elif (nx, ny) not in seen:
                stack.append((nx, ny))
    return frozenset(boundary)


def tower_height(
    jets: Sequence[int],
    n_rocks: int,
    max_steps: int = 100_000,
    fingerprint: str = "surface",
) -> int:
    """Tower height after n_rocks rocks have settled."""
    n_rocks = int(n_rocks)
    if n_rocks < 0:
        raise ValueError("n_rocks must be >= 0")
    if n_rocks == 0:
        return 0
    sim = CycleAcceleratedSimulator(RockChamber(jets, fingerprint=fingerprint), max_steps=max_steps)
    return sim.value_at(n_rocks - 1)
