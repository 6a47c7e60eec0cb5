# core/frontier.py
from __future__ import annotations

from collections import deque
from typing import Any, List, Optional, Tuple
import heapq


FRONTIER_ORDERS = ("best_first", "lifo", "fifo")


class Frontier:
    """
    Owned container of pending states, each stored with its bound.

      - best_first: heap keyed by (-bound, counter); counter avoids comparing states on ties
      - lifo:       plain list used as a stack (DFS-like)
      - fifo:       deque (BFS-like)
    """
    def __init__(self, order: str = "best_first"):
        order = str(order).lower()
        if order not in FRONTIER_ORDERS:
            raise ValueError(f"Unknown frontier order: {order}")
        self.order = order
        self._counter = 0
        if order == "fifo":
            self._items: Any = deque()
        else:
            self._items = []

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return len(self._items) > 0

    def push(self, state: Any, bound: int) -> None:
        if self.order == "best_first":
            self._counter += 1
            heapq.heappush(self._items, (-bound, self._counter, state))
        else:
            self._items.append((bound, state))

    def pop(self) -> Tuple[Any, int]:
        if not self._items:
            raise IndexError("pop from empty frontier")
        if self.order == "best_first":
            neg_bound, _, state = heapq.heappop(self._items)
            return state, -neg_bound
        if self.order == "fifo":
            bound, state = self._items.popleft()
        else:
            bound, state = self._items.pop()
        return state, bound

    def peek_bound(self) -> Optional[int]:
        # only meaningful for best_first: the largest bound still pending
        if self.order != "best_first" or not self._items:
            return None
        return -self._items[0][0]

    def compact(self, threshold: int) -> int:
        """Drop every entry whose bound is below threshold. Returns the number removed."""
        before = len(self._items)
        if self.order == "best_first":
            kept: List[Tuple[int, int, Any]] = [item for item in self._items if -item[0] >= threshold]
            heapq.heapify(kept)
            self._items = kept
        elif self.order == "fifo":
            self._items = deque(item for item in self._items if item[0] >= threshold)
        else:
            self._items = [item for item in self._items if item[0] >= threshold]
        return before - len(self._items)
