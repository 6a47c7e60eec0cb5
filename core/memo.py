# core/memo.py
from __future__ import annotations

from typing import Any, Dict, Hashable, Optional, Set, Tuple


class MemoTable:
    """
    Best score seen per state signature, scoped to a single search.

    With allow_ties a state that only ties the best score for its signature is admitted too, unless
    that very state was already admitted at that score; states must then be hashable. Without the
    second check a cycle of equal-score states would be re-admitted forever.
    """

    def __init__(self, allow_ties: bool = False):
        self.allow_ties = bool(allow_ties)
        self._best: Dict[Hashable, int] = {}
        self._admitted: Set[Tuple[Hashable, int, Any]] = set()

    def __len__(self) -> int:
        return len(self._best)

    def __contains__(self, signature: Hashable) -> bool:
        return signature in self._best

    def get(self, signature: Hashable) -> Optional[int]:
        return self._best.get(signature)

    def admits(self, signature: Hashable, score: int, state: Any = None) -> bool:
        prev = self._best.get(signature)
        if prev is None:
            return True
        if self.allow_ties:
            return score > prev or (score == prev and (signature, score, state) not in self._admitted)
        return score > prev

    def record(self, signature: Hashable, score: int, state: Any = None) -> None:
        if self.allow_ties:
            self._admitted.add((signature, score, state))
        prev = self._best.get(signature)
        if prev is None or score > prev:
            self._best[signature] = score
