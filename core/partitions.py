# core/partitions.py
from __future__ import annotations
from typing import Any, List, Optional, Sequence, Tuple


def all_partitions(items: Sequence[Any]) -> List[Tuple[List[Any], List[Any]]]:
    """
    Every unordered split of items into two groups, items[0] always in the first group,
    so each split appears once: 2^(k-1) results for k >= 1 items.
    """
    items = list(items)
    if not items:
        return [([], [])]

    first, rest = items[0], items[1:]
    out: List[Tuple[List[Any], List[Any]]] = []

    def rec(i: int, group_a: List[Any], group_b: List[Any]) -> None:
        if i == len(rest):
            out.append((list(group_a), list(group_b)))
            return
        group_a.append(rest[i])
        rec(i + 1, group_a, group_b)
        group_a.pop()
        group_b.append(rest[i])
        rec(i + 1, group_a, group_b)
        group_b.pop()

    rec(0, [first], [])
    return out


def balanced_partitions(items: Sequence[Any], slack: Optional[int] = 1) -> List[Tuple[List[Any], List[Any]]]:
    """all_partitions restricted to splits whose smaller side has >= len(items)//2 - slack items."""
    parts = all_partitions(items)
    if slack is None:
        return parts
    min_side = len(items) // 2 - int(slack)
    return [(a, b) for a, b in parts if min(len(a), len(b)) >= min_side]


def cartesian_product(*choices: Sequence[Any]) -> List[Tuple[Any, ...]]:
    combos: List[Tuple[Any, ...]] = [()]
    for options in choices:
        combos = [c + (x,) for c in combos for x in options]
    return combos
