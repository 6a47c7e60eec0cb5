# alg/partition_search.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Sequence
import multiprocessing as mp

from core.partitions import balanced_partitions
from core.results import PartitionResult


@dataclass
class PartitionSearchParams:
    # smaller side must hold >= len(items)//2 - slack items; None enumerates every partition
    slack: Optional[int] = 1

    # >1: solve distinct subsets in a process pool (solve_subset must be picklable)
    workers: int = 1

    progress_every: int = 0


def _solve_subset_worker(args):
    fn, subset = args
    return subset, fn(sorted(subset))


def _pool_context():
    # Prefer fork on Linux (no re-import of the caller), keep spawn as fallback.
    try:
        return mp.get_context("fork")
    except ValueError:
        return mp.get_context("spawn")


def partition_search(
    items: Sequence[Any],
    solve_subset: Callable[[List[Any]], int],
    params: Optional[PartitionSearchParams] = None,
) -> PartitionResult:
    """
    Divide-and-conquer for two independent agents: split the resource set into two disjoint groups,
    score each group on its own with solve_subset and add the results; the answer is the best split.
    """
    if params is None:
        params = PartitionSearchParams()

    items = list(items)
    parts = balanced_partitions(items, slack=params.slack)
    skipped = (2 ** (len(items) - 1) if items else 1) - len(parts)

    subsets: List[FrozenSet[Any]] = []
    seen = set()
    for a, b in parts:
        for group in (frozenset(a), frozenset(b)):
            if group not in seen:
                seen.add(group)
                subsets.append(group)

    cache: Dict[FrozenSet[Any], int] = {}
    if int(params.workers) > 1 and len(subsets) > 1:
        ctx = _pool_context()
        with ctx.Pool(processes=int(params.workers)) as pool:
            for subset, value in pool.imap_unordered(_solve_subset_worker, [(solve_subset, s) for s in subsets]):
                cache[subset] = int(value)
    else:
        for i, subset in enumerate(subsets):
            cache[subset] = int(solve_subset(sorted(subset)))
            if params.progress_every and ((i + 1) % int(params.progress_every) == 0):
                print(f"[partition] solved {i + 1}/{len(subsets)} subsets")

    best_score: Optional[int] = None
    best_partition = None
    for a, b in parts:
        total = cache[frozenset(a)] + cache[frozenset(b)]
        if best_score is None or total > best_score:
            best_score = total
            best_partition = (a, b)

    return PartitionResult(
        best_score=int(best_score) if best_score is not None else 0,
        best_partition=best_partition,
        partitions_evaluated=len(parts),
        partitions_skipped=int(skipped),
        subsets_solved=len(cache),
        meta={"slack": params.slack, "workers": int(params.workers)},
    )
