# alg/bound_search.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, List, Optional
import time

from core.frontier import Frontier
from core.memo import MemoTable
from core.system import FunctionProblem, SearchProblem

# -----------------------------
# Params / stats
# -----------------------------
@dataclass
class SearchParams:
    """
    Knobs for bounded state-space search. Scores and bounds are integers; a larger score is better.
    """
    order: str = "best_first"        # "best_first" | "lifo" | "fifo"

    # pruning knobs
    enable_pruning: bool = True      # discard children with bound < incumbent
    use_memo: bool = True            # discard children not improving the best score seen for their signature
    memo_allow_ties: bool = False    # True: an equal score for a known signature is still pushed, once per (hashable) state

    # sweep the frontier for entries below the incumbent every this many pops (0 = never)
    compact_every: int = 1000

    # Safety guard: stop after this many pops (result is then marked incomplete)
    max_nodes: Optional[int] = None

    # Print progress every this many pops
    progress_every: int = 0

    # known lower bound on the answer, e.g. from a previous heuristic run
    initial_incumbent: Optional[int] = None


@dataclass
class PruningStats:
    visited: int = 0
    generated: int = 0
    pushed: int = 0

    pruned_by_bound: int = 0
    pruned_by_memo: int = 0
    stale_skipped: int = 0

    compactions: int = 0
    compacted_out: int = 0
    max_frontier: int = 0

    # best-first only: remaining frontier discarded once its top bound cannot beat the incumbent
    early_stop: bool = False
    discarded_after_optimality: int = 0


# -----------------------------
# Core search engine
# -----------------------------
def run_bound_search(
    problem: SearchProblem,
    params: Optional[SearchParams] = None,
    initial_state: Any = None,
) -> Dict[str, Any]:
    """
    Branch-and-bound over the implicit graph defined by `problem`.

    Loop: pop a state, raise the incumbent to its score, expand it; each child is dropped when its
    bound is below the incumbent or when the memo already holds an equal-or-better score for its
    signature, and pushed otherwise. The frontier is swept periodically since the incumbent only rises.
    Terminates when the frontier is empty; the final incumbent is the optimum (given a sound bound).
    """
    if params is None:
        params = SearchParams()

    t0 = time.perf_counter()
    stats = PruningStats()

    state0 = problem.initial_state() if initial_state is None else initial_state

    frontier = Frontier(params.order)
    memo = MemoTable(allow_ties=params.memo_allow_ties)

    best_score: Optional[int] = params.initial_incumbent
    best_state: Any = None

    if params.use_memo:
        memo.record(problem.signature(state0), problem.score(state0), state0)
    frontier.push(state0, problem.bound(state0))
    stats.pushed += 1
    stats.max_frontier = 1

    compact_every = int(params.compact_every)
    complete = True

    while frontier:
        if params.max_nodes is not None and stats.visited >= int(params.max_nodes):
            complete = False
            break

        state, bnd = frontier.pop()
        stats.visited += 1

        s = problem.score(state)
        if best_score is None or s > best_score:
            best_score = s
            best_state = state

        if params.enable_pruning:
            if bnd < best_score:
                # pushed before the incumbent rose past it
                stats.stale_skipped += 1
                continue
            if params.order == "best_first" and bnd <= best_score:
                # every pending bound is <= bnd: nothing left can strictly improve the incumbent
                stats.early_stop = True
                stats.discarded_after_optimality += len(frontier)
                break

        for child in problem.expand(state):
            stats.generated += 1
            child_bound = problem.bound(child)

            if params.enable_pruning and child_bound < best_score:
                stats.pruned_by_bound += 1
                continue

            if params.use_memo:
                sig = problem.signature(child)
                child_score = problem.score(child)
                if not memo.admits(sig, child_score, child):
                    stats.pruned_by_memo += 1
                    continue
                memo.record(sig, child_score, child)

            frontier.push(child, child_bound)
            stats.pushed += 1

        if len(frontier) > stats.max_frontier:
            stats.max_frontier = len(frontier)

        if params.enable_pruning and compact_every > 0 and stats.visited % compact_every == 0:
            stats.compacted_out += frontier.compact(best_score)
            stats.compactions += 1

        if params.progress_every and (stats.visited % int(params.progress_every) == 0):
            print(f"[bound_search] visited={stats.visited}  frontier={len(frontier)}  best={best_score}  memo={len(memo)}")

    return {
        "best_score": best_score,
        "best_state": best_state,
        "complete": bool(complete),
        "early_stop": bool(stats.early_stop),
        "order": params.order,
        "visited_nodes": int(stats.visited),
        "generated_nodes": int(stats.generated),
        "pushed_nodes": int(stats.pushed),
        "pruned_by_bound": int(stats.pruned_by_bound),
        "pruned_by_memo": int(stats.pruned_by_memo),
        "stale_skipped": int(stats.stale_skipped),
        "compactions": int(stats.compactions),
        "compacted_out": int(stats.compacted_out),
        "discarded_after_optimality": int(stats.discarded_after_optimality),
        "max_frontier": int(stats.max_frontier),
        "memo_size": int(len(memo)),
        "runtime_sec": float(time.perf_counter() - t0),
    }


def solve(
    initial_state: Any,
    expand: Callable[[Any], List[Any]],
    signature: Callable[[Any], Hashable],
    score: Callable[[Any], int],
    bound: Callable[[Any], int],
    params: Optional[SearchParams] = None,
) -> int:
    """Callable-based entry point; returns the best score found."""
    problem = FunctionProblem(initial_state, expand, signature, score, bound)
    res = run_bound_search(problem, params=params)
    return res["best_score"]
