# alg/exhaustive_search.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from core.system import SearchProblem


@dataclass
class ExhaustiveSearchParams:
    """
    Parameters for brute-force enumeration of every reachable state.
    """
    # Safety guard: stop after visiting this many nodes (partial search)
    max_nodes: Optional[int] = None

    # Print progress every this many visited nodes
    progress_every: int = 0


def exhaustive_search(
    problem: SearchProblem,
    params: Optional[ExhaustiveSearchParams] = None,
    initial_state: Any = None,
) -> Dict[str, Any]:
    """
    Brute-force reference: depth-first over every path of the state graph, no bound and no memo.
    Only usable on small instances; it exists to cross-check run_bound_search.

    Returns:
      {
        "best_score": int | None,
        "best_state": Any,
        "visited_nodes": int,
        "complete": bool,   # whether we finished without hitting max_nodes
      }
    """
    if params is None:
        params = ExhaustiveSearchParams()

    state0 = problem.initial_state() if initial_state is None else initial_state

    best_score: Optional[int] = None
    best_state: Any = None
    visited = 0
    complete = True

    stack = [state0]
    while stack:
        if params.max_nodes is not None and visited >= int(params.max_nodes):
            complete = False
            break

        state = stack.pop()
        visited += 1
        if params.progress_every and (visited % int(params.progress_every) == 0):
            print(f"[exhaustive] visited={visited}  best={best_score}  stack={len(stack)}")

        s = problem.score(state)
        if best_score is None or s > best_score:
            best_score = s
            best_state = state

        stack.extend(problem.expand(state))

    return {
        "best_score": best_score,
        "best_state": best_state,
        "visited_nodes": int(visited),
        "complete": bool(complete),
    }
