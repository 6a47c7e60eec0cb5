# main.py
from __future__ import annotations

import argparse

from alg.bound_search import SearchParams
from core.frontier import FRONTIER_ORDERS
from puzzles.library import EXAMPLES, run_example


def _pretty_print_result(res: dict) -> None:
    print("=== Result ===")
    print("example:", res["example"], "kind:", res["kind"])
    print("answer:", res["answer"])
    print("expected:", res["expected"], "ok:", res["ok"])
    print(f"runtime_sec: {res['runtime_sec']:.3f}")
    extra = {k: v for k, v in res.items() if k not in ("example", "kind", "answer", "expected", "ok", "runtime_sec")}
    if extra:
        print("details:", extra)


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--example", type=str, default="valves_30", choices=sorted(EXAMPLES.keys()))
    parser.add_argument("--all", action="store_true", help="Run every built-in example and report mismatches.")

    # search params
    parser.add_argument("--order", type=str, default="best_first", choices=list(FRONTIER_ORDERS))
    parser.add_argument("--no_pruning", action="store_true", help="Disable bound pruning (memo still applies).")
    parser.add_argument("--no_memo", action="store_true", help="Disable signature memoization.")
    parser.add_argument("--memo_allow_ties", action="store_true", help="Re-push states that tie a memoized score.")
    parser.add_argument("--compact_every", type=int, default=1000, help="Frontier sweep cadence in pops (0 = never).")
    parser.add_argument("--max_nodes", type=int, default=0, help="Stop after this many pops (0 = unlimited).")
    parser.add_argument("--progress_every", type=int, default=0)

    # drivers
    parser.add_argument("--workers", type=int, default=1, help="Processes for partition / per-blueprint solves.")
    parser.add_argument("--max_steps", type=int, default=100_000, help="Warm-up limit for cycle detection.")

    args = parser.parse_args()

    params = SearchParams(
        order=args.order,
        enable_pruning=not args.no_pruning,
        use_memo=not args.no_memo,
        memo_allow_ties=bool(args.memo_allow_ties),
        compact_every=int(args.compact_every),
        max_nodes=(int(args.max_nodes) if args.max_nodes > 0 else None),
        progress_every=int(args.progress_every),
    )

    names = sorted(EXAMPLES.keys()) if args.all else [args.example]
    mismatches = []
    for name in names:
        print(f"[run] example={name}  order={params.order}  memo={params.use_memo}  pruning={params.enable_pruning}")
        res = run_example(name, workers=args.workers, max_steps=args.max_steps, params=params)
        _pretty_print_result(res)
        if not res["ok"]:
            mismatches.append(name)

    if args.all:
        print(f"[done] {len(names) - len(mismatches)}/{len(names)} examples match")
        if mismatches:
            print("mismatches:", mismatches)


if __name__ == "__main__":
    main()
