#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Experiment runner for the built-in puzzle examples.

What it does (per example, per frontier order, per memo setting):
  1) Runs the example in a separate process with a hard timeout, so a runaway search
     or a failing input only affects its own row.
  2) Records answer, expected answer, match flag, runtime, and timeout/error text.
  3) Appends one row per run to a CSV (header only when the file is new or empty).

Orders and memo settings only matter for search examples; cycle-detection examples
(rocks, sequence) are run once per order anyway so every row set has the same shape.
"""

from __future__ import annotations

import os
import time
import argparse
from typing import Any, Dict, List

import pandas as pd
import multiprocessing as mp
import queue
import traceback

from alg.bound_search import SearchParams
from core.frontier import FRONTIER_ORDERS
from puzzles.library import EXAMPLES, run_example

os.environ.setdefault("OMP_NUM_THREADS", "1")
os.environ.setdefault("MKL_NUM_THREADS", "1")

_OPTIONAL_COLUMNS = ("partitions_evaluated", "partitions_skipped", "subsets_solved", "cycle_length", "steps_simulated")

# ----------------------------
# Isolated example runs
# ----------------------------

def _example_process(q, name: str, params: SearchParams, workers: int, max_steps: int) -> None:
    """Child process body: one example run, reported on q as a result dict or as error text."""
    try:
        q.put({"ok": True, "out": run_example(name, workers=workers, max_steps=max_steps, params=params)})
    except Exception as e:
        q.put({"ok": False, "error": f"{type(e).__name__}: {e}", "traceback": traceback.format_exc()})


def _now() -> float:
    return time.perf_counter()


def _run_example_isolated(
    name: str,
    params: SearchParams,
    workers: int,
    max_steps: int,
    timeout_sec: float,
) -> Dict[str, Any]:
    """
    Run one example in its own process. A search still running after timeout_sec is killed and
    reported as {"ok": False, "timeout": True}; a raised error becomes {"ok": False, "error": ...}.
    """
    timeout_sec = float(timeout_sec)

    # examples are rebuilt in the child, so spawn only needs the example name and params
    try:
        ctx = mp.get_context("fork")
    except ValueError:
        ctx = mp.get_context("spawn")

    q = ctx.Queue()
    p = ctx.Process(target=_example_process, args=(q, name, params, int(workers), int(max_steps)))
    # not daemonic: the run may open its own pool (--workers > 1)
    p.daemon = False
    p.start()
    try:
        msg = q.get(timeout=timeout_sec)
    except queue.Empty:
        msg = None

    if msg is None:
        if p.is_alive():
            p.terminate()
            p.join()
            return {"ok": False, "timeout": True, "timeout_sec": timeout_sec}
        p.join()
        return {"ok": False, "timeout": False, "error": f"example process exited with code {p.exitcode} and no result"}

    p.join()
    if msg["ok"]:
        return {"ok": True, "out": msg["out"]}
    return {"ok": False, "timeout": False, "error": msg["error"], "traceback": msg["traceback"]}


# ----------------------------
# Main experiment loop
# ----------------------------
def run_one(
    example_name: str,
    order: str,
    use_memo: bool = True,
    timeout_sec: float = 600.0,
    workers: int = 1,
    max_steps: int = 100_000,
) -> Dict[str, Any]:
    params = SearchParams(order=order, use_memo=bool(use_memo))

    t0 = _now()
    rr = _run_example_isolated(example_name, params, workers, max_steps, timeout_sec)
    wall = float(_now() - t0)

    # appended rows must share one column layout
    row: Dict[str, Any] = {
        "example": example_name,
        "kind": None,
        "order": order,
        "use_memo": bool(use_memo),
        "answer": None,
        "expected": None,
        "ok": False,
        "runtime_sec": None,
        "wall_sec": wall,
        "timeout": bool(rr.get("timeout", False)),
        "error": rr.get("error", None),
    }
    for key in _OPTIONAL_COLUMNS:
        row[key] = None
    if rr.get("ok", False):
        out = rr["out"]
        row.update({
            "kind": out.get("kind"),
            "answer": out.get("answer"),
            "expected": out.get("expected"),
            "ok": bool(out.get("ok", False)),
            "runtime_sec": out.get("runtime_sec"),
        })
        for key in _OPTIONAL_COLUMNS:
            row[key] = out.get(key)
    return row


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--out_csv", type=str, default="experiment_results.csv")
    ap.add_argument("--examples", type=str, default="all",
                    help="comma-separated example names, or 'all'")
    ap.add_argument("--orders", type=str, default=",".join(FRONTIER_ORDERS),
                    help="comma-separated frontier orders, e.g. best_first,lifo")
    ap.add_argument("--with_no_memo", action="store_true",
                    help="Also run every example with memoization disabled")
    ap.add_argument("--timeout_sec", type=float, default=600.0)
    ap.add_argument("--workers", type=int, default=1)
    ap.add_argument("--max_steps", type=int, default=100_000)
    args = ap.parse_args()

    if args.examples.strip().lower() == "all":
        examples = sorted(EXAMPLES.keys())
    else:
        examples = [x.strip() for x in args.examples.split(",") if x.strip()]
    for ex in examples:
        if ex not in EXAMPLES:
            raise ValueError(f"Unknown example: {ex}")

    orders = [x.strip() for x in args.orders.split(",") if x.strip()]
    for order in orders:
        if order not in FRONTIER_ORDERS:
            raise ValueError(f"Unknown frontier order: {order}")

    memo_settings: List[bool] = [True, False] if args.with_no_memo else [True]

    out_csv = args.out_csv
    # If file exists and is non-empty, we will append without header.
    need_header = (not os.path.exists(out_csv)) or (os.path.getsize(out_csv) == 0)

    num_written = 0
    num_ok = 0
    for ex in examples:
        for order in orders:
            for use_memo in memo_settings:
                print(f"[run] example={ex}  order={order}  memo={use_memo}")
                row = run_one(
                    ex,
                    order,
                    use_memo=use_memo,
                    timeout_sec=args.timeout_sec,
                    workers=args.workers,
                    max_steps=args.max_steps,
                )
                if row["timeout"]:
                    print(f"[timeout] example={ex} after {args.timeout_sec:.0f}s")
                elif row["error"]:
                    print(f"[error] example={ex}: {row['error']}")

                df_row = pd.DataFrame([row])
                df_row.to_csv(
                    out_csv,
                    mode="a",
                    header=need_header,
                    index=False,
                )
                need_header = False
                num_written += 1
                num_ok += int(bool(row["ok"]))

                print(f"[saved] appended 1 row -> {out_csv}  (total={num_written})")

    print(f"[done] wrote {num_written} rows -> {out_csv}  (ok={num_ok})")


if __name__ == "__main__":
    main()
