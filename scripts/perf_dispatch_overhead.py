"""Measure Dispatcher overhead vs direct call baseline.

Simplistic micro-benchmark: executes N dispatches to a fixed set of no-op
handlers versus calling the same handlers directly in a loop.
Outputs JSON with per-dispatch timings and overhead_ratio.

Not a rigorous perf test; intended to spot gross regressions.
"""
from __future__ import annotations

import argparse
import json
import os
import sys
import time
from statistics import mean

# ensure repository root on path
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from eventcore.dispatcher import Dispatcher  # noqa: E402


def _noop(payload):
    return None


def bench_dispatch(d: Dispatcher, n: int) -> float:  # ms
    start = time.perf_counter()
    for i in range(n):
        d.dispatch("bench_event", {"i": i})
    return (time.perf_counter() - start) * 1000


def bench_baseline(handlers: list, n: int) -> float:  # ms
    start = time.perf_counter()
    for i in range(n):
        payload = {"i": i}
        for h in handlers:
            h(payload)
    return (time.perf_counter() - start) * 1000


def main(argv: list[str] | None = None) -> int:  # noqa: D401
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--iterations", type=int, default=2000)
    parser.add_argument("--handlers", type=int, default=3)
    parser.add_argument("--runs", type=int, default=5)
    args = parser.parse_args(argv)

    d = Dispatcher()
    handlers = [_noop] * args.handlers
    for h in handlers:
        d.on("bench_event", h)

    event_ms = []
    base_ms = []
    for _ in range(args.runs):
        event_ms.append(bench_dispatch(d, args.iterations))
        base_ms.append(bench_baseline(handlers, args.iterations))
    ev_avg = mean(event_ms)
    base_avg = mean(base_ms)
    overhead_ratio = (ev_avg - base_avg) / ev_avg if ev_avg else 0.0
    print(
        json.dumps(
            {
                "iterations": args.iterations,
                "handlers": args.handlers,
                "dispatch_avg_ms": round(ev_avg, 3),
                "baseline_avg_ms": round(base_avg, 3),
                "per_dispatch_us": round(ev_avg / args.iterations * 1000, 3),
                "overhead_ratio": round(overhead_ratio, 4),
            },
            ensure_ascii=False,
        )
    )
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
