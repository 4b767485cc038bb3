"""Measure broadcast dispatch overhead vs direct handler calls.

Simplistic micro-benchmark: N pattern broadcasts (through Module.notify)
to M modules versus calling the same handlers directly in a loop.
Outputs JSON with per-call microseconds and overhead_ratio.

Not a rigorous perf test.
"""
from __future__ import annotations

import json
import os
import re
import sys
import time
from statistics import mean

# ensure repository root on path
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from svcbus.defer import QueueScheduler  # noqa: E402
from svcbus.modules import ModuleRegistry, ServiceCall  # noqa: E402
from svcbus.observability import configure_logging  # noqa: E402

N = 2000
MODULES = 10


def _handler(call):
    return call.payload


def bench_notify(n: int) -> float:  # ms
    reg = ModuleRegistry(scheduler=QueueScheduler())
    for i in range(MODULES):
        reg.create(f"bench{i}").declare_service("echo", _handler)
    caller = reg.create("caller")
    pattern = re.compile("^bench")
    start = time.time()
    for i in range(n):
        caller.notify(pattern, "echo", i)
    return (time.time() - start) * 1000


def bench_baseline(n: int) -> float:  # ms
    start = time.time()
    for i in range(n):
        for _ in range(MODULES):
            _handler(ServiceCall(payload=i))
    return (time.time() - start) * 1000


def main():  # noqa: D401
    configure_logging()
    runs = 5
    notify_ms = []
    base_ms = []
    for _ in range(runs):
        notify_ms.append(bench_notify(N))
        base_ms.append(bench_baseline(N))
    ev_avg = mean(notify_ms)
    base_avg = mean(base_ms)
    per_call_us = (ev_avg / (N * MODULES)) * 1000
    overhead_ratio = (ev_avg - base_avg) / ev_avg if ev_avg else 0.0
    print(
        json.dumps(
            {
                "iterations": N,
                "modules": MODULES,
                "notify_avg_ms": round(ev_avg, 3),
                "baseline_avg_ms": round(base_avg, 3),
                "per_call_us": round(per_call_us, 3),
                "overhead_ratio": round(overhead_ratio, 4),
            },
            ensure_ascii=False,
        )
    )


if __name__ == "__main__":  # pragma: no cover
    main()
