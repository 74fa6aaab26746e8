"""Minimal in-memory metrics collector.

Purpose:
    - Counters and simple latency samples for dispatch health.
    - Zero external deps; can be swapped by a Prometheus exporter later.

Core API (intentionally tiny):
    inc(name, labels=None, value=1)
    observe(name, value, labels=None)
    snapshot() -> dict (copy for safe reading)

Thread-safety: coarse RLock; overhead negligible for low event volume.

Metric names emitted by eventcore (documented for discoverability):
    - events_dispatched_total{event}
    - handler_invocations_total{event}
    - handler_exceptions_total{event}
    - failure_hook_errors_total{event}
    - slow_handler_total{event}
    - dispatch_latency_ms{event}                      (histogram)
    - handlers_registered_total{event}
    - registry_cleared_total{scope}
    - handler_modules_loaded_total{module}
    - env_override_total{path}
    - config_validation_errors_total{path,code}
"""
from __future__ import annotations

from collections import deque
from threading import RLock
from time import time
from typing import Dict, Tuple, Any

# Recent samples kept per histogram for p50; count/sum/min/max are running.
HIST_WINDOW = 1024

_COUNTERS: Dict[Tuple[str, Tuple[Tuple[str, str], ...]], float] = {}
_HIST: Dict[Tuple[str, Tuple[Tuple[str, str], ...]], "_Series"] = {}
_LOCK = RLock()
_ENABLED = True


class _Series:
    __slots__ = ("count", "total", "min", "max", "samples")

    def __init__(self) -> None:
        self.count = 0
        self.total = 0.0
        self.min = float("inf")
        self.max = float("-inf")
        self.samples: deque = deque(maxlen=HIST_WINDOW)

    def add(self, value: float) -> None:
        self.count += 1
        self.total += value
        self.min = min(self.min, value)
        self.max = max(self.max, value)
        self.samples.append(value)


def _norm_labels(labels: dict[str, Any] | None) -> Tuple[Tuple[str, str], ...]:
    if not labels:
        return tuple()
    return tuple(sorted((str(k), str(v)) for k, v in labels.items()))


def _label_str(labels: Tuple[Tuple[str, str], ...]) -> str:
    if not labels:
        return ""
    return "{" + ",".join(f"{k}={v}" for k, v in labels) + "}"


def set_enabled(flag: bool) -> None:
    """Toggle collection; disabled ``inc``/``observe`` are no-ops."""
    global _ENABLED  # noqa: PLW0603
    with _LOCK:
        _ENABLED = bool(flag)


def inc(
    name: str,
    labels: dict[str, Any] | None = None,
    value: float = 1.0,
) -> None:
    if not _ENABLED:
        return
    key = (name, _norm_labels(labels))
    with _LOCK:
        _COUNTERS[key] = _COUNTERS.get(key, 0.0) + value


def observe(
    name: str,
    value: float,
    labels: dict[str, Any] | None = None,
) -> None:
    if not _ENABLED:
        return
    key = (name, _norm_labels(labels))
    with _LOCK:
        series = _HIST.get(key)
        if series is None:
            series = _HIST[key] = _Series()
        series.add(value)


def get_counter(name: str, labels: dict[str, Any] | None = None) -> float:
    key = (name, _norm_labels(labels))
    with _LOCK:
        return _COUNTERS.get(key, 0.0)


def snapshot() -> dict[str, Any]:
    with _LOCK:
        counters: dict[str, float] = {}
        for (name, labels), v in _COUNTERS.items():
            counters[name + _label_str(labels)] = v
        hist = {}
        for (name, labels), series in _HIST.items():
            if not series.count:
                continue
            ordered = sorted(series.samples)
            hist[name + _label_str(labels)] = {
                "count": series.count,
                "sum": series.total,
                "min": series.min,
                "max": series.max,
                # p50 over the most recent HIST_WINDOW samples
                "p50": ordered[len(ordered) // 2],
                "window": len(ordered),
                "last": series.samples[-1],
            }
        return {
            "ts": time(),
            "counters": counters,
            "histograms": hist,
        }


def reset_for_tests() -> None:
    global _ENABLED  # noqa: PLW0603
    with _LOCK:
        _COUNTERS.clear()
        _HIST.clear()
        _ENABLED = True


__all__ = [
    "inc",
    "observe",
    "get_counter",
    "snapshot",
    "set_enabled",
    "reset_for_tests",
]


# ------------------- Helper wrappers -------------------

def inc_handler_exception(event: str) -> None:
    """Count one absorbed handler failure for ``event``."""
    inc("handler_exceptions_total", {"event": event})


def observe_dispatch_latency(event: str, latency_ms: float) -> None:
    observe("dispatch_latency_ms", latency_ms, {"event": event})


__all__ += ["inc_handler_exception", "observe_dispatch_latency"]
