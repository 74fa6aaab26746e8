"""Synchronous in-process dispatcher.

Features:
  - on(event_name, handler) / @on(event_name) registration
  - dispatch(event_name, *args, **kwargs) invokes a snapshot of handlers
    in registration order
  - handler isolation: exceptions are logged, counted and handed to an
    optional failure hook, never propagated to the producer
  - metrics counters:
        events_dispatched_total{event}, handler_invocations_total{event},
        handler_exceptions_total{event}, dispatch_latency_ms{event}

No async / timeouts / cancellation: a slow handler delays the ones after it
and the producer. Slow handlers should enqueue work elsewhere themselves.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Lock
from time import perf_counter
from typing import Any, Callable, List, Optional

from eventcore import metrics
from eventcore.errors import InvalidArgument, map_exception
from eventcore.registry import (
    EventRegistry,
    Handler,
    describe_handler,
    normalize_event_name,
)

_log = logging.getLogger("eventcore.dispatch")


@dataclass(frozen=True)
class FailureRecord:
    """One failed handler invocation within a single dispatch."""

    event: str
    handler: Handler
    handler_name: str
    error: Exception
    error_type: str = "event-handler-error"


FailureHook = Callable[[FailureRecord], None]


class Dispatcher:
    def __init__(
        self,
        registry: Optional[EventRegistry] = None,
        *,
        failure_hook: Optional[FailureHook] = None,
        slow_handler_ms: Optional[int] = None,
        log_failures: bool = True,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if slow_handler_ms is not None and slow_handler_ms <= 0:
            raise InvalidArgument(
                f"slow_handler_ms must be > 0, got {slow_handler_ms!r}"
            )
        self.registry = registry if registry is not None else EventRegistry()
        self.failure_hook = failure_hook
        self.slow_handler_ms = slow_handler_ms
        self.log_failures = log_failures
        self._log = logger or _log

    # ----- registration -----

    def register(self, event_name: Any, handler: Handler) -> None:
        self.registry.register(event_name, handler)

    def on(self, event_name: Any, handler: Optional[Handler] = None):
        """Register ``handler``; without one, return a decorator."""
        if handler is not None:
            self.registry.register(event_name, handler)
            return handler
        # validate eagerly so a bad name fails at decoration time
        normalize_event_name(event_name)

        def _decorator(func: Handler) -> Handler:
            self.registry.register(event_name, func)
            return func

        return _decorator

    # ----- dispatch -----

    def dispatch(self, event_name: Any, *args: Any, **kwargs: Any) -> None:
        try:
            name = normalize_event_name(event_name)
        except InvalidArgument:
            self._log.debug("dispatch ignored invalid name=%r", event_name)
            return
        handlers = self.registry.lookup(name)
        metrics.inc("events_dispatched_total", {"event": name})
        if not handlers:
            return
        t0 = perf_counter()
        for handler in handlers:
            started = perf_counter()
            try:
                handler(*args, **kwargs)
            except Exception as e:  # noqa: BLE001
                self._record_failure(name, handler, e)
            finally:
                metrics.inc("handler_invocations_total", {"event": name})
            self._check_slow(name, handler, started)
        metrics.observe_dispatch_latency(
            name, (perf_counter() - t0) * 1000
        )

    def _record_failure(
        self, event: str, handler: Handler, error: Exception
    ) -> None:
        record = FailureRecord(
            event=event,
            handler=handler,
            handler_name=describe_handler(handler),
            error=error,
            error_type=map_exception(error, "dispatch"),
        )
        metrics.inc_handler_exception(event)
        if self.log_failures:
            self._log.error(
                "event=%s handler=%s error_type=%s error=%r",
                record.event,
                record.handler_name,
                record.error_type,
                error,
                exc_info=(type(error), error, error.__traceback__),
            )
        if self.failure_hook is None:
            return
        try:
            self.failure_hook(record)
        except Exception:  # noqa: BLE001
            metrics.inc("failure_hook_errors_total", {"event": event})
            self._log.exception("failure hook raised event=%s", event)

    def _check_slow(self, event: str, handler: Handler, started: float) -> None:
        if not self.slow_handler_ms:
            return
        elapsed_ms = (perf_counter() - started) * 1000
        if elapsed_ms > self.slow_handler_ms:
            metrics.inc("slow_handler_total", {"event": event})
            self._log.warning(
                "slow handler event=%s handler=%s elapsed_ms=%.1f limit_ms=%d",
                event,
                describe_handler(handler),
                elapsed_ms,
                self.slow_handler_ms,
            )

    # ----- diagnostics -----

    def handlers_for(self, event_name: Any) -> List[Handler]:
        return self.registry.lookup(event_name)

    def clear(self, event_name: Any) -> None:
        self.registry.clear(event_name)

    def clear_all(self) -> None:
        self.registry.clear_all()

    def event_names(self) -> List[str]:
        return self.registry.event_names()


_DEFAULT: Optional[Dispatcher] = None
_DEFAULT_LOCK = Lock()


def get_dispatcher() -> Dispatcher:
    """Process-wide dispatcher, built from config on first use."""
    global _DEFAULT  # noqa: PLW0603
    if _DEFAULT is not None:
        return _DEFAULT
    with _DEFAULT_LOCK:
        if _DEFAULT is None:
            from eventcore.config import get_config  # local import

            cfg = get_config()
            metrics.set_enabled(cfg.metrics.enabled)
            _DEFAULT = Dispatcher(
                slow_handler_ms=cfg.dispatch.slow_handler_ms,
                log_failures=cfg.dispatch.log_failures,
            )
        return _DEFAULT


def reset_default_dispatcher() -> None:
    global _DEFAULT  # noqa: PLW0603
    with _DEFAULT_LOCK:
        _DEFAULT = None


__all__ = [
    "Dispatcher",
    "FailureRecord",
    "FailureHook",
    "get_dispatcher",
    "reset_default_dispatcher",
]
