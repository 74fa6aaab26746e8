"""Event registry: event name -> ordered handler list.

Thread-safe; every read hands out a copy so an in-flight dispatch never
iterates a list that a handler (or another thread) is mutating.
The lock guards bookkeeping only, handlers are never called under it.
"""
from __future__ import annotations

import logging
from enum import Enum
from threading import RLock
from typing import Any, Callable, Dict, List

from eventcore import metrics
from eventcore.errors import InvalidArgument

Handler = Callable[..., Any]

logger = logging.getLogger("eventcore.registry")


def normalize_event_name(event_name: Any) -> str:
    """Return the canonical string key or raise ``InvalidArgument``."""
    if isinstance(event_name, Enum):
        event_name = event_name.value
    if not isinstance(event_name, str) or not event_name.strip():
        raise InvalidArgument(
            f"event name must be a non-empty string, got {event_name!r}"
        )
    return event_name


def describe_handler(handler: Handler) -> str:
    """Human readable identity used in logs and diagnostics.

    Never raises: proxies with a hostile ``__getattr__`` fall back to
    ``repr`` (and finally the type name).
    """
    try:
        return _qualified_name(handler)
    except Exception:  # noqa: BLE001
        try:
            return repr(handler)
        except Exception:  # noqa: BLE001
            return f"<{type(handler).__name__}>"


def _qualified_name(handler: Handler) -> str:
    qualname = getattr(handler, "__qualname__", None)
    module = getattr(handler, "__module__", None)
    if qualname is None:
        # callable instances, functools.partial, ...
        func = getattr(handler, "func", None)
        if func is not None and func is not handler:
            return f"partial({describe_handler(func)})"
        cls = type(handler)
        qualname = cls.__qualname__
        module = cls.__module__
    return f"{module}.{qualname}" if module else qualname


class EventRegistry:
    def __init__(self) -> None:
        self._handlers: Dict[str, List[Handler]] = {}
        self._lock = RLock()

    def register(self, event_name: Any, handler: Handler) -> None:
        name = normalize_event_name(event_name)
        if handler is None or not callable(handler):
            raise InvalidArgument(
                f"handler for '{name}' must be callable, got {handler!r}"
            )
        with self._lock:
            self._handlers.setdefault(name, []).append(handler)
        metrics.inc("handlers_registered_total", {"event": name})
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "registered handler=%s event=%s",
                describe_handler(handler),
                name,
            )

    def lookup(self, event_name: Any) -> List[Handler]:
        try:
            name = normalize_event_name(event_name)
        except InvalidArgument:
            return []
        with self._lock:
            return list(self._handlers.get(name, ()))

    def clear(self, event_name: Any) -> None:
        try:
            name = normalize_event_name(event_name)
        except InvalidArgument:
            return
        with self._lock:
            removed = self._handlers.pop(name, None)
        if removed:
            metrics.inc("registry_cleared_total", {"scope": "event"})
            logger.debug("cleared %d handler(s) event=%s", len(removed), name)

    def clear_all(self) -> None:
        with self._lock:
            self._handlers.clear()
        metrics.inc("registry_cleared_total", {"scope": "all"})

    # ----- read-only helpers -----

    def event_names(self) -> List[str]:
        with self._lock:
            return sorted(k for k, v in self._handlers.items() if v)

    def count(self, event_name: Any = None) -> int:
        """Handlers for one event, or across all events when omitted."""
        if event_name is not None:
            return len(self.lookup(event_name))
        with self._lock:
            return sum(len(v) for v in self._handlers.values())

    def snapshot(self) -> Dict[str, List[Handler]]:
        with self._lock:
            return {k: list(v) for k, v in self._handlers.items() if v}

    def __contains__(self, event_name: object) -> bool:
        return bool(self.lookup(event_name))

    def __len__(self) -> int:
        return len(self.event_names())


__all__ = [
    "EventRegistry",
    "Handler",
    "describe_handler",
    "normalize_event_name",
]
