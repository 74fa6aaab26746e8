"""eventcore: in-process publish/subscribe for one Python process.

Module-level helpers act on the process-wide dispatcher returned by
``get_dispatcher()``; construct ``Dispatcher`` directly for an isolated
instance (tests, embedded use).
"""
from __future__ import annotations

from typing import Any, List, Optional

from eventcore.dispatcher import (
    Dispatcher,
    FailureRecord,
    get_dispatcher,
    reset_default_dispatcher,
)
from eventcore.errors import EventCoreError, InvalidArgument
from eventcore.registry import EventRegistry, Handler, describe_handler


def on(event_name: Any, handler: Optional[Handler] = None):
    return get_dispatcher().on(event_name, handler)


def register(event_name: Any, handler: Handler) -> None:
    get_dispatcher().register(event_name, handler)


def dispatch(event_name: Any, *args: Any, **kwargs: Any) -> None:
    get_dispatcher().dispatch(event_name, *args, **kwargs)


def handlers_for(event_name: Any) -> List[Handler]:
    return get_dispatcher().handlers_for(event_name)


def clear(event_name: Any) -> None:
    get_dispatcher().clear(event_name)


def clear_all() -> None:
    get_dispatcher().clear_all()


def event_names() -> List[str]:
    return get_dispatcher().event_names()


__all__ = [
    "on",
    "register",
    "dispatch",
    "handlers_for",
    "clear",
    "clear_all",
    "event_names",
    "describe_handler",
    "Dispatcher",
    "EventRegistry",
    "FailureRecord",
    "Handler",
    "EventCoreError",
    "InvalidArgument",
    "get_dispatcher",
    "reset_default_dispatcher",
]
