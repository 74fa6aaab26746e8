"""Central error taxonomy and the exceptions the core originates.

Only ``InvalidArgument`` (bad registration) reaches callers at runtime.
Handler failures are absorbed by the dispatcher and surface solely as
``event-handler-error`` log records / metric labels.
"""
from __future__ import annotations

_ALLOWED_ERROR_TYPES = {
    # registration
    "invalid-argument",
    # dispatch
    "event-handler-error",
    # startup
    "handler-module-import",
    # config
    "config-invalid",
    "config-out-of-range",
}


def validate_error_type(code: str) -> str:
    assert (
        code in _ALLOWED_ERROR_TYPES
    ), f"Unknown error_type '{code}' (not in taxonomy)"
    return code


class EventCoreError(Exception):
    """Base class for errors raised by eventcore itself."""

    error_type = "invalid-argument"


class InvalidArgument(EventCoreError, ValueError):
    """Raised by ``register`` for an empty/invalid event name or handler."""

    error_type = "invalid-argument"


class HandlerModuleError(EventCoreError, ImportError):
    """A configured handler module could not be imported at startup."""

    error_type = "handler-module-import"


def map_exception(e: BaseException, phase: str) -> str:
    if isinstance(e, EventCoreError):
        return validate_error_type(e.error_type)
    if phase == "dispatch":
        return "event-handler-error"
    if phase == "startup":
        return "handler-module-import"
    if phase == "config":
        return "config-invalid"
    return "invalid-argument"


__all__ = [
    "validate_error_type",
    "map_exception",
    "EventCoreError",
    "InvalidArgument",
    "HandlerModuleError",
]
