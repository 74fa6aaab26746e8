"""Startup-time handler registration.

Handler modules declare subscriptions with ``@subscriber(...)`` at import
time; ``load_handler_modules()`` imports the modules listed in
``handlers.modules`` so all registrations happen once, before the first
dispatch. Import errors are startup bugs and fail loudly.
"""
from __future__ import annotations

import importlib
import logging
from typing import Any, Iterable, List, Optional

from eventcore import metrics
from eventcore.dispatcher import Dispatcher, get_dispatcher
from eventcore.errors import HandlerModuleError
from eventcore.registry import Handler, normalize_event_name

logger = logging.getLogger("eventcore.initializers")


def subscriber(event_name: Any, *, dispatcher: Optional[Dispatcher] = None):
    """Decorator registering the function for ``event_name``.

    The default dispatcher is resolved when the decorator is applied, not
    when this module is imported.
    """
    normalize_event_name(event_name)

    def _decorator(func: Handler) -> Handler:
        (dispatcher or get_dispatcher()).register(event_name, func)
        return func

    return _decorator


def load_handler_modules(
    module_names: Optional[Iterable[str]] = None,
) -> List[str]:
    """Import handler modules; returns the names actually imported."""
    if module_names is None:
        from eventcore.config import get_config  # local import

        module_names = get_config().handlers.modules
    loaded: List[str] = []
    for name in module_names:
        try:
            importlib.import_module(name)
        except ImportError as e:
            raise HandlerModuleError(
                f"cannot import handler module '{name}': {e}"
            ) from e
        metrics.inc("handler_modules_loaded_total", {"module": name})
        loaded.append(name)
    if loaded:
        logger.info("handler modules loaded: %s", ", ".join(loaded))
    return loaded


__all__ = ["subscriber", "load_handler_modules"]
