"""Logging setup for the ``eventcore`` logger tree.

Library code only calls ``logging.getLogger("eventcore.<area>")``; hosts
that want eventcore output without their own logging config call
``configure_logging()`` once at startup.
"""
from __future__ import annotations

import json
import logging
from typing import Any

from eventcore.config.schemas.observability import LoggingConfig

ROOT_LOGGER = "eventcore"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

_TEXT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        data: dict[str, Any] = {
            "ts": record.created,
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            data["exc"] = self.formatException(record.exc_info)
        return json.dumps(data, ensure_ascii=False)


def _marked(handler: logging.Handler) -> bool:
    return getattr(handler, "_eventcore_handler", False)


def configure_logging(
    cfg: LoggingConfig | None = None,
    stream: Any = None,
) -> logging.Logger:
    """Attach a single stream handler to the ``eventcore`` logger.

    Safe to call repeatedly: a previously attached handler is replaced so
    level/format changes take effect.
    """
    if cfg is None:
        from eventcore.config import get_config  # local import

        cfg = get_config().logging
    log = logging.getLogger(ROOT_LOGGER)
    for h in list(log.handlers):
        if _marked(h):
            log.removeHandler(h)
    handler = logging.StreamHandler(stream)
    if cfg.format == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
    handler._eventcore_handler = True  # type: ignore[attr-defined]
    log.addHandler(handler)
    log.setLevel(_LEVELS[cfg.level])
    return log


__all__ = ["configure_logging", "JsonFormatter", "ROOT_LOGGER"]
