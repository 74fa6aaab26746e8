"""Typed event dataclasses on top of the name-based dispatcher.

Producers that prefer a declared payload shape can define a ``BaseEvent``
subclass and call ``emit(ev)``; handlers registered for
``ev.event_name()`` receive the instance as their single argument.
Plain ``dispatch(name, *args)`` remains the primary API.
"""
from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from time import time
from typing import Any, ClassVar, Dict, Optional

from eventcore.dispatcher import Dispatcher, get_dispatcher

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


@dataclass(slots=True)
class BaseEvent:
    # Override to decouple the wire name from the class name.
    EVENT_NAME: ClassVar[Optional[str]] = None

    @classmethod
    def event_name(cls) -> str:
        if cls.EVENT_NAME:
            return cls.EVENT_NAME
        return _CAMEL_BOUNDARY.sub("_", cls.__name__).lower()

    def to_event(self) -> Dict[str, Any]:  # noqa: D401
        data = asdict(self)
        data["ts"] = data.get("ts") or time()
        return data


@dataclass(slots=True)
class EntityCreated(BaseEvent):
    entity_type: str
    entity_id: Any
    attributes: dict | None = None
    actor_id: Any | None = None


@dataclass(slots=True)
class EntityUpdated(BaseEvent):
    entity_type: str
    entity_id: Any
    changes: dict | None = None  # field -> [before, after]
    actor_id: Any | None = None


@dataclass(slots=True)
class EntityDeleted(BaseEvent):
    entity_type: str
    entity_id: Any
    actor_id: Any | None = None


def emit(ev: BaseEvent, dispatcher: Dispatcher | None = None) -> None:
    (dispatcher or get_dispatcher()).dispatch(ev.event_name(), ev)


__all__ = [
    "BaseEvent",
    "EntityCreated",
    "EntityUpdated",
    "EntityDeleted",
    "emit",
]
