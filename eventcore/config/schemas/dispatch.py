"""Dispatch + startup registration schemas."""
from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class DispatchConfig(BaseModel):
    # Per-handler duration above which a warning is logged (None disables).
    slow_handler_ms: int | None = None
    log_failures: bool = True

    model_config = ConfigDict(extra="forbid")


class HandlersConfig(BaseModel):
    # Dotted module paths imported at startup so their @subscriber
    # decorators register handlers.
    modules: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")
