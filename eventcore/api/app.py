"""FastAPI application factory for eventcore diagnostics.

Read-only: /health, /events, /events/{name}, /metrics.
Registration and dispatch are never exposed over HTTP.
"""
from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, HTTPException

from eventcore import metrics
from eventcore.dispatcher import Dispatcher, get_dispatcher
from eventcore.errors import InvalidArgument
from eventcore.registry import describe_handler, normalize_event_name


def create_app(dispatcher: Optional[Dispatcher] = None) -> FastAPI:
    app = FastAPI(
        title="eventcore diagnostics",
        version="0.1.0",
        docs_url=None,
        redoc_url=None,
    )

    def _dispatcher() -> Dispatcher:
        # resolved per request so a reset default dispatcher is picked up
        return dispatcher or get_dispatcher()

    @app.get("/health")
    def health():  # noqa: D401
        return {"status": "ok"}

    @app.get("/events")
    def events():  # noqa: D401
        snap = _dispatcher().registry.snapshot()
        return {
            "events": {
                name: [describe_handler(h) for h in handlers]
                for name, handlers in sorted(snap.items())
            }
        }

    @app.get("/events/{name}")
    def event_handlers(name: str):  # noqa: D401
        try:
            normalize_event_name(name)
        except InvalidArgument as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        handlers = _dispatcher().handlers_for(name)
        return {
            "event": name,
            "handlers": [describe_handler(h) for h in handlers],
        }

    @app.get("/metrics")
    def metrics_snapshot():  # noqa: D401
        return metrics.snapshot()

    return app


app = create_app()
