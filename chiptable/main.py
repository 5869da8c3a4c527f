"""FastAPI application factory."""
from __future__ import annotations
import logging
from typing import Optional

from fastapi import FastAPI

from chiptable.api.dispatcher import EventDispatcher
from chiptable.api.routes import router
from chiptable.api.websocket import ws_router
from chiptable.config import Settings, get_settings


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(
        title="Chip Table",
        description="Shared real-time chip ledger for in-person poker",
        version="1.0.0",
    )

    # One dispatcher (registry + connections) per app
    app.state.settings = settings
    app.state.dispatcher = EventDispatcher(settings)

    # Routers
    app.include_router(router)
    app.include_router(ws_router)

    return app


app = create_app()


def serve(settings: Optional[Settings] = None) -> None:
    import uvicorn

    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    serve()
