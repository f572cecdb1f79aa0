"""FastAPI application factory."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from repo_aggregator.infrastructure.config import Settings, get_settings
from repo_aggregator.interface.dependencies import open_http_client
from repo_aggregator.interface.error_handlers import register_error_handlers
from repo_aggregator.interface.routes import router


def create_app(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build and wire the FastAPI application.

    *transport* replaces the network layer of the upstream client; tests use
    it to serve canned GitHub responses.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        async with open_http_client(settings, transport) as client:
            app.state.http_client = client
            try:
                yield
            finally:
                app.state.http_client = None

    app = FastAPI(
        title="GitHub Repository Aggregator",
        version="1.0.0",
        description=(
            "Lists every non-fork repository of a GitHub user together with "
            "its branches and the latest commit of each branch."
        ),
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.http_client = None

    register_error_handlers(app)
    app.include_router(router)
    return app
