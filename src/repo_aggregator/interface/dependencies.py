"""FastAPI dependency injection wiring."""

from __future__ import annotations

from typing import AsyncIterator

import httpx
from fastapi import Header, HTTPException, Request

from repo_aggregator.domain.request_scope import RequestScope
from repo_aggregator.infrastructure.config import Settings
from repo_aggregator.infrastructure.github_rest_adapter import GitHubRestAdapter
from repo_aggregator.services.aggregate_repositories import AggregateRepositoriesUseCase

# Most specific first: the first range present in Accept decides.
_JSON_MEDIA_RANGES = ("application/json", "application/*", "*/*")


def open_http_client(
    settings: Settings, transport: httpx.AsyncBaseTransport | None = None
) -> httpx.AsyncClient:
    """Create the pooled upstream client shared by every request of the app."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        transport=transport,
    )


def get_use_case(request: Request) -> AggregateRepositoriesUseCase:
    """Build the use-case with the GitHub adapter injected."""
    state = request.app.state
    client: httpx.AsyncClient | None = getattr(state, "http_client", None)
    assert client is not None, "application lifespan has not started"

    settings: Settings = state.settings
    upstream = GitHubRestAdapter(client=client, base_url=settings.github_api_url)
    return AggregateRepositoriesUseCase(upstream=upstream)


async def get_request_scope() -> AsyncIterator[RequestScope]:
    """Open the task scope of the current request and tear it down afterwards."""
    scope = RequestScope()
    try:
        yield scope
    finally:
        await scope.aclose()


def _media_range_qualities(accept: str) -> dict[str, float]:
    """Map each media range of an ``Accept`` header to its ``q`` value."""
    qualities: dict[str, float] = {}
    for part in accept.split(","):
        media_range, *params = (p.strip() for p in part.split(";"))
        quality = 1.0
        for param in params:
            name, _, value = param.partition("=")
            if name.strip().lower() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        if media_range:
            qualities[media_range.lower()] = quality
    return qualities


def require_json(accept: str | None = Header(default=None)) -> None:
    """Reject requests whose ``Accept`` header rules out JSON (406)."""
    if not accept or not accept.strip():
        return
    qualities = _media_range_qualities(accept)
    quality = next((qualities[r] for r in _JSON_MEDIA_RANGES if r in qualities), 0.0)
    if quality <= 0:
        raise HTTPException(
            status_code=406,
            detail=f"Media type(s) '{accept}' not acceptable; only application/json is produced.",
        )
