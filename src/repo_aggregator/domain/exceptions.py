"""Domain exception hierarchy.

Each exception maps to a specific HTTP status code at the interface layer.
Inner layers raise these; the outermost error-handler translates them.
"""

from __future__ import annotations

_NOT_FOUND_MSG = "Resource was not found: {}"
_UNAVAILABLE_MSG = "Service is currently not available due to: {}"

RATE_LIMIT_REASON = "API rate limit was exceeded."


class RepoAggregatorError(Exception):
    """Base exception for the entire application."""


# ── Missing upstream resources ──────────────────────────────────────────────


class ResourceNotFoundError(RepoAggregatorError):
    """The owner or repository does not exist upstream (404)."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(_NOT_FOUND_MSG.format(detail))


# ── Upstream failures (all surface as 503) ──────────────────────────────────


class UpstreamUnavailableError(RepoAggregatorError):
    """The upstream API could not deliver a usable answer."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(_UNAVAILABLE_MSG.format(reason))


class RateLimitExceededError(UpstreamUnavailableError):
    """GitHub API rate limit exceeded (403 / 429)."""

    def __init__(self) -> None:
        super().__init__(RATE_LIMIT_REASON)


class UpstreamShapeError(UpstreamUnavailableError):
    """The response body does not match the expected record shape."""


class MissingPaginationHeaderError(UpstreamUnavailableError):
    """A page count was requested from a response without a ``Link`` header."""


class MalformedPaginationHeaderError(UpstreamUnavailableError):
    """The ``Link`` header is present but carries no usable ``rel="last"`` page."""


class UpstreamConnectionError(UpstreamUnavailableError):
    """The upstream API could not be reached (network error, timeout)."""


class UpstreamResponseError(UpstreamUnavailableError):
    """The upstream API answered with an unexpected HTTP status."""

    def __init__(self, status_code: int, url: str) -> None:
        self.status_code = status_code
        super().__init__(f"GitHub API returned HTTP {status_code} for {url}")
