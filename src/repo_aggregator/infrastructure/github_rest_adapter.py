"""GitHub REST API adapter — implements the UpstreamClient port."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Protocol, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from repo_aggregator.domain.entities import BranchRecord, RepositoryRecord
from repo_aggregator.domain.exceptions import (
    RateLimitExceededError,
    ResourceNotFoundError,
    UpstreamConnectionError,
    UpstreamResponseError,
    UpstreamShapeError,
)
from repo_aggregator.domain.request_scope import RequestScope
from repo_aggregator.infrastructure.fan_out import fetch_remaining_pages
from repo_aggregator.infrastructure.github_schemas import BRANCH_LIST, REPOSITORY_LIST
from repo_aggregator.infrastructure.pagination import has_more_pages, last_page_number

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"
PER_PAGE = 100

_USER_NOT_FOUND = "there is no user account '{}'."
_REPOSITORY_NOT_FOUND = "there is no repository '{}/{}'."

R = TypeVar("R", covariant=True)


class _Convertible(Protocol[R]):
    def to_record(self) -> R: ...


class GitHubRestAdapter:
    """Concrete UpstreamClient backed by the GitHub v3 REST API."""

    def __init__(self, client: httpx.AsyncClient, base_url: str = GITHUB_API) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._api_headers: dict[str, str] = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "repo-aggregator/1.0",
        }

    async def list_repositories(
        self, owner_login: str, scope: RequestScope
    ) -> list[RepositoryRecord]:
        """GET /users/{owner}/repos (all pages) → [RepositoryRecord]."""
        return await self._list_all(
            f"/users/{owner_login}/repos",
            REPOSITORY_LIST,
            _USER_NOT_FOUND.format(owner_login),
            scope,
        )

    async def list_branches(
        self, owner_login: str, repository_name: str, scope: RequestScope
    ) -> list[BranchRecord]:
        """GET /repos/{owner}/{repo}/branches (all pages) → [BranchRecord]."""
        return await self._list_all(
            f"/repos/{owner_login}/{repository_name}/branches",
            BRANCH_LIST,
            _REPOSITORY_NOT_FOUND.format(owner_login, repository_name),
            scope,
        )

    async def _list_all(
        self,
        endpoint: str,
        shape: TypeAdapter[list[Any]],
        not_found: str,
        scope: RequestScope,
    ) -> list[Any]:
        """Fetch page 1, then every further page advertised by its Link header."""
        first = await self._api_get(endpoint, not_found)
        records = self._decode(first, shape)

        if not has_more_pages(first):
            return records

        last_page = last_page_number(first)
        logger.debug("%s spans %d pages", endpoint, last_page)

        async def _fetch_page(page: int) -> list[Any]:
            resp = await self._api_get(endpoint, not_found, page=page)
            return self._decode(resp, shape)

        return records + await fetch_remaining_pages(_fetch_page, last_page, scope)

    @staticmethod
    def _decode(resp: httpx.Response, shape: TypeAdapter[list[_Convertible[R]]]) -> list[R]:
        """Validate a JSON array body and convert each item to its domain record."""
        try:
            items = shape.validate_json(resp.content)
        except ValidationError as exc:
            first = exc.errors()[0]
            loc = ".".join(str(p) for p in first.get("loc", ())) or "body"
            raise UpstreamShapeError(
                f"Objects returned from the API are in the wrong format "
                f"({loc}: {first.get('msg', 'invalid value')})"
            ) from exc
        return [item.to_record() for item in items]

    async def _api_get(
        self,
        endpoint: str,
        not_found: str,
        page: int | None = None,
    ) -> httpx.Response:
        """Perform a GitHub API GET request with error translation."""
        url = f"{self._base_url}{endpoint}"
        params: dict[str, str] = {"per_page": str(PER_PAGE)}
        if page is not None:
            params["page"] = str(page)

        logger.info("Request sent to %s (page %s)", url, page or 1)
        try:
            resp = await self._client.get(url, headers=self._api_headers, params=params)
        except httpx.HTTPError as exc:
            raise UpstreamConnectionError(f"network error fetching {url}: {exc}") from exc

        if resp.status_code == 200:
            return resp

        if resp.status_code == 404:
            raise ResourceNotFoundError(not_found)

        if resp.status_code in (403, 429):
            reset_raw = resp.headers.get("x-ratelimit-reset", "")
            try:
                reset_str = datetime.fromtimestamp(int(reset_raw), tz=timezone.utc).strftime(
                    "%Y-%m-%d %H:%M:%S UTC"
                )
            except (ValueError, OSError):
                reset_str = reset_raw or "unknown"
            logger.warning(
                "GitHub rate limit hit (HTTP %d) for %s. Resets at %s",
                resp.status_code,
                url,
                reset_str,
            )
            raise RateLimitExceededError()

        raise UpstreamResponseError(resp.status_code, url)
