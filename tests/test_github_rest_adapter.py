"""Tests for the GitHub REST adapter against an in-process mock transport."""

from __future__ import annotations

from typing import Any

import httpx
import pytest
import pytest_asyncio

from repo_aggregator.domain.entities import BranchRecord, RepositoryRecord
from repo_aggregator.domain.exceptions import (
    MalformedPaginationHeaderError,
    RateLimitExceededError,
    ResourceNotFoundError,
    UpstreamConnectionError,
    UpstreamResponseError,
    UpstreamShapeError,
)
from repo_aggregator.domain.request_scope import RequestScope
from repo_aggregator.infrastructure.github_rest_adapter import GitHubRestAdapter

LOGIN = "username"
REPOS_PATH = f"/users/{LOGIN}/repos"
BRANCHES_PATH = f"/repos/{LOGIN}/repo1/branches"


def _link(path: str, last_page: int) -> str:
    return (
        f'<https://api.github.com{path}?per_page=100&page=2>; rel="next", '
        f'<https://api.github.com{path}?per_page=100&page={last_page}>; rel="last"'
    )


def _repo(name: str, fork: bool = False) -> dict[str, Any]:
    return {
        "id": 1,
        "name": name,
        "full_name": f"{LOGIN}/{name}",
        "owner": {"login": LOGIN, "id": 7},
        "fork": fork,
        "private": False,
    }


def _branch(name: str, sha: str) -> dict[str, Any]:
    return {"name": name, "commit": {"sha": sha, "url": "https://example"}, "protected": False}


class MockGitHub:
    """Serves canned responses keyed by ``(path, page)`` and records every request."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, int], tuple[int, Any, dict[str, str]]] = {}
        self.requests: list[httpx.Request] = []

    def add(
        self,
        path: str,
        body: Any,
        page: int = 1,
        status: int = 200,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.routes[(path, page)] = (status, body, headers or {})

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        page = int(request.url.params.get("page", "1"))
        status, body, headers = self.routes.get((request.url.path, page), (500, None, {}))
        if isinstance(body, (bytes, str)):
            return httpx.Response(status, content=body, headers=headers)
        return httpx.Response(status, json=body, headers=headers)


@pytest.fixture
def github() -> MockGitHub:
    return MockGitHub()


@pytest_asyncio.fixture
async def adapter(github: MockGitHub):
    async with httpx.AsyncClient(transport=httpx.MockTransport(github.handler)) as client:
        yield GitHubRestAdapter(client=client)


@pytest_asyncio.fixture
async def scope():
    async with RequestScope() as request_scope:
        yield request_scope


class TestListRepositories:
    @pytest.mark.asyncio
    async def test_empty_response(self, github, adapter, scope):
        github.add(REPOS_PATH, [])

        assert await adapter.list_repositories(LOGIN, scope) == []

    @pytest.mark.asyncio
    async def test_one_page_keeps_order(self, github, adapter, scope):
        github.add(REPOS_PATH, [_repo("repo1"), _repo("repo2", fork=True)])

        records = await adapter.list_repositories(LOGIN, scope)

        assert records == [
            RepositoryRecord("repo1", LOGIN, is_fork=False),
            RepositoryRecord("repo2", LOGIN, is_fork=True),
        ]
        assert len(github.requests) == 1
        request = github.requests[0]
        assert str(request.url) == f"https://api.github.com{REPOS_PATH}?per_page=100"
        assert request.headers["Accept"] == "application/vnd.github+json"

    @pytest.mark.asyncio
    async def test_multiple_pages(self, github, adapter, scope):
        github.add(REPOS_PATH, [_repo("repo1")], headers={"Link": _link(REPOS_PATH, 3)})
        github.add(REPOS_PATH, [_repo("repo2")], page=2)
        github.add(REPOS_PATH, [_repo("repo3"), _repo("repo4")], page=3)

        records = await adapter.list_repositories(LOGIN, scope)

        assert records[0].name == "repo1"
        assert {r.name for r in records} == {"repo1", "repo2", "repo3", "repo4"}
        assert len(records) == 4
        pages = sorted(r.url.params.get("page", "1") for r in github.requests)
        assert pages == ["1", "2", "3"]
        assert all(r.url.params["per_page"] == "100" for r in github.requests)

    @pytest.mark.asyncio
    async def test_unknown_owner(self, github, adapter, scope):
        github.add(REPOS_PATH, {"message": "Not Found"}, status=404)

        with pytest.raises(ResourceNotFoundError) as exc_info:
            await adapter.list_repositories(LOGIN, scope)
        assert LOGIN in str(exc_info.value)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [403, 429])
    async def test_rate_limited(self, github, adapter, scope, status):
        github.add(
            REPOS_PATH,
            {"message": "API rate limit exceeded"},
            status=status,
            headers={"x-ratelimit-remaining": "0", "x-ratelimit-reset": "1700000000"},
        )

        with pytest.raises(RateLimitExceededError):
            await adapter.list_repositories(LOGIN, scope)

    @pytest.mark.asyncio
    async def test_rate_limited_on_later_page(self, github, adapter, scope):
        github.add(REPOS_PATH, [_repo("repo1")], headers={"Link": _link(REPOS_PATH, 3)})
        github.add(REPOS_PATH, [_repo("repo2")], page=2)
        github.add(REPOS_PATH, {"message": "slow down"}, page=3, status=429)

        with pytest.raises(RateLimitExceededError):
            await adapter.list_repositories(LOGIN, scope)

    @pytest.mark.asyncio
    async def test_unexpected_status(self, github, adapter, scope):
        github.add(REPOS_PATH, {"message": "oops"}, status=502)

        with pytest.raises(UpstreamResponseError) as exc_info:
            await adapter.list_repositories(LOGIN, scope)
        assert exc_info.value.status_code == 502

    @pytest.mark.asyncio
    async def test_malformed_link_header(self, github, adapter, scope):
        github.add(REPOS_PATH, [_repo("repo1")], headers={"Link": '<x?page=2>; rel="next"'})

        with pytest.raises(MalformedPaginationHeaderError):
            await adapter.list_repositories(LOGIN, scope)


class TestShapeValidation:
    @pytest.mark.asyncio
    async def test_missing_required_field(self, github, adapter, scope):
        github.add(REPOS_PATH, [{"name": "repo1", "owner": {"login": LOGIN}}])

        with pytest.raises(UpstreamShapeError) as exc_info:
            await adapter.list_repositories(LOGIN, scope)
        assert "fork" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_object_instead_of_list(self, github, adapter, scope):
        github.add(REPOS_PATH, {"message": "not a list"})

        with pytest.raises(UpstreamShapeError):
            await adapter.list_repositories(LOGIN, scope)

    @pytest.mark.asyncio
    async def test_invalid_json(self, github, adapter, scope):
        github.add(REPOS_PATH, b"<html>definitely not json</html>")

        with pytest.raises(UpstreamShapeError):
            await adapter.list_repositories(LOGIN, scope)

    @pytest.mark.asyncio
    async def test_empty_repository_name(self, github, adapter, scope):
        github.add(REPOS_PATH, [_repo("")])

        with pytest.raises(UpstreamShapeError):
            await adapter.list_repositories(LOGIN, scope)


class TestListBranches:
    @pytest.mark.asyncio
    async def test_one_page(self, github, adapter, scope):
        github.add(BRANCHES_PATH, [_branch("branch1", "sha1"), _branch("main", "sha9")])

        branches = await adapter.list_branches(LOGIN, "repo1", scope)

        assert branches == [BranchRecord("branch1", "sha1"), BranchRecord("main", "sha9")]

    @pytest.mark.asyncio
    async def test_empty_response(self, github, adapter, scope):
        github.add(BRANCHES_PATH, [])

        assert await adapter.list_branches(LOGIN, "repo1", scope) == []

    @pytest.mark.asyncio
    async def test_multiple_pages(self, github, adapter, scope):
        github.add(
            BRANCHES_PATH,
            [_branch("branch1", "sha1")],
            headers={"Link": _link(BRANCHES_PATH, 2)},
        )
        github.add(BRANCHES_PATH, [_branch("branch2", "sha2")], page=2)

        branches = await adapter.list_branches(LOGIN, "repo1", scope)

        assert branches == [BranchRecord("branch1", "sha1"), BranchRecord("branch2", "sha2")]

    @pytest.mark.asyncio
    async def test_repository_deleted(self, github, adapter, scope):
        github.add(BRANCHES_PATH, {"message": "Not Found"}, status=404)

        with pytest.raises(ResourceNotFoundError) as exc_info:
            await adapter.list_branches(LOGIN, "repo1", scope)
        assert f"{LOGIN}/repo1" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_missing_commit_sha(self, github, adapter, scope):
        github.add(BRANCHES_PATH, [{"name": "branch1", "commit": {}}])

        with pytest.raises(UpstreamShapeError):
            await adapter.list_branches(LOGIN, "repo1", scope)


class TestTransportFailures:
    @pytest.mark.asyncio
    async def test_connection_error(self, scope):
        def _refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(_refuse)) as client:
            adapter = GitHubRestAdapter(client=client)
            with pytest.raises(UpstreamConnectionError):
                await adapter.list_repositories(LOGIN, scope)

    @pytest.mark.asyncio
    async def test_custom_base_url(self, github, scope):
        github.add(f"/api/v3{REPOS_PATH}", [])
        async with httpx.AsyncClient(transport=httpx.MockTransport(github.handler)) as client:
            adapter = GitHubRestAdapter(client=client, base_url="http://ghe.local/api/v3/")

            await adapter.list_repositories(LOGIN, scope)

        assert github.requests[0].url.host == "ghe.local"
        assert github.requests[0].url.path == f"/api/v3{REPOS_PATH}"
