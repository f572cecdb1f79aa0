"""Port: upstream client — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from typing import Protocol

from repo_aggregator.domain.entities import BranchRecord, RepositoryRecord
from repo_aggregator.domain.request_scope import RequestScope


class UpstreamClient(Protocol):
    """Abstract contract for listing repositories and branches upstream.

    Implementations fetch every page of a listing; extra pages run as tasks
    of the caller's *scope*.
    """

    async def list_repositories(
        self, owner_login: str, scope: RequestScope
    ) -> list[RepositoryRecord]:
        """Return every repository owned by *owner_login*, forks included."""
        ...

    async def list_branches(
        self, owner_login: str, repository_name: str, scope: RequestScope
    ) -> list[BranchRecord]:
        """Return every branch of ``owner_login/repository_name``."""
        ...
