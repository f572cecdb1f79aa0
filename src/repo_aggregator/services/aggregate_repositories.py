"""Aggregate-repositories use case — the main orchestration pipeline.

This is the single entry point for the business logic.  It depends only on
the :class:`UpstreamClient` port; the interface layer injects the concrete
adapter and the request scope at runtime.
"""

from __future__ import annotations

import logging

from repo_aggregator.domain.entities import (
    AggregatedBranch,
    AggregatedRepository,
    Aggregation,
    AggregationStage,
    BranchRecord,
    RepositoryRecord,
)
from repo_aggregator.domain.ports.upstream_client import UpstreamClient
from repo_aggregator.domain.request_scope import RequestScope

logger = logging.getLogger(__name__)


class AggregateRepositoriesUseCase:
    """Orchestrates the owner → repositories → branches pipeline.

    Parameters
    ----------
    upstream:
        Adapter that lists repositories and branches, all pages included.
    """

    def __init__(self, upstream: UpstreamClient) -> None:
        self._upstream = upstream

    # ── Public entry point ──────────────────────────────────────────────

    async def execute(self, owner_login: str, scope: RequestScope) -> Aggregation:
        """Run the full pipeline and return every non-fork repository with its branches.

        Any failure aborts the whole aggregation; nothing partial is returned.
        """
        stage = AggregationStage.START
        try:
            # 1. Every repository of the owner, forks included
            records = await self._upstream.list_repositories(owner_login, scope)
            stage = AggregationStage.REPOSITORIES_FETCHED
            logger.debug("%s owns %d repositories", owner_login, len(records))

            # 2. Drop forks, keep listing order
            repositories = [r for r in records if not r.is_fork]
            stage = AggregationStage.FILTERED
            logger.info(
                "Aggregating %d non-fork repositories of %s",
                len(repositories),
                owner_login,
            )

            # 3. Branches of every repository concurrently
            branches = await scope.gather(
                self._upstream.list_branches(r.owner_login, r.name, scope)
                for r in repositories
            )
            stage = AggregationStage.BRANCHES_FETCHED

            # 4. Re-associate each branch listing with its repository
            aggregation = Aggregation(
                repositories=tuple(
                    _assemble(repository, repo_branches)
                    for repository, repo_branches in zip(repositories, branches)
                )
            )
            stage = AggregationStage.ASSEMBLED
        except Exception:
            logger.debug(
                "Aggregation for %s moved from %s to %s",
                owner_login,
                stage.value,
                AggregationStage.FAILED.value,
            )
            raise

        logger.debug("Aggregation for %s reached %s", owner_login, stage.value)
        return aggregation


# ── Helpers ─────────────────────────────────────────────────────────────────


def _assemble(
    repository: RepositoryRecord, branches: list[BranchRecord]
) -> AggregatedRepository:
    return AggregatedRepository(
        repository_name=repository.name,
        owner_login=repository.owner_login,
        branches=tuple(
            AggregatedBranch(name=b.name, last_commit_sha=b.commit_sha) for b in branches
        ),
    )
