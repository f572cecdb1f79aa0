"""Pydantic response DTOs for the API boundary."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from repo_aggregator.domain.entities import AggregatedRepository, Aggregation


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class BranchResponse(_CamelModel):
    name: str
    last_commit_sha: str


class RepositoryResponse(_CamelModel):
    repository_name: str
    owner_login: str
    branches: list[BranchResponse]

    @classmethod
    def from_entity(cls, repository: AggregatedRepository) -> RepositoryResponse:
        return cls(
            repository_name=repository.repository_name,
            owner_login=repository.owner_login,
            branches=[
                BranchResponse(name=b.name, last_commit_sha=b.last_commit_sha)
                for b in repository.branches
            ],
        )


class RepositoryListResponse(_CamelModel):
    """Successful response from ``GET /repositories/{owner_login}``."""

    repositories: list[RepositoryResponse]

    @classmethod
    def from_entity(cls, aggregation: Aggregation) -> RepositoryListResponse:
        return cls(
            repositories=[RepositoryResponse.from_entity(r) for r in aggregation.repositories]
        )


class ErrorResponse(BaseModel):
    """Standard error envelope returned on all failure paths."""

    status: int
    message: str
