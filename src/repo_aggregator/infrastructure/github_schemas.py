"""Pydantic models of the GitHub payloads the adapter consumes.

Only the fields the aggregation needs are declared.  Unknown fields are
ignored; a missing or mistyped declared field fails validation.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from repo_aggregator.domain.entities import BranchRecord, RepositoryRecord


class _GitHubModel(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class GitHubOwner(_GitHubModel):
    login: str


class GitHubRepository(_GitHubModel):
    """One element of ``GET /users/{owner}/repos``."""

    name: str = Field(min_length=1)
    owner: GitHubOwner
    fork: bool

    def to_record(self) -> RepositoryRecord:
        return RepositoryRecord(
            name=self.name,
            owner_login=self.owner.login,
            is_fork=self.fork,
        )


class GitHubCommit(_GitHubModel):
    sha: str


class GitHubBranch(_GitHubModel):
    """One element of ``GET /repos/{owner}/{repo}/branches``."""

    name: str
    commit: GitHubCommit

    def to_record(self) -> BranchRecord:
        return BranchRecord(name=self.name, commit_sha=self.commit.sha)


REPOSITORY_LIST = TypeAdapter(list[GitHubRepository])
BRANCH_LIST = TypeAdapter(list[GitHubBranch])
