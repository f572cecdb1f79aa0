"""Domain entities — pure data structures with no external dependencies."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class AggregationStage(str, Enum):
    """Progress marker of a single aggregation pass."""

    START = "start"
    REPOSITORIES_FETCHED = "repositories_fetched"
    FILTERED = "filtered"
    BRANCHES_FETCHED = "branches_fetched"
    ASSEMBLED = "assembled"
    FAILED = "failed"


# ── Upstream records ────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class RepositoryRecord:
    """A repository as listed by ``GET /users/{owner}/repos``."""

    name: str
    owner_login: str
    is_fork: bool = False


@dataclass(frozen=True, slots=True)
class BranchRecord:
    """A branch as listed by ``GET /repos/{owner}/{repo}/branches``."""

    name: str
    commit_sha: str


# ── Aggregated output ───────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class AggregatedBranch:
    name: str
    last_commit_sha: str


@dataclass(frozen=True, slots=True)
class AggregatedRepository:
    """A non-fork repository together with all of its branches."""

    repository_name: str
    owner_login: str
    branches: tuple[AggregatedBranch, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class Aggregation:
    """The final result of one aggregation pass."""

    repositories: tuple[AggregatedRepository, ...] = field(default_factory=tuple)
