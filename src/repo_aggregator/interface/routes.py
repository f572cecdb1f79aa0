"""API routes: thin controllers that delegate to the use case."""

from fastapi import APIRouter, Depends

from repo_aggregator.domain.request_scope import RequestScope
from repo_aggregator.interface.dependencies import (
    get_request_scope,
    get_use_case,
    require_json,
)
from repo_aggregator.interface.failure_logging import log_failures
from repo_aggregator.interface.schemas import ErrorResponse, RepositoryListResponse
from repo_aggregator.services.aggregate_repositories import AggregateRepositoriesUseCase

router = APIRouter()


@router.get(
    "/repositories/{owner_login}",
    response_model=RepositoryListResponse,
    dependencies=[Depends(require_json)],
    responses={
        404: {"model": ErrorResponse, "description": "Owner or repository not found"},
        406: {"model": ErrorResponse, "description": "Client does not accept JSON"},
        503: {"model": ErrorResponse, "description": "GitHub API unavailable or rate limited"},
    },
)
@log_failures
async def list_repositories(
    owner_login: str,
    use_case: AggregateRepositoriesUseCase = Depends(get_use_case),
    scope: RequestScope = Depends(get_request_scope),
) -> RepositoryListResponse:
    """List every non-fork repository of *owner_login* with its branches."""
    aggregation = await use_case.execute(owner_login, scope)
    return RepositoryListResponse.from_entity(aggregation)


@router.get("/health", include_in_schema=False)
async def health() -> dict[str, str]:
    return {"status": "ok"}
