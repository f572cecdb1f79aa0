"""Fan-out fetcher — loads pages ``2..N`` of a listing concurrently."""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, TypeVar

from repo_aggregator.domain.request_scope import RequestScope

logger = logging.getLogger(__name__)

T = TypeVar("T")

PageFetcher = Callable[[int], Awaitable[list[T]]]


async def fetch_remaining_pages(
    page_fetcher: PageFetcher[T],
    last_page: int,
    scope: RequestScope,
) -> list[T]:
    """Fetch pages ``2..last_page`` at once and flatten their records.

    Records come back grouped by page number.  The first failing page
    cancels the others and its error is propagated.
    """
    pages = range(2, last_page + 1)
    if not pages:
        return []

    logger.debug("Fetching pages 2..%d concurrently", last_page)

    async def _fetch(page: int) -> list[T]:
        return await page_fetcher(page)

    results = await scope.gather(_fetch(page) for page in pages)
    return [record for page_records in results for record in page_records]
