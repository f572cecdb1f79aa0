"""Pagination resolver — reads the page count from GitHub's ``Link`` header.

GitHub paginates list endpoints and advertises the remaining pages as::

    <https://api.github.com/user/1/repos?per_page=100&page=2>; rel="next",
    <https://api.github.com/user/1/repos?per_page=100&page=5>; rel="last"

Absence of the header means the listing fits on a single page.
"""

from __future__ import annotations

import re

import httpx

from repo_aggregator.domain.exceptions import (
    MalformedPaginationHeaderError,
    MissingPaginationHeaderError,
)

LINK_HEADER = "Link"

# 1M records at 100 per page; anything beyond is not a real listing.
MAX_LAST_PAGE = 10_000

_LAST_PAGE_RE = re.compile(r'page=(\d+)>; rel="last"')


def has_more_pages(response: httpx.Response) -> bool:
    """Return True when *response* advertises further pages."""
    return LINK_HEADER in response.headers


def last_page_number(response: httpx.Response) -> int:
    """Return the number of the ``rel="last"`` page, between 2 and ``MAX_LAST_PAGE``.

    Callers must check :func:`has_more_pages` first; a missing header is a
    contract violation, not a single-page listing.
    """
    link = response.headers.get(LINK_HEADER)
    if link is None:
        raise MissingPaginationHeaderError(
            "Link header value is not found in the API response."
        )

    malformed = MalformedPaginationHeaderError(
        f"Link header value is in the wrong format in the API response: {link[:200]!r}"
    )
    match = _LAST_PAGE_RE.search(link)
    if match is None:
        raise malformed

    try:
        page = int(match.group(1))
    except ValueError as exc:
        raise malformed from exc

    if not 2 <= page <= MAX_LAST_PAGE:
        raise malformed
    return page
