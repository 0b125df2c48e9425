"""
Stargazer listing pagination.
"""
from __future__ import annotations

import logging
from typing import List

from starcheck.extract import RepoReference, extract_stargazers
from starcheck.fetch import GITHUB_BASE_URL, PageFetcher, stargazers_url

logger = logging.getLogger(__name__)

DEFAULT_MAX_STARGAZERS = 300


def fetch_stargazers(
    fetcher: PageFetcher,
    repo: RepoReference,
    max_users: int = DEFAULT_MAX_STARGAZERS,
    base_url: str = GITHUB_BASE_URL,
) -> List[str]:
    """
    Collect up to ``max_users`` stargazer logins, in first-seen order.

    Pages 1, 2, 3... are fetched one after another. Paging stops once the cap
    is reached or a page adds no login that was not already collected. The
    listing has no page count, so an all-duplicate page is treated as the end.

    Fetch failures are not caught.
    """
    logins: List[str] = []
    seen: set[str] = set()
    page = 1

    while True:
        html = fetcher.fetch_or_throw(stargazers_url(repo, page, base_url))
        new_logins = extract_stargazers(html, limit=max_users - len(logins), seen=seen)
        logins.extend(new_logins)
        seen.update(new_logins)
        logger.debug("Stargazers page %d: +%d (total %d)", page, len(new_logins), len(logins))

        if not new_logins or len(logins) >= max_users:
            break
        page += 1

    return logins
