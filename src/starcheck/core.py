"""
Crawl orchestration: stargazers, then each stargazer's starred repositories.
"""
from __future__ import annotations

import enum
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, Optional, Union

from starcheck.aggregate import AffinityAggregator, TopEntry
from starcheck.extract import RepoReference, extract_repo_references
from starcheck.fetch import (
    GITHUB_BASE_URL,
    NetworkError,
    PageFetcher,
    StarcheckError,
    starred_url,
)
from starcheck.paginate import DEFAULT_MAX_STARGAZERS, fetch_stargazers
from starcheck.ratelimit import DEFAULT_INTERVAL_S, RateLimiter

logger = logging.getLogger(__name__)

MAX_STARGAZERS_LIMIT = 2000
TOP_N = 10


class CrawlPhase(enum.Enum):
    BOOTSTRAPPING = "bootstrapping"
    PAGINATING = "paginating"
    PROCESSING = "processing"
    DONE = "done"


class CrawlError(StarcheckError):
    """
    The crawl failed before any stargazer was processed.

    ``phase`` is the phase that failed: BOOTSTRAPPING or PAGINATING.
    """

    def __init__(self, phase: CrawlPhase, message: str) -> None:
        super().__init__(message)
        self.phase = phase


@dataclass(frozen=True, slots=True)
class CrawlSnapshot:
    """Progress report emitted after every processed stargazer."""
    processed: int
    total: int
    not_found_count: int
    top: List[TopEntry] = field(default_factory=list)


@dataclass(slots=True)
class CrawlProgress:
    """Counters for the per-stargazer loop."""
    total_count: int
    processed_count: int = 0
    not_found_count: int = 0
    error_counts: Dict[str, int] = field(default_factory=lambda: defaultdict(int))

    def record_not_found(self) -> None:
        self.not_found_count += 1

    def record_error(self, kind: Union[int, str]) -> None:
        """Record a skipped stargazer by HTTP status or failure kind."""
        self.error_counts[str(kind)] += 1

    def advance(self) -> None:
        if self.processed_count >= self.total_count:
            raise RuntimeError("processed more stargazers than were listed")
        self.processed_count += 1

    def snapshot(self, top: List[TopEntry]) -> CrawlSnapshot:
        return CrawlSnapshot(
            processed=self.processed_count,
            total=self.total_count,
            not_found_count=self.not_found_count,
            top=top,
        )


def _resolve_target(target: Union[str, RepoReference]) -> RepoReference:
    if isinstance(target, RepoReference):
        return target
    try:
        return RepoReference.parse(target)
    except (TypeError, ValueError) as e:
        raise CrawlError(CrawlPhase.BOOTSTRAPPING, f"Failed to parse repository owner/name: {e}") from e


def _resolve_cap(max_stargazers: Optional[int]) -> int:
    if max_stargazers is None:
        return DEFAULT_MAX_STARGAZERS
    if isinstance(max_stargazers, bool) or not isinstance(max_stargazers, int):
        raise CrawlError(CrawlPhase.BOOTSTRAPPING, f"Max stargazers must be an integer, got {max_stargazers!r}")
    if not 1 <= max_stargazers <= MAX_STARGAZERS_LIMIT:
        raise CrawlError(
            CrawlPhase.BOOTSTRAPPING,
            f"Max stargazers must be between 1 and {MAX_STARGAZERS_LIMIT}, got {max_stargazers}",
        )
    return max_stargazers


def _process_stargazer(
    fetcher: PageFetcher,
    login: str,
    aggregator: AffinityAggregator,
    progress: CrawlProgress,
    base_url: str,
) -> None:
    """Fetch one stargazer's stars and fold them into the counts."""
    url = starred_url(login, base_url)
    try:
        result = fetcher.fetch_with_status(url)
    except NetworkError as e:
        logger.warning("Error fetching starred repos for user %s: %s", login, e)
        progress.record_error("connection_error")
        return

    if result.status == 404:
        logger.debug("Stars page for user %s not found", login)
        progress.record_not_found()
        return
    if not result.ok:
        logger.warning("Error fetching starred repos for user %s: HTTP %d", login, result.status)
        progress.record_error(result.status)
        return

    try:
        refs = extract_repo_references(result.body)
    except Exception:
        logger.exception("Error parsing starred repos for user %s", login)
        progress.record_error("parse_error")
        return
    aggregator.record(refs)


def iter_crawl(
    target: Union[str, RepoReference],
    max_stargazers: Optional[int] = DEFAULT_MAX_STARGAZERS,
    fetcher: Optional[PageFetcher] = None,
    interval_s: float = DEFAULT_INTERVAL_S,
    base_url: str = GITHUB_BASE_URL,
) -> Iterator[CrawlSnapshot]:
    """
    Crawl a repository's stargazers and yield a snapshot after each one.

    Args:
        target: Repository as ``owner/name``, a GitHub URL or a RepoReference.
        max_stargazers: Number of stargazers to examine, 1 to 2000.
        fetcher: Fetcher to use; by default a new one with its own rate limiter.
        interval_s: Minimum gap between requests when ``fetcher`` is None.
        base_url: Site root, without trailing slash.

    Yields:
        CrawlSnapshot after every stargazer, whether it was counted, not
        found or skipped. The last one is the final result.

    Raises:
        CrawlError: the target or cap is invalid, or the stargazer listing
                    could not be fetched. Nothing is yielded in that case.
    """
    logger.debug("Phase: %s", CrawlPhase.BOOTSTRAPPING.value)
    repo = _resolve_target(target)
    cap = _resolve_cap(max_stargazers)
    if fetcher is None:
        try:
            fetcher = PageFetcher(RateLimiter(interval_s))
        except ValueError as e:
            raise CrawlError(CrawlPhase.BOOTSTRAPPING, f"Invalid request interval: {e}") from e

    logger.debug("Phase: %s", CrawlPhase.PAGINATING.value)
    logger.info("Fetching up to %d stargazers of %s", cap, repo)
    try:
        stargazers = fetch_stargazers(fetcher, repo, max_users=cap, base_url=base_url)
    except Exception as e:
        raise CrawlError(CrawlPhase.PAGINATING, f"Error fetching stargazers (HTML): {e}") from e

    logger.debug("Phase: %s", CrawlPhase.PROCESSING.value)
    logger.info("Found %d stargazers of %s", len(stargazers), repo)
    aggregator = AffinityAggregator(repo)
    progress = CrawlProgress(total_count=len(stargazers))

    if not stargazers:
        yield progress.snapshot([])

    for login in stargazers:
        _process_stargazer(fetcher, login, aggregator, progress, base_url)
        progress.advance()
        yield progress.snapshot(aggregator.top_entries(TOP_N, progress.processed_count))

    logger.debug("Phase: %s", CrawlPhase.DONE.value)
    logger.info(
        "Crawl of %s finished: %d processed, %d not found, %d skipped",
        repo, progress.processed_count, progress.not_found_count,
        sum(progress.error_counts.values()),
    )


def crawl(
    target: Union[str, RepoReference],
    max_stargazers: Optional[int] = DEFAULT_MAX_STARGAZERS,
    fetcher: Optional[PageFetcher] = None,
    interval_s: float = DEFAULT_INTERVAL_S,
    base_url: str = GITHUB_BASE_URL,
    on_progress: Optional[Callable[[CrawlSnapshot], None]] = None,
) -> CrawlSnapshot:
    """Run ``iter_crawl`` to completion and return the final snapshot."""
    last: Optional[CrawlSnapshot] = None
    for snapshot in iter_crawl(target, max_stargazers, fetcher, interval_s, base_url):
        if on_progress is not None:
            on_progress(snapshot)
        last = snapshot
    if last is None:
        raise RuntimeError("crawl produced no snapshot")
    return last
