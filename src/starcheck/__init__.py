"""
Stargazer affinity crawler: find the repositories most often co-starred by a
repository's stargazers. Outputs live progress snapshots with a top-10 ranking.
"""
from starcheck.aggregate import AffinityAggregator, TopEntry, percentage
from starcheck.core import CrawlError, CrawlPhase, CrawlProgress, CrawlSnapshot, crawl, iter_crawl
from starcheck.extract import RepoReference, extract_repo_references, extract_stargazers
from starcheck.fetch import FetchResult, HttpError, NetworkError, PageFetcher, StarcheckError
from starcheck.paginate import fetch_stargazers
from starcheck.ratelimit import RateLimiter

__version__ = "1.0.0"
__all__ = [
    "AffinityAggregator",
    "CrawlError",
    "CrawlPhase",
    "CrawlProgress",
    "CrawlSnapshot",
    "FetchResult",
    "HttpError",
    "NetworkError",
    "PageFetcher",
    "RateLimiter",
    "RepoReference",
    "StarcheckError",
    "TopEntry",
    "crawl",
    "extract_repo_references",
    "extract_stargazers",
    "fetch_stargazers",
    "iter_crawl",
    "percentage",
]
