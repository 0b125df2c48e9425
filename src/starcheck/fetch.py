"""
Single-attempt HTML fetching through a shared rate limiter.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

import requests

from starcheck.ratelimit import RateLimiter

if TYPE_CHECKING:
    from starcheck.extract import RepoReference

GITHUB_BASE_URL = "https://github.com"
DEFAULT_USER_AGENT = "starcheck/1.0"


class StarcheckError(Exception):
    """Base class for all errors raised by starcheck."""


class FetchError(StarcheckError):
    """A page could not be fetched."""


class HttpError(FetchError):
    """The server answered with a non-2xx status."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message


class NetworkError(FetchError):
    """The request never produced a response (DNS, connection, timeout...)."""


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Raw response of a status-aware fetch."""
    status: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


def stargazers_url(repo: RepoReference, page: int, base_url: str = GITHUB_BASE_URL) -> str:
    """URL of one page of a repository's stargazer listing."""
    return f"{base_url}/{repo.owner}/{repo.name}/stargazers?page={page}"


def starred_url(login: str, base_url: str = GITHUB_BASE_URL) -> str:
    """URL of the first page of a user's starred repositories."""
    return f"{base_url}/{login}?tab=stars"


class PageFetcher:
    """
    GET markup pages, one at a time, through a ``RateLimiter``.

    Every request is a single attempt. There is no retry and no timeout
    unless ``timeout_s`` is given.
    """

    def __init__(
        self,
        rate_limiter: RateLimiter,
        session: Optional[requests.Session] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout_s: Optional[float] = None,
    ) -> None:
        self.rate_limiter = rate_limiter
        self.session = session if session is not None else requests.Session()
        self.session.headers["User-Agent"] = user_agent
        self.timeout_s = timeout_s

    def _get(self, url: str) -> requests.Response:
        try:
            return self.session.get(
                url,
                headers={"Accept": "text/html"},
                timeout=self.timeout_s,
                allow_redirects=True,
            )
        except requests.RequestException as e:
            raise NetworkError(f"Request failed: {url}: {e}") from e

    def fetch_or_throw(self, url: str) -> str:
        """
        Fetch ``url`` and return its body.

        Raises:
            HttpError: the response status is not 2xx.
            NetworkError: the request failed before a response arrived.
        """
        resp = self.rate_limiter.schedule(lambda: self._get(url))
        if not 200 <= resp.status_code < 300:
            raise HttpError(resp.status_code, f"HTTP {resp.status_code} - {resp.reason}")
        return resp.text

    def fetch_with_status(self, url: str) -> FetchResult:
        """
        Fetch ``url`` and return status and body, whatever the status.

        Raises:
            NetworkError: the request failed before a response arrived.
        """
        resp = self.rate_limiter.schedule(lambda: self._get(url))
        return FetchResult(status=resp.status_code, body=resp.text)
