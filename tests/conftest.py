"""Shared fakes: an in-memory requests session and HTML page builders."""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Union

import pytest

from starcheck.fetch import PageFetcher
from starcheck.ratelimit import RateLimiter


class FakeResponse:
    REASONS = {200: "OK", 404: "Not Found", 429: "Too Many Requests", 500: "Internal Server Error"}

    def __init__(self, status_code: int = 200, text: str = "") -> None:
        self.status_code = status_code
        self.text = text
        self.reason = self.REASONS.get(status_code, "")


class FakeSession:
    """Answers GETs from a url -> response (or exception) table; unknown urls are 404."""

    def __init__(self, pages: Optional[Dict[str, Union[FakeResponse, Exception]]] = None) -> None:
        self.pages = dict(pages or {})
        self.headers: Dict[str, str] = {}
        self.calls: List[dict] = []

    def get(self, url, headers=None, timeout=None, allow_redirects=True):
        self.calls.append({"url": url, "headers": headers, "timeout": timeout})
        page = self.pages.get(url, FakeResponse(404, "Not Found"))
        if isinstance(page, Exception):
            raise page
        return page

    @property
    def urls(self) -> List[str]:
        return [c["url"] for c in self.calls]


def stargazer_page(logins: Iterable[str], scoped: bool = True) -> str:
    """Markup of a stargazer listing page."""
    items = "".join(
        f'<li><img alt="@{login}"><a data-hovercard-type="user" href="/{login}">{login}</a></li>'
        for login in logins
    )
    body = f"<ol>{items}</ol>"
    if scoped:
        body = f'<turbo-frame id="repo-content-turbo-frame">{body}</turbo-frame>'
    header = '<header><a data-hovercard-type="user" href="/site-admin">me</a></header>'
    return f"<html><body>{header}{body}</body></html>"


def starred_page(full_names: Iterable[str]) -> str:
    """Markup of a user's starred-repositories tab."""
    items = "".join(
        f'<div><h3><a data-hovercard-type="repository" class="Link--primary" href="/{name}">{name}</a></h3></div>'
        for name in full_names
    )
    return (
        "<html><body>"
        '<nav><a href="/settings/profile">Settings</a></nav>'
        f'<turbo-frame id="user-starred-repos">{items}</turbo-frame>'
        "</body></html>"
    )


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def fetcher(session: FakeSession) -> PageFetcher:
    return PageFetcher(RateLimiter(0.0), session=session)
