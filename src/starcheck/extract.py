"""
Entity extraction from GitHub HTML pages.

Both extractors are pure functions of the markup they are given.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Collection, List, Optional, Sequence
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from bs4.element import Tag

# Top-level path segments that look like "/owner/name" but are not repositories
BLOCKED_OWNERS: frozenset[str] = frozenset((
    "organizations", "settings", "apps", "site",
    "topics", "collections", "sponsors",
))

REPO_HREF_RE = re.compile(r"/([A-Za-z0-9_.-]+)/([A-Za-z0-9_.-]+)/?(?:[#?].*)?")
LOGIN_HREF_RE = re.compile(r"/([A-Za-z0-9-]+)/?")

STARGAZER_SCOPES: tuple[str, ...] = (
    "turbo-frame#repo-content-turbo-frame",
    "#repo-content-pjax-container",
)
USER_LINK_SELECTOR = 'a[data-hovercard-type="user"][href^="/"]'

STARRED_SCOPES: tuple[str, ...] = (
    "turbo-frame#user-starred-repos",
    "#user-starred-repos",
)
# Tried in order; the next one only runs when the previous found nothing
REPO_LINK_SELECTORS: tuple[str, ...] = (
    'a[data-hovercard-type="repository"][href^="/"]',
    'h3 a[data-hovercard-type="repository"][href^="/"]',
    'h3 a[href^="/"]',
    'a.Link--primary[data-hovercard-type="repository"][href^="/"]',
)
ANY_LOCAL_LINK_SELECTOR = 'a[href^="/"]'


@dataclass(frozen=True, slots=True)
class RepoReference:
    """Canonical ``owner/name`` identifier of a repository."""
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.full_name

    @classmethod
    def from_href(cls, href: Optional[str]) -> Optional[RepoReference]:
        """
        Validate a root-relative href and turn it into a reference.

        Returns None unless the href is exactly two path segments (with an
        optional trailing slash, query or fragment) and the first segment is
        not a reserved top-level path.
        """
        if not href:
            return None
        m = REPO_HREF_RE.fullmatch(href)
        if not m:
            return None
        owner, name = m.group(1), m.group(2)
        if owner in BLOCKED_OWNERS:
            return None
        return cls(owner, name)

    @classmethod
    def parse(cls, value: str) -> RepoReference:
        """
        Resolve a target given as ``owner/name``, ``/owner/name`` or a
        repository URL, optionally pointing at its stargazers page.

        Raises:
            TypeError: the value is not a string.
            ValueError: the value does not name a repository.
        """
        if not isinstance(value, str):
            raise TypeError(f"Repository must be a string, got {type(value).__name__}")
        text = value.strip()
        if "://" in text:
            text = urlparse(text).path
        text = "/" + text.strip("/")
        if text.endswith("/stargazers"):
            text = text[: -len("/stargazers")]
        ref = cls.from_href(text)
        if ref is None:
            raise ValueError(f"Not a repository: {value!r}")
        return ref


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def _scope(soup: BeautifulSoup, selectors: Sequence[str]) -> Tag:
    """First element matching one of ``selectors``, else the whole document."""
    for sel in selectors:
        found = soup.select_one(sel)
        if found is not None:
            return found
    return soup


def extract_stargazers(
    html: str,
    limit: Optional[int] = None,
    seen: Collection[str] = (),
) -> List[str]:
    """
    Extract stargazer logins from one stargazer-listing page.

    Args:
        html: Raw page markup.
        limit: Stop once this many logins have been collected.
        seen: Logins already known to the caller; they are skipped and do
              not count towards ``limit``.

    Returns:
        Logins in document order, without duplicates.
    """
    scope = _scope(_soup(html), STARGAZER_SCOPES)
    logins: List[str] = []
    for a in scope.select(USER_LINK_SELECTOR):
        if limit is not None and len(logins) >= limit:
            break
        m = LOGIN_HREF_RE.fullmatch(a.get("href") or "")
        if not m:
            continue
        login = m.group(1)
        if login in seen or login in logins:
            continue
        logins.append(login)
    return logins


def _collect_refs(anchors: Sequence[Tag]) -> List[RepoReference]:
    refs: dict[RepoReference, None] = {}
    for a in anchors:
        ref = RepoReference.from_href(a.get("href"))
        if ref is not None:
            refs.setdefault(ref)
    return list(refs)


def extract_repo_references(html: str) -> List[RepoReference]:
    """
    Extract the repositories listed on a user's starred-repositories page.

    Selectors in ``REPO_LINK_SELECTORS`` are tried from the most specific to
    the broadest; if none yields a valid reference, every root-relative link
    in scope is scanned. An empty list is a valid result.
    """
    scope = _scope(_soup(html), STARRED_SCOPES)
    for sel in REPO_LINK_SELECTORS:
        refs = _collect_refs(scope.select(sel))
        if refs:
            return refs
    return _collect_refs(scope.select(ANY_LOCAL_LINK_SELECTOR))
