"""Tests for href validation and page extraction."""
import pytest

from starcheck.extract import RepoReference, extract_repo_references, extract_stargazers

from conftest import stargazer_page, starred_page


@pytest.mark.parametrize("href, expected", [
    ("/octocat/Hello-World", "octocat/Hello-World"),
    ("/octocat/Hello-World/", "octocat/Hello-World"),
    ("/octocat/hello.world_2?tab=readme", "octocat/hello.world_2"),
    ("/octocat/Hello-World#readme", "octocat/Hello-World"),
])
def test_repo_reference_from_valid_href(href, expected):
    """Test two-segment hrefs normalize to owner/name."""
    ref = RepoReference.from_href(href)
    assert ref is not None
    assert ref.full_name == expected
    assert str(ref) == expected


@pytest.mark.parametrize("href", [
    "/settings/profile",
    "/topics/python",
    "/sponsors/octocat",
    "/octocat",
    "/octocat/Hello-World/issues",
    "/octocat/Hello-World\n",
    "octocat/Hello-World",
    "https://github.com/octocat/Hello-World",
    "",
    None,
])
def test_repo_reference_rejects_invalid_href(href):
    """Test blocked, single-segment and non-root-relative hrefs are rejected."""
    assert RepoReference.from_href(href) is None


def test_repo_reference_equality():
    """Test references compare by owner/name."""
    assert RepoReference("a", "b") == RepoReference.from_href("/a/b/")
    assert len({RepoReference("a", "b"), RepoReference("a", "b")}) == 1


@pytest.mark.parametrize("value", [
    "octocat/Hello-World",
    "/octocat/Hello-World/",
    "https://github.com/octocat/Hello-World",
    "https://github.com/octocat/Hello-World/stargazers",
])
def test_repo_reference_parse(value):
    """Test target identities resolve from names and URLs."""
    assert RepoReference.parse(value) == RepoReference("octocat", "Hello-World")


@pytest.mark.parametrize("value", ["octocat", "settings/profile", "", "a/b/c"])
def test_repo_reference_parse_rejects(value):
    """Test unresolvable targets raise ValueError."""
    with pytest.raises(ValueError):
        RepoReference.parse(value)


def test_extract_stargazers_order_and_scope():
    """Test logins come back in document order, from the content region only."""
    html = stargazer_page(["alice", "bob", "alice", "carol-1"])
    assert extract_stargazers(html) == ["alice", "bob", "carol-1"]


def test_extract_stargazers_falls_back_to_document():
    """Test the whole document is scanned when no content region exists."""
    html = stargazer_page(["alice", "bob"], scoped=False)
    assert extract_stargazers(html) == ["site-admin", "alice", "bob"]


def test_extract_stargazers_filters_hrefs():
    """Test only single-segment login paths on user-typed links count."""
    html = (
        '<div id="repo-content-pjax-container">'
        '<a data-hovercard-type="user" href="/alice/">alice</a>'
        '<a data-hovercard-type="user" href="/bad_name">x</a>'
        '<a data-hovercard-type="user" href="/orgs/acme">x</a>'
        '<a data-hovercard-type="organization" href="/acme">x</a>'
        '<a href="/dave">dave</a>'
        '<a data-hovercard-type="user" href="https://github.com/eve">eve</a>'
        "</div>"
    )
    assert extract_stargazers(html) == ["alice"]


def test_extract_stargazers_limit_and_seen():
    """Test already-seen logins are skipped and do not consume the limit."""
    html = stargazer_page(["alice", "bob", "carol", "dave"])
    assert extract_stargazers(html, limit=2) == ["alice", "bob"]
    assert extract_stargazers(html, limit=2, seen={"alice", "bob"}) == ["carol", "dave"]
    assert extract_stargazers(html, limit=0) == []


def test_extract_repo_references_typed_links():
    """Test repository-typed links are used and the target page chrome ignored."""
    html = starred_page(["torvalds/linux", "psf/requests", "torvalds/linux"])
    refs = extract_repo_references(html)
    assert [r.full_name for r in refs] == ["torvalds/linux", "psf/requests"]


def test_extract_repo_references_stops_at_first_productive_selector():
    """Test broader selectors are not consulted once a narrower one matched."""
    html = (
        '<div id="user-starred-repos">'
        '<a data-hovercard-type="repository" href="/psf/requests">requests</a>'
        '<h3><a href="/pallets/flask">flask</a></h3>'
        "</div>"
    )
    assert [r.full_name for r in extract_repo_references(html)] == ["psf/requests"]


def test_extract_repo_references_heading_links():
    """Test untyped heading links are used when no typed links exist."""
    html = (
        "<div>"
        '<h3><a href="/pallets/flask">flask</a></h3>'
        '<h3><a href="/topics/web">web</a></h3>'
        '<p><a href="/django/django">django</a></p>'
        "</div>"
    )
    assert [r.full_name for r in extract_repo_references(html)] == ["pallets/flask"]


def test_extract_repo_references_any_link_fallback():
    """Test every root-relative link is scanned as a last resort."""
    html = (
        '<p><a href="/django/django">django</a>'
        '<a href="/settings/profile">settings</a>'
        '<a href="/octocat">octocat</a>'
        '<a href="https://example.com/a/b">ext</a></p>'
    )
    assert [r.full_name for r in extract_repo_references(html)] == ["django/django"]


def test_extract_repo_references_empty_page():
    """Test a page without repositories is an empty result."""
    assert extract_repo_references("<html><body><p>No stars yet</p></body></html>") == []
    assert extract_repo_references("") == []


def test_extraction_is_idempotent():
    """Test repeated extraction over the same markup gives the same result."""
    stars = starred_page(["a/b", "c/d"])
    gazers = stargazer_page(["x", "y"])
    assert extract_repo_references(stars) == extract_repo_references(stars)
    assert extract_stargazers(gazers) == extract_stargazers(gazers)


def test_extract_stargazers_rejects_trailing_newline():
    """Test a login href must end exactly at the last path character."""
    html = (
        '<div id="repo-content-pjax-container">'
        '<a data-hovercard-type="user" href="/bob&#10;">bob</a>'
        '<a data-hovercard-type="user" href="/alice">alice</a>'
        "</div>"
    )
    assert extract_stargazers(html) == ["alice"]


def test_repo_reference_parse_rejects_non_string():
    """Test a non-string target is a TypeError."""
    with pytest.raises(TypeError):
        RepoReference.parse(42)
