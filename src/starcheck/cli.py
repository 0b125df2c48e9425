"""
Command-line interface for the stargazer crawler.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import List, Optional

from starcheck.core import MAX_STARGAZERS_LIMIT, CrawlError, CrawlSnapshot, crawl
from starcheck.extract import RepoReference
from starcheck.fetch import DEFAULT_USER_AGENT, PageFetcher
from starcheck.paginate import DEFAULT_MAX_STARGAZERS
from starcheck.ratelimit import DEFAULT_INTERVAL_S, RateLimiter

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def print_progress(snapshot: CrawlSnapshot) -> None:
    """Rewrite the progress line on stderr."""
    leader = snapshot.top[0].repo_full_name if snapshot.top else "-"
    progress = (
        f"\r\033[K[{snapshot.processed}/{snapshot.total}] "
        f"Not found: {snapshot.not_found_count} | Top: {leader}"
    )
    sys.stderr.write(progress)
    sys.stderr.flush()


def format_summary(snapshot: CrawlSnapshot) -> str:
    """Render a snapshot as a plain-text report."""
    lines: List[str] = [f"Processed {snapshot.processed}/{snapshot.total} stargazers"]
    if snapshot.not_found_count > 0:
        lines.append(f"Hidden/404 profiles: {snapshot.not_found_count}")
    if not snapshot.top:
        lines.append("(No starred repositories recorded yet.)")
        return "\n".join(lines) + "\n"

    lines.append("")
    for rank, entry in enumerate(snapshot.top, start=1):
        lines.append(
            f"{rank:>2}. {entry.repo_full_name} – {entry.count} users "
            f"({entry.percentage}% of processed)"
        )
    return "\n".join(lines) + "\n"


def print_summary(snapshot: CrawlSnapshot) -> None:
    """Print crawl summary to stderr."""
    sys.stderr.write("\n" + "=" * 50 + "\n")
    sys.stderr.write("STARGAZER SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")
    sys.stderr.write(format_summary(snapshot))
    sys.stderr.write("\n")


def max_stargazers_arg(value: str) -> int:
    """argparse type for --max-stargazers."""
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}")
    if not 1 <= n <= MAX_STARGAZERS_LIMIT:
        raise argparse.ArgumentTypeError(f"must be between 1 and {MAX_STARGAZERS_LIMIT}")
    return n


def interval_arg(value: str) -> float:
    """argparse type for --interval."""
    try:
        seconds = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}")
    if not seconds >= 0:
        raise argparse.ArgumentTypeError("must be >= 0")
    return seconds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="starcheck",
        description="Find the repositories most often starred by a repository's stargazers.",
    )
    parser.add_argument("repo", help="Target repository (owner/name or GitHub URL)")
    parser.add_argument(
        "--max-stargazers",
        type=max_stargazers_arg,
        default=DEFAULT_MAX_STARGAZERS,
        help=f"Maximum stargazers to examine, 1-{MAX_STARGAZERS_LIMIT} (default: {DEFAULT_MAX_STARGAZERS})",
    )
    parser.add_argument(
        "--interval",
        type=interval_arg,
        default=DEFAULT_INTERVAL_S,
        help=f"Minimum seconds between requests (default: {DEFAULT_INTERVAL_S})",
    )
    parser.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds (default: none)")
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header")
    parser.add_argument("--out", default="-", help="Output file path, or '-' for stdout (default: -)")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    parser.add_argument("--verbose", action="store_true", help="Show progress, summary and debug logs")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the starcheck CLI."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=LOG_FORMAT,
    )

    try:
        target = RepoReference.parse(args.repo)
    except ValueError as e:
        sys.stderr.write(f"error: Failed to parse repository owner/name: {e}\n")
        return 1

    fetcher = PageFetcher(
        RateLimiter(args.interval),
        user_agent=args.user_agent,
        timeout_s=args.timeout,
    )

    try:
        result = crawl(
            target,
            max_stargazers=args.max_stargazers,
            fetcher=fetcher,
            on_progress=print_progress if args.verbose else None,
        )
    except CrawlError as e:
        sys.stderr.write(f"\nerror: {e}\n")
        return 1

    if args.verbose:
        print_summary(result)

    json_text = json.dumps(asdict(result), ensure_ascii=False, indent=2 if args.pretty else None)

    if args.out == "-":
        print(json_text)
    else:
        output_path = Path(args.out)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json_text, encoding="utf-8")
        if args.verbose:
            sys.stderr.write(f"Results written to: {output_path}\n")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
