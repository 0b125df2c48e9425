"""
Co-star frequency counting and ranking.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Tuple

from starcheck.extract import RepoReference


@dataclass(frozen=True, slots=True)
class TopEntry:
    """One ranked repository in a progress snapshot."""
    repo_full_name: str
    count: int
    percentage: str


def percentage(count: int, processed: int) -> str:
    """Share of processed stargazers, one decimal place, halves rounded up ("6.3")."""
    if processed <= 0:
        return "0.0"
    share = Decimal(count * 100) / Decimal(processed)
    return str(share.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


class AffinityAggregator:
    """
    Count how many stargazers starred each repository.

    The target repository is never counted.
    """

    def __init__(self, target: RepoReference) -> None:
        self.target = target
        self.counts: Dict[RepoReference, int] = {}

    def record(self, refs: Iterable[RepoReference]) -> None:
        """Add one stargazer's starred repositories."""
        for ref in dict.fromkeys(refs):
            if ref == self.target:
                continue
            self.counts[ref] = self.counts.get(ref, 0) + 1

    def top(self, n: int) -> List[Tuple[RepoReference, int]]:
        """
        Up to ``n`` entries, highest count first.

        ``sorted`` is stable and ``counts`` keeps insertion order, so ties
        rank in order of first discovery.
        """
        if n <= 0:
            return []
        ranked = sorted(self.counts.items(), key=lambda item: -item[1])
        return ranked[:n]

    def top_entries(self, n: int, processed: int) -> List[TopEntry]:
        return [
            TopEntry(ref.full_name, count, percentage(count, processed))
            for ref, count in self.top(n)
        ]
