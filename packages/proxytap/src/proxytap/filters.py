"""Free-text filtering of observed traffic.

PUBLIC API:
  - matches: Test one summary against a query
  - filter_transactions: Filtered view preserving store order
  - TrafficFilter: Holds the current query
"""

import logging
from typing import Iterable

from proxytap.models import TransactionSummary

logger = logging.getLogger(__name__)


def matches(summary: TransactionSummary, query: str) -> bool:
    """Case-insensitive substring match on url or method.

    Args:
        summary: Summary to test.
        query: Free text, empty matches everything.
    """
    if not query:
        return True
    q = query.lower()
    return q in summary.url.lower() or q in summary.method.lower()


def filter_transactions(summaries: Iterable[TransactionSummary], query: str) -> list[TransactionSummary]:
    """Select matching summaries without reordering.

    Args:
        summaries: Summaries in store order.
        query: Free text query.

    Returns:
        Matching summaries in the same order.
    """
    return [s for s in summaries if matches(s, query)]


class TrafficFilter:
    """Current filter query for the traffic view."""

    def __init__(self, query: str = ""):
        self.query = query

    def set(self, query: str | None) -> str:
        """Replace the query. None clears it.

        Returns:
            The query now in effect.
        """
        self.query = query or ""
        logger.debug(f"Filter set to {self.query!r}")
        return self.query

    def clear(self) -> None:
        """Match everything."""
        self.query = ""

    def apply(self, summaries: Iterable[TransactionSummary]) -> list[TransactionSummary]:
        """Filter summaries with the current query."""
        return filter_transactions(summaries, self.query)


__all__ = ["matches", "filter_transactions", "TrafficFilter"]
