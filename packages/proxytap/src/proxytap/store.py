"""Transaction record store.

Ordered log of TransactionSummary keyed by id. The reconciliation path is
the only writer; everything else reads copies via snapshot().

PUBLIC API:
  - TransactionStore: Newest-first store with O(1) id lookup
"""

import dataclasses
from typing import Iterator

from proxytap.models import TransactionSummary


class TransactionStore:
    """Newest-first transaction log with at most one summary per id.

    Summaries are kept in arrival order internally and iterated in reverse,
    so inserting the newest record is an append.
    """

    def __init__(self):
        """Initialize empty store."""
        self._by_id: dict[str, TransactionSummary] = {}
        self._order: list[str] = []  # oldest first

    def __len__(self) -> int:
        return len(self._order)

    def __contains__(self, transaction_id: object) -> bool:
        return transaction_id in self._by_id

    def __iter__(self) -> Iterator[TransactionSummary]:
        """Iterate live summaries newest-first."""
        for transaction_id in reversed(self._order):
            yield self._by_id[transaction_id]

    def get(self, transaction_id: str) -> TransactionSummary | None:
        """Get live summary by id."""
        return self._by_id.get(transaction_id)

    def insert(self, summary: TransactionSummary) -> None:
        """Add a summary as the newest entry.

        Args:
            summary: New summary, id must not be present yet.

        Raises:
            ValueError: If a summary with the same id exists.
        """
        if summary.id in self._by_id:
            raise ValueError(f"Transaction {summary.id} already stored")
        self._by_id[summary.id] = summary
        self._order.append(summary.id)

    def complete(self, transaction_id: str, status: int | None, duration_ms: int) -> TransactionSummary:
        """Record the response for a stored transaction in place.

        Args:
            transaction_id: Id of a stored, not yet completed summary.
            status: Response status, None when unknown.
            duration_ms: Observed duration.

        Returns:
            The updated summary.

        Raises:
            KeyError: If the id is not stored.
            ValueError: If the summary was already completed.
        """
        summary = self._by_id[transaction_id]
        if summary.completed:
            raise ValueError(f"Transaction {transaction_id} already completed")
        summary.status = status
        summary.duration_ms = duration_ms
        return summary

    def snapshot(self) -> tuple[TransactionSummary, ...]:
        """Copies of all summaries, newest-first."""
        return tuple(dataclasses.replace(s) for s in self)

    def clear(self) -> int:
        """Remove all summaries.

        Returns:
            Number of summaries removed.
        """
        count = len(self._order)
        self._by_id.clear()
        self._order.clear()
        return count


__all__ = ["TransactionStore"]
