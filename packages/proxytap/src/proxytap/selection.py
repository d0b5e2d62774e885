"""Comparison selection: a rolling window of at most two transaction ids.

PUBLIC API:
  - CompareSelection: Bounded ordered selection
  - MAX_SELECTION: Window size
"""

MAX_SELECTION = 2


class CompareSelection:
    """Ids marked for side-by-side comparison.

    Insertion order is comparison order. Selecting a third id evicts the
    oldest one instead of rejecting the new one.
    """

    def __init__(self):
        self._ids: list[str] = []

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, transaction_id: object) -> bool:
        return transaction_id in self._ids

    @property
    def ids(self) -> tuple[str, ...]:
        """Selected ids in comparison order."""
        return tuple(self._ids)

    @property
    def ready(self) -> bool:
        """Whether exactly two ids are selected."""
        return len(self._ids) == MAX_SELECTION

    def toggle(self, transaction_id: str) -> tuple[str, ...]:
        """Select or deselect an id.

        Args:
            transaction_id: Id to toggle.

        Returns:
            Selection after the toggle.
        """
        if transaction_id in self._ids:
            self._ids.remove(transaction_id)
        else:
            if len(self._ids) >= MAX_SELECTION:
                self._ids.pop(0)
            self._ids.append(transaction_id)
        return self.ids

    def discard(self, transaction_id: str) -> bool:
        """Remove an id if selected.

        Returns:
            True if it was selected.
        """
        if transaction_id in self._ids:
            self._ids.remove(transaction_id)
            return True
        return False

    def clear(self) -> None:
        """Deselect everything."""
        self._ids.clear()


__all__ = ["CompareSelection", "MAX_SELECTION"]
