"""Merge lifecycle events into the transaction store.

Events may arrive duplicated, reordered, or with their request half lost to a
reconnection gap. The merge rules:

- request, unknown id: prepend a new pending summary
- request, known id: duplicate, first-seen metadata stays canonical
- response, unknown id: orphan, dropped
- response, pending id: set status and duration_ms
- response, completed id: duplicate, no-op so duration_ms never drifts

duration_ms is the gap between the receive times of the two events as seen
by this client, not the proxy's own timing. Callers that apply events later
than they receive them pass ``received_at``.

PUBLIC API:
  - ReconcileOutcome: What an event did to the store
  - reconcile: Apply one event to a store
"""

import logging
import time
from enum import Enum
from typing import Callable

from proxytap.models import LifecycleEvent, RequestStarted, ResponseCompleted, TransactionSummary
from proxytap.store import TransactionStore

logger = logging.getLogger(__name__)


class ReconcileOutcome(str, Enum):
    """Effect of one event on the store."""

    CREATED = "created"
    COMPLETED = "completed"
    DUPLICATE_REQUEST = "duplicate_request"
    DUPLICATE_RESPONSE = "duplicate_response"
    ORPHAN_RESPONSE = "orphan_response"

    @property
    def changed(self) -> bool:
        """Whether the store was modified."""
        return self in (ReconcileOutcome.CREATED, ReconcileOutcome.COMPLETED)


def reconcile(
    store: TransactionStore,
    event: LifecycleEvent,
    clock: Callable[[], float] = time.time,
    received_at: float | None = None,
) -> ReconcileOutcome:
    """Apply one lifecycle event to the store.

    Args:
        store: Store to update in place.
        event: Decoded event.
        clock: Returns current Unix time in seconds.
        received_at: Unix time the event arrived, defaults to clock().

    Returns:
        ReconcileOutcome describing the effect.
    """
    now = received_at if received_at is not None else clock()

    if isinstance(event, RequestStarted):
        if event.id in store:
            logger.debug(f"Duplicate request event for {event.id}, keeping first")
            return ReconcileOutcome.DUPLICATE_REQUEST

        store.insert(TransactionSummary(id=event.id, method=event.method, url=event.url, observed_at=now))
        return ReconcileOutcome.CREATED

    if isinstance(event, ResponseCompleted):
        summary = store.get(event.id)
        if summary is None:
            logger.debug(f"Orphan response event for {event.id}, dropped")
            return ReconcileOutcome.ORPHAN_RESPONSE

        if summary.completed:
            logger.debug(f"Duplicate response event for {event.id}, ignored")
            return ReconcileOutcome.DUPLICATE_RESPONSE

        elapsed = max(0, round((now - summary.observed_at) * 1000))
        store.complete(event.id, event.status, elapsed)
        return ReconcileOutcome.COMPLETED

    raise TypeError(f"Not a lifecycle event: {type(event).__name__}")


__all__ = ["ReconcileOutcome", "reconcile"]
