"""On-demand loading of full transaction detail.

A slot is a named place that displays one transaction's detail: the detail
pane, or either side of a comparison. Every load into a slot is tagged with a
fresh token. When the fetch resolves, its result is applied only if the slot
still carries that token, so a slow fetch for an id the user has moved away
from can never overwrite the newer target.

Fetches run elsewhere (worker threads); completions are handed back through
``post`` so that slot and cache mutation happens on the owner's thread. The
cache only holds details some slot points at, so it stays as small as the
number of slots.

PUBLIC API:
  - DetailState: Slot state enum
  - SlotView: Immutable view of a slot
  - DetailHydrator: Slot/token bookkeeping and detail cache
"""

import itertools
import logging
from concurrent.futures import CancelledError, Future
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from proxytap.models import TransactionDetail

logger = logging.getLogger(__name__)

# Slot names used by the traffic service
DETAIL_SLOT = "detail"
LEFT_SLOT = "left"
RIGHT_SLOT = "right"


class DetailState(str, Enum):
    """Consumer-visible state of a slot."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass
class _Slot:
    transaction_id: str
    token: int
    state: DetailState = DetailState.LOADING
    error: str | None = None


@dataclass(frozen=True)
class SlotView:
    """What a consumer sees for a slot.

    ``detail`` is the cached record for the slot's id, which may be an older
    copy while a refetch is loading or after a refetch failed.
    """

    name: str
    transaction_id: str | None
    state: DetailState
    detail: TransactionDetail | None = None
    error: str | None = None


class DetailHydrator:
    """Issues detail fetches and decides which results to honour.

    Attributes:
        cache: Last successfully fetched detail per transaction id, for ids
            that some slot points at.
    """

    def __init__(
        self,
        fetch: Callable[[str], Future],
        post: Callable[[Callable[[], None]], None],
    ):
        """Initialize hydrator.

        Args:
            fetch: Starts fetching a transaction id, returns a Future of TransactionDetail.
            post: Schedules a callable on the owner's thread.
        """
        self._fetch = fetch
        self._post = post
        self._tokens = itertools.count(1)
        self._slots: dict[str, _Slot] = {}
        self.cache: dict[str, TransactionDetail] = {}

    def load(self, slot: str, transaction_id: str, force: bool = False) -> bool:
        """Point a slot at a transaction and fetch its detail.

        Loading the id a slot already shows is a no-op unless the slot is in
        error or ``force`` is set.

        Args:
            slot: Slot name.
            transaction_id: Transaction to show.
            force: Refetch even if already loading or loaded.

        Returns:
            True if a fetch was issued.
        """
        current = self._slots.get(slot)
        if (
            not force
            and current is not None
            and current.transaction_id == transaction_id
            and current.state in (DetailState.LOADING, DetailState.READY)
        ):
            return False

        token = next(self._tokens)
        self._slots[slot] = _Slot(transaction_id=transaction_id, token=token)
        self._prune()
        logger.debug(f"Loading {transaction_id} into {slot} (token {token})")

        try:
            future = self._fetch(transaction_id)
        except Exception as e:
            logger.error(f"Failed to start detail fetch for {transaction_id}: {e}")
            self._resolve(slot, token, transaction_id, None, e)
            return True

        future.add_done_callback(lambda f: self._post(lambda: self._on_done(slot, token, transaction_id, f)))
        return True

    def release(self, slot: str) -> None:
        """Stop showing anything in a slot.

        An in-flight fetch for it still completes but is ignored.
        """
        if self._slots.pop(slot, None) is not None:
            logger.debug(f"Released slot {slot}")
            self._prune()

    def _prune(self) -> None:
        """Evict cached details no slot points at."""
        shown = {s.transaction_id for s in self._slots.values()}
        for transaction_id in [t for t in self.cache if t not in shown]:
            del self.cache[transaction_id]

    def reset(self) -> None:
        """Drop all slots and cached details."""
        self._slots.clear()
        self.cache.clear()

    def view(self, slot: str) -> SlotView:
        """Current view of a slot."""
        current = self._slots.get(slot)
        if current is None:
            return SlotView(name=slot, transaction_id=None, state=DetailState.IDLE)
        return SlotView(
            name=slot,
            transaction_id=current.transaction_id,
            state=current.state,
            detail=self.cache.get(current.transaction_id),
            error=current.error,
        )

    def views(self) -> dict[str, SlotView]:
        """Views of all occupied slots."""
        return {name: self.view(name) for name in self._slots}

    def is_loading(self, slot: str) -> bool:
        """Whether a slot is waiting on a fetch."""
        current = self._slots.get(slot)
        return current is not None and current.state == DetailState.LOADING

    def _on_done(self, slot: str, token: int, transaction_id: str, future: Future) -> None:
        if future.cancelled():
            self._resolve(slot, token, transaction_id, None, CancelledError("Detail fetch cancelled"))
            return
        error = future.exception()
        self._resolve(slot, token, transaction_id, None if error else future.result(), error)

    def _resolve(
        self,
        slot: str,
        token: int,
        transaction_id: str,
        detail: TransactionDetail | None,
        error: BaseException | None,
    ) -> bool:
        current = self._slots.get(slot)
        if current is None or current.token != token:
            logger.debug(f"Discarding stale detail for {transaction_id} in {slot} (token {token})")
            return False

        if error is not None:
            logger.error(f"Detail fetch for {transaction_id} failed: {error}")
            current.state = DetailState.ERROR
            current.error = str(error) or type(error).__name__
            return True

        self.cache[transaction_id] = detail  # type: ignore[assignment]
        current.state = DetailState.READY
        current.error = None
        return True


__all__ = ["DetailState", "SlotView", "DetailHydrator", "DETAIL_SLOT", "LEFT_SLOT", "RIGHT_SLOT"]
