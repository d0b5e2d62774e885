"""Main service orchestrator for proxytap.

TrafficService owns the transaction store, comparison selection, filter and
detail hydrator. Nothing else writes to them. Work that starts on other
threads (stream frames, finished detail fetches) is queued on the inbox and
applied by pump() on the owner's thread one reaction at a time, so the store
is never seen half-updated.
"""

import logging
import queue
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from typing import Callable

from proxytap.client import HttpDispatcher, ProxyClient
from proxytap.config import ProxyTapConfig
from proxytap.errors import UnknownTransactionError
from proxytap.filters import TrafficFilter
from proxytap.hydration import DETAIL_SLOT, LEFT_SLOT, RIGHT_SLOT, DetailHydrator, SlotView
from proxytap.models import LifecycleEvent, TransactionDetail, TransactionSummary
from proxytap.reconcile import ReconcileOutcome, reconcile
from proxytap.selection import CompareSelection
from proxytap.services.capture import CaptureService
from proxytap.services.dispatch import DispatchService
from proxytap.store import TransactionStore
from proxytap.stream import EventStreamClient, StreamStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrafficSnapshot:
    """Immutable view of service state for consumers.

    Attributes:
        transactions: All summaries, newest-first.
        visible: Summaries matching the filter, newest-first.
        query: Current filter query.
        selection: Ids selected for comparison.
        ready_to_compare: Whether exactly two ids are selected.
        stream_status: Event stream connection status.
        session: Event stream session number.
        incomplete: Stream dropped since last reset, events may be missing.
        capture_running: Whether capture is running.
        capture_port: Active capture port.
        slots: Detail slot views keyed by slot name.
    """

    transactions: tuple[TransactionSummary, ...] = ()
    visible: tuple[TransactionSummary, ...] = ()
    query: str = ""
    selection: tuple[str, ...] = ()
    ready_to_compare: bool = False
    stream_status: StreamStatus = StreamStatus.DISCONNECTED
    session: int = 0
    incomplete: bool = False
    capture_running: bool = False
    capture_port: int | None = None
    slots: dict[str, SlotView] = field(default_factory=dict)

    @classmethod
    def create_empty(cls) -> "TrafficSnapshot":
        """Snapshot of a fresh service."""
        return cls()


class TrafficService:
    """Single owner of observed traffic state.

    Attributes:
        config: Loaded configuration.
        store: Transaction store, written only through apply().
        selection: Comparison selection, written only through toggle_compare().
        filter: Current filter query.
        hydrator: Detail slots and cache.
        client: Proxy daemon REST client.
        stream: Event stream client.
        capture: Capture control service.
        dispatch: Request dispatch service.
    """

    def __init__(
        self,
        config: ProxyTapConfig | None = None,
        client: ProxyClient | None = None,
        dispatcher: HttpDispatcher | None = None,
        clock: Callable[[], float] = time.time,
    ):
        """Initialize service.

        Args:
            config: Configuration, defaults if omitted
            client: Proxy daemon client, built from config if omitted
            dispatcher: Dispatcher for ad-hoc requests, built from config if omitted
            clock: Unix time source used for observed_at and durations
        """
        self.config = config or ProxyTapConfig()
        self.clock = clock

        self.client = client or ProxyClient(self.config.api_url, timeout=self.config.timeout)

        self.store = TransactionStore()
        self.selection = CompareSelection()
        self.filter = TrafficFilter()

        self._inbox: queue.SimpleQueue[Callable[[], None]] = queue.SimpleQueue()
        self._executor: ThreadPoolExecutor | None = None
        self.hydrator = DetailHydrator(fetch=self._fetch_detail, post=self.post)

        self.stream = EventStreamClient(
            self.config.events_url,
            on_event=self._on_stream_event,
            on_status=self._on_stream_status,
            connect_timeout=self.config.connect_timeout,
        )
        self.stream_status = StreamStatus.DISCONNECTED
        self.incomplete = False

        self.capture = CaptureService(self.client, default_port=self.config.capture_port)
        self.dispatch = DispatchService(
            dispatcher or HttpDispatcher(timeout=self.config.timeout, verify=self.config.verify_tls),
            history_limit=self.config.history_limit,
        )

    # Reaction inbox

    def post(self, reaction: Callable[[], None]) -> None:
        """Queue a reaction for the owner's thread. Safe from any thread."""
        self._inbox.put(reaction)

    def pump(self, timeout: float = 0) -> int:
        """Run queued reactions in order.

        Args:
            timeout: Seconds to wait for the first reaction if none is queued

        Returns:
            Number of reactions run
        """
        count = 0
        try:
            reaction = self._inbox.get(timeout=timeout) if timeout > 0 else self._inbox.get_nowait()
        except queue.Empty:
            return 0

        while True:
            try:
                reaction()
            except Exception as e:
                logger.error(f"Reaction failed: {e}")
            count += 1
            try:
                reaction = self._inbox.get_nowait()
            except queue.Empty:
                return count

    def wait_for(self, slot: str, timeout: float = 2.0) -> SlotView:
        """Pump until a slot stops loading or the timeout expires.

        Args:
            slot: Slot name
            timeout: Maximum seconds to wait

        Returns:
            View of the slot afterwards, possibly still loading
        """
        deadline = time.monotonic() + timeout
        self.pump()
        while self.hydrator.is_loading(slot):
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            self.pump(timeout=remaining)
        return self.hydrator.view(slot)

    # Event reconciliation

    def apply(self, event: LifecycleEvent, received_at: float | None = None) -> ReconcileOutcome:
        """Reconcile one lifecycle event into the store.

        Args:
            event: Decoded event
            received_at: Unix time the event arrived, defaults to now
        """
        return reconcile(self.store, event, clock=self.clock, received_at=received_at)

    def _on_stream_event(self, event: LifecycleEvent) -> None:
        # Stamped on the socket thread, the reaction may run much later
        self.post(partial(self.apply, event, received_at=self.clock()))

    def _on_stream_status(self, status: StreamStatus) -> None:
        self.post(partial(self._set_stream_status, status))

    def _set_stream_status(self, status: StreamStatus) -> None:
        if self.stream_status == StreamStatus.CONNECTED and status == StreamStatus.DISCONNECTED:
            self.incomplete = True
            logger.warning("Event stream lost, traffic view may be incomplete")
        self.stream_status = status

    def connect(self) -> dict:
        """Open the event stream.

        Returns:
            Status dict, with "error" on failure
        """
        try:
            session = self.stream.connect()
        except Exception as e:
            logger.error(f"Failed to connect event stream: {e}")
            self.pump()
            return {"connected": False, "error": str(e)}
        self.pump()
        return {"connected": True, "session": session, "url": self.stream.url}

    def disconnect(self) -> dict:
        """Close the event stream."""
        was_connected = self.stream.is_connected
        self.stream.disconnect()
        self.pump()
        return {"was_connected": was_connected}

    # Filter and selection

    def set_filter(self, query: str | None) -> list[TransactionSummary]:
        """Change the filter query.

        Returns:
            Copies of the matching summaries
        """
        self.filter.set(query)
        return list(self.snapshot().visible)

    def resolve(self, ref: str | int) -> str:
        """Turn a transaction id or a visible row number into an id.

        Args:
            ref: Exact id, or 0-based row in the filtered view

        Raises:
            UnknownTransactionError: Nothing matches
        """
        if isinstance(ref, str) and ref in self.store:
            return ref
        if isinstance(ref, int) or (isinstance(ref, str) and ref.isdigit()):
            visible = self.filter.apply(self.store)
            row = int(ref)
            if 0 <= row < len(visible):
                return visible[row].id
        raise UnknownTransactionError(ref)

    def toggle_compare(self, ref: str | int) -> tuple[str, ...]:
        """Toggle a transaction in the comparison selection.

        When two ids end up selected both are hydrated; otherwise the
        comparison slots are released.

        Returns:
            Selection after the toggle
        """
        transaction_id = self.resolve(ref)
        selected = self.selection.toggle(transaction_id)
        self._sync_compare_slots()
        return selected

    def _sync_compare_slots(self) -> None:
        if self.selection.ready:
            left, right = self.selection.ids
            self.hydrator.load(LEFT_SLOT, left)
            self.hydrator.load(RIGHT_SLOT, right)
        else:
            self.hydrator.release(LEFT_SLOT)
            self.hydrator.release(RIGHT_SLOT)

    def comparison(self) -> tuple[SlotView, SlotView] | None:
        """Both comparison slots, or None when fewer than two are selected."""
        if not self.selection.ready:
            return None
        return self.hydrator.view(LEFT_SLOT), self.hydrator.view(RIGHT_SLOT)

    # Detail hydration

    def select(self, ref: str | int | None, refresh: bool = False) -> SlotView:
        """Show a transaction in the detail slot, or clear it with None."""
        if ref is None:
            self.hydrator.release(DETAIL_SLOT)
        else:
            self.hydrator.load(DETAIL_SLOT, self.resolve(ref), force=refresh)
        return self.hydrator.view(DETAIL_SLOT)

    def _fetch_detail(self, transaction_id: str) -> Future:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="proxytap-detail")
        return self._executor.submit(self._load_detail, transaction_id)

    def _load_detail(self, transaction_id: str) -> TransactionDetail:
        return TransactionDetail.from_api(self.client.request_details(transaction_id))

    # Snapshot and lifecycle

    def snapshot(self) -> TrafficSnapshot:
        """Immutable copy of current state."""
        transactions = self.store.snapshot()
        return TrafficSnapshot(
            transactions=transactions,
            visible=tuple(self.filter.apply(transactions)),
            query=self.filter.query,
            selection=self.selection.ids,
            ready_to_compare=self.selection.ready,
            stream_status=self.stream_status,
            session=self.stream.session,
            incomplete=self.incomplete,
            capture_running=self.capture.running,
            capture_port=self.capture.port,
            slots=self.hydrator.views(),
        )

    def reset(self) -> int:
        """Forget all observed traffic, selection and fetched detail.

        The filter query and stream connection are kept.

        Returns:
            Number of transactions removed
        """
        removed = self.store.clear()
        self.selection.clear()
        self.hydrator.reset()
        self.incomplete = False
        logger.info(f"Cleared {removed} transactions")
        return removed

    def cleanup(self) -> None:
        """Close connections and worker threads."""
        if self.stream.ws_app:
            self.stream.disconnect()
        if self._executor:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None
        self.client.close()
        self.dispatch.dispatcher.close()


__all__ = ["TrafficService", "TrafficSnapshot"]
