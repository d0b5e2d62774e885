"""Event stream client - one WebSocket to the proxy's traffic feed.

WebSocketApp handles the socket on its own thread; we decode frames and hand
each event to a sink in receipt order. There is no backlog on connect and no
background reconnect: a dropped stream shows up as DISCONNECTED and stays
that way until connect() is called again, which starts a new session.

PUBLIC API:
  - StreamStatus: Connection status enum
  - EventStreamClient: WebSocket event stream consumer
"""

import logging
import threading
import time
from enum import Enum
from typing import Callable

import websocket

from proxytap.errors import EventDecodeError, ProxyConnectionError
from proxytap.models import LifecycleEvent, decode_event

logger = logging.getLogger(__name__)


class StreamStatus(str, Enum):
    """Event stream connection status."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class EventStreamClient:
    """Consumes lifecycle events from the proxy daemon.

    Attributes:
        url: WebSocket URL of the event stream.
        status: Current connection status.
        session: Count of successful opens, bumped on every new connection.
        received: Events decoded in the current session.
        dropped: Malformed messages dropped in the current session.
    """

    def __init__(
        self,
        url: str,
        on_event: Callable[[LifecycleEvent], None],
        on_status: Callable[[StreamStatus], None] | None = None,
        connect_timeout: float = 5.0,
    ):
        """Initialize stream client.

        Args:
            url: WebSocket URL, e.g. ws://localhost:3000/ws/events
            on_event: Sink for decoded events, called on the socket thread.
            on_status: Called on every status change.
            connect_timeout: Seconds connect() waits for the socket to open.
        """
        self.url = url
        self.connect_timeout = connect_timeout
        self._on_event_sink = on_event
        self._on_status_sink = on_status

        self.ws_app: websocket.WebSocketApp | None = None
        self.ws_thread: threading.Thread | None = None

        self.status = StreamStatus.DISCONNECTED
        self.connected = threading.Event()
        self.session = 0
        self.received = 0
        self.dropped = 0
        self._lock = threading.Lock()

    @property
    def is_connected(self) -> bool:
        """Whether the stream is open."""
        return self.status == StreamStatus.CONNECTED

    def connect(self) -> int:
        """Open the stream and wait for it to connect.

        Returns:
            The new session number.

        Raises:
            RuntimeError: If already connected.
            ProxyConnectionError: If the socket closes before opening.
            TimeoutError: If the socket does not open in time.
        """
        if self.ws_app:
            raise RuntimeError("Already connected")

        self._set_status(StreamStatus.CONNECTING)
        self.ws_app = websocket.WebSocketApp(
            self.url,
            on_open=self._on_open,
            on_message=self._on_message,
            on_error=self._on_error,
            on_close=self._on_close,
        )

        self.ws_thread = threading.Thread(
            target=self.ws_app.run_forever,
            kwargs={
                "ping_interval": 30,  # Ping every 30s
                "ping_timeout": 10,  # Wait 10s for pong
                "reconnect": 0,  # Caller reconnects explicitly
            },
            name="proxytap-stream",
        )
        self.ws_thread.daemon = True
        self.ws_thread.start()

        ws_app = self.ws_app
        deadline = time.monotonic() + self.connect_timeout
        while not self.connected.wait(timeout=0.05):
            # Refused or failed handshakes close the socket before it opens
            if self.ws_app is not ws_app or not self.ws_thread.is_alive():
                self.disconnect()
                raise ProxyConnectionError(f"Connection to {self.url} closed before opening")
            if time.monotonic() >= deadline:
                self.disconnect()
                raise TimeoutError(f"Failed to connect to {self.url}")

        return self.session

    def disconnect(self) -> None:
        """Close the stream."""
        ws_app, self.ws_app = self.ws_app, None
        if ws_app:
            ws_app.close()

        if self.ws_thread and self.ws_thread.is_alive() and self.ws_thread is not threading.current_thread():
            self.ws_thread.join(timeout=2)
        self.ws_thread = None

        self.connected.clear()
        self._set_status(StreamStatus.DISCONNECTED)

    def _set_status(self, status: StreamStatus) -> None:
        with self._lock:
            if self.status == status:
                return
            self.status = status
        if self._on_status_sink:
            self._on_status_sink(status)

    def _is_stale(self, ws) -> bool:
        """Whether a callback comes from a socket other than the current one."""
        if ws is self.ws_app:
            return False
        logger.debug("Ignoring callback from a previous event stream socket")
        return True

    def _on_open(self, ws):
        """WebSocket opened - new session, counters restart."""
        if self._is_stale(ws):
            return
        with self._lock:
            self.session += 1
            self.received = 0
            self.dropped = 0
        logger.info(f"Event stream connected (session {self.session})")
        self.connected.set()
        self._set_status(StreamStatus.CONNECTED)

    def _on_message(self, ws, message):
        """Decode one frame and forward it, dropping malformed ones."""
        if self._is_stale(ws):
            return
        try:
            event = decode_event(message)
        except EventDecodeError as e:
            self.dropped += 1
            logger.warning(f"Dropped malformed event: {e}")
            return

        self.received += 1
        try:
            self._on_event_sink(event)
        except Exception as e:
            logger.error(f"Event sink failed for {event.id}: {e}")

    def _on_error(self, ws, error):
        """WebSocket error."""
        logger.error(f"Event stream error: {error}")

    def _on_close(self, ws, code, reason):
        """WebSocket closed. disconnect() already handled closes it started."""
        if self._is_stale(ws):
            return
        logger.info(f"Event stream closed: {code} {reason}")
        self.connected.clear()
        self.ws_app = None
        self._set_status(StreamStatus.DISCONNECTED)


__all__ = ["StreamStatus", "EventStreamClient"]
