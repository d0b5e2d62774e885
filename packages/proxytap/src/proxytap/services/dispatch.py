"""Request dispatch service with bounded history.

PUBLIC API:
  - DispatchService: Parse, record and send ad-hoc requests
  - HistoryEntry: One recorded request
  - parse_headers_text: Parse the user's headers JSON text
"""

import json
import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING

from proxytap.errors import HeaderParseError

if TYPE_CHECKING:
    from proxytap.client import HttpDispatcher

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HistoryEntry:
    """A dispatched request as the user entered it."""

    method: str
    url: str
    headers: str
    body: str | None
    timestamp: float


def parse_headers_text(text: str | None) -> dict[str, str]:
    """Parse headers entered as JSON object text.

    Blank text means no headers. Values are stringified.

    Raises:
        HeaderParseError: Text is not a JSON object
    """
    if text is None or not text.strip():
        return {}
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise HeaderParseError(f"Headers are not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise HeaderParseError(f"Headers must be a JSON object, got {type(data).__name__}")
    return {str(key): value if isinstance(value, str) else json.dumps(value) for key, value in data.items()}


class DispatchService:
    """Sends requests through an HttpDispatcher and keeps recent history.

    History is newest-first and independent of observed traffic.
    """

    def __init__(self, dispatcher: "HttpDispatcher", history_limit: int = 50):
        """Initialize dispatch service.

        Args:
            dispatcher: Performs the HTTP calls
            history_limit: Entries kept, oldest evicted first
        """
        self.dispatcher = dispatcher
        self._history: deque[HistoryEntry] = deque(maxlen=history_limit)

    def send(self, method: str, url: str, headers: str = "{}", body: str | None = None) -> dict:
        """Record and send a request.

        Args:
            method: HTTP method
            url: Target URL
            headers: JSON object text
            body: Optional text body, empty string means none

        Returns:
            Result dict from the dispatcher, or {"error": ...}

        Raises:
            HeaderParseError: Headers text is malformed, nothing is recorded or sent
        """
        parsed = parse_headers_text(headers)
        body = body or None

        self._history.appendleft(
            HistoryEntry(method=method.upper(), url=url, headers=headers, body=body, timestamp=time.time())
        )

        try:
            return self.dispatcher.send(method, url, headers=parsed, body=body)
        except Exception as e:
            logger.error(f"Dispatch of {method} {url} failed: {e}")
            return {"error": str(e)}

    def history(self) -> list[HistoryEntry]:
        """Recorded requests, newest first."""
        return list(self._history)

    def recall(self, index: int) -> HistoryEntry:
        """Get one history entry by position (0 = newest).

        Raises:
            IndexError: No such entry
        """
        return self._history[index]

    def clear_history(self) -> None:
        """Forget all recorded requests."""
        self._history.clear()


__all__ = ["DispatchService", "HistoryEntry", "parse_headers_text"]
