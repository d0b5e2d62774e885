"""Data model for observed traffic.

PUBLIC API:
  - TransactionSummary: Lightweight record held by the store
  - TransactionDetail: Full record fetched on demand
  - RequestStarted: Request-phase lifecycle event
  - ResponseCompleted: Response-phase lifecycle event
  - LifecycleEvent: Union of the two event types
  - decode_event: Decode a raw stream message into a LifecycleEvent
"""

import json
from dataclasses import dataclass, field
from typing import Any, Union

from proxytap.errors import DetailDecodeError, EventDecodeError


@dataclass
class TransactionSummary:
    """One transaction as seen on the event stream.

    Only ``status`` and ``duration_ms`` change after creation, and only once.

    Attributes:
        id: Opaque id assigned by the capture engine.
        method: HTTP method from the first request event seen.
        url: Request URL from the first request event seen.
        observed_at: Unix timestamp when the request event was processed.
        status: Response status, None while pending or when unknown.
        duration_ms: Client-observed gap between request and response events.
            Not proxy-measured latency.
    """

    id: str
    method: str
    url: str
    observed_at: float
    status: int | None = None
    duration_ms: int | None = None

    @property
    def completed(self) -> bool:
        """Whether a response event has been applied."""
        return self.duration_ms is not None


@dataclass(frozen=True)
class TransactionDetail:
    """Full transaction record from the detail service.

    Header blocks are kept as the JSON text the service returns; rendering
    decides how to treat invalid text.
    """

    id: str
    method: str
    url: str
    request_headers: str | None = None
    request_body: bytes = b""
    status: int | None = None
    response_headers: str | None = None
    response_body: bytes = b""
    protocol: str | None = None
    duration_ms: int | None = None
    timestamp: int | None = None

    @classmethod
    def from_api(cls, data: Any) -> "TransactionDetail":
        """Build a detail record from a ``/requests/{id}`` payload.

        Args:
            data: Decoded JSON object.

        Returns:
            TransactionDetail with bodies converted to bytes.

        Raises:
            DetailDecodeError: If required fields are missing or mistyped.
        """
        if not isinstance(data, dict):
            raise DetailDecodeError(f"Detail payload is {type(data).__name__}, not object")

        for key in ("id", "method", "url"):
            if not isinstance(data.get(key), str):
                raise DetailDecodeError(f"Detail payload missing string field '{key}'")

        return cls(
            id=data["id"],
            method=data["method"],
            url=data["url"],
            request_headers=_optional_str(data, "request_headers"),
            request_body=_body_bytes(data, "request_body"),
            status=_optional_int(data, "response_status", DetailDecodeError),
            response_headers=_optional_str(data, "response_headers"),
            response_body=_body_bytes(data, "response_body"),
            protocol=_optional_str(data, "protocol"),
            duration_ms=_optional_int(data, "duration", DetailDecodeError),
            timestamp=_optional_int(data, "timestamp", DetailDecodeError),
        )


@dataclass(frozen=True)
class RequestStarted:
    """Request-phase event: a transaction was first seen."""

    id: str
    method: str
    url: str
    phase: str = field(default="request", init=False)


@dataclass(frozen=True)
class ResponseCompleted:
    """Response-phase event: a transaction received its response."""

    id: str
    status: int | None = None
    phase: str = field(default="response", init=False)


LifecycleEvent = Union[RequestStarted, ResponseCompleted]


def decode_event(message: str | bytes) -> LifecycleEvent:
    """Decode one stream message.

    Args:
        message: Raw JSON text frame.

    Returns:
        RequestStarted or ResponseCompleted.

    Raises:
        EventDecodeError: If the message is not a well-formed event.
    """
    try:
        data = json.loads(message)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise EventDecodeError(f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise EventDecodeError(f"Event is {type(data).__name__}, not object")

    event_id = data.get("id")
    if not isinstance(event_id, str) or not event_id:
        raise EventDecodeError("Event has no id")

    phase = data.get("phase")
    if phase == "request":
        method, url = data.get("method"), data.get("url")
        if not isinstance(method, str) or not isinstance(url, str):
            raise EventDecodeError(f"Request event {event_id} missing method or url")
        return RequestStarted(id=event_id, method=method, url=url)

    if phase == "response":
        return ResponseCompleted(id=event_id, status=_optional_int(data, "status", EventDecodeError))

    raise EventDecodeError(f"Unknown phase: {phase!r}")


def _optional_int(data: dict, key: str, error: type[Exception]) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise error(f"Field '{key}' is not an integer: {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise error(f"Field '{key}' is not an integer: {value!r}")
    return int(value)


def _optional_str(data: dict, key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise DetailDecodeError(f"Field '{key}' is not a string")
    return value


def _body_bytes(data: dict, key: str) -> bytes:
    """Bodies arrive as JSON arrays of byte values."""
    value = data.get(key)
    if value is None:
        return b""
    if not isinstance(value, list):
        raise DetailDecodeError(f"Field '{key}' is not a byte array")
    try:
        return bytes(value)
    except (TypeError, ValueError) as e:
        raise DetailDecodeError(f"Field '{key}' is not a byte array: {e}") from e


__all__ = [
    "TransactionSummary",
    "TransactionDetail",
    "RequestStarted",
    "ResponseCompleted",
    "LifecycleEvent",
    "decode_event",
]
