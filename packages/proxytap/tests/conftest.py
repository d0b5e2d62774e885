"""Shared fixtures for proxytap tests."""

from __future__ import annotations

from typing import Any

import pytest

from proxytap.models import TransactionDetail
from proxytap.store import TransactionStore


class FakeClock:
    """Manually advanced Unix clock."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    """Clock that only moves when told to."""
    return FakeClock()


@pytest.fixture
def store() -> TransactionStore:
    """Empty transaction store."""
    return TransactionStore()


def make_detail(transaction_id: str = "t1", **overrides: Any) -> TransactionDetail:
    """Build a TransactionDetail with sensible defaults."""
    fields: dict[str, Any] = {
        "id": transaction_id,
        "method": "GET",
        "url": f"https://example.com/{transaction_id}",
        "request_headers": '{"Accept": "application/json"}',
        "request_body": b"",
        "status": 200,
        "response_headers": '{"Content-Type": "application/json"}',
        "response_body": b'{"ok": true}',
    }
    fields.update(overrides)
    return TransactionDetail(**fields)


def detail_payload(transaction_id: str = "t1", **overrides: Any) -> dict[str, Any]:
    """Raw /requests/{id} payload as the daemon sends it."""
    payload: dict[str, Any] = {
        "id": transaction_id,
        "method": "POST",
        "url": f"https://example.com/{transaction_id}",
        "request_headers": '{"Content-Type": "application/json"}',
        "request_body": list(b'{"a": 1}'),
        "response_status": 201,
        "response_headers": '{"Server": "test"}',
        "response_body": list(b"created"),
        "protocol": "HTTP/1.1",
        "duration": 12,
        "timestamp": 1700000000,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def detail_factory():
    """Factory for TransactionDetail records."""
    return make_detail


@pytest.fixture
def payload_factory():
    """Factory for raw detail payloads."""
    return detail_payload
