"""Unit tests for event decoding and detail records."""

from __future__ import annotations

import json

import pytest

from proxytap.errors import DetailDecodeError, EventDecodeError
from proxytap.models import RequestStarted, ResponseCompleted, TransactionDetail, TransactionSummary, decode_event


class TestDecodeEvent:
    """Tests for decode_event."""

    def test_request_event(self) -> None:
        """Request events carry method and url."""
        event = decode_event(json.dumps({"id": "a", "phase": "request", "method": "GET", "url": "https://x/a"}))
        assert event == RequestStarted(id="a", method="GET", url="https://x/a")
        assert event.phase == "request"

    def test_response_event(self) -> None:
        """Response events carry the status."""
        event = decode_event(json.dumps({"id": "a", "phase": "response", "status": 404}))
        assert event == ResponseCompleted(id="a", status=404)
        assert event.phase == "response"

    def test_response_without_status(self) -> None:
        """A missing or null status decodes to None."""
        assert decode_event('{"id": "a", "phase": "response"}') == ResponseCompleted(id="a")
        assert decode_event('{"id": "a", "phase": "response", "status": null}') == ResponseCompleted(id="a")

    def test_bytes_message(self) -> None:
        """Binary frames holding JSON are accepted."""
        event = decode_event(b'{"id": "a", "phase": "response", "status": 200}')
        assert event == ResponseCompleted(id="a", status=200)

    @pytest.mark.parametrize(
        "message",
        [
            "not json",
            "[1, 2]",
            '{"phase": "request", "method": "GET", "url": "u"}',
            '{"id": "", "phase": "request", "method": "GET", "url": "u"}',
            '{"id": 7, "phase": "request", "method": "GET", "url": "u"}',
            '{"id": "a", "phase": "unknown"}',
            '{"id": "a"}',
            '{"id": "a", "phase": "request", "url": "u"}',
            '{"id": "a", "phase": "request", "method": "GET"}',
            '{"id": "a", "phase": "response", "status": "200"}',
            '{"id": "a", "phase": "response", "status": true}',
            '{"id": "a", "phase": "response", "status": 200.5}',
        ],
    )
    def test_malformed_raises(self, message: str) -> None:
        """Malformed messages raise EventDecodeError."""
        with pytest.raises(EventDecodeError):
            decode_event(message)

    def test_decode_error_is_value_error(self) -> None:
        """EventDecodeError can be caught as ValueError."""
        with pytest.raises(ValueError):
            decode_event("{")


class TestTransactionSummary:
    """Tests for TransactionSummary."""

    def test_pending_until_duration_set(self) -> None:
        """completed follows duration_ms, not status."""
        summary = TransactionSummary(id="a", method="GET", url="u", observed_at=0.0)
        assert not summary.completed
        summary.duration_ms = 5
        assert summary.completed
        assert summary.status is None


class TestTransactionDetailFromApi:
    """Tests for TransactionDetail.from_api."""

    def test_full_payload(self, payload_factory) -> None:
        """Field names are mapped and bodies become bytes."""
        detail = TransactionDetail.from_api(payload_factory("t9"))
        assert detail.id == "t9"
        assert detail.method == "POST"
        assert detail.status == 201
        assert detail.duration_ms == 12
        assert detail.request_body == b'{"a": 1}'
        assert detail.response_body == b"created"
        assert detail.protocol == "HTTP/1.1"

    def test_optional_fields_missing(self) -> None:
        """Only id, method and url are required."""
        detail = TransactionDetail.from_api({"id": "a", "method": "GET", "url": "u"})
        assert detail.status is None
        assert detail.request_headers is None
        assert detail.request_body == b""
        assert detail.response_body == b""

    def test_not_an_object(self) -> None:
        """Non-object payloads are rejected."""
        with pytest.raises(DetailDecodeError):
            TransactionDetail.from_api([1, 2, 3])

    def test_missing_method(self, payload_factory) -> None:
        """A payload without method is rejected."""
        payload = payload_factory()
        del payload["method"]
        with pytest.raises(DetailDecodeError, match="method"):
            TransactionDetail.from_api(payload)

    def test_body_out_of_byte_range(self, payload_factory) -> None:
        """Body values above 255 are rejected."""
        with pytest.raises(DetailDecodeError):
            TransactionDetail.from_api(payload_factory(response_body=[300]))

    def test_body_not_a_list(self, payload_factory) -> None:
        """Body given as a string is rejected."""
        with pytest.raises(DetailDecodeError):
            TransactionDetail.from_api(payload_factory(request_body="text"))
