"""Unit tests for the proxy daemon client and request dispatcher."""

from __future__ import annotations

import json

import httpx
import pytest

from proxytap.client import HttpDispatcher, ProxyClient
from proxytap.errors import ProxyConnectionError, ProxyTapError, UnknownTransactionError


def _client(handler) -> ProxyClient:
    return ProxyClient("http://daemon/api", transport=httpx.MockTransport(handler))


class TestProxyClient:
    """Tests for ProxyClient."""

    def test_request_details(self, payload_factory) -> None:
        """Detail is fetched from /requests/{id}."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.path)
            return httpx.Response(200, json=payload_factory("abc"))

        data = _client(handler).request_details("abc")
        assert seen == ["/api/requests/abc"]
        assert data["id"] == "abc"

    def test_request_details_404(self) -> None:
        """404 means the daemon does not know the id."""
        client = _client(lambda request: httpx.Response(404, text="Not Found"))
        with pytest.raises(UnknownTransactionError) as exc_info:
            client.request_details("gone")
        assert exc_info.value.ref == "gone"

    def test_server_error(self) -> None:
        """Other error statuses raise with the daemon's message."""
        client = _client(lambda request: httpx.Response(500, text="database locked"))
        with pytest.raises(ProxyTapError, match="500: database locked"):
            client.status()

    def test_connect_error(self) -> None:
        """An unreachable daemon raises ProxyConnectionError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(ProxyConnectionError):
            _client(handler).status()

    def test_start_capture(self) -> None:
        """start_capture posts the port."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.method, request.url.path, json.loads(request.content)))
            return httpx.Response(200, json={"port": 9000})

        assert _client(handler).start_capture(9000) == {"port": 9000}
        assert seen == [("POST", "/api/proxy/start", {"port": 9000})]

    def test_start_capture_conflict(self) -> None:
        """A refusal from the daemon raises."""
        client = _client(lambda request: httpx.Response(409, text="Proxy already running"))
        with pytest.raises(ProxyTapError, match="Proxy already running"):
            client.start_capture(8888)

    def test_stop_capture_empty_body(self) -> None:
        """An empty reply decodes to None."""
        client = _client(lambda request: httpx.Response(200))
        assert client.stop_capture() is None


class TestHttpDispatcher:
    """Tests for HttpDispatcher."""

    def test_send(self) -> None:
        """Status, headers and body are reported."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append((request.method, request.headers.get("X-Test"), request.content))
            return httpx.Response(201, headers={"Content-Type": "text/plain"}, text="made")

        dispatcher = HttpDispatcher(transport=httpx.MockTransport(handler))
        result = dispatcher.send("post", "https://example.com/items", headers={"X-Test": "1"}, body="payload")

        assert seen == [("POST", "1", b"payload")]
        assert result["status"] == 201
        assert result["body"] == "made"
        assert result["headers"]["content-type"] == "text/plain"
        assert result["duration_ms"] >= 0

    @pytest.mark.parametrize("method", ["G ET", "GET/", "", "GÉT"])
    def test_invalid_method(self, method: str) -> None:
        """Methods must be HTTP tokens."""
        dispatcher = HttpDispatcher(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
        with pytest.raises(ProxyTapError, match="Invalid HTTP method"):
            dispatcher.send(method, "https://example.com")

    def test_extension_method(self) -> None:
        """Token methods with punctuation, like M-SEARCH, are sent."""
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.method)
            return httpx.Response(200)

        dispatcher = HttpDispatcher(transport=httpx.MockTransport(handler))
        assert dispatcher.send("m-search", "http://239.255.255.250:1900/")["status"] == 200
        assert seen == ["M-SEARCH"]

    def test_transport_failure(self) -> None:
        """Transport errors become ProxyTapError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        dispatcher = HttpDispatcher(transport=httpx.MockTransport(handler))
        with pytest.raises(ProxyTapError, match="ConnectError"):
            dispatcher.send("GET", "https://example.com")
