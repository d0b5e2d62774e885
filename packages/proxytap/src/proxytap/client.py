"""HTTP clients for the proxy daemon and for dispatching requests.

PUBLIC API:
  - ProxyClient: REST client for detail retrieval and capture control
  - HttpDispatcher: Sends arbitrary HTTP requests and reports the result
"""

import logging
import re
import time
from typing import Any, Dict

import httpx

from proxytap.errors import ProxyConnectionError, ProxyTapError, UnknownTransactionError

logger = logging.getLogger(__name__)

# RFC 9110 token: method names such as M-SEARCH are valid
_METHOD_TOKEN = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


class ProxyClient:
    """HTTP client for the proxy daemon API.

    Provides:
    - Status (is the daemon up)
    - Transaction detail retrieval by id
    - Capture control (start on a port, stop)

    Attributes:
        base_url: API base URL (default: http://localhost:3000/api)
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3000/api",
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize proxy client.

        Args:
            base_url: API base URL
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self._client = httpx.Client(timeout=timeout, transport=transport)

    def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            response = self._client.request(method, f"{self.base_url}{path}", **kwargs)
        except httpx.ConnectError as e:
            logger.error(f"Failed to connect to proxy daemon at {self.base_url}: {e}")
            raise ProxyConnectionError(f"Cannot connect to proxy daemon at {self.base_url}. Is it running?") from e
        except httpx.HTTPError as e:
            logger.error(f"HTTP error from proxy daemon: {e}")
            raise ProxyTapError(str(e)) from e
        return response

    def _check(self, response: httpx.Response) -> None:
        """Raise for error statuses, using the daemon's text as the message."""
        if response.is_success:
            return
        message = response.text.strip() or response.reason_phrase
        logger.error(f"Proxy daemon returned {response.status_code}: {message}")
        raise ProxyTapError(f"{response.status_code}: {message}")

    def get(self, path: str, **kwargs) -> Any:
        """GET a JSON resource.

        Args:
            path: API path (e.g., "/status")
            **kwargs: Passed to httpx

        Returns:
            Decoded JSON

        Raises:
            ProxyConnectionError: Daemon unreachable
            ProxyTapError: HTTP error status or invalid response
        """
        response = self._request("GET", path, **kwargs)
        self._check(response)
        return response.json()

    def post(self, path: str, **kwargs) -> Any:
        """POST and decode the JSON reply, if any.

        Args:
            path: API path (e.g., "/proxy/start")
            **kwargs: Passed to httpx

        Returns:
            Decoded JSON, or None for an empty body
        """
        response = self._request("POST", path, **kwargs)
        self._check(response)
        return response.json() if response.content else None

    def close(self):
        """Close the HTTP client."""
        self._client.close()

    def status(self) -> Dict[str, Any]:
        """Get daemon status, e.g. {"status": "running"}."""
        return self.get("/status")

    def request_details(self, transaction_id: str) -> Dict[str, Any]:
        """Get the full record of one transaction.

        Args:
            transaction_id: Id from the event stream

        Returns:
            Raw detail payload

        Raises:
            UnknownTransactionError: Daemon has no such transaction
        """
        response = self._request("GET", f"/requests/{transaction_id}")
        if response.status_code == 404:
            raise UnknownTransactionError(transaction_id)
        self._check(response)
        return response.json()

    def start_capture(self, port: int) -> Any:
        """Start the intercepting proxy on a port."""
        return self.post("/proxy/start", json={"port": port})

    def stop_capture(self) -> Any:
        """Stop the intercepting proxy."""
        return self.post("/proxy/stop")


class HttpDispatcher:
    """Performs one-off HTTP requests for the API client feature."""

    def __init__(
        self,
        timeout: float = 30.0,
        verify: bool = False,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize dispatcher.

        Args:
            timeout: Request timeout in seconds
            verify: Verify TLS certificates
            transport: Optional httpx transport
        """
        self._client = httpx.Client(timeout=timeout, verify=verify, transport=transport)

    def send(
        self,
        method: str,
        url: str,
        headers: Dict[str, str] | None = None,
        body: str | None = None,
    ) -> Dict[str, Any]:
        """Send a request and collect the response.

        Args:
            method: HTTP method
            url: Absolute URL
            headers: Request headers
            body: Optional text body

        Returns:
            Dict with status, headers, body, duration_ms

        Raises:
            ProxyTapError: Invalid method/URL or transport failure
        """
        method = method.strip().upper()
        if not _METHOD_TOKEN.fullmatch(method):
            raise ProxyTapError(f"Invalid HTTP method: {method!r}")

        start = time.perf_counter()
        try:
            response = self._client.request(method, url, headers=headers or {}, content=body)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ProxyTapError(f"{type(e).__name__}: {e}") from e
        duration_ms = round((time.perf_counter() - start) * 1000)

        return {
            "status": response.status_code,
            "headers": dict(response.headers),
            "body": response.text,
            "duration_ms": duration_ms,
        }

    def close(self):
        """Close the HTTP client."""
        self._client.close()


__all__ = ["ProxyClient", "HttpDispatcher"]
