"""Unit tests for CaptureService."""

from __future__ import annotations

from unittest.mock import MagicMock

from proxytap.errors import ProxyConnectionError
from proxytap.services.capture import CaptureService


class TestCaptureService:
    """Tests for CaptureService."""

    def test_start_default_port(self) -> None:
        """start without a port uses the configured default."""
        client = MagicMock()
        service = CaptureService(client, default_port=8888)

        result = service.start()

        client.start_capture.assert_called_once_with(8888)
        assert result == {"running": True, "port": 8888}

    def test_start_twice(self) -> None:
        """A second start is refused without calling the daemon."""
        client = MagicMock()
        service = CaptureService(client)
        service.start(9000)

        result = service.start(9001)

        assert result["error"] == "Proxy already running"
        assert result["port"] == 9000
        client.start_capture.assert_called_once()

    def test_invalid_port(self) -> None:
        """Ports outside 1-65535 are rejected."""
        client = MagicMock()
        result = CaptureService(client).start(70000)
        assert result["error"] == "Invalid port: 70000"
        client.start_capture.assert_not_called()

    def test_start_failure_leaves_state(self) -> None:
        """A failed start keeps capture stopped."""
        client = MagicMock()
        client.start_capture.side_effect = ProxyConnectionError("Cannot connect")
        service = CaptureService(client)

        result = service.start()

        assert result == {"running": False, "port": None, "error": "Cannot connect"}
        assert not service.running

    def test_stop(self) -> None:
        """stop resets state after the daemon accepts."""
        client = MagicMock()
        service = CaptureService(client)
        service.start(9000)

        assert service.stop() == {"running": False, "port": None}
        client.stop_capture.assert_called_once_with()

    def test_stop_when_stopped(self) -> None:
        """Stopping a stopped capture is a no-op."""
        client = MagicMock()
        result = CaptureService(client).stop()
        assert result["message"] == "Already stopped"
        client.stop_capture.assert_not_called()

    def test_stop_failure_keeps_running(self) -> None:
        """A failed stop leaves capture marked running."""
        client = MagicMock()
        client.stop_capture.side_effect = RuntimeError("timeout")
        service = CaptureService(client)
        service.start(9000)

        result = service.stop()

        assert result["error"] == "timeout"
        assert service.running
