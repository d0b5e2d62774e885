"""Capture control service.

Wraps the daemon's start/stop operations and remembers whether capture is
running. State only changes when the daemon accepts the operation.
"""

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from proxytap.client import ProxyClient

logger = logging.getLogger(__name__)


class CaptureService:
    """Starts and stops traffic capture on the proxy daemon."""

    def __init__(self, client: "ProxyClient", default_port: int = 8888):
        """Initialize capture service.

        Args:
            client: Proxy daemon client
            default_port: Port used when start() gets none
        """
        self.client = client
        self.default_port = default_port
        self.running = False
        self.port: int | None = None

    def status(self) -> dict:
        """Current capture state."""
        return {"running": self.running, "port": self.port}

    def start(self, port: int | None = None) -> dict:
        """Start capture.

        Args:
            port: Listen port, defaults to the configured capture port

        Returns:
            Status dict, with "error" on failure
        """
        if self.running:
            return {**self.status(), "error": "Proxy already running"}

        port = port or self.default_port
        if not 0 < port < 65536:
            return {**self.status(), "error": f"Invalid port: {port}"}

        try:
            self.client.start_capture(port)
        except Exception as e:
            logger.error(f"Failed to start capture on {port}: {e}")
            return {**self.status(), "error": str(e)}

        self.running = True
        self.port = port
        logger.info(f"Capture started on port {port}")
        return self.status()

    def stop(self) -> dict:
        """Stop capture.

        Returns:
            Status dict, with "error" on failure
        """
        if not self.running:
            return {**self.status(), "message": "Already stopped"}

        try:
            self.client.stop_capture()
        except Exception as e:
            logger.error(f"Failed to stop capture: {e}")
            return {**self.status(), "error": str(e)}

        logger.info(f"Capture stopped on port {self.port}")
        self.running = False
        self.port = None
        return self.status()


__all__ = ["CaptureService"]
