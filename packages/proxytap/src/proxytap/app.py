"""Main application entry point for proxytap.

Provides dual REPL/MCP functionality for watching traffic captured by the
proxy daemon. Built on ReplKit2; all traffic state lives in TrafficService.
"""

from dataclasses import dataclass, field

from replkit2 import App

from proxytap.config import load_config
from proxytap.services import TrafficService


@dataclass
class ProxyTapState:
    """Application state for proxytap.

    Attributes:
        service: Owner of traffic, selection and detail state.
    """

    service: TrafficService = field(default_factory=lambda: TrafficService(load_config()))

    def cleanup(self) -> None:
        """Release connections and worker threads."""
        self.service.cleanup()


# Must be created before command imports for decorator registration
app = App(
    "proxytap",
    ProxyTapState,
    uri_scheme="proxytap",
    fastmcp={
        "description": "HTTP debugging proxy traffic viewer",
        "tags": {"http", "proxy", "debugging", "traffic"},
    },
)


# Command imports trigger @app.command decorator registration
from proxytap.commands import connection  # noqa: E402, F401
from proxytap.commands import traffic  # noqa: E402, F401
from proxytap.commands import compare  # noqa: E402, F401
from proxytap.commands import capture  # noqa: E402, F401
from proxytap.commands import send  # noqa: E402, F401
