"""proxytap - traffic viewer for an HTTP debugging proxy.

Watches the proxy daemon's request/response event stream, merges it into one
list of transactions, filters it, fetches full detail on demand and compares
two transactions side by side. Provides both REPL and MCP functionality.

PUBLIC API:
  - main: Entry point function for CLI
  - __version__: Package version string
"""

import atexit
import logging
import sys

__version__ = "0.1.0"


def main():
    """Entry point for proxytap.

    Modes are auto-detected:
    - --mcp flag, or pipe/redirect (no TTY): Starts MCP server mode
    - Interactive terminal (TTY): Starts REPL mode
    """
    from proxytap.app import app
    from proxytap.config import load_config

    config = load_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )

    atexit.register(lambda: app.state.cleanup() if hasattr(app, "state") and app.state else None)

    if "--mcp" in sys.argv or not sys.stdin.isatty():
        app.mcp.run()
    else:
        app.run(title="proxytap - HTTP traffic viewer")


__all__ = ["main", "__version__"]
