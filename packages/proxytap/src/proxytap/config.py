"""Configuration management for proxytap.

Reads proxytap.toml from the current directory or the nearest parent that
has one. Every key is optional.
"""

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "proxytap.toml"


def _find_config_file() -> Optional[Path]:
    """Find proxytap.toml in current or parent directories."""
    current = Path.cwd()

    for parent in [current] + list(current.parents):
        config_file = parent / CONFIG_FILENAME
        if config_file.exists():
            return config_file

    return None


def _load_config(path: Optional[Path] = None) -> dict:
    """Load raw configuration from file."""
    if path is None:
        path = _find_config_file()

    if path is None or not path.exists():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


@dataclass(frozen=True)
class ProxyTapConfig:
    """Settings for talking to the proxy daemon.

    Attributes:
        host: Daemon host.
        port: Daemon HTTP/WebSocket port.
        events_path: WebSocket path of the traffic event stream.
        api_prefix: Path prefix of the REST API.
        timeout: HTTP request timeout in seconds.
        connect_timeout: Seconds to wait for the event stream to open.
        capture_port: Default port for starting capture.
        history_limit: Dispatch history length.
        verify_tls: Verify certificates when dispatching requests.
        log_level: Logging level name for the CLI.
    """

    host: str = "localhost"
    port: int = 3000
    events_path: str = "/ws/events"
    api_prefix: str = "/api"
    timeout: float = 30.0
    connect_timeout: float = 5.0
    capture_port: int = 8888
    history_limit: int = 50
    verify_tls: bool = False
    log_level: str = "INFO"

    @property
    def events_url(self) -> str:
        """WebSocket URL of the event stream."""
        return f"ws://{self.host}:{self.port}{self.events_path}"

    @property
    def api_url(self) -> str:
        """Base URL of the REST API."""
        return f"http://{self.host}:{self.port}{self.api_prefix}"

    @classmethod
    def from_dict(cls, data: dict) -> "ProxyTapConfig":
        """Build config from parsed TOML sections."""
        server = data.get("server", {})
        capture = data.get("capture", {})
        client = data.get("client", {})
        logging_section = data.get("logging", {})

        defaults = cls()
        return cls(
            host=server.get("host", defaults.host),
            port=int(server.get("port", defaults.port)),
            events_path=server.get("events_path", defaults.events_path),
            api_prefix=server.get("api_prefix", defaults.api_prefix).rstrip("/"),
            timeout=float(server.get("timeout", defaults.timeout)),
            connect_timeout=float(server.get("connect_timeout", defaults.connect_timeout)),
            capture_port=int(capture.get("port", defaults.capture_port)),
            history_limit=int(client.get("history_limit", defaults.history_limit)),
            verify_tls=bool(client.get("verify_tls", defaults.verify_tls)),
            log_level=str(logging_section.get("level", defaults.log_level)).upper(),
        )


def load_config(path: Optional[Path] = None) -> ProxyTapConfig:
    """Load configuration, falling back to defaults.

    Args:
        path: Explicit config file, otherwise searched from cwd upwards.

    Returns:
        ProxyTapConfig instance.
    """
    data = _load_config(path)
    if data:
        logger.info(f"Loaded config from {path or _find_config_file()}")
    return ProxyTapConfig.from_dict(data)


__all__ = ["ProxyTapConfig", "load_config", "CONFIG_FILENAME"]
