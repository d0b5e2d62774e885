"""Unit tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from proxytap.config import CONFIG_FILENAME, ProxyTapConfig, load_config


class TestProxyTapConfig:
    """Tests for ProxyTapConfig."""

    def test_defaults(self) -> None:
        """Defaults point at a local daemon."""
        config = ProxyTapConfig()
        assert config.events_url == "ws://localhost:3000/ws/events"
        assert config.api_url == "http://localhost:3000/api"
        assert config.capture_port == 8888
        assert config.history_limit == 50

    def test_from_dict(self) -> None:
        """Sections override defaults."""
        config = ProxyTapConfig.from_dict(
            {
                "server": {"host": "10.0.0.2", "port": 4000, "api_prefix": "/v1/"},
                "capture": {"port": 9090},
                "client": {"history_limit": 10, "verify_tls": True},
                "logging": {"level": "debug"},
            }
        )
        assert config.api_url == "http://10.0.0.2:4000/v1"
        assert config.events_url == "ws://10.0.0.2:4000/ws/events"
        assert config.capture_port == 9090
        assert config.history_limit == 10
        assert config.verify_tls is True
        assert config.log_level == "DEBUG"


class TestLoadConfig:
    """Tests for load_config."""

    def test_no_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without a config file defaults are used."""
        monkeypatch.chdir(tmp_path)
        assert load_config() == ProxyTapConfig()

    def test_found_in_parent(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """The nearest parent directory's file is used."""
        (tmp_path / CONFIG_FILENAME).write_text('[server]\nport = 3100\n\n[capture]\nport = 8080\n')
        nested = tmp_path / "a" / "b"
        nested.mkdir(parents=True)
        monkeypatch.chdir(nested)

        config = load_config()
        assert config.port == 3100
        assert config.capture_port == 8080

    def test_explicit_path(self, tmp_path: Path) -> None:
        """An explicit path is read directly."""
        path = tmp_path / "custom.toml"
        path.write_text('[client]\nhistory_limit = 5\n')
        assert load_config(path).history_limit == 5
