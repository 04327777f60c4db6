"""Tests for ServerConfig and ConfigLoader."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from intentbridge.config import ConfigError, ConfigLoader, ServerConfig

if TYPE_CHECKING:
    from pathlib import Path


class TestServerConfig:
    def test_defaults(self) -> None:
        config = ServerConfig()
        assert config.framing == "newline"
        assert config.cache_ttl == 300
        assert config.match_policy == "ranked"
        assert config.run_timeout is None
        assert "/Applications" in config.app_directories
        assert config.telemetry.enabled is False

    def test_rejects_unknown_framing(self) -> None:
        with pytest.raises(ValueError):
            ServerConfig(framing="smoke-signals")  # type: ignore[arg-type]

    def test_rejects_non_positive_ttl(self) -> None:
        with pytest.raises(ValueError):
            ServerConfig(cache_ttl=0)

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INTENTBRIDGE_FRAMING", "header")
        monkeypatch.setenv("INTENTBRIDGE_CACHE_TTL", "60")
        monkeypatch.setenv("INTENTBRIDGE_MATCH_POLICY", "first")
        config = ServerConfig.from_env()
        assert config.framing == "header"
        assert config.cache_ttl == 60
        assert config.match_policy == "first"

    def test_env_keeps_base_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("INTENTBRIDGE_FRAMING", raising=False)
        base = ServerConfig(framing="header", app_directories=["/opt/apps"])
        config = ServerConfig.from_env(base)
        assert config.framing == "header"
        assert config.app_directories == ["/opt/apps"]

    def test_bad_env_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INTENTBRIDGE_CACHE_TTL", "soon")
        with pytest.raises(ConfigError):
            ServerConfig.from_env()


class TestConfigLoader:
    def test_load(self, tmp_path: Path) -> None:
        f = tmp_path / "config.yaml"
        f.write_text(
            "framing: header\n"
            "cache_ttl: 30\n"
            "app_directories: [/Apps]\n"
            "run_timeout: 12.5\n"
            "telemetry:\n"
            "  enabled: true\n"
        )
        config = ConfigLoader(f).load()
        assert config.framing == "header"
        assert config.cache_ttl == 30
        assert config.app_directories == ["/Apps"]
        assert config.run_timeout == 12.5
        assert config.telemetry.enabled is True

    def test_env_interpolation(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SHORTCUTS_BIN", "/opt/bin/shortcuts")
        f = tmp_path / "config.yaml"
        f.write_text("shortcuts_path: ${SHORTCUTS_BIN}\n")
        assert ConfigLoader(f).load().shortcuts_path == "/opt/bin/shortcuts"

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        f = tmp_path / "config.yaml"
        f.write_text("")
        assert ConfigLoader(f).load() == ServerConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Cannot read"):
            ConfigLoader(tmp_path / "nope.yaml").load()

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        f = tmp_path / "config.yaml"
        f.write_text("framing: [unclosed\n")
        with pytest.raises(ConfigError, match="YAML parse error"):
            ConfigLoader(f).load()

    def test_non_mapping(self, tmp_path: Path) -> None:
        f = tmp_path / "config.yaml"
        f.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            ConfigLoader(f).load()

    def test_schema_failure(self, tmp_path: Path) -> None:
        f = tmp_path / "config.yaml"
        f.write_text("match_policy: random\n")
        with pytest.raises(ConfigError):
            ConfigLoader(f).load()
