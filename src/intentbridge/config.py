"""Server configuration — pydantic models plus a YAML loader."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from intentbridge.discovery.catalog import DEFAULT_TTL
from intentbridge.discovery.scanner import DEFAULT_APP_DIRECTORIES
from intentbridge.execution.runner import DEFAULT_SHORTCUTS_PATH

ENV_PREFIX = "INTENTBRIDGE_"


class ConfigError(Exception):
    """Raised when a config file fails parsing or validation."""


class TelemetrySettings(BaseModel):
    """Optional telemetry configuration."""

    enabled: bool = False
    otlp_endpoint: str | None = None


class ServerConfig(BaseModel):
    """Everything needed to wire up a server instance."""

    framing: Literal["newline", "header"] = Field(default="newline", description="Message framing on stdio.")
    cache_ttl: float = Field(default=DEFAULT_TTL, gt=0, description="Seconds before the catalog is re-scanned.")
    app_directories: list[str] = Field(
        default_factory=lambda: list(DEFAULT_APP_DIRECTORIES),
        description="Directories searched for application bundles.",
    )
    shortcuts_path: str = Field(default=DEFAULT_SHORTCUTS_PATH, description="Path of the shortcuts executable.")
    match_policy: Literal["ranked", "first"] = Field(default="ranked", description="How runnables are matched.")
    run_timeout: float | None = Field(default=None, gt=0, description="Per-run timeout; None waits forever.")
    log_level: str = Field(default="INFO", description="Root log level.")
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    @classmethod
    def from_env(cls, base: ServerConfig | None = None) -> ServerConfig:
        """Apply ``INTENTBRIDGE_*`` environment overrides on top of *base*."""
        data: dict[str, Any] = (base or cls()).model_dump()
        for key in ("framing", "cache_ttl", "log_level", "shortcuts_path", "match_policy"):
            value = os.environ.get(ENV_PREFIX + key.upper())
            if value:
                data[key] = value
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc


class ConfigLoader:
    """Load and validate a YAML config file into a :class:`ServerConfig`."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def load(self) -> ServerConfig:
        """Read YAML, interpolate env vars, and validate.

        Environment variables in the form ``${VAR}`` or ``$VAR`` are expanded
        using :func:`os.path.expandvars` before YAML parsing.  An empty file
        yields the defaults.

        Raises:
            ConfigError: On read errors, YAML parse errors or schema failures.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(f"Cannot read {self._path}: {exc}") from exc

        expanded = os.path.expandvars(raw)

        try:
            data: Any = yaml.safe_load(expanded)
        except yaml.YAMLError as exc:
            raise ConfigError(f"YAML parse error: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError("Config YAML must be a mapping")

        try:
            return ServerConfig.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(str(exc)) from exc
