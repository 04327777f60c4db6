"""Tests for OpenTelemetry tracing helpers."""

from __future__ import annotations

import io
from unittest.mock import patch

import pytest
from opentelemetry import trace

from intentbridge.utils.telemetry import (
    _INSTRUMENTATION_NAME,
    ATTR_ACTION_ID,
    ATTR_RPC_METHOD,
    configure_telemetry,
    get_tracer,
)


class TestGetTracer:
    def test_returns_tracer(self) -> None:
        assert isinstance(get_tracer("test.module"), trace.Tracer)

    def test_default_name(self) -> None:
        assert isinstance(get_tracer(), trace.Tracer)

    def test_noop_span(self) -> None:
        """Without the SDK configured, spans accept attributes and do nothing."""
        with get_tracer("test.noop").start_as_current_span("test") as span:
            span.set_attribute(ATTR_RPC_METHOD, "ping")


class TestConfigureTelemetry:
    def test_raises_without_sdk(self) -> None:
        with patch.dict("sys.modules", {"opentelemetry.sdk.resources": None}):
            with pytest.raises(ImportError, match="opentelemetry-sdk"):
                configure_telemetry()

    def test_console_exporter_targets_stderr(self) -> None:
        try:
            from opentelemetry.sdk.trace import TracerProvider
        except ImportError:
            pytest.skip("opentelemetry-sdk not installed")

        fake_stderr = io.StringIO()
        captured: list[TracerProvider] = []
        with (
            patch("intentbridge.utils.telemetry.sys.stderr", fake_stderr),
            patch("intentbridge.utils.telemetry.trace.set_tracer_provider", side_effect=captured.append),
        ):
            configure_telemetry(service_name="test-svc")

        assert len(captured) == 1
        provider = captured[0]
        with provider.get_tracer("t").start_as_current_span("catalog.refresh"):
            pass
        provider.shutdown()
        assert "catalog.refresh" in fake_stderr.getvalue()

    def test_otlp_raises_without_exporter(self) -> None:
        try:
            import opentelemetry.sdk.trace  # noqa: F401
        except ImportError:
            pytest.skip("opentelemetry-sdk not installed")

        with (
            patch.dict("sys.modules", {"opentelemetry.exporter.otlp.proto.grpc.trace_exporter": None}),
            patch("intentbridge.utils.telemetry.trace.set_tracer_provider"),
        ):
            with pytest.raises(ImportError, match="opentelemetry-exporter-otlp"):
                configure_telemetry(export_to_stderr=False, otlp_endpoint="http://localhost:4317")


class TestAttributeConstants:
    def test_namespaced(self) -> None:
        assert ATTR_ACTION_ID.startswith("intentbridge.")

    def test_instrumentation_name(self) -> None:
        assert _INSTRUMENTATION_NAME == "intentbridge"
