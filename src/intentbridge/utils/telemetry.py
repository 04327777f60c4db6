"""Tracing for intentbridge.

Modules create their tracer once with ``_tracer = get_tracer(__name__)``.
Until :func:`configure_telemetry` installs an SDK provider the tracers are
no-ops, so spans cost nothing in a plain install.  Finished spans are never
written to stdout, which carries protocol frames.
"""

from __future__ import annotations

import sys
from typing import Any

from opentelemetry import trace

# Span attribute keys
ATTR_RPC_METHOD = "rpc.method"
ATTR_RPC_ERROR_CODE = "rpc.jsonrpc.error_code"
ATTR_TOOL_NAME = "intentbridge.tool.name"
ATTR_ACTION_ID = "intentbridge.action.id"
ATTR_RUNNABLE = "intentbridge.runnable"
ATTR_SUCCEEDED = "intentbridge.succeeded"
ATTR_CATALOG_SIZE = "intentbridge.catalog.size"
ATTR_CATALOG_FORCED = "intentbridge.catalog.forced"

_INSTRUMENTATION_NAME = "intentbridge"

_SDK_HINT = "Install it with: pip install intentbridge[otel]"


def get_tracer(name: str | None = None) -> trace.Tracer:
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(
    *,
    service_name: str = "intentbridge",
    export_to_stderr: bool = True,
    otlp_endpoint: str | None = None,
) -> None:
    """Install a global SDK tracer provider.

    Spans go to stderr as JSON when *export_to_stderr* is set, and to an
    OTLP/gRPC collector when *otlp_endpoint* is given.

    Raises:
        ImportError: ``opentelemetry-sdk`` (or, for OTLP, the exporter) is
            not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor, SimpleSpanProcessor
    except ImportError as exc:
        msg = f"opentelemetry-sdk is required for configure_telemetry(). {_SDK_HINT}"
        raise ImportError(msg) from exc

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    if export_to_stderr:
        provider.add_span_processor(SimpleSpanProcessor(_stderr_exporter()))
    if otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(_otlp_exporter(otlp_endpoint)))
    trace.set_tracer_provider(provider)


def _stderr_exporter() -> Any:
    from opentelemetry.sdk.trace.export import ConsoleSpanExporter

    return ConsoleSpanExporter(out=sys.stderr)


def _otlp_exporter(endpoint: str) -> Any:
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    except ImportError as exc:
        msg = f"opentelemetry-exporter-otlp is required for OTLP export. {_SDK_HINT}"
        raise ImportError(msg) from exc
    return OTLPSpanExporter(endpoint=endpoint)
