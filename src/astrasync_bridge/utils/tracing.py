"""Tracing for the bridge: one span per JSON-RPC request and per registry call.

Modules take a tracer from :func:`get_tracer`.  Until
:func:`configure_telemetry` installs an SDK provider (``serve
--otlp-endpoint``), the OpenTelemetry API hands out no-op spans.
"""

from __future__ import annotations

from opentelemetry import trace

ATTR_RPC_METHOD = "bridge.rpc.method"
ATTR_RPC_ERROR_CODE = "bridge.rpc.error_code"
ATTR_TOOL_NAME = "bridge.tool.name"
ATTR_REGISTRY_OPERATION = "bridge.registry.operation"
ATTR_REGISTRY_STATUS = "bridge.registry.status_code"

SERVICE_NAME = "astrasync-bridge"


def get_tracer(name: str | None = None) -> trace.Tracer:
    return trace.get_tracer(name or "astrasync_bridge")


def configure_telemetry(otlp_endpoint: str, *, service_name: str = SERVICE_NAME) -> None:
    """Export bridge spans over OTLP/gRPC to *otlp_endpoint*.

    Needs the ``otel`` extra; raises :class:`ImportError` naming it otherwise.
    """
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (  # pyright: ignore[reportMissingImports]
            OTLPSpanExporter,
        )
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace.export import BatchSpanProcessor  # pyright: ignore[reportMissingImports]
    except ImportError as exc:
        msg = f"OTLP export needs the otel extra: pip install astrasync-bridge[otel] ({exc})"
        raise ImportError(msg) from exc

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))
    trace.set_tracer_provider(provider)
