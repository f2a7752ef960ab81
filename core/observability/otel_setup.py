"""
Bookstore OpenTelemetry Setup

- Traces for requests, use cases and transactions (one span per step)
- OTLP export when an endpoint is configured, otherwise spans stay in-process

Modules call ``trace.get_tracer(__name__)`` at import time; until
``setup_tracing`` installs a provider those tracers are no-ops.
"""
from __future__ import annotations
from typing import Optional
import os

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor


def setup_tracing(
    service_name: str = "bookstore-api",
    endpoint: Optional[str] = None,
) -> TracerProvider:
    """Install a TracerProvider, exporting over OTLP/gRPC if an endpoint is set."""
    resource = Resource.create({"service.name": service_name})
    provider = TracerProvider(resource=resource)

    otlp_endpoint = endpoint or os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if otlp_endpoint:
        # shipped in the "otlp" extra
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
        exporter = OTLPSpanExporter(endpoint=otlp_endpoint)
        provider.add_span_processor(BatchSpanProcessor(exporter))

    trace.set_tracer_provider(provider)
    return provider
