"""
OpenTelemetry Tracing

Spans around client calls. Without a configured TracerProvider the OpenTelemetry API
hands out non-recording spans, so tracing costs nothing until setup_tracer is called.
"""

import logging
from contextlib import nullcontext
from typing import Any, Dict, Optional

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ALWAYS_ON

logger = logging.getLogger(__name__)

TRACER_NAME = "seam_rpc"


def setup_tracer(service_name: str, otlp_endpoint: str = "localhost:4317"):
    """Configure OpenTelemetry tracing with an OTLP exporter

    Args:
        service_name: Service name reported with every span
        otlp_endpoint: OTLP receiver address

    Returns:
        Tracer for the client
    """
    provider = TracerProvider(
        sampler=ALWAYS_ON,
        resource=Resource.create({"service.name": service_name}),
    )
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))
    trace.set_tracer_provider(provider)

    logger.info(f"OpenTelemetry trace configured, service name: {service_name}, OTLP endpoint: {otlp_endpoint}")

    return trace.get_tracer(TRACER_NAME)


def create_span(name: str, attributes: Optional[Dict[str, Any]] = None, enabled: bool = True):
    """Start a client span as the current span

    Args:
        name: Span name, e.g. "SpaceCenter.WarpTo"
        attributes: Span attributes
        enabled: When False, return a no-op context manager

    Returns:
        Context manager yielding the span
    """
    if not enabled:
        return nullcontext()

    tracer = trace.get_tracer(TRACER_NAME)
    return tracer.start_as_current_span(
        name,
        attributes=attributes or {},
        kind=trace.SpanKind.CLIENT,
    )
