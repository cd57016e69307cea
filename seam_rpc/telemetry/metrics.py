"""
OpenTelemetry Metrics

Call counts, error counts and call latency of the client. Instruments are created
lazily from the global MeterProvider, which is a no-op until setup_metrics is called.
"""

import logging
from typing import Any, Dict, Optional

from opentelemetry import metrics
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader

logger = logging.getLogger(__name__)

METER_NAME = "seam_rpc"

CALLS_COUNTER = "rpc.client.calls"
ERRORS_COUNTER = "rpc.client.errors"
LATENCY_HISTOGRAM = "rpc.client.latency"

_instruments: Dict[str, Any] = {}


def setup_metrics(service_name: str, otlp_endpoint: str = "localhost:4317", export_interval_ms: int = 5000):
    """Configure OpenTelemetry metrics with a periodic OTLP exporter

    Args:
        service_name: Service name
        otlp_endpoint: OTLP receiver address
        export_interval_ms: Metrics export interval in milliseconds
    """
    reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=otlp_endpoint),
        export_interval_millis=export_interval_ms,
    )
    metrics.set_meter_provider(MeterProvider(metric_readers=[reader]))
    _instruments.clear()

    logger.info(f"OpenTelemetry metrics configured, service name: {service_name}, OTLP endpoint: {otlp_endpoint}")

    return metrics.get_meter(METER_NAME)


def _counter(name: str, description: str):
    if name not in _instruments:
        meter = metrics.get_meter(METER_NAME)
        _instruments[name] = meter.create_counter(name=name, description=description, unit="1")
    return _instruments[name]


def _histogram(name: str, description: str):
    if name not in _instruments:
        meter = metrics.get_meter(METER_NAME)
        _instruments[name] = meter.create_histogram(name=name, description=description, unit="ms")
    return _instruments[name]


def record_call(service: str, procedure: str, latency_ms: float, outcome: str = "ok"):
    """Count a completed call and record its round-trip latency

    Args:
        service: Service name
        procedure: Procedure name
        latency_ms: Send-to-response time in milliseconds
        outcome: "ok" or "remote_error"
    """
    attributes = {"service": service, "procedure": procedure, "outcome": outcome}
    _counter(CALLS_COUNTER, "RPC calls that received a response").add(1, attributes)
    _histogram(LATENCY_HISTOGRAM, "RPC round-trip latency").record(latency_ms, attributes)


def record_error(kind: str, service: str = "", procedure: str = "",
                 attributes: Optional[Dict[str, Any]] = None):
    """Count a failed call

    Args:
        kind: Failure kind, e.g. "bind", "not_connected", "remote_error", "decode"
        service: Service name
        procedure: Procedure name
        attributes: Extra attribute labels
    """
    labels = {"type": kind, "service": service, "procedure": procedure}
    labels.update(attributes or {})
    _counter(ERRORS_COUNTER, "Failed RPC calls").add(1, labels)
