"""
OpenTelemetry Integration Module

- tracer: client spans around each call
- metrics: call, error and latency instruments
"""

from .metrics import record_call, record_error, setup_metrics
from .tracer import create_span, setup_tracer

__all__ = [
    "setup_tracer",
    "create_span",
    "setup_metrics",
    "record_call",
    "record_error",
]
