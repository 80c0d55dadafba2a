"""
OpenTelemetry Integration Module

Provides tracing and metrics collection for SOAP exchanges:
- tracer: span creation and tracer setup
- metrics: request, error and latency instruments
"""

from .tracer import setup_tracer, create_span
from .metrics import setup_metrics, increment_counter, record_latency

__all__ = [
    "setup_tracer",
    "create_span",
    "setup_metrics",
    "increment_counter",
    "record_latency",
]
