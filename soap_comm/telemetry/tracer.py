"""
OpenTelemetry Tracing

Span helpers for SOAP exchanges. Trace context is not propagated in SOAP or HTTP
headers; spans only describe the local side of a call.
"""

import logging
from typing import Dict, Any, Optional

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ALWAYS_ON
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

logger = logging.getLogger(__name__)


def setup_tracer(service_name: str, otlp_endpoint: str = "localhost:4317"):
    """Configure OpenTelemetry tracer

    Args:
        service_name: Service name
        otlp_endpoint: OTLP receiver address

    Returns:
        Tracer: tracer named after the service
    """
    provider = TracerProvider(sampler=ALWAYS_ON)
    provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))
    trace.set_tracer_provider(provider)

    tracer = trace.get_tracer(service_name)

    logger.info(f"OpenTelemetry trace configured, service name: {service_name}, OTLP endpoint: {otlp_endpoint}")

    return tracer


def create_span(name: str,
                attributes: Optional[Dict[str, Any]] = None,
                tracer_name: str = __name__):
    """Start a client span as the current span

    Args:
        name: Span name
        attributes: Span attributes
        tracer_name: Instrumentation scope the span is reported under

    Returns:
        Context manager yielding the span
    """
    tracer = trace.get_tracer(tracer_name)
    return tracer.start_as_current_span(
        name,
        attributes=attributes or {},
        kind=trace.SpanKind.CLIENT,
    )

