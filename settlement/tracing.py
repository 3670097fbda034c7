"""
Trace propagation shared by both services.

Inbound requests get a server span from the FastAPI instrumentation, which
continues the caller's trace when a ``traceparent`` header is present. Handler,
store and outbound-call spans are opened with ``traced``; outbound calls carry
the active context forward through ``inject_headers``.

Recording an error on a span is diagnostics only. It never changes the
response or triggers a retry.
"""
import logging
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from fastapi import FastAPI
from opentelemetry import propagate, trace
from opentelemetry.baggage.propagation import W3CBaggagePropagator
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.propagators.composite import CompositePropagator
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import SpanKind, Status, StatusCode
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

from settlement.config import Settings

logger = logging.getLogger(__name__)


def install_propagator() -> None:
    propagate.set_global_textmap(
        CompositePropagator([TraceContextTextMapPropagator(), W3CBaggagePropagator()])
    )


def configure_tracing(settings: Settings) -> TracerProvider:
    """
    Build the tracer provider for one service.

    Spans are batched and exported over gRPC to ``settings.otlp_endpoint``.
    If the collector is unreachable the exporter drops spans; the service keeps
    serving.
    """
    provider = TracerProvider(resource=Resource(attributes={SERVICE_NAME: settings.service_name}))
    exporter = OTLPSpanExporter(endpoint=settings.otlp_endpoint, insecure=True)
    provider.add_span_processor(BatchSpanProcessor(exporter))
    install_propagator()

    logger.info(f"Tracing initialized: {settings.service_name} -> {settings.otlp_endpoint}")
    return provider


def instrument_app(app: FastAPI, provider: TracerProvider) -> None:
    FastAPIInstrumentor.instrument_app(app, tracer_provider=provider)


@contextmanager
def traced(
    tracer: trace.Tracer,
    name: str,
    kind: SpanKind = SpanKind.INTERNAL,
    **attributes,
) -> Iterator[trace.Span]:
    """Open a span as current; on error, record it on the span and re-raise."""
    with tracer.start_as_current_span(
        name,
        kind=kind,
        attributes={key: value for key, value in attributes.items() if value is not None},
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        try:
            yield span
        except Exception as exc:
            mark_failed(span, exc)
            raise


def mark_failed(span: trace.Span, exc: BaseException, description: Optional[str] = None) -> None:
    span.record_exception(exc)
    span.set_status(Status(StatusCode.ERROR, description or str(exc)))


def inject_headers(headers: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Write the active trace context into ``headers`` for an outbound call."""
    headers = dict(headers or {})
    propagate.inject(headers)
    return headers


def get_trace_context() -> Dict[str, str]:
    """Trace and span id of the active span, or an empty dict outside a trace."""
    ctx = trace.get_current_span().get_span_context()
    if ctx.is_valid:
        return {
            "trace_id": format(ctx.trace_id, "032x"),
            "span_id": format(ctx.span_id, "016x"),
        }
    return {}
