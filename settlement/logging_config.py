import logging
import sys
import time

from fastapi import FastAPI, Request
from opentelemetry import trace
from pythonjsonlogger.json import JsonFormatter

from settlement.tracing import get_trace_context

access_logger = logging.getLogger("settlement.access")


class CorrelationJsonFormatter(JsonFormatter):
    """JSON formatter that stamps the active trace and span id on every record."""

    def __init__(self, *args, service_name: str = "unknown", **kwargs):
        super().__init__(*args, **kwargs)
        self.service_name = service_name

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)

        ctx = trace.get_current_span().get_span_context()
        if ctx.is_valid:
            log_record["trace_id"] = format(ctx.trace_id, "032x")
            log_record["span_id"] = format(ctx.span_id, "016x")

        log_record["level"] = record.levelname
        log_record["logger"] = record.name
        log_record["service"] = self.service_name


def setup_logging(level: str = "INFO", service_name: str = "unknown") -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        CorrelationJsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            service_name=service_name,
        )
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(handler)

    # Our own access line replaces uvicorn's
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    root_logger.info(f"Structured logging initialized for {service_name}")


def add_access_log(app: FastAPI) -> None:
    """Log one line per request, including the trace id of the request's server span."""

    @app.middleware("http")
    async def log_request(request: Request, call_next):
        start = time.perf_counter()
        trace_id = get_trace_context().get("trace_id", "")
        response = await call_next(request)
        latency_ms = (time.perf_counter() - start) * 1000
        access_logger.info(
            f"clientIP: {request.client.host if request.client else '-'} "
            f"Method: {request.method} Path: {request.url.path} "
            f"StatusCode {response.status_code} Latency: {latency_ms:.1f}ms "
            f"Agent: {request.headers.get('user-agent', '-')} traceID: {trace_id}",
            extra={"status_code": response.status_code},
        )
        return response
