import httpx
import pytest
from fastapi.testclient import TestClient
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from settlement.config import Settings
from settlement.order.main import create_app as create_order_app
from settlement.payment.main import create_app as create_payment_app
from settlement.tracing import install_propagator

ORDER_SERVICE_URL = "http://order-service:8090"
PAYMENT_SERVICE_URL = "http://payment-service:8091"


def make_settings(service_name, tmp_path, **overrides):
    values = dict(
        service_name=service_name,
        database_url=f"sqlite:///{tmp_path / (service_name + '.db')}",
        port=0,
        otlp_endpoint="localhost:4317",
    )
    values.update(overrides)
    return Settings(**values)


def mock_http(handler):
    """httpx client whose every request is answered by ``handler``."""
    return httpx.Client(transport=httpx.MockTransport(handler))


def refuse_connection(request):
    raise httpx.ConnectError("connection refused", request=request)


@pytest.fixture
def span_exporter():
    return InMemorySpanExporter()


@pytest.fixture
def tracer_provider(span_exporter):
    install_propagator()
    provider = TracerProvider()
    provider.add_span_processor(SimpleSpanProcessor(span_exporter))
    yield provider
    provider.shutdown()


@pytest.fixture
def build_order_app(tmp_path, tracer_provider):
    def build(payment_service_url=None, http_client=None):
        settings = make_settings("order-service", tmp_path, payment_service_url=payment_service_url)
        return create_order_app(settings, tracer_provider=tracer_provider, http_client=http_client)

    return build


@pytest.fixture
def build_payment_app(tmp_path, tracer_provider):
    def build(order_service_url=ORDER_SERVICE_URL, http_client=None):
        settings = make_settings("payment-service", tmp_path, order_service_url=order_service_url)
        return create_payment_app(settings, tracer_provider=tracer_provider, http_client=http_client)

    return build


@pytest.fixture
def order_client(build_order_app):
    with TestClient(build_order_app()) as c:
        yield c


@pytest.fixture
def system(build_order_app, build_payment_app):
    """Both services wired to each other: (order client, payment client)."""
    order_app = build_order_app(payment_service_url=PAYMENT_SERVICE_URL)
    with TestClient(order_app) as orders:
        payment_app = build_payment_app(http_client=orders)
        with TestClient(payment_app) as payments:
            # Close the loop for the payment-status proxy route
            order_app.state.payment_client.http = payments
            yield orders, payments
