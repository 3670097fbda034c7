from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI
from opentelemetry.sdk.trace import TracerProvider
from sqlalchemy.engine import Engine

from settlement.config import Settings
from settlement.logging_config import setup_logging
from settlement.order.models import Base
from settlement.order.payment_client import PaymentServiceClient
from settlement.order.routes import router
from settlement.service import build_app

SERVICE_NAME = "order-service"
PORT = 8090


def create_app(
    settings: Settings,
    engine: Optional[Engine] = None,
    tracer_provider: Optional[TracerProvider] = None,
    http_client: Optional[httpx.Client] = None,
) -> FastAPI:
    app = build_app("Order Service", settings, router, Base.metadata, engine, tracer_provider, http_client)
    app.state.payment_client = PaymentServiceClient(
        peer_name="payment-service",
        base_url=settings.payment_service_url,
        env_var="PAYMENT_SERVICE_URL",
        http=app.state.http_client,
        tracer=app.state.tracer,
    )
    return app


def run() -> None:
    settings = Settings.from_env(SERVICE_NAME, default_port=PORT)
    setup_logging(settings.log_level, SERVICE_NAME)
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
