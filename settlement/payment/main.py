from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI
from opentelemetry.sdk.trace import TracerProvider
from sqlalchemy.engine import Engine

from settlement.config import Settings
from settlement.logging_config import setup_logging
from settlement.payment.models import Base
from settlement.payment.order_client import OrderServiceClient
from settlement.payment.routes import router
from settlement.service import build_app

SERVICE_NAME = "payment-service"
PORT = 8091


def create_app(
    settings: Settings,
    engine: Optional[Engine] = None,
    tracer_provider: Optional[TracerProvider] = None,
    http_client: Optional[httpx.Client] = None,
) -> FastAPI:
    app = build_app("Payment Service", settings, router, Base.metadata, engine, tracer_provider, http_client)
    # Settlement callback target; unset ORDER_SERVICE fails each payment after it is persisted
    app.state.order_client = OrderServiceClient(
        peer_name="order-service",
        base_url=settings.order_service_url,
        env_var="ORDER_SERVICE",
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
