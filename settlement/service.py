"""Assembly shared by both services: store, tracing, error mapping and access log."""
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import APIRouter, FastAPI
from opentelemetry.sdk.trace import TracerProvider
from sqlalchemy import MetaData
from sqlalchemy.engine import Engine

from settlement.config import Settings
from settlement.database import make_engine, make_session_factory
from settlement.errors import register_error_handlers
from settlement.logging_config import add_access_log
from settlement.tracing import configure_tracing, instrument_app


def build_app(
    title: str,
    settings: Settings,
    router: APIRouter,
    metadata: MetaData,
    engine: Optional[Engine] = None,
    tracer_provider: Optional[TracerProvider] = None,
    http_client: Optional[httpx.Client] = None,
) -> FastAPI:
    """
    Build a service application around its injected collaborators.

    The store engine, tracer provider and outbound HTTP client default to ones
    built from ``settings``. Whatever is built here is closed with the app
    (engine disposed, provider flushed); injected ones are left to their owner.
    """
    owns_engine = engine is None
    engine = engine or make_engine(settings.database_url)
    owns_provider = tracer_provider is None
    tracer_provider = tracer_provider or configure_tracing(settings)
    owns_http_client = http_client is None
    http_client = http_client or httpx.Client()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if owns_http_client:
            http_client.close()
        if owns_engine:
            engine.dispose()
        if owns_provider:
            tracer_provider.shutdown()

    app = FastAPI(title=title, lifespan=lifespan)

    # Auto-migrate the schema
    metadata.create_all(bind=engine)

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    app.state.http_client = http_client
    app.state.tracer = tracer_provider.get_tracer(settings.service_name)

    app.include_router(router)
    register_error_handlers(app)
    add_access_log(app)
    instrument_app(app, tracer_provider)
    return app
