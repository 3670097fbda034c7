"""Error taxonomy shared by both services and its HTTP mapping.

Every error is handled at the boundary of the request it occurred in: handlers
raise, the exception handlers registered here turn the error into a JSON body
``{"error": message, **details}`` with the status code of its class.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class SettlementError(Exception):
    status_code = 500

    def __init__(self, message: str, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {"error": self.message, **jsonable_encoder(self.details)}


class ValidationError(SettlementError):
    """Request body could not be decoded."""

    status_code = 400


class NotFound(SettlementError):
    status_code = 404


class StoreError(SettlementError):
    """Persistence layer failure."""


class ConfigError(SettlementError):
    """Required environment configuration is missing."""


class DownstreamError(SettlementError):
    """Peer service call failed, timed out or returned non-success."""


class DecodeError(SettlementError):
    """Peer service returned a malformed body."""


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(SettlementError)
    async def handle_settlement_error(request: Request, exc: SettlementError):
        level = logging.WARNING if exc.status_code < 500 else logging.ERROR
        logger.log(
            level,
            f"{request.method} {request.url.path} failed with {type(exc).__name__}: {exc.message}",
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        in_body = all(err.get("loc", ("body",))[0] == "body" for err in errors)
        error = ValidationError("Invalid request body" if in_body else "Invalid request", detail=errors)
        return await handle_settlement_error(request, error)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # Body parse failures FastAPI raises itself (e.g. invalid UTF-8), unknown routes
        error = SettlementError(str(exc.detail))
        error.status_code = exc.status_code
        response = await handle_settlement_error(request, error)
        if exc.headers:
            response.headers.update(exc.headers)
        return response
