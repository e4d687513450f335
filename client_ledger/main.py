"""
Client Ledger — FastAPI application (the persistence gateway).

All routers are registered here, along with the handlers that
give every error response the same shape:

    {"error": "<message>", "details": <optional>}
"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from client_ledger.config import get_settings
from client_ledger.logging_config import configure_logging
from client_ledger.api.health import router as health_router
from client_ledger.api.clients import router as clients_router
from client_ledger.api.transactions import router as transactions_router

settings = get_settings()
configure_logging()

logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Per-client transaction ledger with running balances",
)


def _error_response(status_code: int, error: str, details=None) -> JSONResponse:
    body = {"error": error}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    # Malformed input is a plain 400, the same as a missing field
    return _error_response(400, "Invalid request.", details=exc.errors())


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return _error_response(500, "Database error.", details=str(exc))


# Register routers
app.include_router(health_router)
app.include_router(clients_router)
app.include_router(transactions_router)
