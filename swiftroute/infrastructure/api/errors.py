"""Exception handlers — map the domain error taxonomy to HTTP responses.

Every error body has the shape ``{"message": str, "error": detail?}``.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from swiftroute.domain.errors import (
    ConflictError,
    DispatchError,
    NotFoundError,
    UpstreamTimeoutError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first; anything else derived from DispatchError is a 500.
STATUS_BY_ERROR: list[tuple[type[DispatchError], int]] = [
    (ValidationError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (UpstreamTimeoutError, 504),
]


def status_for(exc: DispatchError) -> int:
    for error_type, status in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status
    return 500


def _body(message: str, error=None) -> dict:
    body = {"message": message}
    if error is not None:
        body["error"] = error
    return body


async def dispatch_error_handler(request: Request, exc: DispatchError) -> JSONResponse:
    status = status_for(exc)
    if status >= 500:
        logger.error("%s %s → %d %s: %s", request.method, request.url.path, status,
                     type(exc).__name__, exc.message)
    return JSONResponse(status_code=status, content=_body(exc.message, exc.detail))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"Invalid request: {location}: {first.get('msg')}" if location else "Invalid request body."
    return JSONResponse(
        status_code=400,
        content=_body(message, jsonable_encoder(errors, custom_encoder={Exception: str})),
    )


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content=_body("Database error.", type(exc).__name__))


async def timeout_error_handler(request: Request, exc: TimeoutError) -> JSONResponse:
    logger.warning("Timeout on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=504, content=_body("The request timed out."))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DispatchError, dispatch_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)
    app.add_exception_handler(TimeoutError, timeout_error_handler)
