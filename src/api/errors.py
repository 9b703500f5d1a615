# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Translation of domain errors into HTTP responses.

Every failure leaves the API with the same body:

    {"success": false, "error": {"type": ..., "message": ..., "details": {...}}}

Validation errors map to 400, request schema errors to 422, missing
entities to 404. A ConflictError means a uniqueness guarantee failed
despite the atomic writes and is logged as a defect before answering 500.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.domains.exceptions import (
    CampusServiceError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.infrastructure.database import DatabaseError
from src.models.common import ErrorBody, ErrorResponse

logger = logging.getLogger(__name__)


def error_response(
    status_code: int,
    error_type: str,
    message: str,
    details: dict | None = None,
) -> JSONResponse:
    """Build the uniform failure response."""
    body = ErrorResponse(
        error=ErrorBody(type=error_type, message=message, details=details or {})
    )
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body),
    )


def status_for(exc: CampusServiceError) -> int:
    """HTTP status of a domain error category."""
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def campus_error_handler(request: Request, exc: CampusServiceError) -> JSONResponse:
    """Handle errors raised by the domain services."""
    if isinstance(exc, ConflictError):
        logger.error(
            "Consistency defect on %s %s: %s details=%s",
            request.method,
            request.url.path,
            exc.message,
            exc.details,
        )
        return error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            exc.error_type,
            "The request could not be completed",
        )

    code = status_for(exc)
    if code >= 500:
        logger.error("Unhandled domain error: %s", exc.message)
    else:
        logger.info(
            "Request rejected: %s %s -> %d %s",
            request.method,
            request.url.path,
            code,
            exc.message,
        )
    return error_response(code, exc.error_type, exc.message, exc.details)


async def request_validation_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Handle request bodies and parameters that fail schema validation."""
    return error_response(
        422,
        "request_validation_error",
        "Request validation failed",
        {"errors": jsonable_encoder(exc.errors())},
    )


async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    """Handle storage failures."""
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "database_error",
        "Database operation failed",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error translation on an application."""
    app.add_exception_handler(CampusServiceError, campus_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(DatabaseError, database_error_handler)
