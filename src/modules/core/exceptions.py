"""API error rendering.

Every error leaves the API in the marketplace envelope::

    {"success": false, "message": "...", "data": {...}}

Domain errors are mapped by family (see ``shared.domain.exceptions``); DRF
errors keep their status code and headers; anything else is logged and
rendered as a 500.
"""

from __future__ import annotations

from typing import Any, Optional

import structlog
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from shared.domain.exceptions import (
    AccessDenied,
    BusinessRuleViolation,
    ConflictError,
    DomainError,
    EntityNotFound,
    InvalidInput,
    UpstreamError,
)

logger = structlog.get_logger(__name__)

DOMAIN_STATUS_CODES: list[tuple[type[DomainError], int]] = [
    (InvalidInput, status.HTTP_400_BAD_REQUEST),
    (BusinessRuleViolation, status.HTTP_400_BAD_REQUEST),
    (EntityNotFound, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (AccessDenied, status.HTTP_403_FORBIDDEN),
    (UpstreamError, status.HTTP_502_BAD_GATEWAY),
]


def status_for(exc: DomainError) -> int:
    for family, code in DOMAIN_STATUS_CODES:
        if isinstance(exc, family):
            return code
    return status.HTTP_400_BAD_REQUEST


def error_body(message: str, data: Optional[Any] = None) -> dict:
    body: dict = {"success": False, "message": message}
    if data:
        body["data"] = data
    return body


def envelope_exception_handler(exc: Exception, context: dict) -> Optional[Response]:
    view = context.get("view")
    view_name = type(view).__name__ if view is not None else None

    if isinstance(exc, DomainError):
        code = status_for(exc)
        log = logger.bind(view=view_name, error=type(exc).__name__, status_code=code)
        if code >= 500:
            log.error("api.domain_error", message=exc.message)
        else:
            log.info("api.domain_error", message=exc.message)
        return Response(error_body(exc.message, exc.details), status=code)

    response = exception_handler(exc, context)
    if response is not None:
        if isinstance(exc, drf_exceptions.ValidationError):
            response.data = error_body("Validation failed.", {"errors": exc.detail})
        else:
            detail = getattr(exc, "detail", None)
            message = str(detail) if detail is not None else str(exc)
            response.data = error_body(message)
        return response

    logger.exception("api.unhandled_error", view=view_name, error=type(exc).__name__)
    return Response(
        error_body("Internal server error."),
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
