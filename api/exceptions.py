"""
API exception handlers.

This module provides custom exception handling for REST API responses.
"""

import logging
from typing import Any, Dict

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.domain.exceptions import (
    AlreadyBoundError,
    DomainException,
    LicenseNotFoundError,
    LicenseRevokedError,
    StoreUnavailableError,
)
from core.metrics import errors_total

logger = logging.getLogger(__name__)


def custom_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """Custom exception handler for REST API."""
    endpoint = _get_endpoint(context)

    if isinstance(exc, DomainException):
        errors_total.labels(error_type=exc.code, endpoint=endpoint).inc()
        return _handle_domain_exception(exc)

    if isinstance(exc, ValueError):
        errors_total.labels(error_type="VALIDATION_ERROR", endpoint=endpoint).inc()
        logger.warning("Invalid request: %s", exc)
        return Response(
            {"error": {"code": "VALIDATION_ERROR", "message": str(exc)}},
            status=status.HTTP_400_BAD_REQUEST,
        )

    if isinstance(exc, APIException):
        response = exception_handler(exc, context)
        if response is not None:
            code = (
                exc.default_code.upper().replace("-", "_")
                if hasattr(exc, "default_code")
                else "API_ERROR"
            )
            detail = response.data.get("detail", exc.default_detail)
            response.data = {"error": {"code": code, "message": detail}}
            return response

    if isinstance(exc, Http404):
        return Response(
            {"error": {"code": "NOT_FOUND", "message": "Resource not found"}},
            status=status.HTTP_404_NOT_FOUND,
        )

    errors_total.labels(error_type="INTERNAL_ERROR", endpoint=endpoint).inc()
    logger.error("Unexpected error: %s", exc, exc_info=True)
    return Response(
        {"error": {"code": "INTERNAL_ERROR", "message": "An internal error occurred"}},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def _get_endpoint(context: Dict[str, Any]) -> str:
    """Name the view that raised, for metric labels."""
    view = context.get("view")
    return view.__class__.__name__ if view is not None else "unknown"


def _handle_domain_exception(exc: DomainException) -> Response:
    """Handle domain-specific exceptions."""
    status_code = status.HTTP_400_BAD_REQUEST
    if isinstance(exc, LicenseNotFoundError):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, (LicenseRevokedError, AlreadyBoundError)):
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(exc, StoreUnavailableError):
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    if status_code >= 500:
        logger.error("Domain exception: %s - %s", exc.code, exc.message)
    else:
        logger.warning("Domain exception: %s - %s", exc.code, exc.message)
    return Response({"error": {"code": exc.code, "message": exc.message}}, status=status_code)
