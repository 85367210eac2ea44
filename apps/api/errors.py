# ===============================================================================
# API ERROR MAPPING 🚦
# ===============================================================================
#
# Services return Err(BusinessError); views turn that into a response here so
# every endpoint reports failures the same way.
#

from rest_framework import status
from rest_framework.response import Response

from apps.common.types import (
    AuthorizationError,
    BusinessError,
    ConflictError,
    ExternalProviderError,
    NotFoundError,
    ValidationError,
)

ERROR_STATUS: tuple[tuple[type[BusinessError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (ExternalProviderError, status.HTTP_502_BAD_GATEWAY),
)


def status_for_error(error: BusinessError) -> int:
    for error_class, http_status in ERROR_STATUS:
        if isinstance(error, error_class):
            return http_status
    return status.HTTP_400_BAD_REQUEST


def error_response(error: BusinessError) -> Response:
    body: dict = {"success": False, "error": error.message, "code": error.code}
    if isinstance(error, ValidationError):
        body["field"] = error.field
        errors = getattr(error, "errors", None)
        if errors:
            body["errors"] = errors
    if isinstance(error, ExternalProviderError):
        body["retryable"] = error.retryable
    return Response(body, status=status_for_error(error))


def invalid_input_response(serializer_errors: dict) -> Response:
    return Response(
        {"success": False, "error": "Invalid input", "code": "invalid_input", "details": serializer_errors},
        status=status.HTTP_400_BAD_REQUEST,
    )
