# workflow/api/errors.py

"""
HTTP mapping for workflow errors.

Every workflow failure leaves the API as:
    {"error": {"code": ..., "message": ..., "details": {...}}}
"""

from rest_framework import status
from rest_framework.response import Response

from workflow.services.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionError as WorkflowPermissionError,
    WorkflowError,
)
from workflow.services.principal import Principal

STATUS_BY_ERROR = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (WorkflowPermissionError, status.HTTP_403_FORBIDDEN),
    (ConflictError, status.HTTP_409_CONFLICT),
)


def error_response(*, code: str, message: str, http_status: int, details=None):
    """
    Canonical API error response.
    """
    return Response(
        {"error": {"code": code, "message": message, "details": details or {}}},
        status=http_status,
    )


def http_status_for(exc: WorkflowError) -> int:
    for error_class, http_status in STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            return http_status
    return status.HTTP_400_BAD_REQUEST


def workflow_error_response(exc: WorkflowError):
    return error_response(
        code=exc.code,
        message=exc.message,
        http_status=http_status_for(exc),
        details=exc.details,
    )


class WorkflowErrorMixin:
    """
    APIView mixin: workflow errors raised anywhere in a handler become
    error_response() payloads; everything else goes to DRF's handler.
    """

    def handle_exception(self, exc):
        if isinstance(exc, WorkflowError):
            return workflow_error_response(exc)
        return super().handle_exception(exc)

    def principal(self) -> Principal:
        return Principal.from_user(self.request.user)
