"""Domain error base class and the DRF exception handler that renders it."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

LOGGER = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base exception for service-layer failures.

    Subclasses set ``status_code`` and ``default_code``; callers may override the
    code per raise to give the client something stable to switch on.
    """

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "SERVICE_ERROR"

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.code = code or self.default_code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def as_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"


class ConflictError(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_code = "CONFLICT"


class ForbiddenError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = "FORBIDDEN"


def api_exception_handler(exc, context):
    if isinstance(exc, ServiceError):
        view = context.get("view")
        request = context.get("request")
        LOGGER.info(
            "Service error returned to client",
            extra={
                "error_code": exc.code,
                "view": type(view).__name__ if view is not None else None,
                "user_id": getattr(getattr(request, "user", None), "id", None),
            },
        )
        return Response(exc.as_payload(), status=exc.status_code)
    return exception_handler(exc, context)
