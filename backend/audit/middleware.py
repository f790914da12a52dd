from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from django.http import RawPostDataException
from django.utils.deprecation import MiddlewareMixin

from .models import ApiAccessLog

logger = logging.getLogger(__name__)

REDACTED_KEYS = frozenset({
    "password",
    "password_confirm",
    "old_password",
    "new_password",
    "new_password_confirm",
    "token",
    "payment_details",
})
REDACTED = "***"


class ApiAuditMiddleware(MiddlewareMixin):
    """Write an ``ApiAccessLog`` row for every API request."""

    def process_view(self, request, view_func, view_args, view_kwargs):
        # Cache the JSON body before the API view consumes the stream.
        if (
            request.path.startswith("/api/")
            and request.method in {"POST", "PUT", "PATCH"}
            and request.content_type == "application/json"
        ):
            try:
                request.body
            except RawPostDataException:
                pass
        return None

    def process_response(self, request, response):
        if not request.path.startswith("/api/"):
            return response
        try:
            resolver_match = getattr(request, "resolver_match", None)
            action = resolver_match.view_name if resolver_match and resolver_match.view_name else ""

            payload = self._extract_request_payload(request)
            user = getattr(request, "user", None)

            ApiAccessLog.objects.create(
                user=user if user is not None and user.is_authenticated else None,
                method=request.method.upper(),
                path=request.path[:255],
                action=action[:128],
                status_code=getattr(response, "status_code", 0),
                campaign_id=self._campaign_id(resolver_match, payload),
                payload=payload,
                response=self._extract_response_summary(response),
                ip_address=self._get_client_ip(request),
                user_agent=request.META.get("HTTP_USER_AGENT", "")[:255],
                request_id=request.headers.get("X-Request-ID", "")[:64],
            )
        except Exception:
            logger.exception("Failed to write API audit log")
        return response

    @staticmethod
    def _redact(payload: Dict[str, Any]) -> Dict[str, Any]:
        return {key: (REDACTED if key in REDACTED_KEYS else value) for key, value in payload.items()}

    def _extract_request_payload(self, request) -> Optional[Dict[str, Any]]:
        if request.method not in {"POST", "PUT", "PATCH"}:
            return None
        data = getattr(request, "data", None)
        if not data:
            try:
                body = request.body
            except RawPostDataException:
                body = getattr(request, "_body", b"")
            if not body:
                return None
            try:
                data = json.loads(body.decode() if isinstance(body, bytes) else body)
            except (ValueError, UnicodeDecodeError):
                return None
        if hasattr(data, "keys"):
            return self._redact({key: data[key] for key in data.keys()})
        return None

    @staticmethod
    def _campaign_id(resolver_match, payload) -> Optional[int]:
        candidate = None
        if resolver_match is not None:
            kwargs = resolver_match.kwargs or {}
            if "campaign" in (resolver_match.url_name or "") and "pk" in kwargs:
                candidate = kwargs["pk"]
        if candidate is None and isinstance(payload, dict):
            candidate = payload.get("campaign") or payload.get("campaign_id")
        try:
            return int(candidate) if candidate is not None else None
        except (TypeError, ValueError):
            return None

    def _extract_response_summary(self, response) -> Optional[Dict[str, Any]]:
        payload = getattr(response, "data", None)
        if not isinstance(payload, dict):
            return None
        summary_keys = [key for key in ("code", "message", "detail", "status") if key in payload]
        if not summary_keys:
            return None
        return {key: str(payload[key]) for key in summary_keys}

    def _get_client_ip(self, request) -> Optional[str]:
        x_forwarded_for = request.META.get("HTTP_X_FORWARDED_FOR")
        if x_forwarded_for:
            return x_forwarded_for.split(",")[0].strip()
        return request.META.get("REMOTE_ADDR")
