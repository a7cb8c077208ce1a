# ==============================================
# File: main/common/middlewares.py
# Purpose: Request context + request audit logging
# ==============================================
from __future__ import annotations
import time
import uuid

from django.http import HttpRequest, HttpResponse
from django.utils.deprecation import MiddlewareMixin

from main.common.audit import audit_logger
from main.common.threadlocals import set_current_request


class RequestThreadLocalMiddleware(MiddlewareMixin):
    """Simple middleware to manage request thread locals.
        Push/pop the current request to thread‑locals around the view.
    """
    header = "HTTP_X_REQUEST_ID"

    def process_request(self, request: HttpRequest) -> None:
        request.request_id = request.META.get(self.header) or uuid.uuid4().hex
        set_current_request(request)

    def process_response(self, request: HttpRequest, response: HttpResponse) -> HttpResponse:
        set_current_request(None)
        return response


class RequestLoggingMiddleware(MiddlewareMixin):
    """Log method, path, status and duration of every API request to the audit log."""

    skip_prefixes = ('/static/', '/media/', '/health/')

    def process_request(self, request: HttpRequest) -> None:
        request._request_start_time = time.time()

    def process_response(self, request: HttpRequest, response: HttpResponse) -> HttpResponse:
        self._log_request(request, response)
        return response

    def _log_request(self, request: HttpRequest, response: HttpResponse) -> None:
        """Log request details for audit purposes."""
        if not hasattr(request, '_request_start_time'):
            return

        # Skip logging for static files and health checks
        if request.path.startswith(self.skip_prefixes):
            return

        duration = time.time() - request._request_start_time
        extra = {
            'request': request,
            'request_id': getattr(request, 'request_id', '-'),
            'ip_address': self._get_client_ip(request),
        }

        audit_logger.info(
            f"{request.method} {request.path} - {response.status_code} - {duration:.3f}s",
            extra=extra,
        )

        # Log errors and warnings
        if 400 <= response.status_code < 500:
            audit_logger.warning(
                f"Client error {response.status_code} on {request.method} {request.path}",
                extra=extra,
            )
        elif response.status_code >= 500:
            audit_logger.error(
                f"Server error {response.status_code} on {request.method} {request.path}",
                extra=extra,
            )

    def _get_client_ip(self, request: HttpRequest) -> str:
        """Get the client IP address from the request."""
        x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
        if x_forwarded_for:
            return x_forwarded_for.split(',')[0].strip()
        return request.META.get('REMOTE_ADDR', 'unknown')
