"""
Utility functions for audit logging.

Audit lines go to the dedicated ``audit`` logger configured in
``settings.LOGGING`` (rotating file, no propagation).
"""
from __future__ import annotations
import logging
from typing import Optional

from django.db import models

from main.common.threadlocals import get_current_request

# Configure logger
audit_logger = logging.getLogger('audit')


class AuditLogFilter(logging.Filter):
    """Filter to add contextual information to audit log records."""

    def filter(self, record):
        request = getattr(record, 'request', None) or get_current_request()
        user = getattr(record, 'user', None) or (
            request is not None and getattr(request, 'user', None))

        authenticated = bool(user) and getattr(user, 'is_authenticated', False)
        record.user_id = str(user.id) if authenticated else 'anonymous'
        record.user_email = getattr(user, 'email', '') if authenticated else 'anonymous'
        return True


def _client_ip(request) -> Optional[str]:
    if request is None:
        return None
    x_forwarded_for = request.META.get('HTTP_X_FORWARDED_FOR')
    if x_forwarded_for:
        return x_forwarded_for.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


def log_action(
    action: str,
    instance: Optional[models.Model] = None,
    user=None,
    request=None,
    level: int = logging.INFO,
    **extra
) -> None:
    """
    Write one audit line.

    Args:
        action: Action performed (begin_attempt, complete_attempt, login, ...)
        instance: The model instance being acted upon
        user: The user performing the action (defaults to the request user)
        request: The current request object (defaults to the thread-local one)
        **extra: Additional key=value pairs appended to the message
    """
    if request is None:
        request = get_current_request()

    model_name = instance.__class__.__name__ if instance is not None else '-'
    object_id = str(instance.pk) if instance is not None and instance.pk else '-'

    details = " ".join(f"{key}={value}" for key, value in sorted(extra.items()))
    message = f"{action} {model_name}:{object_id}"
    if details:
        message = f"{message} {details}"

    log_extra = {'ip_address': _client_ip(request)}
    if user is not None:
        log_extra['user'] = user
    audit_logger.log(level, message, extra=log_extra)
