# ==============================================
# File: main/common/threadlocals.py
# Purpose: Single source of truth for per-request context
# ==============================================
from __future__ import annotations
import threading

_thread_locals = threading.local()


def set_current_request(request) -> None:
    """Store the current HttpRequest in thread-local storage."""
    _thread_locals.request = request


def get_current_request():
    """Return the current HttpRequest or None."""
    return getattr(_thread_locals, "request", None)


def get_current_user():
    """Return the authenticated user of the current request, or None."""
    request = get_current_request()
    user = getattr(request, "user", None) if request is not None else None
    if user is not None and getattr(user, "is_authenticated", False):
        return user
    return None
