# ==============================================
# File: main/apps.py
# Purpose: Ensure signal receivers are registered
# ==============================================
from __future__ import annotations
from django.apps import AppConfig


class MainConfig(AppConfig):
    name = "main"
    default_auto_field = "django.db.models.BigAutoField"

    def ready(self):
        # Import signal handlers
        from main import signals  # noqa: F401
