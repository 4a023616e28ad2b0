"""Celery application for the maintenance service."""
from __future__ import annotations

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "maintenance_service.settings")

app = Celery("maintenance_service")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()
