"""Database models for maintenance staff and reporters."""
from __future__ import annotations

import uuid

from django.db import models


class Profile(models.Model):
    """A person who reports, works on or manages tickets."""

    REPORTER = "reporter"
    MAINTENANCE = "maintenance"
    HOUSEKEEPER = "housekeeper"
    SUB_DIRECTOR = "sub_director"
    ADMIN = "admin"

    ROLE_CHOICES = [
        (REPORTER, "Reporter"),
        (MAINTENANCE, "Maintenance"),
        (HOUSEKEEPER, "Housekeeper"),
        (SUB_DIRECTOR, "Sub Director"),
        (ADMIN, "Administrator"),
    ]

    # Roles a ticket may be assigned to.
    STAFF_ROLES = (MAINTENANCE, ADMIN, SUB_DIRECTOR)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    full_name = models.CharField(max_length=255)
    email = models.EmailField(blank=True)
    role = models.CharField(max_length=32, choices=ROLE_CHOICES, default=REPORTER)
    telegram_chat_id = models.CharField(max_length=64, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["full_name"]
        indexes = [models.Index(fields=["role"], name="accounts_profile_role_idx")]

    def __str__(self) -> str:
        return f"{self.full_name} ({self.role})"

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def is_anonymous(self) -> bool:
        return False
