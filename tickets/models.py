"""Database models for the maintenance ticket service."""
from __future__ import annotations

import uuid
from typing import Any

from django.db import models
from django.utils import timezone


class Property(models.Model):
    """A managed building or site."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=255)
    address = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "properties"

    def __str__(self) -> str:
        return self.name


class Unit(models.Model):
    """A rentable or serviceable space inside a property."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    property = models.ForeignKey(Property, related_name="units", on_delete=models.CASCADE)
    name = models.CharField(max_length=255)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["property__name", "name"]
        unique_together = ("property", "name")

    def __str__(self) -> str:
        return f"{self.property} / {self.name}"


class Category:
    AC = "ac"
    APPLIANCES = "appliances"
    PLUMBING = "plumbing"
    WIFI = "wifi"
    FURNITURE = "furniture"
    LOCKS = "locks"
    ELECTRICITY = "electricity"
    PAINTING = "painting"
    CLEANING = "cleaning"
    PEST_CONTROL = "pest_control"
    OTHER = "other"

    CHOICES = [
        (AC, "Air Conditioning"),
        (APPLIANCES, "Appliances"),
        (PLUMBING, "Plumbing"),
        (WIFI, "WiFi / Internet"),
        (FURNITURE, "Furniture"),
        (LOCKS, "Locks & Security"),
        (ELECTRICITY, "Electricity"),
        (PAINTING, "Painting"),
        (CLEANING, "Cleaning"),
        (PEST_CONTROL, "Pest Control"),
        (OTHER, "Other"),
    ]


class Ticket(models.Model):
    """A maintenance issue reported against a property or unit."""

    CORRECTIVE = "corrective"
    PREVENTIVE = "preventive"

    TYPE_CHOICES = [
        (CORRECTIVE, "Corrective"),
        (PREVENTIVE, "Preventive"),
    ]

    REPORTED = "reported"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"

    STATUS_CHOICES = [
        (REPORTED, "Reported"),
        (ASSIGNED, "Assigned"),
        (IN_PROGRESS, "In Progress"),
        (RESOLVED, "Resolved"),
        (CLOSED, "Closed"),
    ]

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    PRIORITY_CHOICES = [
        (LOW, "Low"),
        (MEDIUM, "Medium"),
        (HIGH, "High"),
        (URGENT, "Urgent"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    property = models.ForeignKey(Property, related_name="tickets", on_delete=models.CASCADE)
    unit = models.ForeignKey(
        Unit, related_name="tickets", on_delete=models.SET_NULL, null=True, blank=True
    )
    type = models.CharField(max_length=16, choices=TYPE_CHOICES, default=CORRECTIVE)
    category = models.CharField(max_length=32, choices=Category.CHOICES)
    priority = models.CharField(max_length=16, choices=PRIORITY_CHOICES, default=MEDIUM)
    status = models.CharField(max_length=32, choices=STATUS_CHOICES, default=REPORTED)
    description = models.TextField()
    requires_spend = models.BooleanField(default=False)
    assigned_to = models.ForeignKey(
        "accounts.Profile",
        related_name="assigned_tickets",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
    )
    created_by = models.ForeignKey(
        "accounts.Profile",
        related_name="created_tickets",
        on_delete=models.SET_NULL,
        null=True,
    )
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)
    resolved_at = models.DateTimeField(null=True, blank=True)
    closed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "id"]
        indexes = [
            models.Index(fields=["status"], name="tickets_status_idx"),
            models.Index(fields=["priority"], name="tickets_priority_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.get_category_display()} - {self.property_id} ({self.status})"

    def stamp_lifecycle(self) -> None:
        """Record when the ticket first reached a resolved or closed status."""

        now = timezone.now()
        if self.status == self.RESOLVED and self.resolved_at is None:
            self.resolved_at = now
        if self.status == self.CLOSED and self.closed_at is None:
            self.closed_at = now


class TicketComment(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    ticket = models.ForeignKey(Ticket, related_name="comments", on_delete=models.CASCADE)
    author = models.ForeignKey(
        "accounts.Profile", related_name="comments", on_delete=models.SET_NULL, null=True
    )
    body = models.TextField()
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["created_at", "id"]


class TicketAttachment(models.Model):
    """Evidence uploaded to blob storage and linked to a ticket."""

    IMAGE = "image"
    VIDEO = "video"
    INVOICE = "invoice"

    KIND_CHOICES = [
        (IMAGE, "Image"),
        (VIDEO, "Video"),
        (INVOICE, "Invoice"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    ticket = models.ForeignKey(Ticket, related_name="attachments", on_delete=models.CASCADE)
    url = models.URLField(max_length=1024)
    kind = models.CharField(max_length=16, choices=KIND_CHOICES, default=IMAGE)
    uploaded_by = models.ForeignKey(
        "accounts.Profile", related_name="attachments", on_delete=models.SET_NULL, null=True
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at", "id"]


class TicketExpense(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    ticket = models.ForeignKey(Ticket, related_name="expenses", on_delete=models.CASCADE)
    description = models.CharField(max_length=255)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    attachment_url = models.URLField(max_length=1024, blank=True, null=True)
    created_by = models.ForeignKey(
        "accounts.Profile", related_name="expenses", on_delete=models.SET_NULL, null=True
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["created_at", "id"]

    def snapshot(self) -> dict[str, Any]:
        """JSON-safe copy of the row, kept in the audit log when it is removed."""

        return {
            "id": str(self.id),
            "ticket_id": str(self.ticket_id),
            "description": self.description,
            "amount": str(self.amount),
            "attachment_url": self.attachment_url,
            "created_by": str(self.created_by_id) if self.created_by_id else None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


class AuditLogImmutableError(Exception):
    """Raised when code tries to rewrite or remove an audit entry."""


class TicketAuditLog(models.Model):
    """Append-only history of ticket mutations."""

    CREATED = "created"
    STATUS_CHANGED = "status_changed"
    PRIORITY_CHANGED = "priority_changed"
    ASSIGNED = "assigned"
    ASSIGNED_TO_CHANGED = "assigned_to_changed"
    CATEGORY_CHANGED = "category_changed"
    DESCRIPTION_CHANGED = "description_changed"
    COMMENT_ADDED = "comment_added"
    EVIDENCE_ADDED = "evidence_added"
    EXPENSE_ADDED = "expense_added"
    EXPENSE_REMOVED = "expense_removed"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    ticket = models.ForeignKey(Ticket, related_name="audit_logs", on_delete=models.CASCADE)
    actor = models.ForeignKey(
        "accounts.Profile",
        related_name="audit_logs",
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        null=True,
    )
    # Free text: unknown tags are kept and rendered generically.
    action = models.CharField(max_length=255)
    from_value = models.JSONField(null=True, blank=True)
    to_value = models.JSONField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["ticket", "created_at"], name="tickets_audit_ticket_idx")]

    def __str__(self) -> str:
        return f"{self.action} on {self.ticket_id}"

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self._state.adding:
            raise AuditLogImmutableError("Audit log entries cannot be modified.")
        super().save(*args, **kwargs)

    def delete(self, *args: Any, **kwargs: Any):  # type: ignore[override]
        raise AuditLogImmutableError("Audit log entries cannot be deleted.")


class PreventiveTask(models.Model):
    """A recurring schedule that staff fire into tickets by hand."""

    DAYS = "days"
    WEEKS = "weeks"
    MONTHS = "months"

    RECURRENCE_CHOICES = [
        (DAYS, "Days"),
        (WEEKS, "Weeks"),
        (MONTHS, "Months"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    property = models.ForeignKey(Property, related_name="preventive_tasks", on_delete=models.CASCADE)
    unit = models.ForeignKey(
        Unit, related_name="preventive_tasks", on_delete=models.SET_NULL, null=True, blank=True
    )
    category = models.CharField(max_length=32, choices=Category.CHOICES)
    description = models.TextField()
    recurrence_type = models.CharField(max_length=16, choices=RECURRENCE_CHOICES, default=DAYS)
    recurrence_interval = models.PositiveIntegerField(default=30)
    last_generated_at = models.DateTimeField(null=True, blank=True)
    next_scheduled_at = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    assigned_to = models.ForeignKey(
        "accounts.Profile",
        related_name="preventive_tasks",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
    )
    created_by = models.ForeignKey(
        "accounts.Profile",
        related_name="created_preventive_tasks",
        on_delete=models.SET_NULL,
        null=True,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = [models.F("next_scheduled_at").asc(nulls_last=True), "id"]

    def __str__(self) -> str:
        return f"{self.get_category_display()} every {self.recurrence_interval} {self.recurrence_type}"
