"""Serializers for ticket entities."""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict

from rest_framework import serializers

from accounts.models import Profile
from accounts.serializers import ProfileSummarySerializer

from .models import (
    Category,
    PreventiveTask,
    Property,
    Ticket,
    TicketAttachment,
    TicketComment,
    TicketExpense,
    Unit,
)
from .services import extract_media, ticket_age


class PropertySerializer(serializers.ModelSerializer):
    class Meta:
        model = Property
        fields = ["id", "name", "address", "created_at", "updated_at"]


class UnitSerializer(serializers.ModelSerializer):
    class Meta:
        model = Unit
        fields = ["id", "property", "name", "notes", "created_at", "updated_at"]


class TicketSerializer(serializers.ModelSerializer):
    property_name = serializers.CharField(source="property.name", read_only=True)
    unit_name = serializers.CharField(source="unit.name", read_only=True, default=None)
    assigned_to_profile = ProfileSummarySerializer(source="assigned_to", read_only=True)
    created_by_profile = ProfileSummarySerializer(source="created_by", read_only=True)
    age_hours = serializers.SerializerMethodField()
    age_label = serializers.SerializerMethodField()
    is_overdue = serializers.SerializerMethodField()

    class Meta:
        model = Ticket
        fields = [
            "id",
            "property",
            "property_name",
            "unit",
            "unit_name",
            "type",
            "category",
            "priority",
            "status",
            "description",
            "requires_spend",
            "assigned_to",
            "assigned_to_profile",
            "created_by",
            "created_by_profile",
            "created_at",
            "updated_at",
            "resolved_at",
            "closed_at",
            "age_hours",
            "age_label",
            "is_overdue",
        ]
        read_only_fields = ["created_by", "created_at", "updated_at", "resolved_at", "closed_at"]

    def get_age_hours(self, obj: Ticket) -> int:
        return ticket_age(obj.created_at).hours

    def get_age_label(self, obj: Ticket) -> str:
        return ticket_age(obj.created_at).label

    def get_is_overdue(self, obj: Ticket) -> bool:
        return ticket_age(obj.created_at).is_overdue


class AttachmentInputSerializer(serializers.Serializer):
    url = serializers.URLField(max_length=1024)
    kind = serializers.ChoiceField(choices=TicketAttachment.KIND_CHOICES)


class TicketCreateSerializer(serializers.Serializer):
    property = serializers.PrimaryKeyRelatedField(queryset=Property.objects.all())
    unit = serializers.PrimaryKeyRelatedField(
        queryset=Unit.objects.all(), required=False, allow_null=True
    )
    type = serializers.ChoiceField(choices=Ticket.TYPE_CHOICES, default=Ticket.CORRECTIVE)
    category = serializers.ChoiceField(choices=Category.CHOICES)
    priority = serializers.ChoiceField(choices=Ticket.PRIORITY_CHOICES, default=Ticket.MEDIUM)
    description = serializers.CharField(
        min_length=10,
        error_messages={"min_length": "Description must be at least 10 characters"},
    )
    requires_spend = serializers.BooleanField(required=False, default=False)
    initial_comment = serializers.CharField(required=False, allow_blank=True, default="")
    attachments = AttachmentInputSerializer(many=True, required=False, default=list)

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:  # type: ignore[override]
        unit = attrs.get("unit")
        if unit is not None and unit.property_id != attrs["property"].pk:
            raise serializers.ValidationError({"unit": "Unit does not belong to the selected property."})
        return attrs


def _staff_queryset():
    return Profile.objects.filter(role__in=Profile.STAFF_ROLES, is_active=True)


class TicketUpdateSerializer(serializers.Serializer):
    unit = serializers.PrimaryKeyRelatedField(
        queryset=Unit.objects.all(), required=False, allow_null=True
    )
    type = serializers.ChoiceField(choices=Ticket.TYPE_CHOICES, required=False)
    category = serializers.ChoiceField(choices=Category.CHOICES, required=False)
    priority = serializers.ChoiceField(choices=Ticket.PRIORITY_CHOICES, required=False)
    status = serializers.ChoiceField(choices=Ticket.STATUS_CHOICES, required=False)
    description = serializers.CharField(min_length=10, required=False)
    requires_spend = serializers.BooleanField(required=False)
    assigned_to = serializers.PrimaryKeyRelatedField(
        queryset=_staff_queryset(), required=False, allow_null=True
    )

    def validate_unit(self, unit: Unit | None) -> Unit | None:
        ticket = self.context.get("ticket")
        if unit is not None and ticket is not None and unit.property_id != ticket.property_id:
            raise serializers.ValidationError("Unit does not belong to the ticket's property.")
        return unit


class StatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Ticket.STATUS_CHOICES)


class AssignSerializer(serializers.Serializer):
    user_id = serializers.PrimaryKeyRelatedField(queryset=_staff_queryset(), allow_null=True)


class CommentSerializer(serializers.ModelSerializer):
    author = ProfileSummarySerializer(read_only=True)
    media = serializers.SerializerMethodField()

    class Meta:
        model = TicketComment
        fields = ["id", "ticket", "author", "body", "media", "created_at"]
        read_only_fields = ["ticket", "created_at"]

    def get_media(self, obj: TicketComment):
        return extract_media(obj.body)


class NoteSerializer(serializers.Serializer):
    body = serializers.CharField(allow_blank=True, trim_whitespace=True)

    def validate_body(self, value: str) -> str:
        if not value.strip():
            raise serializers.ValidationError("Comment cannot be empty")
        return value.strip()


class AttachmentSerializer(serializers.ModelSerializer):
    class Meta:
        model = TicketAttachment
        fields = ["id", "ticket", "url", "kind", "uploaded_by", "created_at"]
        read_only_fields = ["ticket", "uploaded_by", "created_at"]


class ExpenseSerializer(serializers.ModelSerializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    created_by_profile = ProfileSummarySerializer(source="created_by", read_only=True)

    class Meta:
        model = TicketExpense
        fields = [
            "id",
            "ticket",
            "description",
            "amount",
            "attachment_url",
            "created_by",
            "created_by_profile",
            "created_at",
        ]
        read_only_fields = ["ticket", "created_by", "created_at"]


class TimelineEventSerializer(serializers.Serializer):
    id = serializers.CharField(allow_null=True)
    action = serializers.CharField()
    timestamp = serializers.DateTimeField()
    actor_name = serializers.CharField(source="actor.name")
    actor_role = serializers.CharField(source="actor.role", allow_null=True)
    kind = serializers.CharField()
    text = serializers.CharField()
    synthesized = serializers.BooleanField()


class PreventiveTaskSerializer(serializers.ModelSerializer):
    property_name = serializers.CharField(source="property.name", read_only=True)
    unit_name = serializers.CharField(source="unit.name", read_only=True, default=None)
    assigned_to = serializers.PrimaryKeyRelatedField(
        queryset=_staff_queryset(), required=False, allow_null=True
    )
    recurrence_interval = serializers.IntegerField(min_value=1)

    class Meta:
        model = PreventiveTask
        fields = [
            "id",
            "property",
            "property_name",
            "unit",
            "unit_name",
            "category",
            "description",
            "recurrence_type",
            "recurrence_interval",
            "last_generated_at",
            "next_scheduled_at",
            "is_active",
            "assigned_to",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["last_generated_at", "created_by", "created_at", "updated_at"]

    def validate(self, attrs: Dict[str, Any]) -> Dict[str, Any]:  # type: ignore[override]
        prop = attrs.get("property") or getattr(self.instance, "property", None)
        unit = attrs.get("unit", getattr(self.instance, "unit", None))
        if unit is not None and prop is not None and unit.property_id != prop.pk:
            raise serializers.ValidationError({"unit": "Unit does not belong to the selected property."})
        return attrs
