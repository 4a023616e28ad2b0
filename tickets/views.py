"""API views for maintenance tickets, preventive schedules and properties."""
from __future__ import annotations

import uuid
from typing import Dict

from django.conf import settings
from django.db.models import Count, Q, QuerySet
from django.shortcuts import get_object_or_404
from rest_framework import status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.exceptions import PermissionDenied, ValidationError
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.pagination import LimitOffsetPagination, PageNumberPagination
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response

from accounts.permissions import RolePermission

from . import services
from .models import PreventiveTask, Property, Ticket, TicketExpense, Unit
from .serializers import (
    AssignSerializer,
    AttachmentInputSerializer,
    AttachmentSerializer,
    CommentSerializer,
    ExpenseSerializer,
    NoteSerializer,
    PreventiveTaskSerializer,
    PropertySerializer,
    StatusSerializer,
    TicketCreateSerializer,
    TicketSerializer,
    TicketUpdateSerializer,
    TimelineEventSerializer,
    UnitSerializer,
)

UUID_PARAMS = {"property_id", "assigned_to", "unit_id"}

LIST_FILTERS = {
    "property_id": "property_id__in",
    "category": "category__in",
    "priority": "priority__in",
    "status": "status__in",
    "assigned_to": "assigned_to_id__in",
    "type": "type__in",
}


class TicketPagination(PageNumberPagination):
    page_size = settings.TICKET_PAGE_SIZE
    page_size_query_param = "page_size"
    max_page_size = 100


class TimelinePagination(LimitOffsetPagination):
    default_limit = settings.TIMELINE_DEFAULT_LIMIT
    max_limit = 500


def _csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _uuids(values: list[str], param: str) -> list[str]:
    try:
        return [str(uuid.UUID(value)) for value in values]
    except ValueError:
        raise ValidationError({param: "Expected comma-separated UUIDs."})


def apply_ticket_filters(queryset: QuerySet, params) -> QuerySet:
    """Apply the ticket list query string. ``type`` defaults to corrective."""

    types = _csv(params.get("type", "")) or [Ticket.CORRECTIVE]
    queryset = queryset.filter(type__in=types)

    for param, lookup in LIST_FILTERS.items():
        if param == "type":
            continue
        values = _csv(params.get(param, ""))
        if values and param in UUID_PARAMS:
            values = _uuids(values, param)
        if values:
            queryset = queryset.filter(**{lookup: values})

    unit_id = params.get("unit_id")
    if unit_id:
        queryset = queryset.filter(unit_id=_uuids([unit_id], "unit_id")[0])

    search = params.get("search")
    if search:
        queryset = queryset.filter(
            Q(description__icontains=search) | Q(property__name__icontains=search)
        )

    if params.get("urgent_only", "").lower() in {"1", "true", "yes"}:
        queryset = queryset.filter(priority=Ticket.URGENT)
    return queryset


class TicketViewSet(viewsets.ModelViewSet):
    serializer_class = TicketSerializer
    pagination_class = TicketPagination
    permission_classes = [RolePermission]
    permission_map = {
        "create": "canCreateTickets",
        "update": "canUpdateTickets",
        "partial_update": "canUpdateTickets",
        "set_status": "canUpdateTickets",
        "assign": "canUpdateTickets",
        "destroy": "canCloseTickets",
        "stats": "canViewAnalytics",
    }
    filter_backends = [OrderingFilter]
    ordering_fields = ["created_at", "updated_at", "priority"]
    ordering = ["-created_at"]

    def get_queryset(self):  # type: ignore[override]
        queryset = Ticket.objects.select_related(
            "property", "unit", "assigned_to", "created_by"
        ).all()
        return services.scope_tickets(queryset, self.request.user)

    def list(self, request: Request, *args, **kwargs):  # type: ignore[override]
        queryset = apply_ticket_filters(self.filter_queryset(self.get_queryset()), request.query_params)
        page = self.paginate_queryset(queryset)
        serializer = self.get_serializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    def create(self, request: Request, *args, **kwargs):  # type: ignore[override]
        payload = TicketCreateSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        ticket = services.create_ticket(request.user, payload.validated_data)
        return Response(self.get_serializer(ticket).data, status=status.HTTP_201_CREATED)

    def _modifiable_ticket(self) -> Ticket:
        ticket = self.get_object()
        if not services.can_modify_ticket(self.request.user, ticket):
            raise PermissionDenied("You cannot modify this ticket.")
        return ticket

    def update(self, request: Request, *args, **kwargs):  # type: ignore[override]
        ticket = self._modifiable_ticket()
        payload = TicketUpdateSerializer(
            data=request.data,
            partial=kwargs.pop("partial", False) or request.method == "PATCH",
            context={"ticket": ticket},
        )
        payload.is_valid(raise_exception=True)
        ticket = services.update_ticket(request.user, ticket, payload.validated_data)
        return Response(self.get_serializer(ticket).data)

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, *args, **kwargs):  # type: ignore[override]
        """Set a ticket's status."""

        ticket = self._modifiable_ticket()
        payload = StatusSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        ticket = services.set_status(request.user, ticket, payload.validated_data["status"])
        return Response(self.get_serializer(ticket).data)

    @action(detail=True, methods=["post"], url_path="assign")
    def assign(self, request, *args, **kwargs):  # type: ignore[override]
        """Assign a ticket to a staff member, or unassign it with ``null``."""

        ticket = self._modifiable_ticket()
        payload = AssignSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        ticket = services.assign_ticket(request.user, ticket, payload.validated_data["user_id"])
        return Response(self.get_serializer(ticket).data)

    @action(detail=True, methods=["get", "post"], url_path="comments")
    def comments(self, request, *args, **kwargs):  # type: ignore[override]
        ticket = self.get_object()
        if request.method == "GET":
            comments = ticket.comments.select_related("author").all()
            return Response(CommentSerializer(comments, many=True).data)

        payload = NoteSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        try:
            comment = services.add_comment(request.user, ticket, payload.validated_data["body"])
        except services.TicketError as exc:
            raise ValidationError({"body": str(exc)})
        return Response(CommentSerializer(comment).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get", "post"], url_path="evidence")
    def evidence(self, request, *args, **kwargs):  # type: ignore[override]
        ticket = self.get_object()
        if request.method == "GET":
            return Response(AttachmentSerializer(ticket.attachments.all(), many=True).data)

        payload = AttachmentInputSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        attachment = services.add_evidence(
            request.user, ticket, payload.validated_data["url"], payload.validated_data["kind"]
        )
        return Response(AttachmentSerializer(attachment).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["get", "post"], url_path="expenses")
    def expenses(self, request, *args, **kwargs):  # type: ignore[override]
        ticket = self.get_object()
        if request.method == "GET":
            expenses = ticket.expenses.select_related("created_by").all()
            return Response(ExpenseSerializer(expenses, many=True).data)

        payload = ExpenseSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        expense = services.add_expense(
            request.user,
            ticket,
            payload.validated_data["description"],
            payload.validated_data["amount"],
            payload.validated_data.get("attachment_url"),
        )
        return Response(ExpenseSerializer(expense).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["delete"], url_path=r"expenses/(?P<expense_id>[0-9a-f\-]+)")
    def remove_expense(self, request, expense_id=None, *args, **kwargs):  # type: ignore[override]
        ticket = self.get_object()
        expense = get_object_or_404(TicketExpense, pk=expense_id, ticket=ticket)
        if expense.created_by_id != request.user.pk and not services.can_modify_ticket(request.user, ticket):
            raise PermissionDenied("You cannot remove this expense.")
        services.delete_expense(request.user, expense)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["get"], url_path="timeline")
    def timeline(self, request, *args, **kwargs):  # type: ignore[override]
        """Return the ticket's activity feed, newest first."""

        ticket = self.get_object()
        timeline = services.ticket_timeline(ticket)
        paginator = TimelinePagination()
        events = paginator.paginate_queryset(timeline.events, request, view=self)
        return Response(
            {
                "ticket": str(ticket.pk),
                "count": len(timeline),
                "next": paginator.get_next_link(),
                "previous": paginator.get_previous_link(),
                "empty_state": timeline.empty_message,
                "results": TimelineEventSerializer(events, many=True).data,
            }
        )

    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request, *args, **kwargs):  # type: ignore[override]
        """Summarize the visible tickets for the dashboard."""

        queryset = self.get_queryset()
        by_status: Dict[str, int] = {value: 0 for value, _ in Ticket.STATUS_CHOICES}
        for entry in queryset.values("status").order_by().annotate(total=Count("id")):
            by_status[entry["status"]] = entry["total"]
        by_priority: Dict[str, int] = {value: 0 for value, _ in Ticket.PRIORITY_CHOICES}
        for entry in queryset.values("priority").order_by().annotate(total=Count("id")):
            by_priority[entry["priority"]] = entry["total"]

        open_urgent = queryset.filter(priority=Ticket.URGENT).exclude(
            status__in=[Ticket.RESOLVED, Ticket.CLOSED]
        ).count()
        resolved = queryset.filter(resolved_at__isnull=False).values_list("created_at", "resolved_at")

        return Response(
            {
                "total": sum(by_status.values()),
                "byStatus": by_status,
                "byPriority": by_priority,
                "openUrgent": open_urgent,
                "averageResolutionHours": services.average_resolution_hours(resolved),
            }
        )


class PropertyViewSet(viewsets.ModelViewSet):
    queryset = Property.objects.all()
    serializer_class = PropertySerializer
    permission_classes = [RolePermission]
    permission_map = {
        "create": "canManageProperties",
        "update": "canManageProperties",
        "partial_update": "canManageProperties",
        "destroy": "canManageProperties",
    }
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = ["name", "address"]
    ordering_fields = ["name", "created_at"]
    ordering = ["name"]


class UnitViewSet(viewsets.ModelViewSet):
    serializer_class = UnitSerializer
    permission_classes = [RolePermission]
    permission_map = PropertyViewSet.permission_map
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = ["name", "notes"]
    ordering_fields = ["name", "created_at"]
    ordering = ["name"]

    def get_queryset(self):  # type: ignore[override]
        queryset = Unit.objects.select_related("property").all()
        property_id = self.request.query_params.get("property_id")
        if property_id:
            queryset = queryset.filter(property_id=property_id)
        return queryset


class PreventiveTaskViewSet(viewsets.ModelViewSet):
    serializer_class = PreventiveTaskSerializer
    permission_classes = [RolePermission]
    permission_map = {
        "create": "canUpdateTickets",
        "update": "canUpdateTickets",
        "partial_update": "canUpdateTickets",
        "destroy": "canUpdateTickets",
        "generate": "canCreateTickets",
    }

    def get_queryset(self):  # type: ignore[override]
        queryset = PreventiveTask.objects.select_related("property", "unit", "assigned_to").all()
        property_id = self.request.query_params.get("property_id")
        if property_id and property_id != "all":
            queryset = queryset.filter(property_id=property_id)
        return queryset

    def perform_create(self, serializer):  # type: ignore[override]
        serializer.save(created_by=self.request.user)

    @action(detail=True, methods=["post"], url_path="generate")
    def generate(self, request, *args, **kwargs):  # type: ignore[override]
        """Fire the schedule into a new preventive ticket."""

        task = self.get_object()
        try:
            ticket = services.generate_from_preventive(request.user, task)
        except services.TicketError as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)
        return Response(TicketSerializer(ticket).data, status=status.HTTP_201_CREATED)


@api_view(["GET"])
@permission_classes([AllowAny])
def health(request: Request):  # type: ignore[override]
    """Readiness endpoint for orchestration tooling."""

    return Response({"status": "ok"})
