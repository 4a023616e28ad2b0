"""API views for profiles."""
from __future__ import annotations

from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.response import Response

from .models import Profile
from .permissions import RolePermission
from .serializers import ProfileSerializer, ProfileSummarySerializer


class ProfileViewSet(viewsets.ModelViewSet):
    queryset = Profile.objects.all()
    serializer_class = ProfileSerializer
    permission_classes = [RolePermission]
    permission_map = {
        "create": "canManageUsers",
        "update": "canManageUsers",
        "partial_update": "canManageUsers",
        "destroy": "canManageUsers",
    }
    filter_backends = [SearchFilter, OrderingFilter]
    search_fields = ["full_name", "email"]
    ordering_fields = ["full_name", "created_at"]
    ordering = ["full_name"]

    @action(detail=False, methods=["get"], url_path="staff")
    def staff(self, request, *args, **kwargs):  # type: ignore[override]
        """List the active profiles a ticket can be assigned to."""

        queryset = Profile.objects.filter(
            role__in=Profile.STAFF_ROLES, is_active=True
        ).order_by("full_name")
        return Response(ProfileSummarySerializer(queryset, many=True).data)
