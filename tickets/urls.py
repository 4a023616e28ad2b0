"""Route registration for ticket endpoints."""
from __future__ import annotations

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import PreventiveTaskViewSet, PropertyViewSet, TicketViewSet, UnitViewSet, health

router = DefaultRouter()
router.register("tickets", TicketViewSet, basename="ticket")
router.register("preventive-tasks", PreventiveTaskViewSet, basename="preventive-task")
router.register("properties", PropertyViewSet, basename="property")
router.register("units", UnitViewSet, basename="unit")

urlpatterns = [
    path("healthz/", health, name="maintenance-health"),
    path("", include(router.urls)),
]
