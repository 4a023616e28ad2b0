"""URL configuration for the maintenance service."""
from django.urls import include, path

urlpatterns = [
    path("api/", include("accounts.urls")),
    path("api/", include("tickets.urls")),
]
