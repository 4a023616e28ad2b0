"""Serializers for profile records."""
from __future__ import annotations

from rest_framework import serializers

from .models import Profile


class ProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = Profile
        fields = [
            "id",
            "full_name",
            "email",
            "role",
            "telegram_chat_id",
            "is_active",
            "created_at",
            "updated_at",
        ]


class ProfileSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Profile
        fields = ["id", "full_name", "role"]
