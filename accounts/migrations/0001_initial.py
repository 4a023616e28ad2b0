# Generated manually for initial schema.
from __future__ import annotations

import uuid

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Profile",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("full_name", models.CharField(max_length=255)),
                ("email", models.EmailField(blank=True, max_length=254)),
                (
                    "role",
                    models.CharField(
                        choices=[
                            ("reporter", "Reporter"),
                            ("maintenance", "Maintenance"),
                            ("housekeeper", "Housekeeper"),
                            ("sub_director", "Sub Director"),
                            ("admin", "Administrator"),
                        ],
                        default="reporter",
                        max_length=32,
                    ),
                ),
                ("telegram_chat_id", models.CharField(blank=True, max_length=64)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["full_name"],
                "indexes": [models.Index(fields=["role"], name="accounts_profile_role_idx")],
            },
        ),
    ]
