import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="EntitlementRecord",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("public_key", models.CharField(editable=False, max_length=255, unique=True)),
                ("event_id", models.CharField(blank=True, db_index=True, default="", max_length=255)),
                ("email", models.CharField(blank=True, db_index=True, default="", max_length=320)),
                ("attendee_name", models.CharField(blank=True, default="", max_length=255)),
                ("remaining_drinks", models.PositiveIntegerField()),
                ("remaining_meals", models.PositiveIntegerField()),
                ("luma_verified", models.BooleanField(default=False)),
                (
                    "last_redemption_type",
                    models.CharField(
                        blank=True,
                        choices=[("drink", "Drink"), ("meal", "Meal")],
                        default=None,
                        max_length=10,
                        null=True,
                    ),
                ),
                ("last_redemption_at", models.DateTimeField(blank=True, default=None, null=True)),
            ],
            options={
                "ordering": ["-created_at"],
                "permissions": [("redeem_entitlements", "Can redeem guest entitlements at a POS terminal")],
            },
        ),
        migrations.CreateModel(
            name="Redemption",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True)),
                ("updated_at", models.DateTimeField(auto_now=True, db_index=True)),
                ("kind", models.CharField(choices=[("drink", "Drink"), ("meal", "Meal")], max_length=10)),
                ("remaining_after", models.PositiveIntegerField()),
                (
                    "record",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="redemptions",
                        to="entitlements.entitlementrecord",
                    ),
                ),
                (
                    "redeemed_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="redemptions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
