# Generated manually for the TrackReview platform - promo codes

import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="PromoCode",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("code", models.CharField(help_text="Unique code, stored uppercase", max_length=50, unique=True)),
                ("description", models.CharField(blank=True, max_length=255)),
                (
                    "discount_type",
                    models.CharField(
                        choices=[("percentage", "Percentage Discount"), ("fixed", "Fixed Amount Discount")],
                        default="percentage",
                        max_length=20,
                    ),
                ),
                (
                    "discount_value",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Percent (0-100) or amount in major currency units",
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(Decimal("0"))],
                    ),
                ),
                ("max_uses", models.PositiveIntegerField(blank=True, help_text="Null = unlimited", null=True)),
                ("current_uses", models.PositiveIntegerField(default=0)),
                (
                    "valid_from",
                    models.DateTimeField(default=django.utils.timezone.now, help_text="When code becomes valid"),
                ),
                (
                    "valid_until",
                    models.DateTimeField(blank=True, help_text="When code expires (null = never)", null=True),
                ),
                (
                    "is_active",
                    models.BooleanField(default=True, help_text="Master switch; codes are deactivated, not deleted"),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="created_promo_codes",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Promo Code",
                "verbose_name_plural": "Promo Codes",
                "db_table": "promo_codes",
                "ordering": ("-created_at",),
                "indexes": [
                    models.Index(fields=["is_active", "valid_from", "valid_until"], name="idx_promo_validity"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("max_uses__isnull", True), ("current_uses__lte", models.F("max_uses")), _connector="OR"),
                        name="promo_current_uses_within_max",
                    ),
                ],
            },
        ),
    ]
