# Generated manually for the TrackReview platform - delivered reviews

import uuid

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("orders", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Review",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("reviewer_title", models.CharField(max_length=200)),
                ("summary", models.TextField()),
                ("highlights", models.JSONField(blank=True, default=list)),
                ("tags", models.JSONField(default=list)),
                ("scorecard", models.JSONField(default=list, help_text="List of {metric, score} entries")),
                (
                    "overall_rating",
                    models.PositiveSmallIntegerField(
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(5),
                        ]
                    ),
                ),
                ("written_feedback", models.TextField(blank=True)),
                (
                    "media_type",
                    models.CharField(
                        blank=True,
                        choices=[("", "None"), ("video", "Video"), ("audio", "Audio")],
                        default="",
                        max_length=10,
                    ),
                ),
                ("video_url", models.URLField(blank=True, max_length=500)),
                ("audio_url", models.URLField(blank=True, max_length=500)),
                ("media_title", models.CharField(blank=True, max_length=200)),
                ("media_description", models.TextField(blank=True)),
                ("published_date", models.DateTimeField(default=django.utils.timezone.now)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "order",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.PROTECT, related_name="review", to="orders.order"
                    ),
                ),
                (
                    "reviewer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reviews_written",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Review",
                "verbose_name_plural": "Reviews",
                "db_table": "reviews",
                "ordering": ("-published_date",),
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("overall_rating__gte", 1), ("overall_rating__lte", 5)),
                        name="review_rating_in_range",
                    ),
                ],
            },
        ),
    ]
