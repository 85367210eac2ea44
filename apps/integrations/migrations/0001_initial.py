# Generated manually for the TrackReview platform - webhook deduplication

import uuid

import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="WebhookEvent",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                (
                    "source",
                    models.CharField(
                        choices=[("stripe", "💳 Stripe")],
                        help_text="External service that sent the webhook",
                        max_length=50,
                    ),
                ),
                ("event_id", models.CharField(help_text="Unique event ID from the external service", max_length=255)),
                (
                    "event_type",
                    models.CharField(
                        help_text="Type of event (e.g., 'checkout.session.completed')", max_length=100
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "⏳ Pending"),
                            ("processed", "✅ Processed"),
                            ("failed", "❌ Failed"),
                            ("skipped", "⏭️ Skipped"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                (
                    "received_at",
                    models.DateTimeField(
                        default=django.utils.timezone.now, help_text="When webhook was received by our system"
                    ),
                ),
                (
                    "processed_at",
                    models.DateTimeField(blank=True, help_text="When webhook processing completed", null=True),
                ),
                ("payload", models.JSONField(help_text="Complete webhook payload from external service")),
                (
                    "signature_hash",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="SHA-256 hash of webhook signature for verification tracking",
                        max_length=64,
                    ),
                ),
                ("error_message", models.TextField(blank=True, help_text="Error details if processing failed")),
                (
                    "retry_count",
                    models.PositiveIntegerField(default=0, help_text="Number of failed processing attempts"),
                ),
                (
                    "ip_address",
                    models.GenericIPAddressField(
                        blank=True, help_text="IP address webhook was received from", null=True
                    ),
                ),
                ("user_agent", models.TextField(blank=True, help_text="User agent of webhook sender")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "🔄 Webhook Event",
                "verbose_name_plural": "🔄 Webhook Events",
                "ordering": ("-received_at",),
                "db_table": "webhook_events",
                "indexes": [
                    models.Index(fields=["source", "event_type", "received_at"], name="webhook_source_type_idx"),
                    models.Index(fields=["status", "received_at"], name="webhook_status_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("source", "event_id"), name="webhook_event_unique_per_source"),
                ],
            },
        ),
    ]
