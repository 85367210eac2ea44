import hashlib
import uuid
from typing import Any, ClassVar

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

# ===============================================================================
# WEBHOOK DEDUPLICATION SYSTEM
# ===============================================================================


class WebhookEvent(models.Model):
    """
    🔄 Webhook event deduplication and tracking

    The payment provider delivers events at least once. Every verified event
    is recorded here under its provider event id so a redelivery of a
    processed (or deliberately skipped) event is acknowledged without running
    the handler again. Failed events are re-run when the provider retries.
    """

    STATUS_PENDING = "pending"
    STATUS_PROCESSED = "processed"
    STATUS_FAILED = "failed"
    STATUS_SKIPPED = "skipped"
    STATUS_CHOICES: ClassVar[tuple[tuple[str, str], ...]] = (
        (STATUS_PENDING, _("⏳ Pending")),
        (STATUS_PROCESSED, _("✅ Processed")),
        (STATUS_FAILED, _("❌ Failed")),
        (STATUS_SKIPPED, _("⏭️ Skipped")),  # Irrelevant event type or unpaid session
    )

    # Terminal states that redelivery must not re-run
    SETTLED_STATUSES: ClassVar[frozenset[str]] = frozenset({STATUS_PROCESSED, STATUS_SKIPPED})

    SOURCE_CHOICES: ClassVar[tuple[tuple[str, str], ...]] = (("stripe", _("💳 Stripe")),)

    # Core identification
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    source = models.CharField(
        max_length=50, choices=SOURCE_CHOICES, help_text=_("External service that sent the webhook")
    )
    event_id = models.CharField(max_length=255, help_text=_("Unique event ID from the external service"))
    event_type = models.CharField(
        max_length=100, help_text=_("Type of event (e.g., 'checkout.session.completed')")
    )

    # Processing status
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)

    # Timing
    received_at = models.DateTimeField(default=timezone.now, help_text=_("When webhook was received by our system"))
    processed_at = models.DateTimeField(null=True, blank=True, help_text=_("When webhook processing completed"))

    # Data storage
    payload = models.JSONField(help_text=_("Complete webhook payload from external service"))
    signature_hash = models.CharField(
        max_length=64,
        blank=True,
        default="",
        help_text=_("SHA-256 hash of webhook signature for verification tracking"),
    )

    # Error handling
    error_message = models.TextField(blank=True, help_text=_("Error details if processing failed"))
    retry_count = models.PositiveIntegerField(default=0, help_text=_("Number of failed processing attempts"))

    # Metadata
    ip_address = models.GenericIPAddressField(
        null=True, blank=True, help_text=_("IP address webhook was received from")
    )
    user_agent = models.TextField(blank=True, help_text=_("User agent of webhook sender"))

    # Audit trail
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "webhook_events"
        verbose_name = _("🔄 Webhook Event")
        verbose_name_plural = _("🔄 Webhook Events")

        constraints: ClassVar[tuple[models.BaseConstraint, ...]] = (
            models.UniqueConstraint(fields=["source", "event_id"], name="webhook_event_unique_per_source"),
        )
        indexes: ClassVar[tuple[models.Index, ...]] = (
            models.Index(fields=["source", "event_type", "received_at"], name="webhook_source_type_idx"),
            models.Index(fields=["status", "received_at"], name="webhook_status_idx"),
        )
        ordering: ClassVar[tuple[str, ...]] = ("-received_at",)

    def __str__(self) -> str:
        return f"🔄 {self.get_source_display()} | {self.event_type} | {self.status}"

    @property
    def is_settled(self) -> bool:
        return self.status in self.SETTLED_STATUSES

    @property
    def processing_duration(self) -> Any | None:
        """⏱️ Time taken to process webhook"""
        if self.processed_at and self.received_at:
            return self.processed_at - self.received_at
        return None

    @staticmethod
    def hash_signature(signature: str | None) -> str:
        """Only a hash of the signature header is stored"""
        return hashlib.sha256(signature.encode()).hexdigest() if signature else ""

    def mark_processed(self, message: str = "", save: bool = True) -> None:
        """✅ Mark webhook as successfully processed"""
        self.status = self.STATUS_PROCESSED
        self.error_message = ""
        self.processed_at = timezone.now()
        if save:
            self.save(update_fields=["status", "error_message", "processed_at", "updated_at"])

    def mark_failed(self, error_message: str, save: bool = True) -> None:
        """❌ Mark webhook as failed; the provider's redelivery will re-run it"""
        self.status = self.STATUS_FAILED
        self.error_message = error_message
        self.retry_count += 1
        self.processed_at = timezone.now()
        if save:
            self.save(update_fields=["status", "error_message", "retry_count", "processed_at", "updated_at"])

    def mark_skipped(self, reason: str = "Irrelevant event", save: bool = True) -> None:
        """⏭️ Mark webhook as skipped (nothing to do for this event)"""
        self.status = self.STATUS_SKIPPED
        self.error_message = reason
        self.processed_at = timezone.now()
        if save:
            self.save(update_fields=["status", "error_message", "processed_at", "updated_at"])

    def reset_for_retry(self) -> None:
        self.status = self.STATUS_PENDING
        self.save(update_fields=["status", "updated_at"])
