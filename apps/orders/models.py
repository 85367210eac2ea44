"""
Order Management models for the TrackReview platform
An order ties an artist (or guest) to a reviewer package and moves
pending -> paid -> completed, never backward.
"""

from __future__ import annotations

import uuid
from decimal import ROUND_DOWN, Decimal
from typing import Any, ClassVar

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils.translation import gettext_lazy as _

CENT = Decimal("0.01")


def calculate_platform_fee(price_total: Decimal) -> Decimal:
    """Platform share of an order total, rounded down to the cent"""
    rate = Decimal(str(getattr(settings, "PLATFORM_FEE_RATE", "0.10")))
    return (Decimal(price_total) * rate).quantize(CENT, rounding=ROUND_DOWN)


# ===============================================================================
# ORDER MANAGEMENT MODELS
# ===============================================================================


class Order(models.Model):
    """
    Purchase of one reviewer package.
    Status only changes through OrderService.transition, which performs a
    compare-and-swap on the status column.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    # Parties
    artist = models.ForeignKey(
        "users.User",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="orders",
        help_text=_("Buyer; null for guest checkout"),
    )
    guest_email = models.EmailField(blank=True, help_text=_("Contact email for guest checkout"))
    reviewer = models.ForeignKey(
        "users.User",
        on_delete=models.PROTECT,
        related_name="reviewer_orders",
    )
    package = models.ForeignKey(
        "packages.ReviewerPackage",
        on_delete=models.PROTECT,
        related_name="orders",
    )

    # Track submitted for review
    track_url = models.URLField(max_length=500)
    track_title = models.CharField(max_length=255)
    note = models.TextField(blank=True, help_text=_("Optional note from the artist to the reviewer"))

    # Order status workflow
    STATUS_PENDING = "pending"
    STATUS_PAID = "paid"
    STATUS_COMPLETED = "completed"
    STATUS_CHOICES: ClassVar[tuple[tuple[str, str], ...]] = (
        (STATUS_PENDING, _("Pending")),  # Awaiting payment
        (STATUS_PAID, _("Paid")),  # Payment confirmed, awaiting review
        (STATUS_COMPLETED, _("Completed")),  # Review delivered
    )
    # Position in the lifecycle; transitions only move forward
    STATUS_RANK: ClassVar[dict[str, int]] = {STATUS_PENDING: 0, STATUS_PAID: 1, STATUS_COMPLETED: 2}

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING)

    # Pricing snapshot (major currency units)
    original_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("Package price at checkout"),
    )
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    price_total = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("Amount charged"),
    )
    platform_fee = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        editable=False,
        help_text=_("Derived from price_total on save"),
    )
    currency = models.CharField(max_length=3, default="usd")
    promo_code = models.ForeignKey(
        "promotions.PromoCode",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )

    # Review components promised by the package at checkout
    required_review_types = models.JSONField(default=list, blank=True)

    # Payment provider references
    stripe_session_id = models.CharField(max_length=255, blank=True, db_index=True)
    stripe_payment_intent_id = models.CharField(max_length=255, blank=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "orders"
        verbose_name = _("Order")
        verbose_name_plural = _("Orders")
        ordering: ClassVar[tuple[str, ...]] = ("-created_at",)
        indexes: ClassVar[tuple[models.Index, ...]] = (
            models.Index(fields=["artist", "-created_at"], name="order_artist_created_idx"),
            models.Index(fields=["reviewer", "status"], name="order_reviewer_status_idx"),
            models.Index(fields=["status", "-created_at"], name="order_status_created_idx"),
        )
        constraints: ClassVar[tuple[models.BaseConstraint, ...]] = (
            models.CheckConstraint(condition=Q(price_total__gte=0), name="order_price_total_non_negative"),
            models.CheckConstraint(condition=Q(platform_fee__lte=F("price_total")), name="order_fee_within_total"),
            models.CheckConstraint(
                condition=Q(artist__isnull=False) | ~Q(guest_email=""),
                name="order_has_buyer",
            ),
        )

    def __str__(self) -> str:
        return f"Order {self.id} - {self.track_title} ({self.status})"

    def save(self, *args: Any, **kwargs: Any) -> None:
        """Keep the platform fee derived from the total"""
        self.platform_fee = calculate_platform_fee(self.price_total)
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "price_total" in update_fields and "platform_fee" not in update_fields:
            kwargs["update_fields"] = [*update_fields, "platform_fee"]
        super().save(*args, **kwargs)

    @property
    def buyer_email(self) -> str:
        return self.artist.email if self.artist_id else self.guest_email

    @property
    def is_paid(self) -> bool:
        """Paid or further along"""
        return self.STATUS_RANK[self.status] >= self.STATUS_RANK[self.STATUS_PAID]

    @property
    def reviewer_payout(self) -> Decimal:
        return self.price_total - self.platform_fee

    def has_reached(self, status: str) -> bool:
        return self.STATUS_RANK[self.status] >= self.STATUS_RANK[status]


class OrderStatusHistory(models.Model):
    """
    Track order status changes for audit trail.
    `source` records which channel applied the transition.
    """

    SOURCE_CHECKOUT = "checkout"
    SOURCE_WEBHOOK = "webhook"
    SOURCE_MANUAL = "manual"
    SOURCE_REVIEW = "review"
    SOURCE_CHOICES: ClassVar[tuple[tuple[str, str], ...]] = (
        (SOURCE_CHECKOUT, _("Checkout")),
        (SOURCE_WEBHOOK, _("Payment webhook")),
        (SOURCE_MANUAL, _("Manual verification")),
        (SOURCE_REVIEW, _("Review submission")),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="status_history")

    old_status = models.CharField(max_length=20, blank=True, help_text=_("Previous status"))
    new_status = models.CharField(max_length=20, help_text=_("New status"))
    source = models.CharField(max_length=20, choices=SOURCE_CHOICES)
    changed_by = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        help_text=_("User who triggered the change, if any"),
    )
    reason = models.CharField(max_length=255, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "order_status_history"
        verbose_name = _("Order Status History")
        verbose_name_plural = _("Order Status Histories")
        ordering: ClassVar[tuple[str, ...]] = ("-created_at",)
        indexes: ClassVar[tuple[models.Index, ...]] = (
            models.Index(fields=["order", "-created_at"], name="order_history_order_idx"),
        )

    def __str__(self) -> str:
        return f"{self.order_id}: {self.old_status or '-'} → {self.new_status} ({self.source})"
