"""
Promo code models for the TrackReview platform.

- PromoCode: a discount rule (percentage or fixed) with a usage cap and validity window
- PromoCodeUsage: append-only ledger of every redemption
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Any, ClassVar

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

MAX_DISCOUNT_PERCENT = Decimal("100")


def normalize_code(code: str) -> str:
    """Normalize promo code to uppercase and trimmed."""
    return (code or "").upper().strip()


class PromoCode(models.Model):
    """
    Discount code redeemable at checkout.
    `current_uses` never exceeds `max_uses`; it is only ever bumped through
    the guarded increment in PromoCodeService.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    code = models.CharField(
        max_length=50,
        unique=True,
        help_text=_("Unique code, stored uppercase"),
    )
    description = models.CharField(max_length=255, blank=True)

    DISCOUNT_PERCENTAGE = "percentage"
    DISCOUNT_FIXED = "fixed"
    DISCOUNT_TYPES: ClassVar[tuple[tuple[str, Any], ...]] = (
        (DISCOUNT_PERCENTAGE, _("Percentage Discount")),
        (DISCOUNT_FIXED, _("Fixed Amount Discount")),
    )
    discount_type = models.CharField(max_length=20, choices=DISCOUNT_TYPES, default=DISCOUNT_PERCENTAGE)
    discount_value = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0"))],
        help_text=_("Percent (0-100) or amount in major currency units"),
    )

    # Usage limits
    max_uses = models.PositiveIntegerField(null=True, blank=True, help_text=_("Null = unlimited"))
    current_uses = models.PositiveIntegerField(default=0)

    # Validity period
    valid_from = models.DateTimeField(default=timezone.now, help_text=_("When code becomes valid"))
    valid_until = models.DateTimeField(null=True, blank=True, help_text=_("When code expires (null = never)"))

    is_active = models.BooleanField(default=True, help_text=_("Master switch; codes are deactivated, not deleted"))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    created_by = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_promo_codes",
    )

    class Meta:
        db_table = "promo_codes"
        verbose_name = _("Promo Code")
        verbose_name_plural = _("Promo Codes")
        ordering: ClassVar[tuple[str, ...]] = ("-created_at",)
        indexes: ClassVar[tuple[models.Index, ...]] = (
            models.Index(fields=["is_active", "valid_from", "valid_until"], name="idx_promo_validity"),
        )
        constraints: ClassVar[tuple[models.BaseConstraint, ...]] = (
            models.CheckConstraint(
                condition=Q(max_uses__isnull=True) | Q(current_uses__lte=F("max_uses")),
                name="promo_current_uses_within_max",
            ),
        )

    def __str__(self) -> str:
        return f"{self.code} ({self.discount_display})"

    def save(self, *args: Any, **kwargs: Any) -> None:
        """Normalize code to uppercase before saving."""
        self.code = normalize_code(self.code)
        super().save(*args, **kwargs)

    def clean(self) -> None:
        super().clean()
        if self.discount_type == self.DISCOUNT_PERCENTAGE and self.discount_value > MAX_DISCOUNT_PERCENT:
            raise ValidationError({"discount_value": "Percentage must be between 0 and 100"})
        if self.valid_until and self.valid_from and self.valid_until < self.valid_from:
            raise ValidationError({"valid_until": "valid_until must be after valid_from"})

    @property
    def discount_display(self) -> str:
        if self.discount_type == self.DISCOUNT_PERCENTAGE:
            return f"{self.discount_value.normalize()}% off"
        return f"{self.discount_value} off"

    @property
    def remaining_uses(self) -> int | None:
        """Get remaining uses, or None if unlimited."""
        if self.max_uses is None:
            return None
        return max(0, self.max_uses - self.current_uses)

    def is_within_window(self, now: Any = None) -> bool:
        now = now or timezone.now()
        if self.valid_from and now < self.valid_from:
            return False
        return not (self.valid_until and now > self.valid_until)


class PromoCodeUsage(models.Model):
    """
    One redemption of a promo code against an order.
    Rows are never updated or deleted.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    promo_code = models.ForeignKey(PromoCode, on_delete=models.PROTECT, related_name="usages")
    order = models.ForeignKey("orders.Order", on_delete=models.PROTECT, related_name="promo_usages")
    user = models.ForeignKey(
        "users.User",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="promo_usages",
        help_text=_("Null for guest checkout"),
    )

    discount_amount = models.DecimalField(max_digits=10, decimal_places=2)
    original_price = models.DecimalField(max_digits=10, decimal_places=2)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "promo_code_usages"
        verbose_name = _("Promo Code Usage")
        verbose_name_plural = _("Promo Code Usages")
        ordering: ClassVar[tuple[str, ...]] = ("-created_at",)
        constraints: ClassVar[tuple[models.UniqueConstraint, ...]] = (
            models.UniqueConstraint(fields=["promo_code", "order"], name="unique_promo_per_order"),
        )

    def __str__(self) -> str:
        return f"{self.promo_code.code} on order {self.order_id}"
