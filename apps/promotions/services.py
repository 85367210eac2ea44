"""
Promotion services for the TrackReview platform.
Business logic for promo code validation, discount calculation and redemption.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Any

from django.db import IntegrityError, transaction
from django.db.models import F, Q, QuerySet
from django.utils import timezone

from apps.common.types import (
    AuthorizationError,
    BusinessError,
    ConflictError,
    Err,
    NotFoundError,
    Ok,
    Result,
    ValidationError,
)

from .models import MAX_DISCOUNT_PERCENT, PromoCode, PromoCodeUsage, normalize_code

if TYPE_CHECKING:
    from apps.orders.models import Order
    from apps.users.models import User

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

# ===============================================================================
# Errors
# ===============================================================================


class PromoCodeNotFound(NotFoundError):
    """Code does not exist or has been deactivated"""

    code = "promo_not_found"


class PromoCodeExpired(ValidationError):
    code = "promo_expired"

    def __init__(self, message: str = "Promo code has expired"):
        super().__init__("promo_code", message)


class PromoCodeMaxUsesReached(ValidationError):
    code = "promo_max_uses_reached"

    def __init__(self, message: str = "Promo code has reached its maximum uses"):
        super().__init__("promo_code", message)


# ===============================================================================
# Data Classes for Results
# ===============================================================================


@dataclass(frozen=True)
class DiscountSpec:
    """What a valid code grants, before it is applied to a price"""

    promo_code_id: Any
    code: str
    discount_type: str
    discount_value: Decimal


@dataclass(frozen=True)
class AppliedDiscount:
    """
    Result of redeeming a code against an order.

    Attributes:
        code: Normalized promo code.
        original_price: Price before the discount.
        discount_amount: Clamped to [0, original_price].
        discounted_price: original_price - discount_amount, never negative.
        usage_id: PromoCodeUsage row recording this redemption.
    """

    code: str
    original_price: Decimal
    discount_amount: Decimal
    discounted_price: Decimal
    usage_id: Any = None
    promo_code_id: Any = None


# ===============================================================================
# Promo Code Service
# ===============================================================================


class PromoCodeService:
    """
    Validation, calculation and redemption of promo codes.
    Redemption bumps the usage counter with a single guarded UPDATE so that
    concurrent checkouts can never push current_uses past max_uses.
    """

    normalize_code = staticmethod(normalize_code)

    @staticmethod
    def get_promo_code(code: str) -> PromoCode | None:
        normalized = normalize_code(code)
        if not normalized:
            return None
        return PromoCode.objects.filter(code=normalized).first()

    @classmethod
    def validate(cls, code: str, now: datetime | None = None) -> Result[DiscountSpec, BusinessError]:
        """Check a code is usable right now and return what it grants"""
        promo = cls.get_promo_code(code)
        if promo is None:
            return Err(PromoCodeNotFound(f"Invalid promo code: {normalize_code(code)}"))
        return cls._validate_instance(promo, now)

    @staticmethod
    def _validate_instance(promo: PromoCode, now: datetime | None = None) -> Result[DiscountSpec, BusinessError]:
        if not promo.is_active:
            return Err(PromoCodeNotFound(f"Invalid promo code: {promo.code}"))
        if not promo.is_within_window(now or timezone.now()):
            return Err(PromoCodeExpired())
        if promo.max_uses is not None and promo.current_uses >= promo.max_uses:
            return Err(PromoCodeMaxUsesReached())
        return Ok(
            DiscountSpec(
                promo_code_id=promo.id,
                code=promo.code,
                discount_type=promo.discount_type,
                discount_value=promo.discount_value,
            )
        )

    @staticmethod
    def calculate_discount(discount_type: str, discount_value: Decimal, original_price: Decimal) -> Decimal:
        """
        Discount for a price, clamped to [0, original_price] and rounded to cents.
        """
        original_price = Decimal(original_price)
        if original_price <= ZERO:
            return ZERO

        if discount_type == PromoCode.DISCOUNT_PERCENTAGE:
            raw = original_price * Decimal(discount_value) / Decimal("100")
        else:
            raw = Decimal(discount_value)

        discount = raw.quantize(CENT, rounding=ROUND_HALF_UP)
        return min(max(discount, ZERO), original_price)

    @classmethod
    def preview(cls, code: str, original_price: Decimal) -> Result[AppliedDiscount, BusinessError]:
        """Price a code without redeeming it (checkout UI preview)"""
        validation = cls.validate(code)
        if validation.is_err():
            return validation
        spec = validation.unwrap()
        discount = cls.calculate_discount(spec.discount_type, spec.discount_value, original_price)
        return Ok(
            AppliedDiscount(
                code=spec.code,
                original_price=Decimal(original_price),
                discount_amount=discount,
                discounted_price=Decimal(original_price) - discount,
            )
        )

    @classmethod
    def apply(
        cls,
        code: str,
        order: Order,
        original_price: Decimal,
        user: User | None = None,
    ) -> Result[AppliedDiscount, BusinessError]:
        """
        Redeem a code for an order.

        Re-validates, then claims one use with a conditional increment. Zero
        affected rows means another redemption took the last use (or the code
        was deactivated) between validation and the update. The usage row and
        the increment commit or roll back together.
        """
        validation = cls.validate(code)
        if validation.is_err():
            return validation
        spec = validation.unwrap()

        discount = cls.calculate_discount(spec.discount_type, spec.discount_value, original_price)
        now = timezone.now()

        try:
            with transaction.atomic():
                claimed = (
                    PromoCode.objects.filter(pk=spec.promo_code_id, is_active=True)
                    .filter(Q(max_uses__isnull=True) | Q(current_uses__lt=F("max_uses")))
                    .update(current_uses=F("current_uses") + 1, updated_at=now)
                )
                if claimed == 0:
                    return cls._claim_failure(spec)

                usage = PromoCodeUsage.objects.create(
                    promo_code_id=spec.promo_code_id,
                    order=order,
                    user=user,
                    discount_amount=discount,
                    original_price=original_price,
                )
        except IntegrityError:
            logger.warning(
                f"⚠️ [Promo] Code {spec.code} already applied to order {order.pk}",
                extra={"promo_code": spec.code, "order_id": str(order.pk)},
            )
            return Err(ConflictError(f"Promo code {spec.code} already applied to this order"))

        logger.info(
            f"🏷️ [Promo] Applied {spec.code} to order {order.pk}: -{discount}",
            extra={"promo_code": spec.code, "order_id": str(order.pk), "discount_amount": str(discount)},
        )
        return Ok(
            AppliedDiscount(
                code=spec.code,
                original_price=Decimal(original_price),
                discount_amount=discount,
                discounted_price=Decimal(original_price) - discount,
                usage_id=usage.id,
                promo_code_id=spec.promo_code_id,
            )
        )

    @staticmethod
    def release(order: Order) -> bool:
        """
        Undo a redemption whose order never reached the payment provider.

        The usage row and the decrement commit together; the decrement is
        guarded so the counter can never go below zero.
        """
        with transaction.atomic():
            usage = PromoCodeUsage.objects.select_for_update().filter(order=order).first()
            if usage is None:
                return False
            usage.delete()
            PromoCode.objects.filter(pk=usage.promo_code_id, current_uses__gt=0).update(
                current_uses=F("current_uses") - 1, updated_at=timezone.now()
            )

        logger.info(
            f"↩️ [Promo] Released use of promo code {usage.promo_code_id} from order {order.pk}",
            extra={"promo_code_id": str(usage.promo_code_id), "order_id": str(order.pk)},
        )
        return True

    @staticmethod
    def _claim_failure(spec: DiscountSpec) -> Err[BusinessError]:
        still_active = PromoCode.objects.filter(pk=spec.promo_code_id, is_active=True).exists()
        if not still_active:
            return Err(PromoCodeNotFound(f"Invalid promo code: {spec.code}"))
        logger.warning(f"⚠️ [Promo] Lost race for last use of {spec.code}", extra={"promo_code": spec.code})
        return Err(PromoCodeMaxUsesReached())


# ===============================================================================
# Promo Code Admin Service
# ===============================================================================

UPDATABLE_FIELDS = ("description", "is_active", "max_uses", "valid_from", "valid_until")


class PromoCodeAdminService:
    """Administrator operations; codes are deactivated, never deleted"""

    @staticmethod
    def _require_admin(user: Any) -> Result[None, BusinessError]:
        if not user or not user.is_authenticated or not user.is_platform_admin:
            return Err(AuthorizationError("Only administrators can manage promo codes"))
        return Ok(None)

    @classmethod
    def list_promo_codes(cls, user: Any, active_only: bool = False) -> Result[QuerySet[PromoCode], BusinessError]:
        auth = cls._require_admin(user)
        if auth.is_err():
            return auth
        queryset = PromoCode.objects.all()
        if active_only:
            queryset = queryset.filter(is_active=True)
        return Ok(queryset)

    @classmethod
    def create_promo_code(cls, user: Any, data: dict[str, Any]) -> Result[PromoCode, BusinessError]:
        auth = cls._require_admin(user)
        if auth.is_err():
            return auth

        code = normalize_code(data.get("code", ""))
        if not code:
            return Err(ValidationError("code", "Code is required"))

        discount_type = data.get("discount_type", PromoCode.DISCOUNT_PERCENTAGE)
        discount_value = Decimal(str(data.get("discount_value", "0")))
        if discount_type not in (PromoCode.DISCOUNT_PERCENTAGE, PromoCode.DISCOUNT_FIXED):
            return Err(ValidationError("discount_type", f"Unknown discount type: {discount_type}"))
        if discount_value < ZERO:
            return Err(ValidationError("discount_value", "Discount value cannot be negative"))
        if discount_type == PromoCode.DISCOUNT_PERCENTAGE and discount_value > MAX_DISCOUNT_PERCENT:
            return Err(ValidationError("discount_value", "Percentage discount cannot exceed 100"))

        window = cls._check_window(data.get("valid_from"), data.get("valid_until"))
        if window.is_err():
            return window

        try:
            with transaction.atomic():
                promo = PromoCode.objects.create(
                    code=code,
                    description=data.get("description", ""),
                    discount_type=discount_type,
                    discount_value=discount_value,
                    max_uses=data.get("max_uses"),
                    valid_from=data.get("valid_from") or timezone.now(),
                    valid_until=data.get("valid_until"),
                    is_active=data.get("is_active", True),
                    created_by=user,
                )
        except IntegrityError:
            return Err(ConflictError("Promo code already exists"))

        logger.info(f"✅ [Promo] Created {promo.code} by {user.email}", extra={"promo_code": promo.code})
        return Ok(promo)

    @classmethod
    def update_promo_code(cls, user: Any, promo_code_id: Any, changes: dict[str, Any]) -> Result[PromoCode, BusinessError]:
        auth = cls._require_admin(user)
        if auth.is_err():
            return auth

        with transaction.atomic():
            promo = PromoCode.objects.select_for_update().filter(pk=promo_code_id).first()
            if promo is None:
                return Err(PromoCodeNotFound(f"Promo code {promo_code_id} not found"))

            updates = {k: v for k, v in changes.items() if k in UPDATABLE_FIELDS}
            if "max_uses" in updates and updates["max_uses"] is not None and updates["max_uses"] < promo.current_uses:
                return Err(
                    ValidationError("max_uses", f"max_uses cannot be below current uses ({promo.current_uses})")
                )

            window = cls._check_window(
                updates.get("valid_from", promo.valid_from), updates.get("valid_until", promo.valid_until)
            )
            if window.is_err():
                return window

            for field_name, value in updates.items():
                setattr(promo, field_name, value)
            promo.save(update_fields=[*updates.keys(), "updated_at"])

        logger.info(
            f"✅ [Promo] Updated {promo.code}: {sorted(updates)}",
            extra={"promo_code": promo.code, "fields": sorted(updates)},
        )
        return Ok(promo)

    @classmethod
    def list_usage(cls, user: Any, promo_code_id: Any) -> Result[QuerySet[PromoCodeUsage], BusinessError]:
        auth = cls._require_admin(user)
        if auth.is_err():
            return auth
        if not PromoCode.objects.filter(pk=promo_code_id).exists():
            return Err(PromoCodeNotFound(f"Promo code {promo_code_id} not found"))
        return Ok(PromoCodeUsage.objects.filter(promo_code_id=promo_code_id).select_related("order", "user"))

    @staticmethod
    def _check_window(valid_from: datetime | None, valid_until: datetime | None) -> Result[None, BusinessError]:
        if valid_from and valid_until and valid_until < valid_from:
            return Err(ValidationError("valid_until", "valid_until must be after valid_from"))
        return Ok(None)
