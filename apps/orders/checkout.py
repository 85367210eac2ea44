"""
Checkout orchestration for the TrackReview platform.
Resolves the package, prices it and commits the pending order together with
its promo redemption, then opens the embedded payment session.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from django.conf import settings
from django.db import transaction

from apps.billing.gateways import PaymentGatewayFactory
from apps.common.types import (
    BusinessError,
    Err,
    ExternalProviderError,
    Ok,
    Result,
    ValidationError,
)
from apps.packages.services import PackageCatalogService
from apps.promotions.services import PromoCodeService

from .models import Order
from .services import OrderCreateData, OrderService

logger = logging.getLogger(__name__)


def to_minor_units(amount: Decimal) -> int:
    """Major currency units to the integer amount the provider expects"""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class CheckoutSession:
    """What the client needs to mount the embedded checkout"""

    client_secret: str
    order_id: str


class CheckoutService:
    """
    🛒 startCheckout

    An invalid, expired or exhausted promo code never fails checkout; the order
    is simply priced without a discount.
    """

    @staticmethod
    def start_checkout(  # noqa: PLR0913
        reviewer_id: Any,
        package_id: Any,
        track_url: str,
        track_title: str,
        note: str = "",
        promo_code: str | None = None,
        artist: Any = None,
        guest_email: str = "",
    ) -> Result[CheckoutSession, BusinessError]:
        if not track_url:
            return Err(ValidationError("track_url", "Track URL is required"))
        if not track_title or not track_title.strip():
            return Err(ValidationError("track_title", "Track title is required"))
        if artist is None and not guest_email:
            return Err(ValidationError("guest_email", "Email is required for guest checkout"))

        package_result = PackageCatalogService.get_package(reviewer_id, package_id)
        if package_result.is_err():
            return package_result
        package = package_result.unwrap()

        currency = getattr(settings, "PAYMENT_CURRENCY", "usd")
        try:
            gateway = PaymentGatewayFactory.get_default_gateway()
        except ValueError as e:
            logger.error(f"🔥 [Checkout] Payment gateway unavailable: {e}")
            return Err(ExternalProviderError("Payment provider is not configured", retryable=False))

        with transaction.atomic():
            order = OrderService.create_pending_order(
                OrderCreateData(
                    reviewer=package.reviewer,
                    package=package,
                    track_url=track_url,
                    track_title=track_title.strip(),
                    original_price=package.price,
                    artist=artist,
                    guest_email="" if artist is not None else guest_email,
                    note=note or "",
                    currency=currency,
                    required_review_types=list(package.review_types),
                )
            )

            if promo_code:
                CheckoutService._apply_promo(order, promo_code, artist)

        # Provider I/O runs after the order and the promo use have committed
        session = gateway.create_checkout_session(
            order_id=str(order.id),
            amount_cents=to_minor_units(order.price_total),
            currency=currency,
            product_name=f"{package.name} review: {order.track_title}",
            metadata={
                "reviewer_id": str(package.reviewer_id),
                "package_id": str(package.pk),
            },
            customer_email=order.buyer_email or None,
        )
        if not session["success"]:
            logger.error(
                f"🔥 [Checkout] Payment session failed for order {order.id}: {session['error'] or 'unknown error'}",
                extra={"order_id": str(order.id), "package_id": str(package.pk)},
            )
            CheckoutService._release_promo(order)
            return Err(ExternalProviderError("Could not start payment. Please try again."))

        OrderService.attach_payment_session(order, session["session_id"])

        logger.info(
            f"🛒 [Checkout] Order {order.id} awaiting payment of {order.price_total} {currency}",
            extra={"order_id": str(order.id), "session_id": order.stripe_session_id},
        )
        return Ok(CheckoutSession(client_secret=session["client_secret"], order_id=str(order.id)))

    @staticmethod
    def _apply_promo(order: Order, promo_code: str, artist: Any) -> None:
        applied = PromoCodeService.apply(promo_code, order, order.original_price, user=artist)
        if applied.is_err():
            error = applied.unwrap_err()
            logger.warning(
                f"⚠️ [Checkout] Promo code {promo_code!r} not applied to order {order.id}: {error.message}",
                extra={"order_id": str(order.id), "reason": error.code},
            )
            return

        discount = applied.unwrap()
        OrderService.apply_discount(order, discount.discount_amount, promo_code_id=discount.promo_code_id)

    @staticmethod
    def _release_promo(order: Order) -> None:
        """Give back the use claimed for an order whose session never opened"""
        if order.promo_code_id is None:
            return
        if PromoCodeService.release(order):
            OrderService.apply_discount(order, Decimal("0.00"), promo_code_id=None)
