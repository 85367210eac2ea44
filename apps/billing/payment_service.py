"""
Payment Confirmation Service for the TrackReview platform

The webhook receiver, the manual verification endpoint and (indirectly) the
client status poller all converge on PaymentConfirmationService.confirm_payment,
which performs the guarded pending -> paid transition exactly once.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from apps.common.types import (
    AuthorizationError,
    BusinessError,
    Err,
    ExternalProviderError,
    NotFoundError,
    Ok,
    Result,
)
from apps.notifications.models import Notification
from apps.notifications.services import TrustedNotificationDispatcher
from apps.orders.models import Order, OrderStatusHistory
from apps.orders.services import OrderQueryService, OrderService

from .gateways import PaymentGatewayFactory

if TYPE_CHECKING:
    from .gateways.base import BasePaymentGateway

logger = logging.getLogger(__name__)

PROVIDER_PAID_STATUS = "paid"


# ===============================================================================
# CONFIRMATION OUTCOME
# ===============================================================================


@dataclass(frozen=True)
class ConfirmationOutcome:
    """
    Result of one confirmation attempt.

    CONFIRMED means this call applied pending -> paid. ALREADY_CONFIRMED means
    another channel got there first (or the order has moved on), which callers
    treat as success. REJECTED carries a machine reason and a human message.
    """

    CONFIRMED = "confirmed"
    ALREADY_CONFIRMED = "already_confirmed"
    REJECTED = "rejected"

    REASON_ORDER_NOT_FOUND = "order_not_found"
    REASON_INVALID_STATE = "invalid_state"
    REASON_PROVIDER_NOT_PAID = "provider_not_paid"

    status: str
    order: Order | None = None
    reason: str = ""
    message: str = ""

    @property
    def is_success(self) -> bool:
        return self.status != self.REJECTED

    @property
    def applied(self) -> bool:
        return self.status == self.CONFIRMED


# ===============================================================================
# PAYMENT CONFIRMATION SERVICE
# ===============================================================================


class PaymentConfirmationService:
    """
    💰 Reconciles payment state from every confirmation channel
    """

    @staticmethod
    def confirm_payment(
        order_id: Any,
        source: str,
        payment_intent_id: str = "",
        changed_by: Any = None,
    ) -> ConfirmationOutcome:
        """
        Idempotently move an order from pending to paid.

        Safe to call any number of times from any channel: only the first call
        that wins the conditional update changes state or notifies anyone.
        """
        extra_fields = {"stripe_payment_intent_id": payment_intent_id} if payment_intent_id else None
        result = OrderService.transition(
            order_id,
            Order.STATUS_PAID,
            source=source,
            changed_by=changed_by,
            reason=f"Payment confirmed via {source}",
            extra_fields=extra_fields,
        )

        if result.is_err():
            error = result.unwrap_err()
            reason = (
                ConfirmationOutcome.REASON_ORDER_NOT_FOUND
                if isinstance(error, NotFoundError)
                else ConfirmationOutcome.REASON_INVALID_STATE
            )
            logger.warning(
                f"⚠️ [Payments] Confirmation of order {order_id} via {source} rejected: {error}",
                extra={"order_id": str(order_id), "source": source, "reason": reason},
            )
            return ConfirmationOutcome(status=ConfirmationOutcome.REJECTED, reason=reason, message=error.message)

        transition = result.unwrap()
        if not transition.applied:
            return ConfirmationOutcome(status=ConfirmationOutcome.ALREADY_CONFIRMED, order=transition.order)

        logger.info(
            f"💰 [Payments] Order {transition.order.id} paid ({transition.order.price_total} "
            f"{transition.order.currency}) via {source}",
            extra={"order_id": str(transition.order.id), "source": source},
        )
        PaymentConfirmationService._notify_reviewer(transition.order)
        return ConfirmationOutcome(status=ConfirmationOutcome.CONFIRMED, order=transition.order)

    @staticmethod
    def verify_payment_status(
        order_id: Any,
        user: Any,
        gateway: BasePaymentGateway | None = None,
    ) -> Result[ConfirmationOutcome, BusinessError]:
        """
        Caller-initiated reconciliation against the provider's own record.

        Only the buying artist (or an administrator) may ask. The provider is
        not contacted when the order is already paid.
        """
        lookup = OrderQueryService.get_order(order_id)
        if lookup.is_err():
            return lookup
        order = lookup.unwrap()

        is_owner = order.artist_id is not None and order.artist_id == getattr(user, "pk", None)
        if not (is_owner or getattr(user, "is_platform_admin", False)):
            logger.warning(
                f"🔒 [Payments] User {getattr(user, 'pk', None)} tried to verify payment for order {order.id}",
                extra={"order_id": str(order.id), "user_id": getattr(user, "pk", None)},
            )
            return Err(AuthorizationError("Not authorized to verify this order"))

        if order.is_paid:
            return Ok(ConfirmationOutcome(status=ConfirmationOutcome.ALREADY_CONFIRMED, order=order))

        if not order.stripe_session_id:
            return Err(ExternalProviderError("Order has no payment session", retryable=False))

        if gateway is None:
            try:
                gateway = PaymentGatewayFactory.get_default_gateway()
            except ValueError as e:
                logger.error(f"🔥 [Payments] Payment gateway unavailable: {e}")
                return Err(ExternalProviderError("Payment provider is not configured", retryable=False))

        session = gateway.retrieve_checkout_session(order.stripe_session_id)
        if not session["success"]:
            return Err(ExternalProviderError("Could not reach the payment provider. Please try again."))

        if session["payment_status"] != PROVIDER_PAID_STATUS:
            logger.info(
                f"⏳ [Payments] Order {order.id} not paid at provider: {session['payment_status']}",
                extra={"order_id": str(order.id), "payment_status": session["payment_status"]},
            )
            return Ok(
                ConfirmationOutcome(
                    status=ConfirmationOutcome.REJECTED,
                    order=order,
                    reason=ConfirmationOutcome.REASON_PROVIDER_NOT_PAID,
                    message=f"Payment status: {session['payment_status']}. Payment has not been completed.",
                )
            )

        outcome = PaymentConfirmationService.confirm_payment(
            order.id,
            source=OrderStatusHistory.SOURCE_MANUAL,
            payment_intent_id=session["payment_intent_id"] or "",
            changed_by=user,
        )
        return Ok(outcome)

    @staticmethod
    def _notify_reviewer(order: Order) -> None:
        TrustedNotificationDispatcher.send(
            user_id=order.reviewer_id,
            title="New paid order",
            message=f'"{order.track_title}" is paid and waiting for your review.',
            link=f"/orders/{order.id}",
            notification_type=Notification.TYPE_ORDER,
        )
