import logging
from typing import Any

from django.conf import settings

from apps.billing.payment_service import ConfirmationOutcome, PaymentConfirmationService
from apps.integrations.models import WebhookEvent
from apps.orders.models import Order, OrderStatusHistory

from .base import BaseWebhookProcessor, EventHandlingOutcome, verify_stripe_signature

logger = logging.getLogger(__name__)

CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"
PAYMENT_INTENT_SUCCEEDED = "payment_intent.succeeded"


# ===============================================================================
# STRIPE WEBHOOK PROCESSOR
# ===============================================================================


class StripeWebhookProcessor(BaseWebhookProcessor):
    """
    💳 Stripe webhook processor with deduplication

    Handles Stripe events:
    - checkout.session.completed → confirm payment for the order (primary)
    - payment_intent.succeeded → confirm payment for the order (backup, in
      case the session event is lost)

    Both land on PaymentConfirmationService.confirm_payment, so whichever
    arrives second is a no-op.
    """

    source_name = "stripe"

    def __init__(self) -> None:
        super().__init__()
        self._event_handlers = {
            CHECKOUT_SESSION_COMPLETED: self.handle_checkout_session_completed,
            PAYMENT_INTENT_SUCCEEDED: self.handle_payment_intent_succeeded,
        }

    def extract_event_id(self, payload: dict[str, Any]) -> str:
        """🔍 Extract Stripe event ID"""
        return str(payload.get("id", ""))

    def extract_event_type(self, payload: dict[str, Any]) -> str:
        """🏷️ Extract Stripe event type"""
        return str(payload.get("type", ""))

    def verify_signature(self, payload: dict[str, Any], signature: str, raw_body: bytes | None = None) -> bool:
        """🔐 Verify the Stripe-Signature header against the exact bytes received"""
        webhook_secret = getattr(settings, "STRIPE_WEBHOOK_SECRET", "")
        if not webhook_secret:
            # Fail secure when secret is not configured
            logger.error("🔥 STRIPE_WEBHOOK_SECRET not configured - rejecting webhook")
            return False

        if raw_body is None:
            return False

        return verify_stripe_signature(
            payload_body=raw_body,
            stripe_signature=signature,
            webhook_secret=webhook_secret,
            tolerance=getattr(settings, "STRIPE_WEBHOOK_TOLERANCE_SECONDS", 300),
        )

    def handle_event(self, webhook_event: WebhookEvent) -> EventHandlingOutcome:
        """🎯 Handle Stripe webhook event using handler registry"""
        handler = self._event_handlers.get(webhook_event.event_type)
        if handler is None:
            logger.info(f"⏭️ Skipping unhandled Stripe event type: {webhook_event.event_type}")
            return EventHandlingOutcome.skipped(f"Skipped unhandled event type: {webhook_event.event_type}")

        event_object = webhook_event.payload.get("data", {}).get("object", {}) or {}
        return handler(event_object)

    def handle_checkout_session_completed(self, session: dict[str, Any]) -> EventHandlingOutcome:
        """💳 Primary confirmation event"""
        session_id = session.get("id", "")
        payment_status = session.get("payment_status")
        if payment_status != "paid":
            logger.info(f"⏭️ Checkout session {session_id} completed with payment_status={payment_status}")
            return EventHandlingOutcome.skipped(f"Session {session_id} not paid ({payment_status})")

        order_id = (session.get("metadata") or {}).get("order_id")
        if not order_id and session_id:
            # Redundant lookup through the session id stored at checkout
            order_id = Order.objects.filter(stripe_session_id=session_id).values_list("id", flat=True).first()
        if not order_id:
            logger.error(f"❌ Checkout session {session_id} carries no order_id")
            return EventHandlingOutcome.failed("Missing order_id in session metadata", http_status=400)

        return self._confirm(order_id, payment_intent_id=_object_id(session.get("payment_intent")))

    def handle_payment_intent_succeeded(self, payment_intent: dict[str, Any]) -> EventHandlingOutcome:
        """💰 Backup confirmation event"""
        payment_intent_id = payment_intent.get("id", "")
        order_id = (payment_intent.get("metadata") or {}).get("order_id")
        if not order_id:
            logger.error(f"❌ PaymentIntent {payment_intent_id} carries no order_id")
            return EventHandlingOutcome.failed("Missing order_id in payment intent metadata", http_status=400)

        return self._confirm(order_id, payment_intent_id=payment_intent_id)

    def _confirm(self, order_id: Any, payment_intent_id: str) -> EventHandlingOutcome:
        outcome = PaymentConfirmationService.confirm_payment(
            order_id,
            source=OrderStatusHistory.SOURCE_WEBHOOK,
            payment_intent_id=payment_intent_id,
        )

        if outcome.status == ConfirmationOutcome.CONFIRMED:
            return EventHandlingOutcome.processed(f"Order {order_id} marked paid")
        if outcome.status == ConfirmationOutcome.ALREADY_CONFIRMED:
            return EventHandlingOutcome.processed(f"Order {order_id} already {outcome.order.status}")
        if outcome.reason == ConfirmationOutcome.REASON_ORDER_NOT_FOUND:
            return EventHandlingOutcome.failed(f"Order {order_id} not found", http_status=404)
        return EventHandlingOutcome.failed(outcome.message or f"Could not confirm order {order_id}")


def _object_id(value: Any) -> str:
    """Stripe fields may be an id string or an expanded object"""
    if isinstance(value, dict):
        return str(value.get("id", ""))
    return str(value or "")
