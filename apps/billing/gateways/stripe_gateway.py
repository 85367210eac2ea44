"""
Stripe Payment Gateway for the TrackReview platform
Embedded Checkout sessions that never redirect; completion arrives by webhook.
"""

from __future__ import annotations

import logging
from typing import Any

import stripe
from django.conf import settings

from .base import (
    BasePaymentGateway,
    CheckoutSessionResult,
    PaymentGatewayFactory,
    SessionStatusResult,
)

logger = logging.getLogger(__name__)


# ===============================================================================
# STRIPE GATEWAY IMPLEMENTATION
# ===============================================================================


class StripeGateway(BasePaymentGateway):
    """
    💳 Stripe payment gateway implementation

    Sessions are created in embedded UI mode with redirect_on_completion="never",
    so the client polls order status instead of landing on a return URL.
    """

    def __init__(self) -> None:
        super().__init__()
        self._stripe = stripe
        self._initialize_stripe()

    def _initialize_stripe(self) -> None:
        """Initialize Stripe SDK with API keys from Django settings"""
        api_key = getattr(settings, "STRIPE_SECRET_KEY", "")
        if not api_key:
            self.logger.error("🔥 STRIPE_SECRET_KEY is not configured")
            raise ValueError("Stripe secret key not configured")

        self._stripe.api_key = api_key
        self._stripe.api_version = getattr(settings, "STRIPE_API_VERSION", "2024-06-20")

    @property
    def gateway_name(self) -> str:
        return "stripe"

    def validate_configuration(self) -> bool:
        """Secret keys must be Stripe secret or restricted keys"""
        api_key = getattr(settings, "STRIPE_SECRET_KEY", "")
        if not api_key.startswith(("sk_", "rk_")):
            self.logger.warning("⚠️ STRIPE_SECRET_KEY does not look like a Stripe secret key")
            return False
        return True

    def create_checkout_session(  # noqa: PLR0913
        self,
        order_id: str,
        amount_cents: int,
        currency: str,
        product_name: str,
        metadata: dict[str, Any] | None = None,
        customer_email: str | None = None,
    ) -> CheckoutSessionResult:
        """
        Create an embedded Stripe Checkout session for one order.

        The same metadata is attached to the session and to the PaymentIntent so
        that both checkout.session.completed and payment_intent.succeeded carry
        the order id.
        """
        session_metadata = {"order_id": str(order_id), **(metadata or {})}
        params: dict[str, Any] = {
            "ui_mode": "embedded",
            "redirect_on_completion": "never",
            "mode": "payment",
            "line_items": [
                {
                    "price_data": {
                        "currency": currency,
                        "product_data": {"name": product_name},
                        "unit_amount": amount_cents,
                    },
                    "quantity": 1,
                }
            ],
            "metadata": session_metadata,
            "payment_intent_data": {"metadata": session_metadata},
        }
        if customer_email:
            params["customer_email"] = customer_email

        try:
            session = self._stripe.checkout.Session.create(**params)
        except self._stripe.StripeError as e:
            self.logger.error(
                f"🔥 Stripe checkout session creation failed for order {order_id}: {e}",
                extra={"order_id": str(order_id)},
            )
            return CheckoutSessionResult(success=False, session_id=None, client_secret=None, error=str(e))

        self.logger.info(
            f"✅ Created Stripe checkout session {session.id} for order {order_id} ({amount_cents} {currency})",
            extra={"order_id": str(order_id), "session_id": session.id},
        )
        return CheckoutSessionResult(
            success=True,
            session_id=session.id,
            client_secret=session.client_secret,
            error=None,
        )

    def retrieve_checkout_session(self, session_id: str) -> SessionStatusResult:
        try:
            session = self._stripe.checkout.Session.retrieve(session_id)
        except self._stripe.StripeError as e:
            self.logger.error(f"🔥 Failed to retrieve Stripe session {session_id}: {e}")
            return SessionStatusResult(success=False, payment_status="error", payment_intent_id=None, error=str(e))

        payment_intent = session.payment_intent
        payment_intent_id = payment_intent if isinstance(payment_intent, str) else getattr(payment_intent, "id", None)

        self.logger.info(f"💳 Stripe session {session_id} payment_status: {session.payment_status}")
        return SessionStatusResult(
            success=True,
            payment_status=session.payment_status,
            payment_intent_id=payment_intent_id,
            error=None,
        )


# ===============================================================================
# GATEWAY REGISTRATION
# ===============================================================================

PaymentGatewayFactory.register_gateway("stripe", StripeGateway)
