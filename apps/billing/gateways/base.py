"""
Base Payment Gateway for the TrackReview platform
Abstract interface for all payment gateway implementations.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar, TypedDict

from django.conf import settings

logger = logging.getLogger(__name__)


# ===============================================================================
# TYPE DEFINITIONS
# ===============================================================================


class CheckoutSessionResult(TypedDict):
    """Result from checkout session creation"""
    success: bool
    session_id: str | None
    client_secret: str | None
    error: str | None


class SessionStatusResult(TypedDict):
    """Result from checkout session lookup"""
    success: bool
    payment_status: str  # paid, unpaid, no_payment_required, or 'error'
    payment_intent_id: str | None
    error: str | None


# ===============================================================================
# ABSTRACT BASE GATEWAY
# ===============================================================================


class BasePaymentGateway(ABC):
    """
    🏛️ Abstract base class for all payment gateways

    Provides unified interface for:
    - Embedded checkout session creation
    - Authoritative session status lookup
    """

    def __init__(self) -> None:
        self.logger = logging.getLogger(f"apps.billing.gateways.{self.__class__.__name__.lower()}")

    @property
    @abstractmethod
    def gateway_name(self) -> str:
        """Gateway identifier (e.g., 'stripe')"""

    @abstractmethod
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
        Open a payment session for one order

        Args:
            order_id: Order ID, echoed back in webhook metadata
            amount_cents: Amount in minor currency units
            currency: ISO currency code
            product_name: Line item label shown to the buyer
            metadata: Additional metadata
            customer_email: Prefill for the payment form

        Returns:
            CheckoutSessionResult with the session id and client_secret
        """

    @abstractmethod
    def retrieve_checkout_session(self, session_id: str) -> SessionStatusResult:
        """
        Ask the provider for the current state of a session

        Args:
            session_id: Gateway checkout session ID

        Returns:
            SessionStatusResult with the provider's payment_status
        """

    def validate_configuration(self) -> bool:
        """
        Validate gateway configuration (API keys, etc.)
        Override in subclasses for specific validation.
        """
        return True


# ===============================================================================
# GATEWAY FACTORY
# ===============================================================================


class PaymentGatewayFactory:
    """
    🏭 Factory for creating payment gateway instances

    Supports dynamic gateway selection based on configuration.
    """

    _gateways: ClassVar[dict[str, type[BasePaymentGateway]]] = {}

    @classmethod
    def register_gateway(cls, gateway_name: str, gateway_class: type[BasePaymentGateway]) -> None:
        """Register a payment gateway class"""
        cls._gateways[gateway_name] = gateway_class

    @classmethod
    def create_gateway(cls, gateway_name: str) -> BasePaymentGateway:
        """
        Create payment gateway instance

        Raises:
            ValueError: If gateway not found or not configured
        """
        if gateway_name not in cls._gateways:
            raise ValueError(f"Payment gateway '{gateway_name}' not registered")

        gateway = cls._gateways[gateway_name]()

        if not gateway.validate_configuration():
            raise ValueError(f"Payment gateway '{gateway_name}' not properly configured")

        logger.debug(f"✅ Created {gateway_name} payment gateway")
        return gateway

    @classmethod
    def get_default_gateway(cls) -> BasePaymentGateway:
        """Get the gateway named by settings.PAYMENT_GATEWAY"""
        return cls.create_gateway(getattr(settings, "PAYMENT_GATEWAY", "stripe"))

    @classmethod
    def list_available_gateways(cls) -> list[str]:
        return list(cls._gateways.keys())
