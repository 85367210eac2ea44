"""
Payment Gateway Implementations for the TrackReview platform
Embedded checkout sessions behind a unified interface.
"""

from .base import BasePaymentGateway, CheckoutSessionResult, PaymentGatewayFactory, SessionStatusResult
from .stripe_gateway import StripeGateway

__all__ = [
    "BasePaymentGateway",
    "CheckoutSessionResult",
    "PaymentGatewayFactory",
    "SessionStatusResult",
    "StripeGateway",
]
