import hashlib
import hmac
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from django.db import transaction
from django.utils import timezone

from apps.common.types import Err, Ok, Result
from apps.integrations.models import WebhookEvent

logger = logging.getLogger(__name__)

# Webhook signature parsing constants
EXPECTED_KEY_VALUE_PARTS = 2  # Expected parts when splitting key=value format


class SecurityError(Exception):
    """🔒 Security-related errors in webhook processing"""


# ===============================================================================
# WEBHOOK PROCESSING RESULT TYPES
# ===============================================================================


@dataclass(frozen=True)
class WebhookProcessingResult:
    """Result of webhook processing with the HTTP status the sender should see."""

    success: bool
    message: str
    webhook_event: WebhookEvent | None = None
    http_status: int = 200

    @classmethod
    def success_result(cls, message: str, event: WebhookEvent | None) -> "WebhookProcessingResult":
        """Create a successful result."""
        return cls(success=True, message=message, webhook_event=event, http_status=200)

    @classmethod
    def error_result(
        cls, message: str, event: WebhookEvent | None = None, http_status: int = 400
    ) -> "WebhookProcessingResult":
        """Create an error result."""
        return cls(success=False, message=message, webhook_event=event, http_status=http_status)


@dataclass(frozen=True)
class EventHandlingOutcome:
    """What a source-specific handler decided about one event."""

    status: str
    message: str
    http_status: int = 200

    @classmethod
    def processed(cls, message: str) -> "EventHandlingOutcome":
        return cls(WebhookEvent.STATUS_PROCESSED, message)

    @classmethod
    def skipped(cls, message: str) -> "EventHandlingOutcome":
        """Intentionally ignored; acknowledged so the provider stops retrying"""
        return cls(WebhookEvent.STATUS_SKIPPED, message)

    @classmethod
    def failed(cls, message: str, http_status: int = 500) -> "EventHandlingOutcome":
        return cls(WebhookEvent.STATUS_FAILED, message, http_status)


@dataclass(frozen=True)
class WebhookContext:
    """Context for webhook event processing."""

    payload: dict[str, Any]
    signature: str
    raw_body: bytes | None
    ip_address: str | None
    user_agent: str | None
    event_info: dict[str, str]


@dataclass(frozen=True)
class WebhookRequestMetadata:
    """Metadata extracted from webhook request."""

    signature: str
    raw_body: bytes | None
    ip_address: str | None
    user_agent: str | None


# ===============================================================================
# BASE WEBHOOK PROCESSING
# ===============================================================================


class BaseWebhookProcessor(ABC):
    """
    🔧 Base class for webhook processing with deduplication

    Pipeline: validate payload → verify signature → record/deduplicate → handle.
    Nothing is written until the signature has been verified.
    """

    source_name: str | None = None  # Override in subclasses

    def __init__(self) -> None:
        if not self.source_name:
            self.source_name = self.__class__.__name__.lower()

        # Validate that signature implementation is secure
        self._validate_signature_implementation()

    def process_webhook(
        self,
        payload: dict[str, Any],
        signature: str = "",
        raw_body: bytes | None = None,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> WebhookProcessingResult:
        """
        🔄 Main webhook processing pipeline
        """
        metadata = WebhookRequestMetadata(signature, raw_body, ip_address, user_agent)
        result = (
            self._validate_payload(payload)
            .and_then(lambda event_info: self._create_context(payload, metadata, event_info))
            .and_then(lambda context: self._verify_signature_with_context(context))
            .and_then(lambda context: self._create_and_process_event(context))
        )

        match result:
            case Ok(processing_result):
                return processing_result
            case Err(WebhookProcessingResult() as early_exit):
                # Rejections and acknowledged duplicates stop the chain early
                return early_exit
            case Err(error_message):
                logger.error(f"💥 Critical error processing {self.source_name} webhook: {error_message}")
                return WebhookProcessingResult.error_result("Internal processing error", http_status=500)

    def _validate_payload(self, payload: dict[str, Any]) -> Result[dict[str, str], WebhookProcessingResult]:
        """Step 1: Validate payload and extract event information."""
        if not isinstance(payload, dict):
            return Err(WebhookProcessingResult.error_result("❌ Payload must be a JSON object"))

        event_id = self.extract_event_id(payload)
        event_type = self.extract_event_type(payload)

        if not event_id:
            return Err(WebhookProcessingResult.error_result("❌ Missing event ID in payload"))

        if not event_type:
            return Err(WebhookProcessingResult.error_result("❌ Missing event type in payload"))

        return Ok({"event_id": event_id, "event_type": event_type})

    def _create_context(
        self, payload: dict[str, Any], metadata: WebhookRequestMetadata, event_info: dict[str, str]
    ) -> Result[WebhookContext, WebhookProcessingResult]:
        """Step 2: Create webhook processing context."""
        return Ok(
            WebhookContext(
                payload=payload,
                signature=metadata.signature,
                raw_body=metadata.raw_body,
                ip_address=metadata.ip_address,
                user_agent=metadata.user_agent,
                event_info=event_info,
            )
        )

    def _verify_signature_with_context(self, context: WebhookContext) -> Result[WebhookContext, WebhookProcessingResult]:
        """Step 3: Verify webhook signature before touching any data."""
        if not self.verify_signature(context.payload, context.signature, context.raw_body):
            logger.warning(
                f"🚨 [Security] Invalid {self.source_name} webhook signature for event {context.event_info['event_id']}",
                extra={
                    "source": self.source_name,
                    "event_id": context.event_info["event_id"],
                    "ip_address": context.ip_address,
                },
            )
            return Err(WebhookProcessingResult.error_result("❌ Invalid webhook signature"))

        return Ok(context)

    def _create_and_process_event(self, context: WebhookContext) -> Result[WebhookProcessingResult, WebhookProcessingResult]:
        """Step 4: Record the event (deduplicating redeliveries) and process it."""
        event_id = context.event_info["event_id"]
        event_type = context.event_info["event_type"]

        with transaction.atomic():
            webhook_event, created = WebhookEvent.objects.select_for_update().get_or_create(
                source=self.source_name,
                event_id=event_id,
                defaults={
                    "event_type": event_type,
                    "payload": context.payload,
                    "signature_hash": WebhookEvent.hash_signature(context.signature),
                    "ip_address": context.ip_address,
                    "user_agent": context.user_agent or "",
                },
            )
            if not created:
                if webhook_event.is_settled:
                    logger.info(f"🔄 Duplicate webhook {self.source_name}:{event_id} - skipping")
                    return Err(
                        WebhookProcessingResult.success_result(
                            f"⏭️ Duplicate webhook skipped: {event_id}", webhook_event
                        )
                    )
                logger.info(
                    f"🔁 Re-processing {webhook_event.status} webhook {self.source_name}:{event_id} "
                    f"(attempt {webhook_event.retry_count + 1})"
                )
                webhook_event.reset_for_retry()

        try:
            with transaction.atomic():
                outcome = self.handle_event(webhook_event)
        except Exception as e:
            logger.exception(f"💥 Exception processing {self.source_name} webhook {event_id}")
            webhook_event.mark_failed(f"Processing error: {e!s}")
            return Ok(WebhookProcessingResult.error_result("Internal processing error", webhook_event, 500))

        if outcome.status == WebhookEvent.STATUS_PROCESSED:
            webhook_event.mark_processed()
            logger.info(f"✅ Processed {self.source_name} webhook {event_id}: {outcome.message}")
            return Ok(WebhookProcessingResult.success_result(outcome.message, webhook_event))

        if outcome.status == WebhookEvent.STATUS_SKIPPED:
            webhook_event.mark_skipped(outcome.message)
            logger.info(f"⏭️ Skipped {self.source_name} webhook {event_id}: {outcome.message}")
            return Ok(WebhookProcessingResult.success_result(outcome.message, webhook_event))

        webhook_event.mark_failed(outcome.message)
        logger.error(f"❌ Failed {self.source_name} webhook {event_id}: {outcome.message}")
        return Ok(WebhookProcessingResult.error_result(outcome.message, webhook_event, outcome.http_status))

    def extract_event_id(self, payload: dict[str, Any]) -> str | None:
        """🔍 Extract unique event ID from payload - override in subclasses"""
        return payload.get("id")

    def extract_event_type(self, payload: dict[str, Any]) -> str | None:
        """🏷️ Extract event type from payload - override in subclasses"""
        return payload.get("type")

    @abstractmethod
    def verify_signature(self, payload: dict[str, Any], signature: str, raw_body: bytes | None = None) -> bool:
        """🔐 Verify webhook signature - must be implemented by subclasses"""

    @abstractmethod
    def handle_event(self, webhook_event: WebhookEvent) -> EventHandlingOutcome:
        """🎯 Handle specific webhook event"""

    def _validate_signature_implementation(self) -> None:
        """Refuse to run with a verify_signature that accepts obviously invalid input."""
        always_false_cases = [
            ({}, "", None),
            ({"test": "data"}, "obviously_invalid_signature_12345", b'{"test": "data"}'),
            ({}, "short", b"{}"),
        ]
        for payload, signature, raw_body in always_false_cases:
            if self.verify_signature(payload, signature, raw_body):
                raise SecurityError("Overly permissive signature verification detected")


# ===============================================================================
# WEBHOOK SIGNATURE VERIFICATION UTILITIES
# ===============================================================================


def verify_stripe_signature(
    payload_body: bytes, stripe_signature: str, webhook_secret: str, tolerance: int = 300
) -> bool:
    """
    🔐 Verify Stripe webhook signature with timestamp validation

    Stripe signature format: t=timestamp,v1=signature[,v1=signature...]
    The header may carry several v1 signatures while a secret is being rolled.
    """
    if not stripe_signature or not webhook_secret or payload_body is None:
        return False

    timestamp = None
    signatures: list[str] = []
    for element in stripe_signature.split(","):
        parts = element.strip().split("=", 1)
        if len(parts) != EXPECTED_KEY_VALUE_PARTS:
            return False
        key, value = parts
        if key == "t":
            try:
                timestamp = int(value)
            except ValueError:
                return False
        elif key == "v1":
            signatures.append(value)

    if timestamp is None or not signatures:
        return False

    # Check timestamp (prevent replay attacks)
    current_time = int(timezone.now().timestamp())
    if abs(current_time - timestamp) > tolerance:
        logger.warning(f"⏰ Stripe webhook timestamp outside tolerance: {current_time - timestamp}s")
        return False

    try:
        payload_for_signature = f"{timestamp}.{payload_body.decode('utf-8')}"
    except UnicodeDecodeError:
        return False

    expected_signature = hmac.new(
        webhook_secret.encode("utf-8"), payload_for_signature.encode("utf-8"), hashlib.sha256
    ).hexdigest()

    return any(hmac.compare_digest(candidate, expected_signature) for candidate in signatures)


def get_webhook_processor(source: str) -> BaseWebhookProcessor | None:
    """
    🏭 Factory function to get appropriate webhook processor
    """
    from .stripe import StripeWebhookProcessor  # Factory pattern avoids circular imports  # noqa: PLC0415

    processors: dict[str, type[BaseWebhookProcessor]] = {
        "stripe": StripeWebhookProcessor,
    }

    processor_class = processors.get(source)
    if processor_class:
        return processor_class()

    return None
