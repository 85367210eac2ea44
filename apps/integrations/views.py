import json
import logging
from typing import Any

from django.conf import settings
from django.http import HttpRequest, JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt
from django_ratelimit.decorators import ratelimit  # type: ignore[import-untyped]

from apps.common.request_ip import get_safe_client_ip, ratelimit_client_ip
from apps.common.types import Err, Ok, Result

from .webhooks.base import get_webhook_processor

logger = logging.getLogger(__name__)


# ===============================================================================
# WEBHOOK ENDPOINT VIEWS
# ===============================================================================


@method_decorator(
    [
        csrf_exempt,
        ratelimit(key=ratelimit_client_ip, rate=settings.WEBHOOK_RATE_LIMIT, method="POST", block=False),
    ],
    name="dispatch",
)
class WebhookView(View):
    """
    🔄 Generic webhook endpoint with deduplication

    Status codes: 400 for malformed or unsigned requests (nothing is written),
    404 when the referenced order is missing, 200 for handled, duplicate or
    intentionally ignored events, 500 on internal failure.
    """

    http_method_names = ["post"]
    source_name: str | None = None  # Override in subclasses

    def post(self, request: HttpRequest) -> JsonResponse:
        """📨 Process incoming webhook using result pipeline"""
        if not self.source_name:
            return JsonResponse({"error": "Webhook source not configured"}, status=400)

        if getattr(request, "limited", False):
            logger.warning(
                f"🚨 [Security] Rate limit exceeded for {self.source_name} webhook from IP: {self.get_client_ip(request)}",
                extra={"source": self.source_name, "ip_address": self.get_client_ip(request)},
            )
            return JsonResponse(
                {"status": "rate_limited", "message": "Too many webhook requests. Please slow down."}, status=429
            )

        try:
            result = (
                self._parse_request(request)
                .and_then(lambda payload: self._extract_metadata(request, payload))
                .and_then(lambda context: self._get_processor(context))
            )
            if result.is_err():
                return JsonResponse({"status": "error", "message": result.error}, status=400)

            return self._process_webhook(result.unwrap())

        except Exception:
            logger.exception(f"💥 Critical error processing {self.source_name} webhook")
            # Never expose internal exception details to external callers
            return JsonResponse({"status": "error", "message": "Internal processing error"}, status=500)

    def _parse_request(self, request: HttpRequest) -> Result[tuple[dict[str, Any], bytes], str]:
        """Parse the body, keeping the raw bytes for signature verification."""
        content_type = request.content_type or ""
        if not content_type.startswith("application/json"):
            return Err("Content-Type must be application/json")

        raw_body = request.body
        try:
            payload = json.loads(raw_body)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return Err("Invalid JSON payload")
        return Ok((payload, raw_body))

    def _extract_metadata(self, request: HttpRequest, parsed: tuple[dict[str, Any], bytes]) -> Result[dict[str, Any], str]:
        """Extract webhook metadata from the request."""
        payload, raw_body = parsed
        return Ok(
            {
                "payload": payload,
                "raw_body": raw_body,
                "signature": self.extract_signature(request),
                "ip_address": self.get_client_ip(request),
                "user_agent": request.META.get("HTTP_USER_AGENT", ""),
            }
        )

    def _get_processor(self, context: dict[str, Any]) -> Result[dict[str, Any], str]:
        """Get the appropriate webhook processor for this source."""
        processor = get_webhook_processor(self.source_name or "")
        if not processor:
            return Err(f"No processor found for source: {self.source_name}")

        context["processor"] = processor
        return Ok(context)

    def _process_webhook(self, context: dict[str, Any]) -> JsonResponse:
        """Process the webhook and create the appropriate response."""
        processor = context["processor"]
        result = processor.process_webhook(
            payload=context["payload"],
            signature=context["signature"],
            raw_body=context["raw_body"],
            ip_address=context["ip_address"],
            user_agent=context["user_agent"],
        )

        webhook_id = str(result.webhook_event.id) if result.webhook_event else None
        body = {"status": "success" if result.success else "error", "message": result.message, "webhook_id": webhook_id}
        if result.success:
            logger.info(f"✅ {self.source_name} webhook handled: {result.message}")
        else:
            logger.error(f"❌ {self.source_name} webhook failed ({result.http_status}): {result.message}")
        return JsonResponse(body, status=result.http_status)

    def extract_signature(self, request: HttpRequest) -> str:
        """🔐 Extract webhook signature from headers - override in subclasses"""
        return request.META.get("HTTP_X_SIGNATURE", "")

    def get_client_ip(self, request: HttpRequest) -> str:
        """🌐 Get client IP address"""
        return get_safe_client_ip(request)


class StripeWebhookView(WebhookView):
    """💳 Stripe webhook endpoint"""

    source_name = "stripe"

    def extract_signature(self, request: HttpRequest) -> str:
        """🔐 Extract Stripe signature"""
        return request.META.get("HTTP_STRIPE_SIGNATURE", "")
