"""
Order API Views for the TrackReview platform
DRF views for checkout, order status polling, payment verification and review submission.
"""

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle

from apps.api.errors import error_response, invalid_input_response
from apps.billing.payment_service import PaymentConfirmationService
from apps.orders.checkout import CheckoutService
from apps.orders.services import OrderQueryService
from apps.reviews.services import ReviewSubmissionService

from .serializers import (
    CheckoutInputSerializer,
    CheckoutOutputSerializer,
    OrderStatusSerializer,
    ReviewSubmissionInputSerializer,
)

logger = logging.getLogger(__name__)


# 🔒 SECURITY: Custom throttle classes for order endpoints
class CheckoutThrottle(ScopedRateThrottle):
    """Throttling for checkout; each call opens a provider session"""
    scope = 'checkout'


class OrderStatusThrottle(ScopedRateThrottle):
    """Throttling for the status endpoint the client poller hits"""
    scope = 'order_status'


class PaymentVerifyThrottle(ScopedRateThrottle):
    """Throttling for manual verification; each call queries the provider"""
    scope = 'payment_verify'


class ReviewSubmitThrottle(ScopedRateThrottle):
    scope = 'review_submit'


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([CheckoutThrottle])
def start_checkout(request: Request) -> Response:
    """
    Start checkout for a reviewer package.
    Anonymous callers check out as guests and must give an email.
    """
    input_serializer = CheckoutInputSerializer(data=request.data)
    if not input_serializer.is_valid():
        return invalid_input_response(input_serializer.errors)

    data = input_serializer.validated_data
    artist = request.user if request.user.is_authenticated else None

    result = CheckoutService.start_checkout(
        reviewer_id=data['reviewer_id'],
        package_id=data['package_id'],
        track_url=data['track_url'],
        track_title=data['track_title'],
        note=data['note'],
        promo_code=data['promo_code'] or None,
        artist=artist,
        guest_email=data['guest_email'],
    )
    if result.is_err():
        return error_response(result.unwrap_err())

    session = result.unwrap()
    output = CheckoutOutputSerializer({'client_secret': session.client_secret, 'order_id': session.order_id})
    return Response(output.data, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
@throttle_classes([OrderStatusThrottle])
def order_status(request: Request, order_id: str) -> Response:
    """Read-only status for the artist, the reviewer or an admin"""
    result = OrderQueryService.get_order_for_user(order_id, request.user)
    if result.is_err():
        return error_response(result.unwrap_err())
    return Response(OrderStatusSerializer(result.unwrap()).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@throttle_classes([PaymentVerifyThrottle])
def verify_payment(request: Request, order_id: str) -> Response:
    """
    Ask the payment provider directly whether an order has been paid.
    A provider that has not seen the payment is reported as success=False
    with HTTP 200; provider outages are 502 and retryable.
    """
    result = PaymentConfirmationService.verify_payment_status(order_id, request.user)
    if result.is_err():
        return error_response(result.unwrap_err())

    outcome = result.unwrap()
    body = {'success': outcome.is_success, 'outcome': outcome.status}
    if outcome.order is not None:
        body['status'] = outcome.order.status
    if not outcome.is_success:
        body['error'] = outcome.message
        body['reason'] = outcome.reason
    return Response(body)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@throttle_classes([ReviewSubmitThrottle])
def submit_review(request: Request, order_id: str) -> Response:
    """Deliver the review for a paid order and complete it"""
    envelope = ReviewSubmissionInputSerializer(data=request.data)
    if not envelope.is_valid():
        return invalid_input_response(envelope.errors)

    payload = {key: value for key, value in request.data.items() if key != 'required_types'}
    result = ReviewSubmissionService.submit_review(
        order_id,
        payload,
        reviewer=request.user,
        required_types=envelope.validated_data['required_types'],
    )
    if result.is_err():
        return error_response(result.unwrap_err())

    review = result.unwrap()
    return Response(
        {'success': True, 'review_id': str(review.id), 'order_id': str(review.order_id)},
        status=status.HTTP_201_CREATED,
    )
