"""
Promotion API Views for the TrackReview platform
Public code validation for the checkout form plus administrator management.
"""

import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle

from apps.api.errors import error_response, invalid_input_response
from apps.packages.services import PackageCatalogService
from apps.promotions.services import PromoCodeAdminService, PromoCodeService

from .serializers import (
    PromoCodeCreateSerializer,
    PromoCodeSerializer,
    PromoCodeUpdateSerializer,
    PromoCodeUsageSerializer,
    PromoValidateInputSerializer,
)

logger = logging.getLogger(__name__)


class PromoValidateThrottle(ScopedRateThrottle):
    """Throttling for public code checks to slow down code guessing"""
    scope = 'promo_validate'


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([PromoValidateThrottle])
def validate_promo_code(request: Request) -> Response:
    """
    Check a promo code without redeeming it.
    With reviewer_id and package_id the discount is priced against the package.
    """
    input_serializer = PromoValidateInputSerializer(data=request.data)
    if not input_serializer.is_valid():
        return invalid_input_response(input_serializer.errors)
    data = input_serializer.validated_data

    if 'package_id' not in data:
        result = PromoCodeService.validate(data['code'])
        if result.is_err():
            return error_response(result.unwrap_err())
        spec = result.unwrap()
        return Response({
            'valid': True,
            'code': spec.code,
            'discount_type': spec.discount_type,
            'discount_value': str(spec.discount_value),
        })

    package_result = PackageCatalogService.get_package(data['reviewer_id'], data['package_id'])
    if package_result.is_err():
        return error_response(package_result.unwrap_err())

    preview = PromoCodeService.preview(data['code'], package_result.unwrap().price)
    if preview.is_err():
        return error_response(preview.unwrap_err())

    applied = preview.unwrap()
    return Response({
        'valid': True,
        'code': applied.code,
        'original_price': str(applied.original_price),
        'discount_amount': str(applied.discount_amount),
        'discounted_price': str(applied.discounted_price),
    })


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def promo_code_list(request: Request) -> Response:
    """List promo codes or create a new one (administrators only)"""
    if request.method == 'GET':
        active_only = request.query_params.get('active') in ('1', 'true', 'True')
        result = PromoCodeAdminService.list_promo_codes(request.user, active_only=active_only)
        if result.is_err():
            return error_response(result.unwrap_err())
        return Response({'results': PromoCodeSerializer(result.unwrap(), many=True).data})

    input_serializer = PromoCodeCreateSerializer(data=request.data)
    if not input_serializer.is_valid():
        return invalid_input_response(input_serializer.errors)

    result = PromoCodeAdminService.create_promo_code(request.user, input_serializer.validated_data)
    if result.is_err():
        return error_response(result.unwrap_err())
    return Response(PromoCodeSerializer(result.unwrap()).data, status=status.HTTP_201_CREATED)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def promo_code_update(request: Request, promo_code_id: str) -> Response:
    input_serializer = PromoCodeUpdateSerializer(data=request.data, partial=True)
    if not input_serializer.is_valid():
        return invalid_input_response(input_serializer.errors)

    result = PromoCodeAdminService.update_promo_code(request.user, promo_code_id, input_serializer.validated_data)
    if result.is_err():
        return error_response(result.unwrap_err())
    return Response(PromoCodeSerializer(result.unwrap()).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def promo_code_usage(request: Request, promo_code_id: str) -> Response:
    """Redemption ledger for one code"""
    result = PromoCodeAdminService.list_usage(request.user, promo_code_id)
    if result.is_err():
        return error_response(result.unwrap_err())
    return Response({'results': PromoCodeUsageSerializer(result.unwrap(), many=True).data})
