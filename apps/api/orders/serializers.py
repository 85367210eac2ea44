"""
Order API Serializers for the TrackReview platform
Input validation for checkout and review submission, plus order status output.
"""

from rest_framework import serializers

from apps.orders.models import Order
from apps.packages.models import REVIEW_TYPES


class CheckoutInputSerializer(serializers.Serializer):
    """Validate checkout requests; pricing always comes from the server"""

    reviewer_id = serializers.IntegerField(min_value=1)
    package_id = serializers.UUIDField()
    track_url = serializers.URLField(max_length=500)
    track_title = serializers.CharField(max_length=255)
    note = serializers.CharField(required=False, allow_blank=True, default='')
    promo_code = serializers.CharField(required=False, allow_blank=True, max_length=50, default='')
    guest_email = serializers.EmailField(required=False, allow_blank=True, default='')


class CheckoutOutputSerializer(serializers.Serializer):
    client_secret = serializers.CharField()
    order_id = serializers.CharField()


class OrderStatusSerializer(serializers.ModelSerializer):
    """What the client poller needs, nothing more"""

    order_id = serializers.UUIDField(source='id', read_only=True)
    is_paid = serializers.BooleanField(read_only=True)

    class Meta:
        model = Order
        fields = ['order_id', 'status', 'is_paid', 'paid_at', 'completed_at']
        read_only_fields = fields


class ReviewSubmissionInputSerializer(serializers.Serializer):
    """
    Only the envelope is checked here; review content rules live in
    ReviewSubmissionValidator so every failure is reported together.
    """

    required_types = serializers.ListField(
        child=serializers.ChoiceField(choices=REVIEW_TYPES), required=False, allow_null=True, default=None
    )
