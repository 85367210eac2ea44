"""
Promotion API Serializers for the TrackReview platform
Read and write shapes for promo codes and their usage ledger.
"""

from rest_framework import serializers

from apps.promotions.models import MAX_DISCOUNT_PERCENT, PromoCode, PromoCodeUsage


class PromoCodeSerializer(serializers.ModelSerializer):
    """Administrator view of a promo code"""

    remaining_uses = serializers.IntegerField(read_only=True, allow_null=True)
    discount_display = serializers.CharField(read_only=True)

    class Meta:
        model = PromoCode
        fields = [
            'id',
            'code',
            'description',
            'discount_type',
            'discount_value',
            'discount_display',
            'max_uses',
            'current_uses',
            'remaining_uses',
            'valid_from',
            'valid_until',
            'is_active',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class PromoCodeCreateSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    discount_type = serializers.ChoiceField(choices=PromoCode.DISCOUNT_TYPES, default=PromoCode.DISCOUNT_PERCENTAGE)
    discount_value = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    max_uses = serializers.IntegerField(min_value=1, required=False, allow_null=True, default=None)
    valid_from = serializers.DateTimeField(required=False, allow_null=True, default=None)
    valid_until = serializers.DateTimeField(required=False, allow_null=True, default=None)
    is_active = serializers.BooleanField(default=True)

    def validate(self, attrs: dict) -> dict:
        if attrs['discount_type'] == PromoCode.DISCOUNT_PERCENTAGE and attrs['discount_value'] > MAX_DISCOUNT_PERCENT:
            raise serializers.ValidationError({'discount_value': 'Percentage discount cannot exceed 100'})
        return attrs


class PromoCodeUpdateSerializer(serializers.Serializer):
    """Partial update; code, type and value are fixed once created"""

    description = serializers.CharField(max_length=255, required=False, allow_blank=True)
    is_active = serializers.BooleanField(required=False)
    max_uses = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    valid_from = serializers.DateTimeField(required=False)
    valid_until = serializers.DateTimeField(required=False, allow_null=True)


class PromoCodeUsageSerializer(serializers.ModelSerializer):
    order_id = serializers.UUIDField(read_only=True)
    user_email = serializers.SerializerMethodField()

    class Meta:
        model = PromoCodeUsage
        fields = ['id', 'order_id', 'user_email', 'original_price', 'discount_amount', 'created_at']
        read_only_fields = fields

    def get_user_email(self, obj: PromoCodeUsage) -> str | None:
        return obj.user.email if obj.user_id else None


class PromoValidateInputSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=50)
    reviewer_id = serializers.IntegerField(min_value=1, required=False)
    package_id = serializers.UUIDField(required=False)

    def validate(self, attrs: dict) -> dict:
        if ('reviewer_id' in attrs) != ('package_id' in attrs):
            raise serializers.ValidationError('reviewer_id and package_id must be given together')
        return attrs
