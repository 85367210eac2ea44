"""
Django admin configuration for orders app.
Orders are read-only here: status changes go through OrderService.
"""

from typing import ClassVar

from django.contrib import admin

from .models import Order, OrderStatusHistory


class OrderStatusHistoryInline(admin.TabularInline):
    """Audit trail of applied transitions."""

    model = OrderStatusHistory
    extra = 0
    can_delete = False
    max_num = 0
    fields = ('old_status', 'new_status', 'source', 'changed_by', 'reason', 'created_at')
    readonly_fields = fields


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Admin interface for orders."""

    list_display: ClassVar[list[str]] = (
        'id', 'track_title', 'reviewer', 'status', 'price_total',
        'platform_fee', 'currency', 'created_at'
    )
    list_filter: ClassVar[list[str]] = ('status', 'currency', 'created_at')
    search_fields: ClassVar[list[str]] = (
        'id', 'track_title', 'artist__email', 'guest_email', 'reviewer__email', 'stripe_session_id'
    )
    readonly_fields: ClassVar[list[str]] = (
        'status', 'original_price', 'discount_amount', 'price_total', 'platform_fee',
        'promo_code', 'stripe_session_id', 'stripe_payment_intent_id',
        'created_at', 'updated_at', 'paid_at', 'completed_at'
    )
    inlines: ClassVar[list] = [OrderStatusHistoryInline]

    fieldsets: ClassVar[tuple] = (
        ('Order Information', {
            'fields': ('artist', 'guest_email', 'reviewer', 'package', 'status')
        }),
        ('Track', {
            'fields': ('track_url', 'track_title', 'note', 'required_review_types')
        }),
        ('Financial Details', {
            'fields': ('currency', 'original_price', 'discount_amount', 'price_total', 'platform_fee', 'promo_code')
        }),
        ('Payment Provider', {
            'fields': ('stripe_session_id', 'stripe_payment_intent_id'),
            'classes': ('collapse',)
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at', 'paid_at', 'completed_at'),
            'classes': ('collapse',)
        })
    )

    def has_delete_permission(self, request, obj=None) -> bool:
        return False
