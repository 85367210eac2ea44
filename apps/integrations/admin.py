from django.contrib import admin
from django.utils.html import format_html
from django.utils.translation import gettext_lazy as _

from .models import WebhookEvent

# ===============================================================================
# WEBHOOK EVENT ADMINISTRATION
# ===============================================================================

STATUS_COLORS = {
    WebhookEvent.STATUS_PENDING: '#fbbf24',
    WebhookEvent.STATUS_PROCESSED: '#10b981',
    WebhookEvent.STATUS_FAILED: '#ef4444',
    WebhookEvent.STATUS_SKIPPED: '#6b7280',
}


@admin.register(WebhookEvent)
class WebhookEventAdmin(admin.ModelAdmin):
    """🔄 Payment webhook ledger; read-only, rows are written by the receiver"""

    list_display = [
        'received_at',
        'event_id',
        'event_type',
        'order_reference',
        'status_display',
        'retry_count',
        'processing_time',
    ]
    list_filter = ['status', 'event_type']
    search_fields = ['event_id', 'ip_address']
    date_hierarchy = 'received_at'

    fieldsets = (
        (_('🔍 Event'), {
            'fields': ('source', 'event_id', 'event_type', 'status', 'order_reference', 'received_at', 'processed_at')
        }),
        (_('📋 Processing'), {
            'fields': ('retry_count', 'error_message', 'processing_duration'),
        }),
        (_('🌐 Delivery'), {
            'fields': ('ip_address', 'user_agent', 'signature_hash'),
            'classes': ('collapse',),
        }),
        (_('📦 Payload'), {
            'fields': ('payload',),
            'classes': ('collapse',),
        }),
    )

    def get_readonly_fields(self, request, obj=None):
        return [field.name for field in self.model._meta.fields] + ['order_reference', 'processing_duration']

    @admin.display(description=_('Order'))
    def order_reference(self, obj):
        """Order id carried in the event metadata"""
        event_object = (obj.payload or {}).get('data', {}).get('object', {}) or {}
        return (event_object.get('metadata') or {}).get('order_id') or '-'

    @admin.display(description=_('Status'))
    def status_display(self, obj):
        return format_html(
            '<span style="color: {};">{}</span>',
            STATUS_COLORS.get(obj.status, '#6b7280'),
            obj.get_status_display(),
        )

    @admin.display(description=_('Duration'))
    def processing_time(self, obj):
        if obj.processing_duration:
            seconds = obj.processing_duration.total_seconds()
            if seconds < 1:
                return f"{int(seconds * 1000)}ms"
            return f"{seconds:.1f}s"
        return "-"

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
