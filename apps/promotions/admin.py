"""
Django Admin configuration for the Promotions app.
"""

from django.contrib import admin

from .models import PromoCode, PromoCodeUsage

# ===============================================================================
# Inline Admin Classes
# ===============================================================================


class PromoCodeUsageInline(admin.TabularInline):
    """Inline for redemptions within a promo code."""

    model = PromoCodeUsage
    extra = 0
    readonly_fields = ("order", "user", "original_price", "discount_amount", "created_at")
    fields = ("order", "user", "original_price", "discount_amount", "created_at")
    can_delete = False
    max_num = 0


# ===============================================================================
# Model Admins
# ===============================================================================


@admin.register(PromoCode)
class PromoCodeAdmin(admin.ModelAdmin):
    """Admin for promo codes. Deletion is disabled; deactivate instead."""

    list_display = ("code", "discount_display", "is_active", "usage_display", "valid_from", "valid_until")
    list_filter = ("is_active", "discount_type", "created_at")
    search_fields = ("code", "description")
    readonly_fields = ("current_uses", "created_at", "updated_at", "created_by")
    inlines = [PromoCodeUsageInline]

    fieldsets = (
        (None, {"fields": ("code", "description", "is_active")}),
        ("Discount", {"fields": ("discount_type", "discount_value")}),
        ("Validity", {"fields": ("valid_from", "valid_until")}),
        ("Usage Limits", {"fields": ("max_uses", "current_uses")}),
        ("Audit", {"fields": ("created_by", "created_at", "updated_at")}),
    )

    @admin.display(description="Usage")
    def usage_display(self, obj: PromoCode) -> str:
        limit = obj.max_uses if obj.max_uses is not None else "∞"
        return f"{obj.current_uses}/{limit}"

    def has_delete_permission(self, request, obj=None) -> bool:
        return False

    def save_model(self, request, obj, form, change) -> None:
        if not change and obj.created_by_id is None:
            obj.created_by = request.user
        super().save_model(request, obj, form, change)


@admin.register(PromoCodeUsage)
class PromoCodeUsageAdmin(admin.ModelAdmin):
    """Read-only redemption ledger."""

    list_display = ("promo_code", "order", "user", "discount_amount", "created_at")
    list_filter = ("created_at",)
    search_fields = ("promo_code__code", "user__email")

    def has_add_permission(self, request) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False
