"""
Django admin configuration for reviews app.
Reviews are immutable once delivered, so the admin is read-only.
"""

from typing import ClassVar

from django.contrib import admin

from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display: ClassVar[list[str]] = ['order', 'reviewer', 'overall_rating', 'media_type', 'published_date']
    list_filter: ClassVar[list[str]] = ['overall_rating', 'media_type']
    search_fields: ClassVar[list[str]] = ['reviewer_title', 'summary', 'order__track_title', 'reviewer__email']

    def has_add_permission(self, request) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False
