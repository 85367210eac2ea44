"""
Django Admin configuration for the Packages app.
"""

from django.contrib import admin

from .models import ReviewerPackage


@admin.register(ReviewerPackage)
class ReviewerPackageAdmin(admin.ModelAdmin):
    """Admin for reviewer packages."""

    list_display = ("name", "reviewer", "price", "review_types", "is_active", "sort_order")
    list_filter = ("is_active",)
    search_fields = ("name", "reviewer__email", "reviewer__display_name")
    readonly_fields = ("created_at", "updated_at")
