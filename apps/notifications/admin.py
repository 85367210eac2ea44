"""
Notifications admin configuration for the TrackReview platform.
"""

from __future__ import annotations

from typing import ClassVar

from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display: ClassVar[tuple[str, ...]] = ("title", "user", "notification_type", "is_read", "created_at")
    list_filter: ClassVar[tuple[str, ...]] = ("notification_type", "is_read")
    search_fields: ClassVar[tuple[str, ...]] = ("title", "user__email")
    readonly_fields: ClassVar[tuple[str, ...]] = ("created_at", "read_at")
