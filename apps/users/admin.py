"""
Django admin configuration for Users app
"""

from typing import ClassVar

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Email-based user admin with platform roles"""

    list_display: ClassVar[tuple[str, ...]] = ("email", "get_full_name", "role", "is_active", "date_joined")
    list_filter: ClassVar[tuple[str, ...]] = ("role", "is_active", "is_staff")
    search_fields: ClassVar[tuple[str, ...]] = ("email", "display_name", "first_name", "last_name")
    ordering: ClassVar[tuple[str, ...]] = ("email",)

    fieldsets: ClassVar[tuple] = (
        (None, {"fields": ("email", "password")}),
        ("Profile", {"fields": ("display_name", "first_name", "last_name", "role")}),
        ("Permissions", {"fields": ("is_active", "is_staff", "is_superuser", "groups", "user_permissions")}),
        ("Important dates", {"fields": ("last_login", "date_joined")}),
    )

    add_fieldsets: ClassVar[tuple] = (
        (None, {"classes": ("wide",), "fields": ("email", "role", "password1", "password2")}),
    )
