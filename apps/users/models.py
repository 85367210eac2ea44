"""
User models for the TrackReview platform
Email-based authentication with artist, reviewer and admin roles.
"""

from __future__ import annotations

from typing import Any, ClassVar

from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.utils.translation import gettext_lazy as _


class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication"""

    def create_user(self, email: str, password: str | None = None, **extra_fields: Any) -> User:
        """Create and return a regular user with email and password"""
        if not email:
            raise ValueError("The Email field must be set")
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email: str, password: str | None = None, **extra_fields: Any) -> User:
        """Create and return a superuser with email and password"""
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", User.ROLE_ADMIN)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self.create_user(email, password, **extra_fields)

    def reviewers(self) -> models.QuerySet[User]:
        return self.filter(role=User.ROLE_REVIEWER, is_active=True)


class User(AbstractUser):
    """
    Platform user. Artists buy reviews, reviewers sell them,
    admins manage promo codes and can see every order.
    """

    ROLE_ARTIST = "artist"
    ROLE_REVIEWER = "reviewer"
    ROLE_ADMIN = "admin"

    ROLE_CHOICES: ClassVar[tuple[tuple[str, str], ...]] = (
        (ROLE_ARTIST, _("Artist")),
        (ROLE_REVIEWER, _("Reviewer")),
        (ROLE_ADMIN, _("Administrator")),
    )

    username = None  # Remove username field, using email instead
    email = models.EmailField(_("email address"), unique=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default=ROLE_ARTIST)
    display_name = models.CharField(max_length=150, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS: ClassVar[list[str]] = []

    class Meta:
        db_table = "users"
        verbose_name = _("User")
        verbose_name_plural = _("Users")
        indexes: ClassVar[tuple[models.Index, ...]] = (models.Index(fields=["role"], name="user_role_idx"),)

    def __str__(self) -> str:
        return f"{self.get_full_name()} ({self.email})"

    def get_full_name(self) -> str:
        """Get display name, full name or email, whichever is set first"""
        if self.display_name:
            return self.display_name
        full_name = super().get_full_name()
        return full_name if full_name.strip() else self.email

    @property
    def is_reviewer(self) -> bool:
        return self.role == self.ROLE_REVIEWER

    @property
    def is_platform_admin(self) -> bool:
        """Admins by role or Django superusers"""
        return self.role == self.ROLE_ADMIN or self.is_superuser
