"""
Notifications models for the TrackReview platform
In-app notifications shown to artists and reviewers.
"""

from __future__ import annotations

import uuid
from typing import ClassVar

from django.db import models
from django.utils.translation import gettext_lazy as _


class Notification(models.Model):
    """
    A message addressed to one user.
    Rows for other users are written only by TrustedNotificationDispatcher.
    """

    TYPE_PAYMENT = "payment"
    TYPE_REVIEW = "review"
    TYPE_ORDER = "order"
    TYPE_SYSTEM = "system"
    TYPE_CHOICES: ClassVar[tuple[tuple[str, str], ...]] = (
        (TYPE_PAYMENT, _("Payment")),
        (TYPE_REVIEW, _("Review")),
        (TYPE_ORDER, _("Order")),
        (TYPE_SYSTEM, _("System")),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey("users.User", on_delete=models.CASCADE, related_name="notifications")

    title = models.CharField(max_length=200)
    message = models.TextField()
    link_url = models.CharField(max_length=500, blank=True)
    notification_type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_SYSTEM)

    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "notifications"
        verbose_name = _("Notification")
        verbose_name_plural = _("Notifications")
        ordering: ClassVar[tuple[str, ...]] = ("-created_at",)
        indexes: ClassVar[tuple[models.Index, ...]] = (
            models.Index(fields=["user", "is_read", "-created_at"], name="notification_user_unread_idx"),
        )

    def __str__(self) -> str:
        return f"{self.user_id}: {self.title}"
