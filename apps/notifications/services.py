"""
Notification services for the TrackReview platform.

NotificationService covers what a user may do with their own notifications.
TrustedNotificationDispatcher is the one place allowed to write a notification
for somebody other than the current user; it is called from backend services
(payment confirmation, review delivery), never from request handlers directly.
"""

from __future__ import annotations

import logging
from typing import Any

from django.db import transaction
from django.db.models import QuerySet
from django.utils import timezone

from apps.common.types import AuthorizationError, BusinessError, Err, NotFoundError, Ok, Result

from .models import Notification

logger = logging.getLogger(__name__)


class NotificationService:
    """Owner-scoped operations"""

    @staticmethod
    def list_for_user(user: Any, unread_only: bool = False) -> QuerySet[Notification]:
        queryset = Notification.objects.filter(user=user)
        if unread_only:
            queryset = queryset.filter(is_read=False)
        return queryset

    @staticmethod
    def unread_count(user: Any) -> int:
        return Notification.objects.filter(user=user, is_read=False).count()

    @staticmethod
    def mark_as_read(notification_id: Any, user: Any) -> Result[Notification, BusinessError]:
        notification = Notification.objects.filter(pk=notification_id).first()
        if notification is None:
            return Err(NotFoundError(f"Notification {notification_id} not found"))
        if notification.user_id != user.pk:
            logger.warning(
                f"🔒 [Notifications] User {user.pk} tried to mark notification {notification_id} as read",
                extra={"notification_id": str(notification_id), "user_id": user.pk},
            )
            return Err(AuthorizationError("You can only update your own notifications"))

        if not notification.is_read:
            notification.is_read = True
            notification.read_at = timezone.now()
            notification.save(update_fields=["is_read", "read_at"])
        return Ok(notification)


class TrustedNotificationDispatcher:
    """
    Internal capability for cross-user notification writes.

    Delivery is best-effort: failures are logged and reported as False,
    never raised to the caller.
    """

    @staticmethod
    def send(
        user_id: Any,
        title: str,
        message: str,
        link: str | None = None,
        notification_type: str = Notification.TYPE_SYSTEM,
    ) -> bool:
        try:
            with transaction.atomic():
                notification = Notification.objects.create(
                    user_id=user_id,
                    title=title,
                    message=message,
                    link_url=link or "",
                    notification_type=notification_type,
                )
        except Exception as e:
            logger.warning(
                f"⚠️ [Notifications] Failed to notify user {user_id}: {e}",
                extra={"user_id": user_id, "notification_type": notification_type},
            )
            return False

        logger.info(
            f"🔔 [Notifications] Sent {notification_type} notification to user {user_id}",
            extra={"user_id": user_id, "notification_id": str(notification.id)},
        )
        return True
