"""
Review submission for the TrackReview platform.
Validates a reviewer's deliverable, then stores it and completes the order
as a single unit.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from django.db import IntegrityError, transaction

from apps.common.types import AuthorizationError, BusinessError, ConflictError, Err, Ok, Result
from apps.notifications.models import Notification
from apps.notifications.services import TrustedNotificationDispatcher
from apps.orders.models import Order, OrderStatusHistory
from apps.orders.services import OrderQueryService, OrderService
from apps.packages.models import normalize_review_types
from apps.packages.services import PackageCatalogService

from .models import Review
from .validators import ReviewSubmission, ReviewSubmissionValidator

logger = logging.getLogger(__name__)


class ReviewAlreadySubmitted(ConflictError):
    code = "review_already_submitted"


class OrderNotPaid(ConflictError):
    code = "order_not_paid"


class ReviewSubmissionService:
    """
    submitReview

    Validation failures leave the order and the review table untouched. The
    artist notification is sent after the write and its failure is ignored.
    """

    @classmethod
    def submit_review(
        cls,
        order_id: Any,
        payload: dict[str, Any],
        reviewer: Any,
        required_types: Iterable[str] | None = None,
    ) -> Result[Review, BusinessError]:
        lookup = OrderQueryService.get_order(order_id)
        if lookup.is_err():
            return lookup
        order = lookup.unwrap()

        if order.reviewer_id != getattr(reviewer, "pk", None):
            logger.warning(
                f"🔒 [Reviews] User {getattr(reviewer, 'pk', None)} tried to review order {order.id}",
                extra={"order_id": str(order.id), "user_id": getattr(reviewer, "pk", None)},
            )
            return Err(AuthorizationError("Only the assigned reviewer can submit this review"))

        state = cls._check_reviewable(order)
        if state.is_err():
            return state

        types = cls.resolve_required_types(order, required_types)
        validation = ReviewSubmissionValidator(types).validate(payload)
        if validation.is_err():
            error = validation.unwrap_err()
            logger.info(
                f"📝 [Reviews] Review for order {order.id} rejected: {sorted(error.errors)}",
                extra={"order_id": str(order.id), "fields": sorted(error.errors)},
            )
            return validation

        try:
            review = cls._complete_order_with_review(order, validation.unwrap(), reviewer)
        except (_CompletionLost, IntegrityError):
            logger.warning(
                f"⚠️ [Reviews] Order {order.id} was completed concurrently",
                extra={"order_id": str(order.id)},
            )
            return Err(ReviewAlreadySubmitted("A review has already been submitted for this order"))

        logger.info(
            f"✅ [Reviews] Review {review.id} delivered for order {order.id}",
            extra={"order_id": str(order.id), "review_id": str(review.id)},
        )
        cls._notify_artist(order)
        return Ok(review)

    @staticmethod
    def resolve_required_types(order: Order, supplied: Iterable[str] | None) -> list[str]:
        """
        Snapshot taken at checkout plus anything the caller asks for. Only an
        order without a snapshot falls back to the package's current settings.
        """
        types = set(normalize_review_types(order.required_review_types))
        if supplied is not None:
            types |= set(normalize_review_types(supplied))
        elif not types:
            types |= set(PackageCatalogService.current_review_types(order.reviewer_id, order.package_id))
        return normalize_review_types(types)

    @staticmethod
    def _check_reviewable(order: Order) -> Result[Order, BusinessError]:
        if order.status == Order.STATUS_PENDING:
            return Err(OrderNotPaid("Order has not been paid yet"))
        if order.status == Order.STATUS_COMPLETED:
            return Err(ReviewAlreadySubmitted("A review has already been submitted for this order"))
        return Ok(order)

    @staticmethod
    def _complete_order_with_review(order: Order, submission: ReviewSubmission, reviewer: Any) -> Review:
        with transaction.atomic():
            transition = OrderService.transition(
                order.id,
                Order.STATUS_COMPLETED,
                source=OrderStatusHistory.SOURCE_REVIEW,
                changed_by=reviewer,
                reason="Review submitted",
            )
            if transition.is_err() or not transition.unwrap().applied:
                raise _CompletionLost

            return Review.objects.create(
                order=order,
                reviewer=reviewer,
                reviewer_title=submission.reviewer_title,
                summary=submission.summary,
                highlights=submission.highlights,
                tags=submission.tags,
                scorecard=submission.scorecard,
                overall_rating=submission.overall_rating,
                written_feedback=submission.written_feedback,
                media_type=submission.media_type,
                video_url=submission.video_url,
                audio_url=submission.audio_url,
                media_title=submission.media_title,
                media_description=submission.media_description,
            )

    @staticmethod
    def _notify_artist(order: Order) -> None:
        if order.artist_id is None:
            return
        try:
            TrustedNotificationDispatcher.send(
                user_id=order.artist_id,
                title="Your review is ready",
                message=f'Your review for "{order.track_title}" has been delivered.',
                link=f"/orders/{order.id}/review",
                notification_type=Notification.TYPE_REVIEW,
            )
        except Exception as e:
            logger.warning(
                f"⚠️ [Reviews] Artist notification for order {order.id} failed: {e}",
                extra={"order_id": str(order.id)},
            )


class _CompletionLost(Exception):
    """Another submission completed the order first; rolls back this attempt"""
