"""
Review models for the TrackReview platform
A review is the deliverable for exactly one completed order and is never edited.
"""

from __future__ import annotations

import uuid
from typing import ClassVar

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class Review(models.Model):
    """
    Reviewer's feedback on an artist's track.
    Created only by ReviewSubmissionService in the same transaction that
    completes the order.
    """

    MEDIA_NONE = ""
    MEDIA_VIDEO = "video"
    MEDIA_AUDIO = "audio"
    MEDIA_CHOICES: ClassVar[tuple[tuple[str, str], ...]] = (
        (MEDIA_NONE, _("None")),
        (MEDIA_VIDEO, _("Video")),
        (MEDIA_AUDIO, _("Audio")),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.OneToOneField("orders.Order", on_delete=models.PROTECT, related_name="review")
    reviewer = models.ForeignKey("users.User", on_delete=models.PROTECT, related_name="reviews_written")

    # Always present
    reviewer_title = models.CharField(max_length=200)
    summary = models.TextField()
    highlights = models.JSONField(default=list, blank=True)
    tags = models.JSONField(default=list)
    scorecard = models.JSONField(default=list, help_text=_("List of {metric, score} entries"))
    overall_rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])

    # Package dependent
    written_feedback = models.TextField(blank=True)
    media_type = models.CharField(max_length=10, choices=MEDIA_CHOICES, blank=True, default=MEDIA_NONE)
    video_url = models.URLField(max_length=500, blank=True)
    audio_url = models.URLField(max_length=500, blank=True)
    media_title = models.CharField(max_length=200, blank=True)
    media_description = models.TextField(blank=True)

    published_date = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "reviews"
        verbose_name = _("Review")
        verbose_name_plural = _("Reviews")
        ordering: ClassVar[tuple[str, ...]] = ("-published_date",)
        constraints: ClassVar[tuple[models.BaseConstraint, ...]] = (
            models.CheckConstraint(
                condition=Q(overall_rating__gte=1) & Q(overall_rating__lte=5), name="review_rating_in_range"
            ),
        )

    def __str__(self) -> str:
        return f"Review of {self.order_id} by {self.reviewer_id}"

    @property
    def media_url(self) -> str:
        if self.media_type == self.MEDIA_VIDEO:
            return self.video_url
        if self.media_type == self.MEDIA_AUDIO:
            return self.audio_url
        return ""
