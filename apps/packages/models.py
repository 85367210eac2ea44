"""
Reviewer package models for the TrackReview platform.
A package is a priced review offering with the review components it promises.
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Any, ClassVar

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

# ===============================================================================
# Review component types
# ===============================================================================

REVIEW_TYPE_SCORECARD = "scorecard"
REVIEW_TYPE_WRITTEN = "written"
REVIEW_TYPE_VIDEO = "video"
REVIEW_TYPE_AUDIO = "audio"

REVIEW_TYPES: tuple[str, ...] = (
    REVIEW_TYPE_SCORECARD,
    REVIEW_TYPE_WRITTEN,
    REVIEW_TYPE_VIDEO,
    REVIEW_TYPE_AUDIO,
)


def normalize_review_types(values: Any) -> list[str]:
    """Known review types from an arbitrary iterable, deduplicated, in canonical order"""
    if not values:
        return []
    wanted = {str(v).strip().lower() for v in values}
    return [t for t in REVIEW_TYPES if t in wanted]


class ReviewerPackage(models.Model):
    """
    Priced offering in a reviewer's catalog.
    Orders snapshot `review_types` at checkout so later edits never change what was bought.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    reviewer = models.ForeignKey(
        "users.User",
        on_delete=models.CASCADE,
        related_name="packages",
    )

    name = models.CharField(max_length=120)
    description = models.TextField(blank=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text=_("Price in major currency units"),
    )
    review_types = models.JSONField(
        default=list,
        blank=True,
        help_text=_("Components this package delivers: scorecard, written, video, audio"),
    )
    turnaround_days = models.PositiveIntegerField(default=7)

    is_active = models.BooleanField(default=True)
    sort_order = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "reviewer_packages"
        verbose_name = _("Reviewer Package")
        verbose_name_plural = _("Reviewer Packages")
        ordering: ClassVar[tuple[str, ...]] = ("reviewer", "sort_order", "price")
        indexes: ClassVar[tuple[models.Index, ...]] = (
            models.Index(fields=["reviewer", "is_active"], name="package_reviewer_active_idx"),
        )

    def __str__(self) -> str:
        return f"{self.name} ({self.price})"

    def save(self, *args: Any, **kwargs: Any) -> None:
        self.review_types = normalize_review_types(self.review_types)
        super().save(*args, **kwargs)

    def clean(self) -> None:
        super().clean()
        unknown = {str(v).lower() for v in self.review_types or []} - set(REVIEW_TYPES)
        if unknown:
            raise ValidationError({"review_types": f"Unknown review types: {', '.join(sorted(unknown))}"})
        types = normalize_review_types(self.review_types)
        if REVIEW_TYPE_VIDEO in types and REVIEW_TYPE_AUDIO in types:
            raise ValidationError({"review_types": "A package can include a video or an audio review, not both"})
