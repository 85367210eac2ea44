"""
Review submission validation for the TrackReview platform.

Every rule is evaluated and all failures are reported together, keyed by
field, so the reviewer can fix the whole form in one pass. Nothing here
touches the database.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from django.conf import settings

from apps.common.types import Err, Ok, Result, ValidationError, ValidationErrors
from apps.packages.models import (
    REVIEW_TYPE_AUDIO,
    REVIEW_TYPE_SCORECARD,
    REVIEW_TYPE_VIDEO,
    REVIEW_TYPE_WRITTEN,
    normalize_review_types,
)

from .models import Review

VIDEO_URL_PATTERN = re.compile(r"\.mp4|video/mp4", re.IGNORECASE)
AUDIO_URL_PATTERN = re.compile(r"\.mp3|audio/mpeg|audio/mp3", re.IGNORECASE)

# Free-text fields stored in bounded columns
LENGTH_LIMITED_FIELDS = ("reviewer_title", "media_title", "video_url", "audio_url")

DEFAULT_RULES: dict[str, int] = {
    "SUMMARY_MIN_LENGTH": 100,
    "WRITTEN_MIN_LENGTH": 1000,
    "SCORECARD_SIZE": 16,
    "RATING_MIN": 1,
    "RATING_MAX": 5,
}


class ReviewValidationError(ValidationError):
    """All failed review rules, as {field: [messages]}"""

    code = "review_invalid"

    def __init__(self, errors: ValidationErrors):
        self.errors = errors
        first_field = next(iter(errors), "review")
        messages = [message for field_messages in errors.values() for message in field_messages]
        super().__init__(first_field, " ".join(messages))


@dataclass(frozen=True)
class ReviewSubmission:
    """Cleaned review content, ready to persist"""

    reviewer_title: str
    summary: str
    tags: list[str]
    scorecard: list[dict[str, Any]]
    overall_rating: int
    highlights: list[str] = field(default_factory=list)
    written_feedback: str = ""
    media_type: str = ""
    video_url: str = ""
    audio_url: str = ""
    media_title: str = ""
    media_description: str = ""


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _is_number(value: Any) -> bool:
    # bool is an int subclass; True is not a score
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return False
    return not (isinstance(value, float) and not math.isfinite(value))


class ReviewSubmissionValidator:
    """
    Validates a review payload against the review types a package promises.

    Base rules apply to every review. The written, video and audio rules only
    apply when that type is required; the scorecard size rule always applies.
    """

    def __init__(self, required_types: Iterable[str] | None = None, rules: dict[str, int] | None = None):
        self.required_types = normalize_review_types(required_types)
        configured = getattr(settings, "REVIEW_SUBMISSION", {})
        self.rules = {**DEFAULT_RULES, **configured, **(rules or {})}
        self._errors: ValidationErrors = {}

    def validate(self, payload: Any) -> Result[ReviewSubmission, ReviewValidationError]:
        if not isinstance(payload, dict):
            return Err(ReviewValidationError({"review": ["Review payload must be an object"]}))

        self._errors = {}

        reviewer_title = self._check_title(payload.get("reviewer_title"))
        summary = self._check_summary(payload.get("summary"))
        tags = self._check_tags(payload.get("tags"))
        rating = self._check_rating(payload.get("overall_rating"))
        scorecard = self._check_scorecard(payload.get("scorecard"))
        written = self._check_written(payload.get("written_feedback"))
        media = self._check_media(payload)
        self._check_lengths({"reviewer_title": reviewer_title, **media})

        if self._errors:
            return Err(ReviewValidationError(self._errors))

        return Ok(
            ReviewSubmission(
                reviewer_title=reviewer_title,
                summary=summary,
                tags=tags,
                scorecard=scorecard,
                overall_rating=rating,
                highlights=[_text(h) for h in payload.get("highlights") or [] if _text(h)],
                written_feedback=written,
                **media,
            )
        )

    def _add(self, field_name: str, message: str) -> None:
        self._errors.setdefault(field_name, []).append(message)

    def _requires(self, review_type: str) -> bool:
        return review_type in self.required_types

    # ===============================================================================
    # BASE RULES
    # ===============================================================================

    def _check_title(self, value: Any) -> str:
        title = _text(value)
        if not title:
            self._add("reviewer_title", "Reviewer title is required")
        return title

    def _check_summary(self, value: Any) -> str:
        summary = _text(value)
        minimum = self.rules["SUMMARY_MIN_LENGTH"]
        if len(summary) < minimum:
            self._add("summary", f"Summary must be at least {minimum} characters (currently {len(summary)} characters)")
        return summary

    def _check_tags(self, value: Any) -> list[str]:
        if not isinstance(value, list):
            self._add("tags", "At least one tag is required")
            return []
        tags = list(dict.fromkeys(_text(tag) for tag in value if _text(tag)))
        if not tags:
            self._add("tags", "At least one tag is required")
        return tags

    def _check_rating(self, value: Any) -> int:
        low, high = self.rules["RATING_MIN"], self.rules["RATING_MAX"]
        if not _is_number(value) or value != int(value) or not low <= value <= high:
            self._add("overall_rating", f"Overall rating must be a whole number from {low} to {high}")
            return 0
        return int(value)

    def _check_scorecard(self, value: Any) -> list[dict[str, Any]]:
        size = self.rules["SCORECARD_SIZE"]
        if not isinstance(value, list) or len(value) != size:
            count = len(value) if isinstance(value, list) else 0
            if self._requires(REVIEW_TYPE_SCORECARD):
                self._add("scorecard", f"Scorecard is required for this package and must have all {size} entries")
            self._add("scorecard", f"Scorecard must have exactly {size} entries (currently {count})")
            return []

        cleaned: list[dict[str, Any]] = []
        for position, entry in enumerate(value, start=1):
            metric = _text(entry.get("metric")) if isinstance(entry, dict) else ""
            score = entry.get("score") if isinstance(entry, dict) else None
            if not metric:
                self._add("scorecard", f"Entry {position}: metric name is required")
            if not _is_number(score) or score < 0:
                self._add("scorecard", f"Entry {position}: score must be a number of at least 0")
                continue
            cleaned.append({"metric": metric, "score": float(score) if isinstance(score, Decimal) else score})
        return cleaned

    # ===============================================================================
    # PACKAGE RULES
    # ===============================================================================

    def _check_written(self, value: Any) -> str:
        written = _text(value)
        if not self._requires(REVIEW_TYPE_WRITTEN):
            return written

        minimum = self.rules["WRITTEN_MIN_LENGTH"]
        if len(written) < minimum:
            self._add(
                "written_feedback",
                f"Written review must be at least {minimum} characters "
                f"(currently {len(written)} characters, {minimum - len(written)} more needed)",
            )
        return written

    def _check_media(self, payload: dict[str, Any]) -> dict[str, str]:
        media_type = _text(payload.get("media_type")).lower()
        video_url = _text(payload.get("video_url"))
        audio_url = _text(payload.get("audio_url"))
        title = _text(payload.get("media_title"))

        if self._requires(REVIEW_TYPE_VIDEO):
            self._check_media_kind(Review.MEDIA_VIDEO, media_type, video_url, title, VIDEO_URL_PATTERN, "MP4")
        if self._requires(REVIEW_TYPE_AUDIO):
            self._check_media_kind(Review.MEDIA_AUDIO, media_type, audio_url, title, AUDIO_URL_PATTERN, "MP3")

        if media_type not in (Review.MEDIA_VIDEO, Review.MEDIA_AUDIO):
            media_type = Review.MEDIA_NONE
        return {
            "media_type": media_type,
            "video_url": video_url,
            "audio_url": audio_url,
            "media_title": title,
            "media_description": _text(payload.get("media_description")),
        }

    def _check_media_kind(  # noqa: PLR0913
        self, kind: str, media_type: str, url: str, title: str, pattern: re.Pattern[str], file_format: str
    ) -> None:
        url_field = f"{kind}_url"
        if media_type != kind:
            self._add("media_type", f"A {kind} review is required for this package")
        if not url:
            self._add(url_field, f"{kind.capitalize()} review is required for this package. Please upload an {file_format} file.")
        elif not pattern.search(url):
            self._add(url_field, f"{kind.capitalize()} review must be in {file_format} format")
        if not title:
            self._add("media_title", f"{kind.capitalize()} title is required")

    def _check_lengths(self, values: dict[str, str]) -> None:
        for field_name in LENGTH_LIMITED_FIELDS:
            limit = Review._meta.get_field(field_name).max_length
            value = values.get(field_name, "")
            if len(value) > limit:
                label = field_name.replace("_", " ").capitalize()
                self._add(field_name, f"{label} must be at most {limit} characters (currently {len(value)} characters)")
