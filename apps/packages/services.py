"""
Package catalog services for the TrackReview platform.
Resolves a reviewer's purchasable packages for checkout and review validation.
"""

from __future__ import annotations

import logging
from typing import Any

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError

from apps.common.types import Err, NotFoundError, Ok, Result

from .models import ReviewerPackage

logger = logging.getLogger(__name__)

User = get_user_model()


class ReviewerNotFound(NotFoundError):
    code = "reviewer_not_found"


class PackageNotFound(NotFoundError):
    code = "package_not_found"


class PackageCatalogService:
    """Read access to reviewer package catalogs"""

    @staticmethod
    def get_reviewer(reviewer_id: Any) -> Result[Any, NotFoundError]:
        try:
            reviewer = User.objects.reviewers().get(pk=reviewer_id)
        except (User.DoesNotExist, ValueError, TypeError):
            return Err(ReviewerNotFound(f"Reviewer {reviewer_id} not found"))
        return Ok(reviewer)

    @classmethod
    def get_package(cls, reviewer_id: Any, package_id: Any) -> Result[ReviewerPackage, NotFoundError]:
        """
        Resolve a purchasable package. The package must belong to the reviewer
        and be active; anything else is reported as not found.
        """
        reviewer_result = cls.get_reviewer(reviewer_id)
        if reviewer_result.is_err():
            return reviewer_result

        try:
            package = ReviewerPackage.objects.select_related("reviewer").get(
                pk=package_id, reviewer=reviewer_result.unwrap(), is_active=True
            )
        except (ReviewerPackage.DoesNotExist, DjangoValidationError, ValueError):
            return Err(PackageNotFound(f"Package {package_id} not found for reviewer {reviewer_id}"))

        return Ok(package)

    @classmethod
    def current_review_types(cls, reviewer_id: Any, package_id: Any) -> list[str]:
        """
        Review types the package demands according to the reviewer's current catalog.
        Inactive packages still count; an order may outlive the offering.
        """
        package = ReviewerPackage.objects.filter(pk=package_id, reviewer_id=reviewer_id).first()
        if package is None:
            logger.warning(f"⚠️ [Packages] Package {package_id} no longer exists for reviewer {reviewer_id}")
            return []
        return list(package.review_types)
