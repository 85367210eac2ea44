"""
Test suite for reviewer packages and catalog lookups
"""

import uuid

from django.core.exceptions import ValidationError
from django.test import TestCase

from apps.packages.models import ReviewerPackage
from apps.packages.services import PackageCatalogService, PackageNotFound, ReviewerNotFound
from tests.factories.core import create_artist, create_package, create_reviewer


class ReviewerPackageModelTestCase(TestCase):

    def test_review_types_normalized_on_save(self):
        package = create_package(create_reviewer(), review_types=['Written', 'scorecard', 'written'])
        self.assertEqual(package.review_types, ['scorecard', 'written'])

    def test_video_and_audio_together_rejected(self):
        package = ReviewerPackage(reviewer=create_reviewer(), name='Both', price='10.00', review_types=['video', 'audio'])
        with self.assertRaises(ValidationError):
            package.full_clean()

    def test_unknown_review_type_rejected(self):
        package = ReviewerPackage(reviewer=create_reviewer(), name='Odd', price='10.00', review_types=['interpretive dance'])
        with self.assertRaises(ValidationError):
            package.full_clean()


class PackageCatalogServiceTestCase(TestCase):

    def setUp(self):
        self.reviewer = create_reviewer()
        self.package = create_package(self.reviewer)

    def test_get_package(self):
        self.assertEqual(PackageCatalogService.get_package(self.reviewer.pk, self.package.pk).unwrap(), self.package)

    def test_package_of_another_reviewer(self):
        result = PackageCatalogService.get_package(create_reviewer().pk, self.package.pk)
        self.assertIsInstance(result.unwrap_err(), PackageNotFound)

    def test_artist_is_not_a_reviewer(self):
        result = PackageCatalogService.get_package(create_artist().pk, self.package.pk)
        self.assertIsInstance(result.unwrap_err(), ReviewerNotFound)

    def test_malformed_package_id(self):
        result = PackageCatalogService.get_package(self.reviewer.pk, 'not-a-uuid')
        self.assertIsInstance(result.unwrap_err(), PackageNotFound)

    def test_current_review_types_includes_inactive_packages(self):
        self.package.is_active = False
        self.package.save()
        self.assertEqual(
            PackageCatalogService.current_review_types(self.reviewer.pk, self.package.pk), ['scorecard', 'written']
        )

    def test_current_review_types_for_missing_package(self):
        self.assertEqual(PackageCatalogService.current_review_types(self.reviewer.pk, uuid.uuid4()), [])
