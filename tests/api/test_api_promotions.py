"""
Test suite for the promotions API endpoints
"""

import uuid
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from apps.promotions.models import PromoCode
from tests.factories.core import create_admin, create_artist, create_package, create_promo_code, create_reviewer


class ValidatePromoCodeAPITestCase(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.url = reverse('api:promotions:validate')
        create_promo_code(code='SAVE10')

    def test_validate_only(self):
        response = self.client.post(self.url, {'code': 'save10'}, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data['valid'])
        self.assertEqual(response.data['code'], 'SAVE10')

    def test_preview_against_package(self):
        reviewer = create_reviewer()
        package = create_package(reviewer, price=Decimal('100.00'))

        response = self.client.post(
            self.url, {'code': 'SAVE10', 'reviewer_id': reviewer.pk, 'package_id': str(package.pk)}, format='json'
        )

        self.assertEqual(response.data['discount_amount'], '10.00')
        self.assertEqual(response.data['discounted_price'], '90.00')
        self.assertEqual(PromoCode.objects.get(code='SAVE10').current_uses, 0)

    def test_unknown_code(self):
        response = self.client.post(self.url, {'code': 'NOPE'}, format='json')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data['code'], 'promo_not_found')

    def test_package_without_reviewer(self):
        response = self.client.post(self.url, {'code': 'SAVE10', 'package_id': str(uuid.uuid4())}, format='json')
        self.assertEqual(response.status_code, 400)


class PromoCodeAdminAPITestCase(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.client.force_authenticate(user=create_admin())
        self.list_url = reverse('api:promotions:promo_code_list')

    def test_create_and_list(self):
        response = self.client.post(
            self.list_url, {'code': 'launch20', 'discount_type': 'percentage', 'discount_value': '20'}, format='json'
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['code'], 'LAUNCH20')

        listing = self.client.get(self.list_url)
        self.assertEqual([p['code'] for p in listing.data['results']], ['LAUNCH20'])

    def test_duplicate_is_409(self):
        create_promo_code(code='DUP')
        response = self.client.post(self.list_url, {'code': 'dup', 'discount_value': '5'}, format='json')
        self.assertEqual(response.status_code, 409)

    def test_deactivate(self):
        promo = create_promo_code(code='OFF')
        url = reverse('api:promotions:promo_code_update', kwargs={'promo_code_id': promo.id})

        response = self.client.patch(url, {'is_active': False}, format='json')

        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.data['is_active'])

    def test_usage_ledger(self):
        promo = create_promo_code(code='USED')
        url = reverse('api:promotions:promo_code_usage', kwargs={'promo_code_id': promo.id})
        response = self.client.get(url)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['results'], [])

    def test_non_admin_forbidden(self):
        self.client.force_authenticate(user=create_artist())
        self.assertEqual(self.client.get(self.list_url).status_code, 403)
