"""
Test suite for the order API endpoints
Checkout, status polling, manual payment verification and review submission over HTTP.
"""

import uuid
from decimal import Decimal
from unittest.mock import MagicMock, patch

import stripe
from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from apps.orders.models import Order
from apps.reviews.models import Review
from tests.factories.core import (
    OrderCreationRequest,
    build_review_payload,
    create_artist,
    create_order,
    create_package,
    create_promo_code,
    create_reviewer,
)


class CheckoutAPITestCase(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.url = reverse('api:checkout')
        self.reviewer = create_reviewer()
        self.package = create_package(self.reviewer, price=Decimal('100.00'))
        gateway = MagicMock()
        gateway.create_checkout_session.return_value = {
            'success': True, 'session_id': 'cs_test_api', 'client_secret': 'cs_test_api_secret', 'error': None,
        }
        patcher = patch('apps.orders.checkout.PaymentGatewayFactory.get_default_gateway', return_value=gateway)
        patcher.start()
        self.addCleanup(patcher.stop)

    def _payload(self, **overrides):
        payload = {
            'reviewer_id': self.reviewer.pk,
            'package_id': str(self.package.pk),
            'track_url': 'https://soundcloud.com/example/track',
            'track_title': 'Night Drive',
        }
        payload.update(overrides)
        return payload

    def test_authenticated_checkout(self):
        artist = create_artist()
        self.client.force_authenticate(user=artist)

        response = self.client.post(self.url, self._payload(promo_code='SAVE10'), format='json')

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.data['client_secret'], 'cs_test_api_secret')
        order = Order.objects.get(pk=response.data['order_id'])
        self.assertEqual(order.artist, artist)

    def test_guest_checkout(self):
        response = self.client.post(self.url, self._payload(guest_email='guest@example.com'), format='json')

        self.assertEqual(response.status_code, 201)
        self.assertIsNone(Order.objects.get(pk=response.data['order_id']).artist)

    def test_guest_without_email(self):
        response = self.client.post(self.url, self._payload(), format='json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['field'], 'guest_email')

    def test_price_is_never_taken_from_the_client(self):
        self.client.force_authenticate(user=create_artist())
        response = self.client.post(self.url, self._payload(price_total='0.01'), format='json')
        self.assertEqual(Order.objects.get(pk=response.data['order_id']).price_total, Decimal('100.00'))

    def test_promo_code_applied(self):
        create_promo_code(code='SAVE10')
        self.client.force_authenticate(user=create_artist())

        response = self.client.post(self.url, self._payload(promo_code='SAVE10'), format='json')

        self.assertEqual(Order.objects.get(pk=response.data['order_id']).price_total, Decimal('90.00'))

    def test_invalid_input(self):
        response = self.client.post(self.url, self._payload(track_url='not a url'), format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('track_url', response.data['details'])

    def test_unknown_package_is_404(self):
        response = self.client.post(
            self.url, self._payload(package_id=str(uuid.uuid4()), guest_email='g@example.com'), format='json'
        )
        self.assertEqual(response.status_code, 404)


class OrderStatusAPITestCase(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.artist = create_artist()
        self.order = create_order(OrderCreationRequest(package=create_package(create_reviewer()), artist=self.artist))
        self.url = reverse('api:orders:order_status', kwargs={'order_id': self.order.id})

    def test_owner_sees_status(self):
        self.client.force_authenticate(user=self.artist)
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data['status'], 'pending')
        self.assertFalse(response.data['is_paid'])

    def test_stranger_forbidden(self):
        self.client.force_authenticate(user=create_artist())
        self.assertEqual(self.client.get(self.url).status_code, 403)

    def test_anonymous_unauthorized(self):
        self.assertEqual(self.client.get(self.url).status_code, 401)


class VerifyPaymentAPITestCase(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.artist = create_artist()
        self.order = create_order(
            OrderCreationRequest(
                package=create_package(create_reviewer()), artist=self.artist, stripe_session_id='cs_test_verify'
            )
        )
        self.url = reverse('api:orders:verify_payment', kwargs={'order_id': self.order.id})
        self.client.force_authenticate(user=self.artist)

    @patch('stripe.checkout.Session.retrieve')
    def test_paid_at_provider(self, mock_retrieve):
        mock_retrieve.return_value = MagicMock(payment_status='paid', payment_intent='pi_api')

        response = self.client.post(self.url)

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['status'], 'paid')

    @patch('stripe.checkout.Session.retrieve')
    def test_not_paid_at_provider(self, mock_retrieve):
        mock_retrieve.return_value = MagicMock(payment_status='unpaid', payment_intent=None)

        response = self.client.post(self.url)

        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.data['success'])
        self.assertEqual(response.data['error'], 'Payment status: unpaid. Payment has not been completed.')
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_PENDING)

    @patch('stripe.checkout.Session.retrieve')
    def test_provider_unreachable(self, mock_retrieve):
        mock_retrieve.side_effect = stripe.APIConnectionError('timeout')

        response = self.client.post(self.url)

        self.assertEqual(response.status_code, 502)
        self.assertTrue(response.data['retryable'])


class SubmitReviewAPITestCase(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.reviewer = create_reviewer()
        self.order = create_order(
            OrderCreationRequest(
                package=create_package(self.reviewer), artist=create_artist(), status=Order.STATUS_PAID
            )
        )
        self.url = reverse('api:orders:submit_review', kwargs={'order_id': self.order.id})
        self.client.force_authenticate(user=self.reviewer)

    def test_submit_review(self):
        response = self.client.post(self.url, build_review_payload(), format='json')

        self.assertEqual(response.status_code, 201)
        self.assertTrue(Review.objects.filter(pk=response.data['review_id']).exists())

    def test_validation_errors_listed_per_field(self):
        response = self.client.post(self.url, build_review_payload(written_feedback='w' * 900, tags=[]), format='json')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data['code'], 'review_invalid')
        self.assertEqual(set(response.data['errors']), {'written_feedback', 'tags'})

    def test_duplicate_submission_conflicts(self):
        self.client.post(self.url, build_review_payload(), format='json')
        response = self.client.post(self.url, build_review_payload(), format='json')
        self.assertEqual(response.status_code, 409)

    def test_required_types_from_caller(self):
        response = self.client.post(self.url, {**build_review_payload(), 'required_types': ['audio']}, format='json')
        self.assertEqual(response.status_code, 400)
        self.assertIn('audio_url', response.data['errors'])
