"""
Test suite for the Stripe gateway
The Stripe SDK is patched; no network calls are made.
"""

from types import SimpleNamespace
from unittest.mock import patch

import stripe
from django.test import TestCase, override_settings

from apps.billing.gateways import PaymentGatewayFactory, StripeGateway


class StripeGatewayTestCase(TestCase):

    def setUp(self):
        self.gateway = StripeGateway()

    @patch('stripe.checkout.Session.create')
    def test_creates_embedded_session(self, mock_create):
        mock_create.return_value = SimpleNamespace(id='cs_test_1', client_secret='cs_test_1_secret')

        result = self.gateway.create_checkout_session(
            order_id='order-1',
            amount_cents=4500,
            currency='usd',
            product_name='Standard Review',
            metadata={'reviewer_id': '7'},
            customer_email='artist@example.com',
        )

        self.assertTrue(result['success'])
        self.assertEqual(result['client_secret'], 'cs_test_1_secret')
        params = mock_create.call_args.kwargs
        self.assertEqual(params['ui_mode'], 'embedded')
        self.assertEqual(params['redirect_on_completion'], 'never')
        self.assertEqual(params['line_items'][0]['price_data']['unit_amount'], 4500)
        self.assertEqual(params['metadata'], {'order_id': 'order-1', 'reviewer_id': '7'})
        self.assertEqual(params['payment_intent_data']['metadata']['order_id'], 'order-1')
        self.assertEqual(params['customer_email'], 'artist@example.com')

    @patch('stripe.checkout.Session.create')
    def test_provider_error_reported_not_raised(self, mock_create):
        mock_create.side_effect = stripe.APIConnectionError('network down')

        result = self.gateway.create_checkout_session('order-1', 4500, 'usd', 'Standard Review')

        self.assertFalse(result['success'])
        self.assertIn('network down', result['error'])

    @patch('stripe.checkout.Session.retrieve')
    def test_retrieve_session_status(self, mock_retrieve):
        mock_retrieve.return_value = SimpleNamespace(payment_status='paid', payment_intent='pi_123')

        result = self.gateway.retrieve_checkout_session('cs_test_1')

        self.assertEqual(result['payment_status'], 'paid')
        self.assertEqual(result['payment_intent_id'], 'pi_123')

    @patch('stripe.checkout.Session.retrieve')
    def test_retrieve_with_expanded_payment_intent(self, mock_retrieve):
        mock_retrieve.return_value = SimpleNamespace(
            payment_status='paid', payment_intent=SimpleNamespace(id='pi_456')
        )
        self.assertEqual(self.gateway.retrieve_checkout_session('cs_test_1')['payment_intent_id'], 'pi_456')

    @patch('stripe.checkout.Session.retrieve')
    def test_retrieve_failure(self, mock_retrieve):
        mock_retrieve.side_effect = stripe.APIConnectionError('timeout')
        result = self.gateway.retrieve_checkout_session('cs_test_1')
        self.assertFalse(result['success'])


class PaymentGatewayFactoryTestCase(TestCase):

    def test_default_gateway_is_stripe(self):
        self.assertIsInstance(PaymentGatewayFactory.get_default_gateway(), StripeGateway)
        self.assertIn('stripe', PaymentGatewayFactory.list_available_gateways())

    def test_unknown_gateway(self):
        with self.assertRaises(ValueError):
            PaymentGatewayFactory.create_gateway('paypal')

    @override_settings(STRIPE_SECRET_KEY='')
    def test_missing_secret_key(self):
        with self.assertRaises(ValueError):
            PaymentGatewayFactory.create_gateway('stripe')

    @override_settings(STRIPE_SECRET_KEY='pk_test_wrong_kind')
    def test_publishable_key_is_not_a_secret_key(self):
        with self.assertRaises(ValueError):
            PaymentGatewayFactory.create_gateway('stripe')
