"""
Test suite for the webhook ledger admin
"""

from django.contrib.admin.sites import AdminSite
from django.test import RequestFactory, TestCase

from apps.integrations.admin import WebhookEventAdmin
from apps.integrations.models import WebhookEvent
from tests.factories.core import create_admin
from tests.factories.stripe_events import checkout_session_completed


class WebhookEventAdminTestCase(TestCase):

    def setUp(self):
        self.model_admin = WebhookEventAdmin(WebhookEvent, AdminSite())
        self.request = RequestFactory().get('/admin/integrations/webhookevent/')
        self.request.user = create_admin()

    def _event(self, payload):
        return WebhookEvent.objects.create(
            source='stripe',
            event_id=payload.get('id', 'evt_admin'),
            event_type=payload.get('type', 'unknown'),
            payload=payload,
        )

    def test_order_reference_from_metadata(self):
        event = self._event(checkout_session_completed('evt_admin_1', 'order-123'))
        self.assertEqual(self.model_admin.order_reference(event), 'order-123')

    def test_order_reference_missing(self):
        event = self._event({'id': 'evt_admin_2', 'type': 'customer.created', 'data': {'object': {}}})
        self.assertEqual(self.model_admin.order_reference(event), '-')

    def test_ledger_is_read_only(self):
        event = self._event({'id': 'evt_admin_3', 'type': 'customer.created'})
        self.assertFalse(self.model_admin.has_add_permission(self.request))
        self.assertFalse(self.model_admin.has_change_permission(self.request, event))
        self.assertIn('payload', self.model_admin.get_readonly_fields(self.request, event))

    def test_processing_time_pending_event(self):
        event = self._event({'id': 'evt_admin_4', 'type': 'customer.created'})
        self.assertEqual(self.model_admin.processing_time(event), '-')
