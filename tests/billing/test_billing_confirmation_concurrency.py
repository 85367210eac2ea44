"""
Concurrent payment confirmation
Webhook, backup event and manual verification may land at the same moment.
"""

import threading

from django.db import connections
from django.test import TransactionTestCase

from apps.billing.payment_service import ConfirmationOutcome, PaymentConfirmationService
from apps.notifications.models import Notification
from apps.orders.models import Order, OrderStatusHistory
from tests.factories.core import OrderCreationRequest, create_artist, create_order, create_package, create_reviewer


class ConcurrentConfirmPaymentTestCase(TransactionTestCase):

    def setUp(self):
        self.reviewer = create_reviewer()
        self.order = create_order(
            OrderCreationRequest(package=create_package(self.reviewer), artist=create_artist(), stripe_session_id='cs_test_race')
        )

    def test_only_one_channel_applies_the_transition(self):
        sources = [OrderStatusHistory.SOURCE_WEBHOOK, OrderStatusHistory.SOURCE_WEBHOOK, OrderStatusHistory.SOURCE_MANUAL]
        barrier = threading.Barrier(len(sources))
        outcomes = [None] * len(sources)
        failures = []

        def worker(index):
            try:
                barrier.wait(timeout=10)
                outcomes[index] = PaymentConfirmationService.confirm_payment(self.order.id, source=sources[index])
            except Exception as e:  # noqa: BLE001
                failures.append(e)
            finally:
                connections.close_all()

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(len(sources))]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        self.assertEqual(failures, [])
        statuses = sorted(outcome.status for outcome in outcomes)
        self.assertEqual(
            statuses,
            [ConfirmationOutcome.ALREADY_CONFIRMED, ConfirmationOutcome.ALREADY_CONFIRMED, ConfirmationOutcome.CONFIRMED],
        )
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.STATUS_PAID)
        self.assertEqual(
            OrderStatusHistory.objects.filter(order=self.order, new_status=Order.STATUS_PAID).count(), 1
        )
        self.assertEqual(
            Notification.objects.filter(user=self.reviewer, notification_type=Notification.TYPE_ORDER).count(), 1
        )
