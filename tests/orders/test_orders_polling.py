"""
Test suite for the bounded order status poller
"""

from unittest.mock import MagicMock

from django.test import TestCase, override_settings

from apps.orders.models import Order
from apps.orders.polling import OrderStatusPoller
from tests.factories.core import OrderCreationRequest, create_artist, create_order, create_package, create_reviewer


class OrderStatusPollerTestCase(TestCase):

    def test_stops_on_paid(self):
        fetch = MagicMock(side_effect=['pending', 'pending', 'paid', 'paid'])
        result = OrderStatusPoller(fetch, initial_delay=0, interval=0, max_duration=5).run()

        self.assertTrue(result.succeeded)
        self.assertEqual(result.status, 'paid')
        self.assertEqual(result.attempts, 3)
        self.assertEqual(fetch.call_count, 3)

    def test_completed_counts_as_success(self):
        result = OrderStatusPoller(lambda: 'completed', initial_delay=0, interval=0, max_duration=5).run()
        self.assertTrue(result.succeeded)

    def test_times_out(self):
        result = OrderStatusPoller(lambda: 'pending', initial_delay=0, interval=0.01, max_duration=0.05).run()

        self.assertTrue(result.timed_out)
        self.assertFalse(result.succeeded)
        self.assertEqual(result.status, 'pending')
        self.assertGreaterEqual(result.attempts, 1)

    def test_fetch_errors_do_not_stop_polling(self):
        fetch = MagicMock(side_effect=[ConnectionError('offline'), 'paid'])
        result = OrderStatusPoller(fetch, initial_delay=0, interval=0, max_duration=5).run()
        self.assertTrue(result.succeeded)
        self.assertEqual(result.attempts, 2)

    def test_cancel_before_first_check(self):
        fetch = MagicMock(return_value='paid')
        poller = OrderStatusPoller(fetch, initial_delay=10, interval=1, max_duration=30)
        poller.cancel()

        result = poller.run()

        self.assertTrue(result.cancelled)
        fetch.assert_not_called()

    def test_background_poll_reports_through_callback(self):
        seen = []
        poller = OrderStatusPoller(lambda: 'paid', initial_delay=0, interval=0, max_duration=5, on_result=seen.append)

        result = poller.start().wait(timeout=5)

        self.assertTrue(result.succeeded)
        self.assertEqual(seen, [result])

    def test_cannot_start_twice(self):
        poller = OrderStatusPoller(lambda: 'paid', initial_delay=0, interval=0, max_duration=1).start()
        poller.wait(timeout=5)
        with self.assertRaises(RuntimeError):
            poller.start()

    @override_settings(ORDER_STATUS_POLLING={'INITIAL_DELAY_SECONDS': 1, 'INTERVAL_SECONDS': 4, 'MAX_DURATION_SECONDS': 60})
    def test_defaults_come_from_settings(self):
        poller = OrderStatusPoller(lambda: None)
        self.assertEqual((poller.initial_delay, poller.interval, poller.max_duration), (1.0, 4.0, 60.0))

    def test_for_order_reads_database_status(self):
        order = create_order(
            OrderCreationRequest(package=create_package(create_reviewer()), artist=create_artist(), status=Order.STATUS_PAID)
        )
        result = OrderStatusPoller.for_order(order.id, initial_delay=0, interval=0, max_duration=1).run()
        self.assertEqual(result.status, Order.STATUS_PAID)
