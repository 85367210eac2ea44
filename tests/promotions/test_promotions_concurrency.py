"""
Concurrent redemption of promo codes
Threads race real database connections; every worker validates before any claims.
"""

import threading
from decimal import Decimal
from unittest.mock import patch

from django.db import connections
from django.test import TransactionTestCase

from apps.promotions.models import PromoCode, PromoCodeUsage
from apps.promotions.services import PromoCodeMaxUsesReached, PromoCodeService
from tests.factories.core import (
    OrderCreationRequest,
    create_artist,
    create_order,
    create_package,
    create_promo_code,
    create_reviewer,
)


class ConcurrentPromoApplyTestCase(TransactionTestCase):

    def setUp(self):
        self.artist = create_artist()
        self.package = create_package(create_reviewer(), price=Decimal('100.00'))

    def _race(self, code: str, workers: int) -> list:
        orders = [create_order(OrderCreationRequest(package=self.package, artist=self.artist)) for _ in range(workers)]
        barrier = threading.Barrier(workers)
        validate = PromoCodeService.validate
        results = [None] * workers
        failures = []

        def validate_then_wait(promo_code, now=None):
            # Every worker sees the code as usable before anyone claims it
            result = validate(promo_code, now)
            barrier.wait(timeout=10)
            return result

        def worker(index):
            try:
                results[index] = PromoCodeService.apply(code, orders[index], Decimal('100.00'))
            except Exception as e:  # noqa: BLE001
                failures.append(e)
            finally:
                connections.close_all()

        with patch.object(PromoCodeService, 'validate', side_effect=validate_then_wait):
            threads = [threading.Thread(target=worker, args=(i,)) for i in range(workers)]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join(timeout=30)

        self.assertEqual(failures, [])
        return results

    def test_last_use_claimed_by_exactly_one_worker(self):
        promo = create_promo_code(code='LASTONE', max_uses=1)

        results = self._race('LASTONE', workers=2)

        winners = [r for r in results if r.is_ok()]
        losers = [r for r in results if r.is_err()]
        self.assertEqual(len(winners), 1)
        self.assertEqual(len(losers), 1)
        self.assertIsInstance(losers[0].unwrap_err(), PromoCodeMaxUsesReached)
        promo.refresh_from_db()
        self.assertEqual(promo.current_uses, 1)
        self.assertEqual(PromoCodeUsage.objects.filter(promo_code=promo).count(), 1)

    def test_uses_never_exceed_max(self):
        promo = create_promo_code(code='FEW', max_uses=2)

        results = self._race('FEW', workers=4)

        self.assertEqual(sum(1 for r in results if r.is_ok()), 2)
        promo.refresh_from_db()
        self.assertEqual(promo.current_uses, 2)
        self.assertLessEqual(promo.current_uses, promo.max_uses)
        self.assertEqual(PromoCodeUsage.objects.filter(promo_code=promo).count(), 2)
        self.assertTrue(PromoCode.objects.filter(pk=promo.pk, current_uses__lte=2).exists())
