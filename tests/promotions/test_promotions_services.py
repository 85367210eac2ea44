"""
Test suite for promo code services
Validation, clamped discount calculation and the guarded usage increment.
"""

from datetime import timedelta
from decimal import Decimal
from unittest.mock import patch

from django.test import TestCase
from django.utils import timezone

from apps.common.types import ConflictError, Ok
from apps.orders.models import Order
from apps.promotions.models import PromoCode, PromoCodeUsage
from apps.promotions.services import (
    DiscountSpec,
    PromoCodeExpired,
    PromoCodeMaxUsesReached,
    PromoCodeNotFound,
    PromoCodeService,
)
from tests.factories.core import (
    OrderCreationRequest,
    create_artist,
    create_order,
    create_package,
    create_promo_code,
    create_reviewer,
)


class PromoCodeCalculationTestCase(TestCase):
    """Discount arithmetic, no database rows involved"""

    def test_percentage_discount(self):
        discount = PromoCodeService.calculate_discount(PromoCode.DISCOUNT_PERCENTAGE, Decimal('10'), Decimal('100.00'))
        self.assertEqual(discount, Decimal('10.00'))

    def test_percentage_discount_rounds_to_cents(self):
        discount = PromoCodeService.calculate_discount(PromoCode.DISCOUNT_PERCENTAGE, Decimal('15'), Decimal('19.99'))
        self.assertEqual(discount, Decimal('3.00'))  # 2.9985 rounds half up

    def test_fixed_discount_clamped_to_price(self):
        discount = PromoCodeService.calculate_discount(PromoCode.DISCOUNT_FIXED, Decimal('80.00'), Decimal('50.00'))
        self.assertEqual(discount, Decimal('50.00'))

    def test_negative_discount_clamped_to_zero(self):
        discount = PromoCodeService.calculate_discount(PromoCode.DISCOUNT_FIXED, Decimal('-5.00'), Decimal('50.00'))
        self.assertEqual(discount, Decimal('0.00'))

    def test_zero_price_gets_no_discount(self):
        discount = PromoCodeService.calculate_discount(PromoCode.DISCOUNT_PERCENTAGE, Decimal('50'), Decimal('0.00'))
        self.assertEqual(discount, Decimal('0.00'))


class PromoCodeValidationTestCase(TestCase):

    def test_code_lookup_is_case_insensitive(self):
        create_promo_code(code='SAVE10')
        result = PromoCodeService.validate('  save10 ')
        self.assertTrue(result.is_ok())
        self.assertEqual(result.unwrap().code, 'SAVE10')

    def test_unknown_code(self):
        result = PromoCodeService.validate('NOPE')
        self.assertIsInstance(result.unwrap_err(), PromoCodeNotFound)

    def test_inactive_code_reported_as_not_found(self):
        create_promo_code(code='OLD', is_active=False)
        result = PromoCodeService.validate('OLD')
        self.assertIsInstance(result.unwrap_err(), PromoCodeNotFound)

    def test_expired_code(self):
        create_promo_code(code='GONE', valid_until=timezone.now() - timedelta(hours=1))
        result = PromoCodeService.validate('GONE')
        self.assertIsInstance(result.unwrap_err(), PromoCodeExpired)

    def test_not_yet_valid_code(self):
        create_promo_code(code='SOON', valid_from=timezone.now() + timedelta(days=2))
        result = PromoCodeService.validate('SOON')
        self.assertIsInstance(result.unwrap_err(), PromoCodeExpired)

    def test_exhausted_code(self):
        create_promo_code(code='FULL', max_uses=3, current_uses=3)
        result = PromoCodeService.validate('FULL')
        self.assertIsInstance(result.unwrap_err(), PromoCodeMaxUsesReached)

    def test_preview_does_not_consume_a_use(self):
        promo = create_promo_code(code='SAVE10', max_uses=1)
        result = PromoCodeService.preview('SAVE10', Decimal('100.00'))
        self.assertEqual(result.unwrap().discounted_price, Decimal('90.00'))
        promo.refresh_from_db()
        self.assertEqual(promo.current_uses, 0)


class PromoCodeApplyTestCase(TestCase):
    """Redemption against real orders"""

    def setUp(self):
        self.artist = create_artist()
        self.package = create_package(create_reviewer(), price=Decimal('100.00'))

    def _order(self) -> Order:
        return create_order(OrderCreationRequest(package=self.package, artist=self.artist))

    def test_save10_on_100_dollar_order(self):
        create_promo_code(code='SAVE10', discount_value=Decimal('10'))
        order = self._order()

        result = PromoCodeService.apply('SAVE10', order, Decimal('100.00'), user=self.artist)

        applied = result.unwrap()
        self.assertEqual(applied.discount_amount, Decimal('10.00'))
        self.assertEqual(applied.discounted_price, Decimal('90.00'))
        self.assertTrue(PromoCodeUsage.objects.filter(pk=applied.usage_id, order=order).exists())

    def test_apply_increments_usage_counter(self):
        promo = create_promo_code(code='SAVE10', max_uses=5)
        PromoCodeService.apply('SAVE10', self._order(), Decimal('100.00'))
        promo.refresh_from_db()
        self.assertEqual(promo.current_uses, 1)

    def test_last_use_can_only_be_claimed_once(self):
        promo = create_promo_code(code='LAST', max_uses=1)

        first = PromoCodeService.apply('LAST', self._order(), Decimal('100.00'))
        second = PromoCodeService.apply('LAST', self._order(), Decimal('100.00'))

        self.assertTrue(first.is_ok())
        self.assertIsInstance(second.unwrap_err(), PromoCodeMaxUsesReached)
        promo.refresh_from_db()
        self.assertEqual(promo.current_uses, 1)
        self.assertEqual(PromoCodeUsage.objects.filter(promo_code=promo).count(), 1)

    def test_guarded_increment_rejects_stale_validation(self):
        """A redemption validated before another took the last use must still fail"""
        promo = create_promo_code(code='RACE', max_uses=2, current_uses=2)
        stale = Ok(DiscountSpec(promo.id, promo.code, promo.discount_type, promo.discount_value))

        with patch.object(PromoCodeService, 'validate', return_value=stale):
            result = PromoCodeService.apply('RACE', self._order(), Decimal('100.00'))

        self.assertIsInstance(result.unwrap_err(), PromoCodeMaxUsesReached)
        promo.refresh_from_db()
        self.assertEqual(promo.current_uses, 2)
        self.assertFalse(PromoCodeUsage.objects.filter(promo_code=promo).exists())

    def test_guarded_increment_rejects_code_deactivated_after_validation(self):
        promo = create_promo_code(code='OFF')
        stale = Ok(DiscountSpec(promo.id, promo.code, promo.discount_type, promo.discount_value))
        PromoCode.objects.filter(pk=promo.pk).update(is_active=False)

        with patch.object(PromoCodeService, 'validate', return_value=stale):
            result = PromoCodeService.apply('OFF', self._order(), Decimal('100.00'))

        self.assertIsInstance(result.unwrap_err(), PromoCodeNotFound)

    def test_same_code_twice_on_one_order_conflicts(self):
        promo = create_promo_code(code='TWICE')
        order = self._order()

        PromoCodeService.apply('TWICE', order, Decimal('100.00'))
        result = PromoCodeService.apply('TWICE', order, Decimal('100.00'))

        self.assertIsInstance(result.unwrap_err(), ConflictError)
        promo.refresh_from_db()
        self.assertEqual(promo.current_uses, 1)

    def test_unlimited_code(self):
        promo = create_promo_code(code='FOREVER', max_uses=None)
        for _ in range(3):
            self.assertTrue(PromoCodeService.apply('FOREVER', self._order(), Decimal('100.00')).is_ok())
        promo.refresh_from_db()
        self.assertEqual(promo.current_uses, 3)


class PromoCodeReleaseTestCase(TestCase):
    """Giving back a use whose order never reached the payment provider"""

    def setUp(self):
        self.package = create_package(create_reviewer(), price=Decimal('100.00'))
        self.order = create_order(OrderCreationRequest(package=self.package, artist=create_artist()))

    def test_release_returns_the_use(self):
        promo = create_promo_code(code='BACK', max_uses=1)
        PromoCodeService.apply('BACK', self.order, Decimal('100.00'))

        self.assertTrue(PromoCodeService.release(self.order))

        promo.refresh_from_db()
        self.assertEqual(promo.current_uses, 0)
        self.assertFalse(PromoCodeUsage.objects.filter(order=self.order).exists())
        self.assertTrue(PromoCodeService.validate('BACK').is_ok())

    def test_release_without_redemption(self):
        promo = create_promo_code(code='NONE', current_uses=3)
        self.assertFalse(PromoCodeService.release(self.order))
        promo.refresh_from_db()
        self.assertEqual(promo.current_uses, 3)

    def test_release_never_goes_below_zero(self):
        promo = create_promo_code(code='FLOOR')
        PromoCodeService.apply('FLOOR', self.order, Decimal('100.00'))
        PromoCode.objects.filter(pk=promo.pk).update(current_uses=0)

        self.assertTrue(PromoCodeService.release(self.order))

        promo.refresh_from_db()
        self.assertEqual(promo.current_uses, 0)
