"""Tests for coupon evaluation: rejection order and discount computation."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from storefront.domain.coupons import (
    Coupon,
    CouponRejection,
    DiscountType,
    compute_discount,
    evaluate,
)
from storefront.domain.money import Money

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _coupon(**overrides) -> Coupon:
    values = dict(
        code="SAVE10",
        discount_type=DiscountType.PERCENTAGE,
        discount_value=Decimal("10"),
        start_date=NOW - timedelta(days=1),
        end_date=NOW + timedelta(days=1),
    )
    values.update(overrides)
    return Coupon(**values)


class TestApplicable:
    def test_percentage_discount(self):
        result = evaluate(_coupon(), Money(10000), NOW)
        assert result.applicable
        assert result.discount == Money(1000)
        assert result.reason is None
        assert result.message is None

    def test_percentage_capped_by_max_discount(self):
        coupon = _coupon(max_discount_value=Money(500))
        assert evaluate(coupon, Money(10000), NOW).discount == Money(500)

    def test_fixed_amount(self):
        coupon = _coupon(discount_type=DiscountType.FIXED_AMOUNT, discount_value=Decimal("15.00"))
        assert evaluate(coupon, Money(10000), NOW).discount == Money(1500)

    def test_fixed_amount_never_exceeds_subtotal(self):
        coupon = _coupon(discount_type=DiscountType.FIXED_AMOUNT, discount_value=Decimal("50.00"))
        assert evaluate(coupon, Money(3000), NOW).discount == Money(3000)

    def test_open_ended_dates(self):
        coupon = _coupon(start_date=None, end_date=None)
        assert evaluate(coupon, Money(10000), NOW).applicable

    def test_boundaries_are_inclusive(self):
        assert evaluate(_coupon(start_date=NOW), Money(100), NOW).applicable
        assert evaluate(_coupon(end_date=NOW), Money(100), NOW).applicable

    def test_subtotal_equal_to_minimum_is_enough(self):
        coupon = _coupon(min_purchase_amount=Money(10000))
        assert evaluate(coupon, Money(10000), NOW).applicable

    def test_usage_below_limit(self):
        coupon = _coupon(max_usage=2, usage_count=1)
        assert evaluate(coupon, Money(10000), NOW).applicable


class TestRejected:
    @pytest.mark.parametrize(
        "overrides, reason",
        [
            ({"is_active": False}, CouponRejection.INACTIVE),
            ({"start_date": NOW + timedelta(hours=1)}, CouponRejection.NOT_YET_ACTIVE),
            ({"end_date": NOW - timedelta(seconds=1)}, CouponRejection.EXPIRED),
            ({"min_purchase_amount": Money(20000)}, CouponRejection.BELOW_MINIMUM_PURCHASE),
            ({"max_usage": 3, "usage_count": 3}, CouponRejection.USAGE_LIMIT_REACHED),
        ],
    )
    def test_reason(self, overrides, reason):
        result = evaluate(_coupon(**overrides), Money(10000), NOW)
        assert not result.applicable
        assert result.reason == reason
        assert result.discount == Money(0)
        assert result.message

    def test_inactive_wins_over_expired(self):
        coupon = _coupon(is_active=False, end_date=NOW - timedelta(days=3))
        assert evaluate(coupon, Money(10000), NOW).reason == CouponRejection.INACTIVE

    def test_expired_wins_over_minimum(self):
        coupon = _coupon(end_date=NOW - timedelta(days=3), min_purchase_amount=Money(99999))
        assert evaluate(coupon, Money(100), NOW).reason == CouponRejection.EXPIRED

    def test_zero_usage_limit_never_applies(self):
        coupon = _coupon(max_usage=0)
        assert evaluate(coupon, Money(100), NOW).reason == CouponRejection.USAGE_LIMIT_REACHED


class TestComputeDiscount:
    def test_hundred_percent_takes_everything(self):
        coupon = _coupon(discount_value=Decimal("100"))
        assert compute_discount(coupon, Money(1999)) == Money(1999)

    def test_zero_subtotal(self):
        assert compute_discount(_coupon(), Money(0)) == Money(0)
