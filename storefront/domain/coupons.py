# storefront/domain/coupons.py
"""
Ewaluacja kuponu: czysta funkcja, bez dostepu do bazy.

Kolejnosc sprawdzen (pierwszy blad konczy ewaluacje):
1. aktywny
2. data w [start_date, end_date]
3. subtotal >= min_purchase_amount
4. usage_count < max_usage (licznik zwieksza checkout, evaluator tylko czyta)
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from storefront.domain.money import Money, min_of, percentage_of


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED_AMOUNT = "fixed_amount"


class CouponRejection(str, Enum):
    INACTIVE = "CouponInactive"
    NOT_YET_ACTIVE = "CouponNotYetActive"
    EXPIRED = "CouponExpired"
    BELOW_MINIMUM_PURCHASE = "BelowMinimumPurchase"
    USAGE_LIMIT_REACHED = "UsageLimitReached"


REJECTION_MESSAGES = {
    CouponRejection.INACTIVE: "Coupon is not active",
    CouponRejection.NOT_YET_ACTIVE: "Coupon is not valid yet",
    CouponRejection.EXPIRED: "Coupon has expired",
    CouponRejection.BELOW_MINIMUM_PURCHASE: "Order subtotal is below the coupon minimum purchase amount",
    CouponRejection.USAGE_LIMIT_REACHED: "Coupon usage limit has been reached",
}


@dataclass(frozen=True)
class Coupon:
    code: str
    discount_type: DiscountType
    # procent dla PERCENTAGE, kwota (jednostki glowne) dla FIXED_AMOUNT
    discount_value: Decimal
    start_date: datetime | None = None
    end_date: datetime | None = None
    min_purchase_amount: Money | None = None
    max_usage: int | None = None
    max_discount_value: Money | None = None
    is_active: bool = True
    usage_count: int = 0


@dataclass(frozen=True)
class CouponEvaluation:
    applicable: bool
    discount: Money
    reason: CouponRejection | None = None

    @property
    def message(self) -> str | None:
        return REJECTION_MESSAGES.get(self.reason) if self.reason else None


def _reject(subtotal: Money, reason: CouponRejection) -> CouponEvaluation:
    return CouponEvaluation(applicable=False, discount=Money.zero(subtotal.scale), reason=reason)


def evaluate(coupon: Coupon, subtotal: Money, now: datetime) -> CouponEvaluation:
    if not coupon.is_active:
        return _reject(subtotal, CouponRejection.INACTIVE)

    if coupon.start_date is not None and now < coupon.start_date:
        return _reject(subtotal, CouponRejection.NOT_YET_ACTIVE)

    if coupon.end_date is not None and now > coupon.end_date:
        return _reject(subtotal, CouponRejection.EXPIRED)

    if coupon.min_purchase_amount is not None and subtotal < coupon.min_purchase_amount:
        return _reject(subtotal, CouponRejection.BELOW_MINIMUM_PURCHASE)

    if coupon.max_usage is not None and coupon.usage_count >= coupon.max_usage:
        return _reject(subtotal, CouponRejection.USAGE_LIMIT_REACHED)

    return CouponEvaluation(applicable=True, discount=compute_discount(coupon, subtotal))


def compute_discount(coupon: Coupon, subtotal: Money) -> Money:
    if coupon.discount_type == DiscountType.FIXED_AMOUNT:
        discount = Money.from_decimal(coupon.discount_value, subtotal.scale)
    else:
        discount = percentage_of(subtotal, coupon.discount_value)
        if coupon.max_discount_value is not None:
            discount = min_of(discount, coupon.max_discount_value)

    # rabat nigdy wiekszy niz subtotal
    return min_of(discount, subtotal)
