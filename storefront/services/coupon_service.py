# storefront/services/coupon_service.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.orm import Session

from storefront.data.models.coupon import CouponModel
from storefront.domain.coupons import Coupon, DiscountType
from storefront.domain.errors import CouponCodeTaken, CouponNotFound, InvalidAmount
from storefront.domain.money import Money
from storefront.repos.coupon_repo import CouponRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def as_utc(value: datetime | None) -> datetime | None:
    # sqlite zwraca daty bez strefy, zapisujemy zawsze UTC
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def _money(minor: int | None) -> Money | None:
    return Money(int(minor)) if minor is not None else None


def to_domain(model: CouponModel) -> Coupon:
    return Coupon(
        code=model.code,
        discount_type=DiscountType(model.discount_type),
        discount_value=Decimal(str(model.discount_value)),
        start_date=as_utc(model.start_date),
        end_date=as_utc(model.end_date),
        min_purchase_amount=_money(model.min_purchase_amount),
        max_usage=model.max_usage,
        max_discount_value=_money(model.max_discount_value),
        is_active=model.is_active,
        usage_count=model.usage_count,
    )


def to_dict(model: CouponModel) -> Dict[str, Any]:
    coupon = to_domain(model)
    return {
        "code": coupon.code,
        "discount_type": coupon.discount_type.value,
        "discount_value": coupon.discount_value,
        "start_date": coupon.start_date,
        "end_date": coupon.end_date,
        "min_purchase_amount": coupon.min_purchase_amount.to_decimal() if coupon.min_purchase_amount is not None else None,
        "max_usage": coupon.max_usage,
        "max_discount_value": coupon.max_discount_value.to_decimal() if coupon.max_discount_value is not None else None,
        "is_active": coupon.is_active,
        "usage_count": coupon.usage_count,
    }


class CouponService:
    """
    Rejestr kuponow (panel admina): tworzenie, odczyt po kodzie, wlaczanie/wylaczanie.
    Sama ewaluacja kuponu jest w storefront.domain.coupons.
    """

    def __init__(self, db: Session):
        self.repo = CouponRepo(db)

    def get_coupon_by_code(self, code: str) -> Dict[str, Any]:
        return to_dict(self.get_model(code))

    def get_model(self, code: str) -> CouponModel:
        coupon = self.repo.get_by_code(code)
        if not coupon:
            raise CouponNotFound(f"Coupon '{code}' not found", code=code)
        return coupon

    def create_coupon(self, payload) -> Dict[str, Any]:
        try:
            discount_type = DiscountType(payload.discount_type)
        except ValueError:
            raise InvalidAmount(
                'Invalid discount type. Must be either "percentage" or "fixed_amount".',
                discount_type=payload.discount_type,
            )

        value = Decimal(str(payload.discount_value))
        if value <= 0:
            raise InvalidAmount("Discount value must be greater than 0")
        if discount_type == DiscountType.PERCENTAGE and value > 100:
            raise InvalidAmount("Percentage discount cannot exceed 100")
        if discount_type == DiscountType.FIXED_AMOUNT:
            # ten sam zakres co ceny, wieksza kwota nie zmiesci sie w bazie
            Money.from_decimal(value)

        start_date = as_utc(payload.start_date)
        end_date = as_utc(payload.end_date)
        if start_date and end_date and end_date < start_date:
            raise InvalidAmount("Coupon end date is before its start date")

        if self.repo.get_by_code(payload.code):
            raise CouponCodeTaken(code=payload.code)

        min_purchase = payload.min_purchase_amount
        max_discount = payload.max_discount_value

        created = self.repo.create_coupon(
            CouponModel(
                code=payload.code,
                discount_type=discount_type.value,
                discount_value=value,
                start_date=start_date,
                end_date=end_date,
                min_purchase_amount=Money.from_decimal(min_purchase).minor if min_purchase is not None else None,
                max_discount_value=Money.from_decimal(max_discount).minor if max_discount is not None else None,
                max_usage=payload.max_usage,
                usage_count=0,
                is_active=payload.is_active,
            )
        )

        logger.info(f"Coupon {created.code} created ({discount_type.value} {value})")
        return to_dict(created)

    def set_coupon_active(self, code: str, is_active: bool) -> Dict[str, Any]:
        coupon = self.get_model(code)
        updated = self.repo.set_active(coupon, is_active, datetime.now(timezone.utc))
        logger.info(f"Coupon {code} is_active={is_active}")
        return to_dict(updated)
