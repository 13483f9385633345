# storefront/repos/coupon_repo.py
from sqlalchemy import select, update, or_
from sqlalchemy.orm import Session

from storefront.data.models.coupon import CouponModel


class CouponRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_by_code(self, code: str) -> CouponModel | None:
        return self.db.execute(
            select(CouponModel)
            .where(CouponModel.code == code)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def create_coupon(self, coupon: CouponModel) -> CouponModel:
        self.db.add(coupon)
        self.db.commit()
        self.db.refresh(coupon)
        return coupon

    def increment_usage(self, coupon_id: int) -> int:
        # warunek na limit w samym UPDATE, rownolegle checkouty nie przekrocza max_usage
        result = self.db.execute(
            update(CouponModel)
            .where(
                CouponModel.id == coupon_id,
                or_(CouponModel.max_usage.is_(None), CouponModel.usage_count < CouponModel.max_usage),
            )
            .values(usage_count=CouponModel.usage_count + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def set_active(self, coupon: CouponModel, is_active: bool, now) -> CouponModel:
        coupon.is_active = is_active
        coupon.updated_at = now
        self.db.commit()
        self.db.refresh(coupon)
        return coupon
