from datetime import datetime, timezone

from sqlalchemy import Column, Integer, BigInteger, String, DateTime, Numeric, Boolean

from storefront.data.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class CouponModel(Base):
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True)
    code = Column(String(100), nullable=False, unique=True, index=True)

    discount_type = Column(String(20), nullable=False)  # percentage, fixed_amount
    discount_value = Column(Numeric(12, 2), nullable=False)
    start_date = Column(DateTime(timezone=True), nullable=True)
    end_date = Column(DateTime(timezone=True), nullable=True)

    # w groszach
    min_purchase_amount = Column(BigInteger, nullable=True)
    max_discount_value = Column(BigInteger, nullable=True)

    max_usage = Column(Integer, nullable=True)
    usage_count = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
