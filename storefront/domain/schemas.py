# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Generic, List, TypeVar
from decimal import Decimal
from datetime import datetime

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Jednolita odpowiedz {status, message, data}."""

    status: int
    message: str
    data: T | None = None


class ItemIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: int = Field(..., gt=0, description="ID produktu (musi być > 0)")
    quantity: int = Field(..., gt=0, description="Ilość produktu (musi być > 0)")


class QuantityIn(BaseModel):
    """Nowa ilosc pozycji; 0 lub mniej usuwa pozycje."""

    quantity: int


class CartItemOut(BaseModel):
    product_id: int
    quantity: int
    unit_price: Decimal
    line_total: Decimal


class CartOut(BaseModel):
    user_id: int
    items: List[CartItemOut]
    unavailable: List[int] = []
    subtotal: Decimal
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class CheckoutIn(BaseModel):
    coupon_code: str | None = Field(None, max_length=100)


class StatusIn(BaseModel):
    status: str = Field(..., min_length=1)


class OrderItemOut(BaseModel):
    product_id: int
    quantity: int
    unit_price: Decimal
    line_total: Decimal


class OrderOut(BaseModel):
    id: int
    user_id: int
    status: str
    items: List[OrderItemOut]
    coupon_code: str | None = None
    subtotal: Decimal
    discount_amount: Decimal
    total: Decimal
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CouponIn(BaseModel):
    """Schema dla tworzenia kuponu (panel admina)."""

    code: str = Field(..., min_length=1, max_length=100)
    discount_type: str = Field(..., description='"percentage" albo "fixed_amount"')
    discount_value: Decimal
    start_date: datetime | None = None
    end_date: datetime | None = None
    min_purchase_amount: Decimal | None = Field(None, ge=0)
    max_usage: int | None = Field(None, ge=0)
    max_discount_value: Decimal | None = Field(None, ge=0)
    is_active: bool = True


class CouponStatusIn(BaseModel):
    is_active: bool


class CouponOut(BaseModel):
    code: str
    discount_type: str
    discount_value: Decimal
    start_date: datetime | None = None
    end_date: datetime | None = None
    min_purchase_amount: Decimal | None = None
    max_usage: int | None = None
    max_discount_value: Decimal | None = None
    is_active: bool
    usage_count: int
