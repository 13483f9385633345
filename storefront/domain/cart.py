# storefront/domain/cart.py
from dataclasses import dataclass, field
from datetime import datetime

from storefront.domain.money import Money, multiply, total


@dataclass(frozen=True)
class CartLine:
    product_id: int
    quantity: int
    unit_price: Money

    @property
    def line_total(self) -> Money:
        return multiply(self.unit_price, self.quantity)

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "quantity": self.quantity,
            "unit_price": self.unit_price.to_decimal(),
            "line_total": self.line_total.to_decimal(),
        }


@dataclass(frozen=True)
class CartView:
    """Read-only cart: lines re-priced from the catalog, subtotal computed on read."""

    user_id: int
    lines: list[CartLine] = field(default_factory=list)
    # produkty wycofane z katalogu, poza subtotalem
    unavailable: list[int] = field(default_factory=list)
    updated_at: datetime | None = None

    @property
    def subtotal(self) -> Money:
        return total(line.line_total for line in self.lines)

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "items": [line.to_dict() for line in self.lines],
            "unavailable": list(self.unavailable),
            "subtotal": self.subtotal.to_decimal(),
            "updated_at": self.updated_at,
        }
