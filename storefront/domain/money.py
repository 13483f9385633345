# storefront/domain/money.py
"""
Kwoty pieniezne jako int w jednostkach groszowych (minor units) + skala.
Nigdy float. Zaokraglenie ROUND_HALF_UP tylko przy wyliczaniu rabatu/sumy.
"""
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from storefront.domain.errors import InvalidAmount
from storefront.utils.settings import CURRENCY_SCALE

# 9 999 999 999.99 przy skali 2, tyle miesci kolumna Numeric(12, 2)
MAX_MINOR_UNITS = 10**12 - 1


@dataclass(frozen=True, order=True)
class Money:
    minor: int
    scale: int = CURRENCY_SCALE

    def __post_init__(self):
        if isinstance(self.minor, bool) or not isinstance(self.minor, int):
            raise InvalidAmount(f"Money needs an integer amount of minor units, got {self.minor!r}")

    @classmethod
    def zero(cls, scale: int = CURRENCY_SCALE) -> "Money":
        return cls(0, scale)

    @classmethod
    def from_decimal(cls, value, scale: int = CURRENCY_SCALE) -> "Money":
        """Parse a catalog price ("199.99", 49.5, Decimal) into minor units."""
        try:
            # str() zeby 49.5 nie zamienilo sie w 49.4999...
            amount = Decimal(str(value))
        except (InvalidOperation, ValueError) as e:
            raise InvalidAmount(f"Not a monetary amount: {value!r}") from e

        if not amount.is_finite() or amount < 0:
            raise InvalidAmount(f"Not a non-negative monetary amount: {value!r}")

        try:
            minor = int(amount.scaleb(scale).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        except InvalidOperation as e:
            raise InvalidAmount(f"Monetary amount out of range: {value!r}") from e

        if minor > MAX_MINOR_UNITS:
            raise InvalidAmount(f"Monetary amount out of range: {value!r}", max_minor_units=MAX_MINOR_UNITS)
        return cls(minor, scale)

    def to_decimal(self) -> Decimal:
        return Decimal(self.minor).scaleb(-self.scale)

    def __str__(self) -> str:
        return format_amount(self)


def _same_scale(a: Money, b: Money) -> None:
    if a.scale != b.scale:
        raise InvalidAmount(f"Cannot combine amounts of scale {a.scale} and {b.scale}")


def add(a: Money, b: Money) -> Money:
    _same_scale(a, b)
    return Money(a.minor + b.minor, a.scale)


def subtract(a: Money, b: Money) -> Money:
    _same_scale(a, b)
    return Money(a.minor - b.minor, a.scale)


def multiply(amount: Money, quantity: int) -> Money:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidAmount(f"Quantity must be an integer, got {quantity!r}")
    if quantity < 0:
        raise InvalidAmount(f"Quantity must be non-negative, got {quantity}")
    return Money(amount.minor * quantity, amount.scale)


def percentage_of(amount: Money, percent) -> Money:
    """`percent`% of `amount`, rounded half-up to the nearest minor unit."""
    if amount.minor < 0:
        raise InvalidAmount("Cannot take a percentage of a negative amount")

    try:
        pct = Decimal(str(percent))
    except (InvalidOperation, ValueError) as e:
        raise InvalidAmount(f"Not a percentage: {percent!r}") from e

    if not pct.is_finite() or pct < 0:
        raise InvalidAmount(f"Percentage must be non-negative, got {percent!r}")

    raw = Decimal(amount.minor) * pct / Decimal(100)
    return Money(int(raw.quantize(Decimal("1"), rounding=ROUND_HALF_UP)), amount.scale)


def clamp_min(amount: Money, floor: Money) -> Money:
    _same_scale(amount, floor)
    return amount if amount.minor >= floor.minor else floor


def min_of(a: Money, b: Money) -> Money:
    _same_scale(a, b)
    return a if a.minor <= b.minor else b


def total(amounts, scale: int = CURRENCY_SCALE) -> Money:
    result = Money.zero(scale)
    for amount in amounts:
        result = add(result, amount)
    return result


def format_amount(amount: Money, currency: str | None = None) -> str:
    text = f"{amount.to_decimal():,.{amount.scale}f}"
    return f"{text} {currency}" if currency else text
