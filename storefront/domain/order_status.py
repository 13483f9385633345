# storefront/domain/order_status.py
"""
Jeden, kanoniczny zestaw statusow zamowienia i stala tabela przejsc.

Wczesniejszy system mial trzy niezgodne enumy (Status, StatusOrderEnum,
OrderStatus) z roznymi kodami liczbowymi. Tutaj statusy sa nazwami (string),
bez kodow liczbowych.
"""
from enum import Enum
from typing import Iterable

from storefront.domain.errors import InvalidTransition


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    RETURNED = "RETURNED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"
    WAITING_FOR_APPROVAL = "WAITING_FOR_APPROVAL"
    DELETED = "DELETED"


INITIAL_STATUS = OrderStatus.PENDING

TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset(
        {
            OrderStatus.PROCESSING,
            OrderStatus.CANCELLED,
            OrderStatus.WAITING_FOR_APPROVAL,
            OrderStatus.REJECTED,
        }
    ),
    OrderStatus.PROCESSING: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset({OrderStatus.RETURNED}),
    OrderStatus.WAITING_FOR_APPROVAL: frozenset({OrderStatus.PROCESSING, OrderStatus.REJECTED}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.RETURNED: frozenset(),
    OrderStatus.REJECTED: frozenset(),
    OrderStatus.DELETED: frozenset(),
    OrderStatus.EXPIRED: frozenset(),
}


def parse_status(value) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(str(value).upper())
    except ValueError:
        raise InvalidTransition(f"Unknown order status: {value!r}", to_status=str(value))


class OrderStateMachine:
    """
    Enforces the transition table over a configurable set of enabled statuses.

    Disabling a status removes every edge into it; the table itself is fixed.
    """

    def __init__(self, enabled: Iterable[str | OrderStatus] | None = None):
        if enabled:
            self.enabled = frozenset(parse_status(s) for s in enabled)
        else:
            self.enabled = frozenset(OrderStatus)

        if INITIAL_STATUS not in self.enabled:
            raise ValueError("PENDING must stay enabled, it is the initial order status")

    def allowed_targets(self, current: OrderStatus) -> frozenset[OrderStatus]:
        return frozenset(s for s in TRANSITIONS[current] if s in self.enabled)

    def is_terminal(self, status: OrderStatus) -> bool:
        return not TRANSITIONS[status]

    def can_transition(self, current: OrderStatus, target: OrderStatus) -> bool:
        return target in self.allowed_targets(current)

    def check(self, current: OrderStatus, target: OrderStatus) -> None:
        if not self.can_transition(current, target):
            raise InvalidTransition(
                f"Cannot move order from {current.value} to {target.value}",
                from_status=current.value,
                to_status=target.value,
            )
