# storefront/services/order_service.py
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict

from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.domain import coupons
from storefront.domain.errors import (
    CouponNotFound,
    CouponRejected,
    EmptyCart,
    InvalidTransition,
    OrderNotFound,
    ProductUnavailable,
)
from storefront.domain.money import Money, clamp_min, format_amount, subtract, total as money_total
from storefront.domain.order_status import INITIAL_STATUS, OrderStateMachine, OrderStatus, parse_status
from storefront.repos.coupon_repo import CouponRepo
from storefront.repos.order_repo import OrderRepo
from storefront.services.access_gate import AccessGate, Identity
from storefront.services.cart_service import CartService
from storefront.services.coupon_service import as_utc, to_domain
from storefront.services.notification_service import NotificationService
from storefront.utils.settings import CURRENCY_CODE, ORDER_STATUSES, RETURN_WINDOW_DAYS
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def order_to_dict(order: OrderModel) -> Dict[str, Any]:
    return {
        "id": order.id,
        "user_id": order.user_id,
        "status": order.status,
        "items": [
            {
                "product_id": i.product_id,
                "quantity": i.quantity,
                "unit_price": Money(i.unit_price).to_decimal(),
                "line_total": Money(i.unit_price * i.quantity).to_decimal(),
            }
            for i in order.items
        ],
        "coupon_code": order.coupon_code,
        "subtotal": Money(order.subtotal).to_decimal(),
        "discount_amount": Money(order.discount_amount).to_decimal(),
        "total": Money(order.total).to_decimal(),
        "created_at": order.created_at,
        "updated_at": order.updated_at,
    }


class OrderService:
    """
    Serwis odpowiedzialny za domenę zamówień.

    - checkout: snapshot koszyka + kupon + zamowienie + czyszczenie koszyka
      w jednej transakcji, pod lockiem uzytkownika
    - transition: zmiana statusu tylko po krawedziach OrderStateMachine,
      compare-and-set na poprzednim statusie
    """

    def __init__(
        self,
        db: Session,
        cart_service: CartService,
        access_gate: AccessGate | None = None,
        notification_service: NotificationService | None = None,
        state_machine: OrderStateMachine | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.coupon_repo = CouponRepo(db)
        self.cart_service = cart_service
        self.access_gate = access_gate or AccessGate()
        self.notification_service = notification_service or NotificationService()
        self.state_machine = state_machine or OrderStateMachine(ORDER_STATUSES)
        self.clock = clock

    def checkout(self, user_id: int, coupon_code: str | None = None) -> Dict[str, Any]:
        """
        Use Case: Tworzenie zamówienia z koszyka.

        1. Snapshot koszyka (ceny z katalogu, zamrazane w pozycjach zamowienia)
        2. Kupon przez evaluator, licznik uzyc +1
        3. Zamowienie w PENDING
        4. Czyszczenie koszyka
        Wszystko w jednym commicie, wiec nie ma stanu "zamowienie jest, koszyk tez".
        """
        with self.cart_service.lock(user_id):
            try:
                order = self._place_order(user_id, coupon_code)
                self.repo.commit()
            except Exception:
                self.repo.rollback()
                raise

        logger.info(
            "order_placed",
            order_id=order.id,
            user_id=user_id,
            total=format_amount(Money(order.total), CURRENCY_CODE),
            coupon_code=coupon_code,
        )
        return order_to_dict(self.repo.get_order(order.id))

    def _place_order(self, user_id: int, coupon_code: str | None) -> OrderModel:
        cart, items = self.cart_service.load_for_checkout(user_id)
        if not items:
            raise EmptyCart()

        lines, unavailable = self.cart_service.price_lines(items)
        if unavailable:
            raise ProductUnavailable(
                f"Products {unavailable} are withdrawn or short on stock, adjust the cart",
                product_ids=unavailable,
            )

        subtotal = money_total(line.line_total for line in lines)
        discount = Money.zero()

        if coupon_code:
            discount = self._apply_coupon(coupon_code, subtotal)

        total = clamp_min(subtract(subtotal, discount), Money.zero())
        now = self.clock()

        order = OrderModel(
            user_id=user_id,
            status=INITIAL_STATUS.value,
            coupon_code=coupon_code or None,
            subtotal=subtotal.minor,
            discount_amount=discount.minor,
            total=total.minor,
            created_at=now,
            updated_at=now,
            items=[
                OrderItemModel(
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price=line.unit_price.minor,
                )
                for line in lines
            ],
        )
        self.repo.add_order(order)
        self.cart_service.clear(cart)
        return order

    def _apply_coupon(self, code: str, subtotal: Money) -> Money:
        model = self.coupon_repo.get_by_code(code)
        if not model:
            raise CouponNotFound(f"Coupon '{code}' not found", code=code)

        result = coupons.evaluate(to_domain(model), subtotal, self.clock())
        if not result.applicable:
            logger.info("coupon_rejected", code=code, reason=result.reason.value)
            raise CouponRejected(result.reason.value, result.message, code=code)

        # licznik uzyc: warunek max_usage w samym UPDATE
        if self.coupon_repo.increment_usage(model.id) == 0:
            reason = coupons.CouponRejection.USAGE_LIMIT_REACHED
            raise CouponRejected(reason.value, coupons.REJECTION_MESSAGES[reason], code=code)

        return result.discount

    def transition(self, order_id: int, to_status, actor: Identity | None) -> Dict[str, Any]:
        target = parse_status(to_status)
        self.access_gate.require_transition(actor, target)

        order = self._get_visible_order(order_id, actor)
        current = OrderStatus(order.status)
        self.state_machine.check(current, target)

        now = self.clock()
        if target == OrderStatus.RETURNED:
            self._check_return_window(order, now)

        new_data = {"status": target.value, "updated_at": now}
        if target == OrderStatus.COMPLETED:
            new_data["completed_at"] = now

        rowcount = self.repo.compare_and_set_status(order_id, expected=current.value, new_data=new_data)
        if rowcount == 0:
            # ktos inny zmienil status pierwszy, odczytaj aktualny
            self.repo.rollback()
            latest = self.repo.get_order(order_id)
            latest_status = latest.status if latest else current.value
            logger.info(
                "transition_lost_race",
                order_id=order_id,
                expected=current.value,
                actual=latest_status,
                target=target.value,
            )
            raise InvalidTransition(
                f"Order status changed concurrently to {latest_status}",
                from_status=latest_status,
                to_status=target.value,
            )

        self.repo.commit()
        logger.info(f"Order {order_id} {current.value} -> {target.value} by user {actor.user_id} ({actor.role})")

        self.notification_service.order_status_changed(order_id, order.user_id, current.value, target.value)
        return order_to_dict(self.repo.get_order(order_id))

    def cancel_order(self, order_id: int, actor: Identity | None) -> Dict[str, Any]:
        return self.transition(order_id, OrderStatus.CANCELLED, actor)

    def request_return(self, order_id: int, actor: Identity | None) -> Dict[str, Any]:
        return self.transition(order_id, OrderStatus.RETURNED, actor)

    def get_order(self, order_id: int, actor: Identity) -> Dict[str, Any]:
        """
        Use Case: Pobranie zamówienia (Query).
        """
        return order_to_dict(self._get_visible_order(order_id, actor))

    def list_orders(self, actor: Identity) -> list[Dict[str, Any]]:
        return [order_to_dict(o) for o in self.repo.list_orders_for_user(actor.user_id)]

    def _get_visible_order(self, order_id: int, actor: Identity) -> OrderModel:
        order = self.repo.get_order(order_id)

        # cudze zamowienie wyglada jak nieistniejace
        if not order or (not actor.is_admin and order.user_id != actor.user_id):
            raise OrderNotFound(f"Order {order_id} not found", order_id=order_id)

        return order

    def _check_return_window(self, order: OrderModel, now: datetime) -> None:
        completed_at = as_utc(order.completed_at or order.updated_at)
        if now - completed_at > timedelta(days=RETURN_WINDOW_DAYS):
            raise InvalidTransition(
                f"Return window of {RETURN_WINDOW_DAYS} days has passed",
                from_status=order.status,
                to_status=OrderStatus.RETURNED.value,
            )
