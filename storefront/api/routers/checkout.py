# storefront/api/routers/checkout.py
from fastapi import APIRouter, Depends, status

from storefront.api.deps import get_access_gate, get_order_service, require_identity
from storefront.api.responses import envelope
from storefront.domain.schemas import CheckoutIn, Envelope, OrderOut
from storefront.services.access_gate import AccessGate, Action, Identity
from storefront.services.order_service import OrderService

router = APIRouter(tags=["checkout"])


@router.post("/checkout", response_model=Envelope[OrderOut], status_code=status.HTTP_201_CREATED)
def checkout(
    payload: CheckoutIn | None = None,
    identity: Identity = Depends(require_identity),
    gate: AccessGate = Depends(get_access_gate),
    svc: OrderService = Depends(get_order_service),
):
    """
    Tworzy zamówienie z koszyka uzytkownika i czysci koszyk.
    """
    gate.require(identity, Action.ORDER_CHECKOUT)
    order = svc.checkout(identity.user_id, payload.coupon_code if payload else None)
    return envelope(order, "Order created successfully", status.HTTP_201_CREATED)
