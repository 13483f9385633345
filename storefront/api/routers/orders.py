# storefront/api/routers/orders.py
from typing import List

from fastapi import APIRouter, Depends

from storefront.api.deps import get_access_gate, get_order_service, require_identity
from storefront.api.responses import envelope
from storefront.domain.schemas import Envelope, OrderOut, StatusIn
from storefront.services.access_gate import AccessGate, Action, Identity
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("", response_model=Envelope[List[OrderOut]])
def list_orders(
    identity: Identity = Depends(require_identity),
    gate: AccessGate = Depends(get_access_gate),
    svc: OrderService = Depends(get_order_service),
):
    gate.require(identity, Action.ORDER_READ)
    return envelope(svc.list_orders(identity), "Orders retrieved successfully")


@router.get("/{order_id}", response_model=Envelope[OrderOut])
def get_order(
    order_id: int,
    identity: Identity = Depends(require_identity),
    gate: AccessGate = Depends(get_access_gate),
    svc: OrderService = Depends(get_order_service),
):
    """
    Pobiera szczegóły zamówienia.
    """
    gate.require(identity, Action.ORDER_READ)
    return envelope(svc.get_order(order_id, identity), "Order retrieved successfully")


@router.put("/{order_id}/status", response_model=Envelope[OrderOut])
def change_status(
    order_id: int,
    payload: StatusIn,
    identity: Identity = Depends(require_identity),
    gate: AccessGate = Depends(get_access_gate),
    svc: OrderService = Depends(get_order_service),
):
    # endpoint panelu admina, klient uzywa /cancel i /return
    gate.require(identity, Action.ORDER_SET_STATUS)
    return envelope(svc.transition(order_id, payload.status, identity), "Order status updated successfully")


@router.put("/{order_id}/cancel", response_model=Envelope[OrderOut])
def cancel_order(
    order_id: int,
    identity: Identity = Depends(require_identity),
    svc: OrderService = Depends(get_order_service),
):
    return envelope(svc.cancel_order(order_id, identity), "Order cancelled successfully")


@router.put("/{order_id}/return", response_model=Envelope[OrderOut])
def request_return(
    order_id: int,
    identity: Identity = Depends(require_identity),
    svc: OrderService = Depends(get_order_service),
):
    return envelope(svc.request_return(order_id, identity), "Order returned successfully")
