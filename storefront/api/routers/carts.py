#storefront/api/routers/carts.py
from fastapi import APIRouter, Depends

from storefront.api.deps import get_access_gate, get_cart_service, require_identity
from storefront.api.responses import envelope
from storefront.domain.schemas import CartOut, Envelope, ItemIn, QuantityIn
from storefront.services.access_gate import AccessGate, Action, Identity
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=Envelope[CartOut])
def get_cart(
    identity: Identity = Depends(require_identity),
    gate: AccessGate = Depends(get_access_gate),
    svc: CartService = Depends(get_cart_service),
):
    gate.require(identity, Action.CART_READ)
    return envelope(svc.snapshot(identity.user_id), "Cart retrieved successfully")


@router.post("/items", response_model=Envelope[CartOut])
def add_item(
    payload: ItemIn,
    identity: Identity = Depends(require_identity),
    gate: AccessGate = Depends(get_access_gate),
    svc: CartService = Depends(get_cart_service),
):
    gate.require(identity, Action.CART_MUTATE)
    cart = svc.add_item(identity.user_id, payload.product_id, payload.quantity)
    return envelope(cart, "Product added to cart")


@router.put("/items/{product_id}", response_model=Envelope[CartOut])
def update_quantity(
    product_id: int,
    payload: QuantityIn,
    identity: Identity = Depends(require_identity),
    gate: AccessGate = Depends(get_access_gate),
    svc: CartService = Depends(get_cart_service),
):
    gate.require(identity, Action.CART_MUTATE)
    cart = svc.update_quantity(identity.user_id, product_id, payload.quantity)
    return envelope(cart, "Product quantity updated successfully")


@router.delete("/items/{product_id}", response_model=Envelope[CartOut])
def remove_item(
    product_id: int,
    identity: Identity = Depends(require_identity),
    gate: AccessGate = Depends(get_access_gate),
    svc: CartService = Depends(get_cart_service),
):
    gate.require(identity, Action.CART_MUTATE)
    return envelope(svc.remove_item(identity.user_id, product_id), "Product removed from cart")
