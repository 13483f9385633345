# storefront/api/deps.py
from functools import lru_cache

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.errors import Unauthenticated
from storefront.services.access_gate import AccessGate, Identity, TokenVerifier
from storefront.services.cart_service import CartService
from storefront.services.coupon_service import CouponService
from storefront.services.lock_service import build_lock_service
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import OrderService
from storefront.services.product_client import ProductClient


# wspoldzielone w procesie (lock lokalny musi byc jeden na proces)
@lru_cache
def get_product_client() -> ProductClient:
    return ProductClient()


@lru_cache
def get_lock_service():
    return build_lock_service()


@lru_cache
def get_notification_service() -> NotificationService:
    return NotificationService()


@lru_cache
def get_token_verifier() -> TokenVerifier:
    return TokenVerifier()


@lru_cache
def get_access_gate() -> AccessGate:
    return AccessGate()


def get_identity(
    request: Request,
    authorization: str | None = Header(None),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> Identity | None:
    """Bearer token z naglowka albo cookie `token`."""
    token = None
    if authorization and authorization.startswith("Bearer "):
        token = authorization[len("Bearer "):].strip()
    if not token:
        token = request.cookies.get("token")
    return verifier.verify(token)


def require_identity(identity: Identity | None = Depends(get_identity)) -> Identity:
    if identity is None:
        raise Unauthenticated()
    return identity


def get_cart_service(
    db: Session = Depends(get_db),
    product_client: ProductClient = Depends(get_product_client),
    lock_service=Depends(get_lock_service),
) -> CartService:
    return CartService(db=db, product_client=product_client, lock_service=lock_service)


def get_order_service(
    db: Session = Depends(get_db),
    cart_service: CartService = Depends(get_cart_service),
    access_gate: AccessGate = Depends(get_access_gate),
    notification_service: NotificationService = Depends(get_notification_service),
) -> OrderService:
    return OrderService(
        db=db,
        cart_service=cart_service,
        access_gate=access_gate,
        notification_service=notification_service,
    )


def get_coupon_service(db: Session = Depends(get_db)) -> CouponService:
    return CouponService(db)
