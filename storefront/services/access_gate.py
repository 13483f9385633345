# storefront/services/access_gate.py
"""
Access Gate: tozsamosc z tokena + statyczna tabela uprawnien (rola, akcja).

Token wydaje zewnetrzny serwis auth, tutaj jest tylko weryfikowany.
Fail closed: brak albo niepoprawny token -> brak tozsamosci -> odmowa.
"""
from dataclasses import dataclass
from enum import Enum

import jwt
from jwt import PyJWTError

from storefront.domain.errors import Forbidden, Unauthenticated
from storefront.domain.order_status import OrderStatus
from storefront.utils.settings import JWT_SECRET, JWT_ALGORITHM
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

ADMIN = "admin"
CUSTOMER = "customer"
# kazda zweryfikowana, niepusta rola (role pochodza z zewnetrznej tabeli roles)
AUTHENTICATED = "*"


class Action(str, Enum):
    CART_READ = "cart:read"
    CART_MUTATE = "cart:mutate"
    ORDER_CHECKOUT = "order:checkout"
    ORDER_READ = "order:read"
    ORDER_CANCEL = "order:cancel"
    ORDER_RETURN = "order:return"
    ORDER_SET_STATUS = "order:set_status"
    COUPON_MANAGE = "coupon:manage"


_CUSTOMER_ACTIONS = {
    Action.CART_READ,
    Action.CART_MUTATE,
    Action.ORDER_CHECKOUT,
    Action.ORDER_READ,
    Action.ORDER_CANCEL,
    Action.ORDER_RETURN,
}

PERMISSIONS: frozenset[tuple[str, Action]] = frozenset(
    {(AUTHENTICATED, action) for action in _CUSTOMER_ACTIONS} | {(ADMIN, action) for action in Action}
)

# statusy, w ktore klient moze przeprowadzic wlasne zamowienie
_TRANSITION_ACTIONS = {
    OrderStatus.CANCELLED: Action.ORDER_CANCEL,
    OrderStatus.RETURNED: Action.ORDER_RETURN,
}


@dataclass(frozen=True)
class Identity:
    user_id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN


class TokenVerifier:
    """Verifies an HS256 token and resolves it to an `Identity`, or None."""

    def __init__(self, secret: str = JWT_SECRET, algorithm: str = JWT_ALGORITHM):
        self.secret = secret
        self.algorithm = algorithm

    def verify(self, token: str | None) -> Identity | None:
        if not token:
            return None

        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except PyJWTError as e:
            logger.info(f"Token verification failed: {e}")
            return None

        raw_user_id = payload.get("sub", payload.get("userId"))
        role = payload.get("role", payload.get("roleName"))
        try:
            user_id = int(raw_user_id)
        except (TypeError, ValueError):
            logger.info("Token has no usable user id")
            return None

        if not role:
            logger.info("Token has no role claim", user_id=user_id)
            return None

        return Identity(user_id=user_id, role=str(role))


class AccessGate:
    def __init__(self, permissions: frozenset[tuple[str, Action]] = PERMISSIONS):
        self.permissions = permissions

    def authorize(self, identity: Identity | None, action: Action) -> bool:
        if identity is None or not identity.role:
            return False
        action = Action(action)
        return (identity.role, action) in self.permissions or (AUTHENTICATED, action) in self.permissions

    def require(self, identity: Identity | None, action: Action) -> Identity:
        action = Action(action)
        if identity is None:
            raise Unauthenticated()
        if not self.authorize(identity, action):
            logger.info("access_denied", user_id=identity.user_id, role=identity.role, action=action.value)
            raise Forbidden(f"Role '{identity.role}' may not perform {action.value}", action=action.value)
        return identity

    def action_for_transition(self, target: OrderStatus) -> Action:
        return _TRANSITION_ACTIONS.get(target, Action.ORDER_SET_STATUS)

    def require_transition(self, identity: Identity | None, target: OrderStatus) -> Identity:
        return self.require(identity, self.action_for_transition(target))
