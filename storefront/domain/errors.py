# storefront/domain/errors.py
"""
Bledy domenowe. Kazdy ma `reason` (kod dla klienta) i `status_code` (HTTP).

walidacja -> 4xx, bez retry
polityka biznesowa (kupony, przejscia statusow, uprawnienia) -> oczekiwane wyniki
kolaboratorzy (product-service, redis) -> mozna ponowic caly request
"""


class StoreError(Exception):
    reason = "StoreError"
    status_code = 400
    default_message = "Request could not be processed"

    def __init__(self, message: str | None = None, **context):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"reason": self.reason, **self.context}


# walidacja
class InvalidAmount(StoreError):
    reason = "InvalidAmount"
    default_message = "Amount must be non-negative"


class EmptyCart(StoreError):
    reason = "EmptyCart"
    default_message = "Cannot check out an empty cart"


class ItemNotFound(StoreError):
    reason = "ItemNotFound"
    status_code = 404
    default_message = "Product is not in the cart"


class OrderNotFound(StoreError):
    reason = "OrderNotFound"
    status_code = 404
    default_message = "Order not found"


class CouponNotFound(StoreError):
    reason = "CouponNotFound"
    status_code = 404
    default_message = "Coupon not found"


class CouponCodeTaken(StoreError):
    reason = "CouponCodeTaken"
    status_code = 409
    default_message = "A coupon with this code already exists"


# polityka
class CouponRejected(StoreError):
    """Kupon odrzucony przez evaluator, `reason` to powod z ewaluacji."""

    status_code = 400
    default_message = "Coupon cannot be applied"

    def __init__(self, reason: str, message: str | None = None, **context):
        self.reason = reason
        super().__init__(message, **context)


class InvalidTransition(StoreError):
    reason = "InvalidTransition"
    status_code = 409
    default_message = "Order status transition is not allowed"


class Forbidden(StoreError):
    reason = "Forbidden"
    status_code = 403
    default_message = "Action not permitted for this role"


class Unauthenticated(StoreError):
    reason = "Unauthenticated"
    status_code = 401
    default_message = "Unauthorized - No valid token provided"


class ConcurrentModification(StoreError):
    reason = "ConcurrentModification"
    status_code = 409
    default_message = "Cart was modified by another operation"


# kolaboratorzy
class ProductUnavailable(StoreError):
    reason = "ProductUnavailable"
    status_code = 404
    default_message = "Product is unavailable"


class CollaboratorUnavailable(StoreError):
    reason = "CollaboratorUnavailable"
    status_code = 503
    default_message = "Upstream service unavailable, retry the request"
