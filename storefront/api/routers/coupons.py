# storefront/api/routers/coupons.py
from fastapi import APIRouter, Depends, status

from storefront.api.deps import get_access_gate, get_coupon_service, require_identity
from storefront.api.responses import envelope
from storefront.domain.schemas import CouponIn, CouponOut, CouponStatusIn, Envelope
from storefront.services.access_gate import AccessGate, Action, Identity
from storefront.services.coupon_service import CouponService

router = APIRouter(prefix="/coupons", tags=["coupons"])


@router.post("", response_model=Envelope[CouponOut], status_code=status.HTTP_201_CREATED)
def create_coupon(
    payload: CouponIn,
    identity: Identity = Depends(require_identity),
    gate: AccessGate = Depends(get_access_gate),
    svc: CouponService = Depends(get_coupon_service),
):
    gate.require(identity, Action.COUPON_MANAGE)
    return envelope(svc.create_coupon(payload), "Coupon created successfully.", status.HTTP_201_CREATED)


@router.get("/code/{code}", response_model=Envelope[CouponOut])
def get_coupon_by_code(code: str, svc: CouponService = Depends(get_coupon_service)):
    return envelope(svc.get_coupon_by_code(code), "Coupon retrieved successfully.")


@router.put("/code/{code}/status", response_model=Envelope[CouponOut])
def update_coupon_status(
    code: str,
    payload: CouponStatusIn,
    identity: Identity = Depends(require_identity),
    gate: AccessGate = Depends(get_access_gate),
    svc: CouponService = Depends(get_coupon_service),
):
    gate.require(identity, Action.COUPON_MANAGE)
    return envelope(svc.set_coupon_active(code, payload.is_active), "Coupon status updated.")
