"""FastAPI routes for coupons."""

from dataclasses import asdict

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from marketplace.api.auth import Principal, current_principal, require_admin
from marketplace.api.schemas import (
    CouponIdResponse,
    CouponQuoteResponse,
    CreateCouponRequest,
    StatusResponse,
    UseCouponRequest,
    ValidateCouponRequest,
)
from marketplace.promotion.management import CreateCoupon
from marketplace.promotion.usage import MarkCouponUsed
from marketplace.promotion.validation import normalize_code, validate_coupon

coupon_router = APIRouter(prefix="/coupons", tags=["coupons"])


@coupon_router.post("", status_code=201, response_model=CouponIdResponse)
def create_coupon(body: CreateCouponRequest, principal: Principal = Depends(require_admin)) -> CouponIdResponse:
    command = CreateCoupon(**body.model_dump(exclude_none=True))
    return CouponIdResponse(coupon_id=current_domain.process(command, asynchronous=False))


@coupon_router.post("/validate", response_model=CouponQuoteResponse)
def validate(body: ValidateCouponRequest, principal: Principal = Depends(current_principal)):
    quote = validate_coupon(body.code, body.cart_total, principal.user_id)
    return CouponQuoteResponse(**{k: v for k, v in asdict(quote).items() if k != "source"})


@coupon_router.post("/use", response_model=StatusResponse)
def use_coupon(body: UseCouponRequest, principal: Principal = Depends(current_principal)) -> StatusResponse:
    command = MarkCouponUsed(code=normalize_code(body.code), user_id=principal.user_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()
