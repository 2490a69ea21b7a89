"""Coupon creation."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Integer, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.promotion.coupon import Coupon


@marketplace.command(part_of="Coupon")
class CreateCoupon:
    code = String(required=True, max_length=50)
    description = String(max_length=500)
    discount_type = String(required=True, max_length=20)
    discount_value = Float(required=True, min_value=0.0)
    min_order_value = Float(default=0.0)
    max_discount = Float()
    usage_limit = Integer()
    usage_limit_per_user = Integer(default=1)
    valid_from = DateTime()
    valid_until = DateTime()


@marketplace.command_handler(part_of=Coupon)
class CouponManagementHandler:
    @handle(CreateCoupon)
    def create_coupon(self, command):
        repo = current_domain.repository_for(Coupon)
        code = command.code.strip().upper()
        if repo._dao.query.filter(code=code).all().items:
            raise ValidationError({"code": [f"Coupon {code} already exists"]})

        terms = {
            "description": command.description,
            "min_order_value": command.min_order_value or 0.0,
            "max_discount": command.max_discount,
            "usage_limit": command.usage_limit,
            "usage_limit_per_user": command.usage_limit_per_user or 1,
            "valid_until": command.valid_until,
        }
        if command.valid_from:
            terms["valid_from"] = command.valid_from

        coupon = Coupon.create(code, command.discount_type, command.discount_value, **terms)
        repo.add(coupon)
        return str(coupon.id)
