"""Offer aggregate: a time-boxed promotion that may carry a coupon code."""

from enum import Enum

from protean.fields import Boolean, DateTime, Float, Integer, String, Text

from marketplace.domain import marketplace


class OfferDiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"
    NONE = "none"


@marketplace.aggregate
class Offer:
    title = String(required=True, max_length=200)
    description = Text()
    discount_type = String(choices=OfferDiscountType, default=OfferDiscountType.NONE.value)
    discount_value = Float(default=0.0, min_value=0.0)
    coupon_code = String(max_length=50)
    start_date = DateTime(required=True)
    end_date = DateTime(required=True)
    is_active = Boolean(default=True)
    priority = Integer(default=0)

    def carries_discount(self) -> bool:
        return self.discount_type != OfferDiscountType.NONE.value

    @classmethod
    def create(cls, title, start_date, end_date, coupon_code=None, **terms):
        return cls(
            title=title,
            start_date=start_date,
            end_date=end_date,
            coupon_code=coupon_code.strip().upper() if coupon_code else None,
            **terms,
        )
