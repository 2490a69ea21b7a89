"""Coupon aggregate: a dedicated discount code with usage bookkeeping."""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String

from marketplace.domain import marketplace
from marketplace.errors import AlreadyUsedByUser, UsageLimitReached


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@marketplace.entity(part_of="Coupon")
class CouponUsage:
    user_id = Identifier(required=True)
    used_at = DateTime(required=True)


@marketplace.aggregate
class Coupon:
    code = String(required=True, max_length=50, unique=True)
    description = String(max_length=500)
    discount_type = String(choices=DiscountType, required=True)
    discount_value = Float(required=True, min_value=0.0)
    min_order_value = Float(default=0.0, min_value=0.0)
    max_discount = Float(min_value=0.0)
    usage_limit = Integer(min_value=1)
    used_count = Integer(default=0, min_value=0)
    usage_limit_per_user = Integer(default=1, min_value=1)
    usages = HasMany(CouponUsage)
    valid_from = DateTime()
    valid_until = DateTime()
    is_active = Boolean(default=True)
    created_at = DateTime()

    @invariant.post
    def percentage_cannot_exceed_hundred(self):
        if self.discount_type == DiscountType.PERCENTAGE.value and self.discount_value > 100:
            raise ValidationError({"discount_value": ["Percentage discount cannot exceed 100"]})

    @classmethod
    def create(cls, code, discount_type, discount_value, **terms):
        now = datetime.now(UTC)
        terms.setdefault("valid_from", now)
        return cls(
            code=code.strip().upper(),
            discount_type=discount_type,
            discount_value=discount_value,
            created_at=now,
            **terms,
        )

    def uses_by(self, user_id) -> int:
        return sum(1 for usage in self.usages if str(usage.user_id) == str(user_id))

    def check_usage(self, user_id=None):
        """Raise when the global or the per-user usage limit is exhausted."""
        if self.usage_limit and self.used_count >= self.usage_limit:
            raise UsageLimitReached("Coupon has reached its usage limit", code=self.code)
        if user_id and self.usage_limit_per_user and self.uses_by(user_id) >= self.usage_limit_per_user:
            raise AlreadyUsedByUser("You have already used this coupon", code=self.code, user_id=str(user_id))

    def record_usage(self, user_id):
        self.check_usage(user_id)
        self.used_count += 1
        self.add_usages(CouponUsage(user_id=user_id, used_at=datetime.now(UTC)))
