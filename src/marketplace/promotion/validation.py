"""Coupon resolution and discount computation.

A code is looked up in three places, first match wins:

1. an active dedicated ``Coupon``;
2. the ``TreasureConfig`` singleton, when active and inside its window;
3. an active ``Offer`` carrying the code whose window contains now and
   which actually grants a discount.

The matched terms then go through the common checks (validity window,
minimum order value) and, for dedicated coupons only, the usage limits.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from marketplace.errors import BelowMinimumOrder, CouponExpired, CouponNotFound, CouponNotYetValid
from marketplace.notification.dispatch import format_rupees
from marketplace.promotion.coupon import Coupon, DiscountType
from marketplace.promotion.offer import Offer
from marketplace.promotion.treasure import current_treasure

SOURCE_COUPON = "coupon"
SOURCE_TREASURE = "treasure"
SOURCE_OFFER = "offer"


@dataclass(frozen=True)
class CouponTerms:
    code: str
    source: str
    discount_type: str
    discount_value: float
    min_order_value: float = 0.0
    max_discount: float | None = None
    valid_from: datetime | None = None
    valid_until: datetime | None = None
    description: str | None = None
    coupon: Coupon | None = None


@dataclass(frozen=True)
class CouponQuote:
    """What a code is worth against a given cart total."""

    code: str
    source: str
    discount_type: str
    discount_value: float
    discount: float
    min_order_value: float
    max_discount: float | None
    description: str | None = None


def normalize_code(code) -> str:
    if not code or not str(code).strip():
        raise ValidationError({"code": ["Coupon code is required"]})
    return str(code).strip().upper()


def _aware(value):
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _within(now, start, end) -> bool:
    start, end = _aware(start), _aware(end)
    return (start is None or start <= now) and (end is None or now <= end)


def compute_discount(discount_type, discount_value, cart_total, max_discount=None) -> float:
    """Percentages round half-up to whole rupees; no discount exceeds the cart total."""
    if discount_type == DiscountType.PERCENTAGE.value:
        raw = Decimal(str(cart_total)) * Decimal(str(discount_value)) / 100
        discount = float(raw.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
        if max_discount:
            discount = min(discount, max_discount)
    else:
        discount = float(discount_value)
    return max(0.0, min(discount, float(cart_total)))


def resolve(code, now=None) -> CouponTerms | None:
    now = now or datetime.now(UTC)

    coupons = current_domain.repository_for(Coupon)._dao.query.filter(code=code, is_active=True).all().items
    if coupons:
        coupon = coupons[0]
        return CouponTerms(
            code=coupon.code,
            source=SOURCE_COUPON,
            discount_type=coupon.discount_type,
            discount_value=coupon.discount_value,
            min_order_value=coupon.min_order_value or 0.0,
            max_discount=coupon.max_discount,
            valid_from=coupon.valid_from,
            valid_until=coupon.valid_until,
            description=coupon.description,
            coupon=coupon,
        )

    treasure = current_treasure()
    if treasure and treasure.is_active and treasure.matches(code) and _within(now, treasure.valid_from, treasure.valid_until):
        return CouponTerms(
            code=code,
            source=SOURCE_TREASURE,
            discount_type=treasure.discount_type,
            discount_value=treasure.discount_value,
            min_order_value=treasure.min_order_value or 0.0,
            max_discount=treasure.max_discount,
            valid_from=treasure.valid_from,
            valid_until=treasure.valid_until,
            description=treasure.title,
        )

    offers = current_domain.repository_for(Offer)._dao.query.filter(coupon_code=code, is_active=True).all().items
    live = [o for o in offers if o.carries_discount() and _within(now, o.start_date, o.end_date)]
    if live:
        offer = max(live, key=lambda o: o.priority or 0)
        return CouponTerms(
            code=code,
            source=SOURCE_OFFER,
            discount_type=offer.discount_type,
            discount_value=offer.discount_value,
            valid_from=offer.start_date,
            valid_until=offer.end_date,
            description=offer.title,
        )

    return None


def validate_coupon(code, cart_total, user_id=None, now=None) -> CouponQuote:
    """Resolve ``code`` and price it against ``cart_total``. Nothing is written."""
    quote, _ = evaluate_coupon(code, cart_total, user_id, now)
    return quote


def evaluate_coupon(code, cart_total, user_id=None, now=None):
    """Like ``validate_coupon`` but also hands back the matched Coupon record, if any."""
    code = normalize_code(code)
    now = now or datetime.now(UTC)

    terms = resolve(code, now)
    if terms is None:
        raise CouponNotFound("Invalid coupon code", code=code)

    valid_from, valid_until = _aware(terms.valid_from), _aware(terms.valid_until)
    if valid_from and valid_from > now:
        raise CouponNotYetValid("Coupon is not yet valid", code=code)
    if valid_until and valid_until < now:
        raise CouponExpired("Coupon has expired", code=code)
    if cart_total < terms.min_order_value:
        raise BelowMinimumOrder(
            f"Minimum order value of {format_rupees(terms.min_order_value)} required",
            code=code,
            min_order_value=terms.min_order_value,
        )

    if terms.coupon is not None:
        terms.coupon.check_usage(user_id)

    quote = CouponQuote(
        code=terms.code,
        source=terms.source,
        discount_type=terms.discount_type,
        discount_value=terms.discount_value,
        discount=compute_discount(terms.discount_type, terms.discount_value, cart_total, terms.max_discount),
        min_order_value=terms.min_order_value,
        max_discount=terms.max_discount,
        description=terms.description,
    )
    return quote, terms.coupon
