"""Commission split between the platform and a tenant."""

from decimal import ROUND_HALF_UP, Decimal

from protean.exceptions import ValidationError

_CENTS = Decimal("0.01")


def round2(value) -> float:
    return float(Decimal(str(value)).quantize(_CENTS, rounding=ROUND_HALF_UP))


def commission(total_price, rate_percent) -> tuple[float, float]:
    """Return ``(platform_commission, tenant_earnings)`` for an order total.

    The platform share is rounded to paise; the tenant receives the exact
    remainder so the two always add back up to the total.
    """
    rate = Decimal(str(rate_percent))
    if rate < 0 or rate > 100:
        raise ValidationError({"commission_rate": ["Commission rate must be between 0 and 100"]})

    total = Decimal(str(total_price))
    platform = (total * rate / 100).quantize(_CENTS, rounding=ROUND_HALF_UP)
    return float(platform), float(total - platform)
