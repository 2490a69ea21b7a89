"""Treasure-hunt promo: a singleton coupon revealed by a storefront pop-up.

The record is seeded once at startup. Request paths only read it, so two
concurrent first requests can never create two singletons.
"""

from datetime import UTC, datetime

import structlog
from protean.fields import Boolean, DateTime, Float, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.promotion.coupon import DiscountType

logger = structlog.get_logger(__name__)

DEFAULT_TREASURE_CODE = "TREASURE10"


@marketplace.aggregate
class TreasureConfig:
    is_active = Boolean(default=True)
    code = String(required=True, max_length=50)
    discount_type = String(choices=DiscountType, default=DiscountType.PERCENTAGE.value)
    discount_value = Float(required=True, min_value=0.0)
    min_order_value = Float(default=0.0, min_value=0.0)
    max_discount = Float(min_value=0.0)
    title = String(max_length=200, default="You Found a Treasure!")
    valid_from = DateTime()
    valid_until = DateTime()

    def matches(self, code) -> bool:
        return bool(self.code) and self.code.strip().upper() == code


def current_treasure():
    """Return the singleton, or None when it has not been seeded."""
    records = current_domain.repository_for(TreasureConfig)._dao.query.all().items
    return records[0] if records else None


def seed_treasure_config():
    existing = current_treasure()
    if existing is not None:
        return existing

    config = TreasureConfig(
        code=DEFAULT_TREASURE_CODE,
        discount_type=DiscountType.PERCENTAGE.value,
        discount_value=10.0,
        valid_from=datetime.now(UTC),
    )
    current_domain.repository_for(TreasureConfig).add(config)
    logger.info("treasure_config_seeded", code=config.code)
    return config
