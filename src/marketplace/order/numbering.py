"""Human-readable order numbers: ``PK`` + YYMMDD + four random digits."""

import random
from datetime import UTC, datetime

import structlog
from protean.utils.globals import current_domain

from marketplace import settings
from marketplace.errors import OrderNumberUnavailable

logger = structlog.get_logger(__name__)


def generate_order_number(now=None, rng=random) -> str:
    now = now or datetime.now(UTC)
    return f"PK{now:%y%m%d}{rng.randrange(10000):04d}"


def allocate_order_number(attempts=None) -> str:
    """Draw order numbers until one is not taken yet.

    The ``unique`` constraint on ``Order.order_number`` still rejects a number
    taken by a concurrent checkout between this check and the insert.
    """
    from marketplace.order.order import Order

    repo = current_domain.repository_for(Order)
    attempts = attempts or settings.order_number_attempts()
    for _ in range(attempts):
        number = generate_order_number()
        if not repo._dao.query.filter(order_number=number).all().items:
            return number
        logger.warning("order_number_collision", order_number=number)

    raise OrderNumberUnavailable(f"Could not allocate an order number after {attempts} attempts")
