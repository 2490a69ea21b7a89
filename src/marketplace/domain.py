"""Marketplace bounded context: orders, inventory, tenant routing and promotions.

A single domain holds every aggregate that takes part in checkout so that
stock reservation, coupon usage and order persistence commit in one unit of
work.
"""

import structlog
from protean.domain import Domain

from marketplace.utils.logging import configure_logging

configure_logging(log_dir="logs")

marketplace = Domain(name="marketplace")

logger = structlog.get_logger(__name__)
