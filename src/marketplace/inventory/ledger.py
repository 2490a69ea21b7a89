"""Inventory ledger: stock reservation and release against products.

Reservations are applied to freshly loaded products in memory first and
persisted afterwards with a version compare-and-swap, so a batch either
reserves every line or nothing, and two checkouts racing on the same product
cannot both draw on the same units.
"""

from dataclasses import dataclass

import structlog
from protean.utils.globals import current_domain

from marketplace.catalogue.management import load_product
from marketplace.catalogue.product import Product
from marketplace.errors import ProductNotFound
from marketplace.utils.concurrency import save_if_unchanged

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class StockLine:
    product_id: str
    quantity: int
    size: str | None = None


def reserve_lines(lines) -> list[Product]:
    """Check and take stock for every line. Nothing is persisted.

    Lines drawing on the same product share one loaded instance, so two lines
    for the same size are checked against their combined quantity. The first
    failing line raises and the caller's unit of work discards everything.
    """
    products = {}
    for line in lines:
        product = products.get(line.product_id)
        if product is None:
            product = load_product(line.product_id)
            products[line.product_id] = product
        product.reserve(line.quantity, size=line.size)
    return list(products.values())


def release_lines(lines) -> list[Product]:
    """Return stock for every line. Products deleted since ordering are skipped."""
    products = {}
    for line in lines:
        product = products.get(line.product_id)
        if product is None:
            try:
                product = load_product(line.product_id)
            except ProductNotFound:
                logger.warning("release_skipped_missing_product", product_id=line.product_id)
                continue
            products[line.product_id] = product
        if not product.release(line.quantity, size=line.size) and not product.is_booking:
            logger.warning("release_skipped_missing_variant", product_id=line.product_id, size=line.size)
    return list(products.values())


def commit(products):
    repo = current_domain.repository_for(Product)
    for product in products:
        save_if_unchanged(repo, product)


def reserve(product_id, size, quantity):
    """Reserve a single line and persist it."""
    products = reserve_lines([StockLine(product_id=product_id, quantity=quantity, size=size)])
    commit(products)
    logger.info("stock_reserved", product_id=product_id, size=size, quantity=quantity)
    return products[0]


def release(product_id, size, quantity):
    """Release a single line and persist it."""
    products = release_lines([StockLine(product_id=product_id, quantity=quantity, size=size)])
    commit(products)
    logger.info("stock_released", product_id=product_id, size=size, quantity=quantity)
