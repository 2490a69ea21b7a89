"""Catalogue management: product creation and restocking."""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.catalogue.product import BookingConfig, Product, ProductType
from marketplace.domain import marketplace
from marketplace.errors import ProductNotFound
from marketplace.utils.concurrency import retry_on_conflict, save_if_unchanged


@marketplace.command(part_of="Product")
class CreateProduct:
    name = String(required=True, max_length=255)
    description = Text()
    price = Float(required=True, min_value=0.0)
    discount_price = Float(default=0.0)
    tenant_id = Identifier()
    stock = Integer(default=0)
    sku = String(max_length=100)
    image = String(max_length=500)
    variants = Text()  # JSON: list of {size, price, stock, sku}
    product_type = String(max_length=20, default=ProductType.STANDARD.value)
    booking_config = Text()  # JSON: booking rules for booking products
    gift_wrap_available = Boolean(default=False)


@marketplace.command(part_of="Product")
class RestockProduct:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    size = String(max_length=50)


def load_product(product_id):
    try:
        return current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        raise ProductNotFound(f"Product {product_id} not found", product_id=str(product_id)) from None


def _booking_config(raw):
    if not raw:
        return None
    data = json.loads(raw) if isinstance(raw, str) else raw
    cities = data.pop("available_cities", None)
    if cities is not None:
        data["available_cities"] = json.dumps(cities)
    return BookingConfig(**data)


@marketplace.command_handler(part_of=Product)
class CatalogueCommandHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        variants = json.loads(command.variants) if command.variants else []
        product_type = command.product_type or ProductType.STANDARD.value
        booking_config = _booking_config(command.booking_config)
        if product_type == ProductType.BOOKING.value and booking_config is None:
            booking_config = BookingConfig()

        product = Product.create(
            name=command.name,
            price=command.price,
            discount_price=command.discount_price,
            tenant_id=command.tenant_id,
            stock=command.stock or 0,
            variants=variants,
            product_type=product_type,
            booking_config=booking_config,
            description=command.description,
            sku=command.sku,
            image=command.image,
            gift_wrap_available=bool(command.gift_wrap_available),
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @retry_on_conflict()
    @handle(RestockProduct)
    def restock_product(self, command):
        product = load_product(command.product_id)
        product.restock(command.quantity, size=command.size)
        save_if_unchanged(current_domain.repository_for(Product), product)
        return product.available(command.size)
