"""Checkout: turning a customer's items into a Pending order.

Everything happens in one unit of work: stock for every line is checked and
taken, the coupon use is recorded, the order is written and the customer's
cart emptied. If any line fails nothing is persisted. A checkout that loses
a race on a product's stock re-runs from a fresh read.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.cart.items import find_cart
from marketplace.domain import marketplace
from marketplace.errors import NoItems
from marketplace.inventory import ledger
from marketplace.inventory.ledger import StockLine
from marketplace.order.numbering import allocate_order_number
from marketplace.order.order import Order, PaymentMethod
from marketplace.promotion.usage import redeem
from marketplace.utils.concurrency import retry_on_conflict

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class CreateOrder:
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {product_id, quantity, size, gift_wrap, custom_photo_*}
    shipping_address = Text(required=True)  # JSON: address dict
    payment_method = String(max_length=20, default=PaymentMethod.COD.value)
    payment_info = Text()  # JSON: {razorpay_order_id, ...}
    items_price = Float(default=0.0)
    tax_price = Float(default=0.0)
    shipping_price = Float(default=0.0)
    gift_wrap_price = Float(default=0.0)
    packing_price = Float(default=0.0)
    discount_price = Float(default=0.0)
    total_price = Float(required=True, min_value=0.0)
    coupon_code = String(max_length=50)


def _parse_lines(raw):
    lines = json.loads(raw) if isinstance(raw, str) else raw
    if not lines:
        raise NoItems("No order items")
    for line in lines:
        if not line.get("product_id"):
            raise ValidationError({"items": ["Every item needs a product_id"]})
        if int(line.get("quantity") or 0) < 1:
            raise ValidationError({"items": ["Item quantity must be at least 1"]})
    return lines


def _snapshot(product, line):
    """Order line with the product's name and price as they are right now."""
    size = line.get("size") or None
    variant = product.find_variant(size) if product.has_variants and size else None
    price = variant.price if variant is not None and variant.price else product.unit_price
    return {
        "product_id": str(product.id),
        "name": product.name,
        "quantity": int(line["quantity"]),
        "price": price,
        "image": product.image,
        "size": size,
        "gift_wrap": bool(line.get("gift_wrap")),
        "custom_photo_url": line.get("custom_photo_url"),
        "custom_photo_public_id": line.get("custom_photo_public_id"),
        "tenant_id": product.tenant_id,
    }


def _clear_cart(customer_id):
    cart = find_cart(customer_id)
    if cart is not None and cart.items:
        cart.clear()
        current_domain.repository_for(Cart).add(cart)


@marketplace.command_handler(part_of=Order)
class CreateOrderHandler:
    @retry_on_conflict()
    @handle(CreateOrder)
    def create_order(self, command):
        lines = _parse_lines(command.items)
        stock_lines = [
            StockLine(product_id=str(line["product_id"]), quantity=int(line["quantity"]), size=line.get("size") or None)
            for line in lines
        ]
        products = ledger.reserve_lines(stock_lines)
        by_id = {str(product.id): product for product in products}
        items = [_snapshot(by_id[str(line["product_id"])], line) for line in lines]

        if command.coupon_code:
            redeem(command.coupon_code, command.customer_id, command.items_price or command.total_price)

        shipping_address = (
            json.loads(command.shipping_address)
            if isinstance(command.shipping_address, str)
            else command.shipping_address
        )
        order = Order.place(
            order_number=allocate_order_number(),
            customer_id=command.customer_id,
            items=items,
            shipping_address=shipping_address,
            payment_method=command.payment_method,
            payment_info=json.loads(command.payment_info) if command.payment_info else None,
            coupon_code=command.coupon_code.strip().upper() if command.coupon_code else None,
            pricing={
                "items_price": command.items_price or 0.0,
                "tax_price": command.tax_price or 0.0,
                "shipping_price": command.shipping_price or 0.0,
                "gift_wrap_price": command.gift_wrap_price or 0.0,
                "packing_price": command.packing_price or 0.0,
                "discount_price": command.discount_price or 0.0,
                "total_price": command.total_price,
            },
        )

        ledger.commit(products)
        current_domain.repository_for(Order).add(order)
        _clear_cart(command.customer_id)

        logger.info(
            "order_placed",
            order_id=str(order.id),
            order_number=order.order_number,
            customer_id=str(command.customer_id),
            total_price=command.total_price,
        )
        return str(order.id)
