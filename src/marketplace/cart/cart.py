"""Cart aggregate: the products a customer intends to buy.

One cart per customer. Nothing is reserved while items sit in the cart;
stock is only taken when the cart is checked out as an order.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    size = String(max_length=50)
    gift_wrap = Boolean(default=False)
    added_at = DateTime()


@marketplace.aggregate
class Cart:
    customer_id = Identifier(required=True, unique=True)
    items = HasMany(CartItem)
    updated_at = DateTime()

    @classmethod
    def create(cls, customer_id):
        return cls(customer_id=customer_id, updated_at=datetime.now(UTC))

    def _find(self, item_id):
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ValidationError({"item_id": ["Item not found in cart"]})
        return item

    def add_item(self, product_id, quantity, size=None, gift_wrap=False):
        """Add a product, merging into an existing line for the same product and size."""
        now = datetime.now(UTC)
        existing = next(
            (i for i in self.items if str(i.product_id) == str(product_id) and (i.size or None) == (size or None)),
            None,
        )
        if existing:
            existing.quantity += quantity
            existing.gift_wrap = bool(gift_wrap) or existing.gift_wrap
            item = existing
        else:
            item = CartItem(product_id=product_id, quantity=quantity, size=size, gift_wrap=gift_wrap, added_at=now)
            self.add_items(item)
        self.updated_at = now
        return item

    def update_item_quantity(self, item_id, quantity):
        self._find(item_id).quantity = quantity
        self.updated_at = datetime.now(UTC)

    def remove_item(self, item_id):
        self.remove_items(self._find(item_id))
        self.updated_at = datetime.now(UTC)

    def clear(self):
        for item in list(self.items):
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)
