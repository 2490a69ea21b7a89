"""Cart item management: commands and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.cart.cart import Cart
from marketplace.catalogue.management import load_product
from marketplace.domain import marketplace


@marketplace.command(part_of="Cart")
class AddToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    size = String(max_length=50)
    gift_wrap = Boolean(default=False)


@marketplace.command(part_of="Cart")
class UpdateCartItem:
    customer_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@marketplace.command(part_of="Cart")
class RemoveFromCart:
    customer_id = Identifier(required=True)
    item_id = Identifier(required=True)


@marketplace.command(part_of="Cart")
class ClearCart:
    customer_id = Identifier(required=True)


def find_cart(customer_id):
    carts = current_domain.repository_for(Cart)._dao.query.filter(customer_id=str(customer_id)).all().items
    return carts[0] if carts else None


@marketplace.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = load_product(command.product_id)
        if product.has_variants and command.size:
            product.available(command.size)  # raises VariantNotFound for an unknown size

        cart = find_cart(command.customer_id) or Cart.create(command.customer_id)
        item = cart.add_item(
            product_id=command.product_id,
            quantity=command.quantity,
            size=command.size,
            gift_wrap=command.gift_wrap,
        )
        current_domain.repository_for(Cart).add(cart)
        return str(item.id)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        cart = find_cart(command.customer_id) or Cart.create(command.customer_id)
        cart.update_item_quantity(command.item_id, command.quantity)
        current_domain.repository_for(Cart).add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        cart = find_cart(command.customer_id) or Cart.create(command.customer_id)
        cart.remove_item(command.item_id)
        current_domain.repository_for(Cart).add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = find_cart(command.customer_id)
        if cart is None:
            return
        cart.clear()
        current_domain.repository_for(Cart).add(cart)
