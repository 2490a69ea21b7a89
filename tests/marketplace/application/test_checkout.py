"""Application tests for CreateOrder: stock, snapshots, coupon and cart."""

import json

import pytest
from marketplace.cart.items import AddToCart, find_cart
from marketplace.catalogue.product import Product
from marketplace.errors import InsufficientStock, NoItems, VariantNotFound
from marketplace.order.creation import CreateOrder
from marketplace.order.order import Order
from marketplace.promotion.coupon import Coupon
from marketplace.promotion.management import CreateCoupon
from protean.utils.globals import current_domain

SHIPPING_ADDRESS = {
    "name": "Asha Rao",
    "phone": "9876543210",
    "address_line1": "12 MG Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "pincode": "560001",
}


def _product(product_id):
    return current_domain.repository_for(Product).get(product_id)


def _orders():
    return current_domain.repository_for(Order)._dao.query.all().items


def _checkout(lines, customer_id="cust-1", **overrides):
    defaults = {
        "customer_id": customer_id,
        "items": json.dumps(lines),
        "shipping_address": json.dumps(SHIPPING_ADDRESS),
        "items_price": 1000.0,
        "total_price": 1000.0,
    }
    defaults.update(overrides)
    return current_domain.process(CreateOrder(**defaults), asynchronous=False)


class TestCreateOrder:
    def test_order_is_persisted_pending(self, make_product, place_order):
        product_id = make_product(stock=5)
        order_id = place_order(product_id, quantity=2)

        order = current_domain.repository_for(Order).get(order_id)
        assert order.status == "Pending"
        assert order.order_number.startswith("PK")
        assert len(order.order_number) == 12
        assert order.timeline()[0].message == "Order placed successfully"

    def test_stock_is_taken(self, make_product, place_order):
        product_id = make_product(stock=5)
        place_order(product_id, quantity=2)
        assert _product(product_id).stock == 3

    def test_items_snapshot_catalogue_name_and_price(self, make_product):
        product_id = make_product(name="Brass Lamp", price=900.0, discount_price=750.0, image="lamp.jpg")
        order_id = _checkout([{"product_id": product_id, "quantity": 1}])

        item = current_domain.repository_for(Order).get(order_id).items[0]
        assert (item.name, item.price, item.image) == ("Brass Lamp", 750.0, "lamp.jpg")

    def test_variant_price_is_used_for_sized_lines(self, make_product):
        product_id = make_product(price=1200.0, variants=[{"size": "L", "price": 1300.0, "stock": 2}])
        order_id = _checkout([{"product_id": product_id, "quantity": 1, "size": "L"}])

        order = current_domain.repository_for(Order).get(order_id)
        assert order.items[0].price == 1300.0
        assert _product(product_id).find_variant("L").stock == 1

    def test_pricing_breakdown_is_stored_as_given(self, make_product):
        product_id = make_product()
        order_id = _checkout(
            [{"product_id": product_id, "quantity": 1}],
            items_price=500.0,
            tax_price=90.0,
            shipping_price=40.0,
            gift_wrap_price=30.0,
            packing_price=20.0,
            total_price=680.0,
        )
        pricing = current_domain.repository_for(Order).get(order_id).pricing
        assert (pricing.tax_price, pricing.gift_wrap_price, pricing.total_price) == (90.0, 30.0, 680.0)

    def test_order_numbers_are_unique(self, make_product, place_order):
        product_id = make_product(stock=20)
        for _ in range(5):
            place_order(product_id)
        numbers = {o.order_number for o in _orders()}
        assert len(numbers) == 5


class TestCheckoutFailures:
    def test_empty_items_are_rejected(self):
        with pytest.raises(NoItems) as exc:
            _checkout([])
        assert exc.value.message == "No order items"

    def test_cannot_oversell(self, make_product, place_order):
        product_id = make_product(stock=1)
        place_order(product_id, quantity=1)

        with pytest.raises(InsufficientStock):
            place_order(product_id, quantity=1, customer_id="cust-2")
        assert _product(product_id).stock == 0
        assert len(_orders()) == 1

    def test_failing_line_leaves_every_product_untouched(self, make_product):
        plenty = make_product(name="Mug", stock=10)
        scarce = make_product(name="Lamp", stock=1)

        with pytest.raises(InsufficientStock) as exc:
            _checkout(
                [
                    {"product_id": plenty, "quantity": 3},
                    {"product_id": scarce, "quantity": 2},
                ]
            )
        assert exc.value.message == "Insufficient stock for Lamp"
        assert _product(plenty).stock == 10
        assert _product(scarce).stock == 1
        assert _orders() == []

    def test_two_lines_on_same_product_count_together(self, make_product):
        product_id = make_product(stock=3)
        with pytest.raises(InsufficientStock):
            _checkout(
                [
                    {"product_id": product_id, "quantity": 2},
                    {"product_id": product_id, "quantity": 2},
                ]
            )
        assert _product(product_id).stock == 3

    def test_unknown_size_is_rejected(self, make_product):
        product_id = make_product(variants=[{"size": "M", "stock": 2}])
        with pytest.raises(VariantNotFound):
            _checkout([{"product_id": product_id, "quantity": 1, "size": "XL"}])


class TestCheckoutRace:
    def test_stale_read_is_retried_and_loses(self, make_product, place_order, monkeypatch):
        """A checkout that read stock before another one took it must not oversell."""
        from marketplace.inventory import ledger

        product_id = make_product(stock=1)
        stale = ledger.load_product(product_id)
        place_order(product_id, quantity=1)

        real_load = ledger.load_product
        calls = []

        def load_stale_once(pid):
            calls.append(pid)
            return stale if len(calls) == 1 else real_load(pid)

        monkeypatch.setattr(ledger, "load_product", load_stale_once)

        with pytest.raises(InsufficientStock):
            place_order(product_id, quantity=1, customer_id="cust-2")

        assert len(calls) == 2
        assert _product(product_id).stock == 0
        assert len(_orders()) == 1


class TestCheckoutSideEffects:
    def test_cart_is_emptied(self, make_product, place_order):
        product_id = make_product()
        current_domain.process(AddToCart(customer_id="cust-1", product_id=product_id, quantity=1), asynchronous=False)

        place_order(product_id)
        assert len(find_cart("cust-1").items) == 0

    def test_coupon_use_is_recorded(self, make_product, place_order):
        current_domain.process(CreateCoupon(code="WELCOME", discount_type="fixed", discount_value=100.0), asynchronous=False)
        product_id = make_product()

        order_id = place_order(product_id, coupon_code="welcome", discount_price=100.0, total_price=400.0)

        coupon = current_domain.repository_for(Coupon)._dao.query.filter(code="WELCOME").all().items[0]
        assert coupon.used_count == 1
        assert coupon.uses_by("cust-1") == 1
        assert current_domain.repository_for(Order).get(order_id).coupon_code == "WELCOME"

    def test_exhausted_coupon_fails_the_checkout(self, make_product, place_order):
        from marketplace.errors import AlreadyUsedByUser

        current_domain.process(CreateCoupon(code="ONCE", discount_type="fixed", discount_value=50.0), asynchronous=False)
        product_id = make_product(stock=5)
        place_order(product_id, coupon_code="ONCE")

        with pytest.raises(AlreadyUsedByUser):
            place_order(product_id, coupon_code="ONCE")
        assert _product(product_id).stock == 4
