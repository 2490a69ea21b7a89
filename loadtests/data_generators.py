"""Faker-based payload generators for the marketplace load tests.

Payloads match the field names of the API's Pydantic request schemas and
stay inside the domain's field limits (phone and pincode lengths,
percentages within 0-100).
"""

import random
import uuid

from faker import Faker

fake = Faker("en_IN")

SIZES = ["S", "M", "L", "XL"]


def unique_user_id() -> str:
    return f"lt-user-{uuid.uuid4().hex[:10]}"


def valid_phone() -> str:
    return f"{random.randint(6, 9)}{random.randint(0, 999_999_999):09d}"


def valid_email() -> str:
    return f"{fake.user_name()[:20]}.{uuid.uuid4().hex[:4]}@example.com"


def shipping_address() -> dict:
    return {
        "name": fake.name()[:60],
        "phone": valid_phone(),
        "address_line1": fake.street_address()[:100],
        "city": fake.city(),
        "state": fake.state(),
        "pincode": f"{random.randint(110000, 855999)}",
    }


def product_data(stock: int = 1000, with_variants: bool = False) -> dict:
    """A standard product. Variant products split the stock across sizes."""
    payload = {
        "name": f"{fake.color_name()} {random.choice(['Mug', 'Tote', 'Frame', 'Candle'])}",
        "description": fake.sentence(nb_words=8),
        "price": round(random.uniform(199, 2499), 2),
        "stock": stock,
    }
    if with_variants:
        payload["variants"] = [{"size": size, "stock": stock // len(SIZES)} for size in SIZES]
    return payload


def booking_product_data() -> dict:
    return {
        "name": f"{fake.color_name()} Return Gift Hamper",
        "price": round(random.uniform(99, 499), 2),
        "product_type": "booking",
        "booking_config": {
            "commission_percentage": 12.0,
            "min_quantity": 10,
            "max_quantity": 500,
            "lead_time_days": 2,
        },
    }


def order_data(product: dict, product_id: str, quantity: int = 1, size: str | None = None) -> dict:
    items_price = round(product["price"] * quantity, 2)
    return {
        "items": [{"product_id": product_id, "quantity": quantity, "size": size}],
        "shipping_address": shipping_address(),
        "payment_method": "COD",
        "items_price": items_price,
        "total_price": items_price,
    }


def tenant_application() -> dict:
    return {
        "business_name": f"{fake.company()[:80]} {uuid.uuid4().hex[:4]}",
        "owner_name": fake.name()[:60],
        "email": valid_email(),
        "phone": valid_phone(),
        "address": {"city": fake.city(), "state": fake.state()},
    }


def coupon_data() -> dict:
    return {
        "code": f"LT{uuid.uuid4().hex[:8].upper()}",
        "discount_type": random.choice(["percentage", "fixed"]),
        "discount_value": random.choice([5, 10, 15, 100]),
        "min_order_value": 0,
        "usage_limit_per_user": 1,
    }
