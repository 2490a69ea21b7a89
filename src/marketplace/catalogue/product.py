"""Product aggregate root with Variant entity and BookingConfig value object.

A product keeps stock either on its flat ``stock`` counter or per variant,
depending on ``has_variants``. Booking products (appointment-style services
fulfilled off-platform) carry a nominal stock that is never reserved.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from marketplace.domain import marketplace
from marketplace.errors import InsufficientStock, VariantNotFound


class ProductType(Enum):
    STANDARD = "standard"
    BOOKING = "booking"


@marketplace.value_object(part_of="Product")
class BookingConfig:
    """Rules a booking order for this product must satisfy."""

    commission_percentage: Float(default=10.0, min_value=0.0, max_value=100.0)
    min_quantity: Integer(default=1, min_value=1)
    max_quantity: Integer(default=100, min_value=1)
    lead_time_days: Integer(default=2, min_value=0)
    available_cities: Text()  # JSON array of city names, empty means anywhere

    @invariant.post
    def quantity_bounds_must_be_ordered(self):
        if self.min_quantity and self.max_quantity and self.min_quantity > self.max_quantity:
            raise ValidationError({"booking_config": ["Minimum quantity cannot exceed maximum quantity"]})

    def cities(self) -> list[str]:
        return json.loads(self.available_cities) if self.available_cities else []

    def serves(self, city) -> bool:
        cities = self.cities()
        if not cities:
            return True
        return bool(city) and city.strip().lower() in {c.strip().lower() for c in cities}


@marketplace.entity(part_of="Product")
class Variant:
    size: String(required=True, max_length=50)
    price: Float(min_value=0.0)
    stock: Integer(default=0)
    sku: String(max_length=100)


@marketplace.aggregate
class Product:
    name: String(required=True, max_length=255)
    description: Text()
    price: Float(required=True, min_value=0.0)
    discount_price: Float(default=0.0, min_value=0.0)
    tenant_id: Identifier()  # Empty for platform-owned products
    has_variants: Boolean(default=False)
    variants: HasMany(Variant)
    stock: Integer(default=0)
    sku: String(max_length=100)
    image: String(max_length=500)
    gift_wrap_available: Boolean(default=False)
    requires_custom_photo: Boolean(default=False)
    is_active: Boolean(default=True)
    product_type: String(choices=ProductType, default=ProductType.STANDARD.value)
    booking_config: ValueObject(BookingConfig)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def stock_cannot_go_negative(self):
        if self.stock is not None and self.stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})
        for variant in self.variants or []:
            if variant.stock is not None and variant.stock < 0:
                raise ValidationError({"variants": [f"Stock for size {variant.size} cannot be negative"]})

    @classmethod
    def create(
        cls,
        name,
        price,
        discount_price=0.0,
        tenant_id=None,
        stock=0,
        variants=None,
        product_type=ProductType.STANDARD.value,
        booking_config=None,
        **details,
    ):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            price=price,
            discount_price=discount_price or 0.0,
            tenant_id=tenant_id,
            stock=stock,
            has_variants=bool(variants),
            product_type=product_type,
            booking_config=booking_config,
            created_at=now,
            updated_at=now,
            **details,
        )
        for variant in variants or []:
            product.add_variants(
                Variant(
                    size=variant["size"],
                    price=price if variant.get("price") is None else variant["price"],
                    stock=variant.get("stock", 0),
                    sku=variant.get("sku"),
                )
            )
        return product

    @property
    def is_booking(self) -> bool:
        return self.product_type == ProductType.BOOKING.value

    @property
    def unit_price(self) -> float:
        if self.discount_price and self.discount_price > 0:
            return self.discount_price
        return self.price

    def find_variant(self, size):
        return next((v for v in self.variants if v.size == size), None)

    def _stock_holder(self, size):
        """The record whose ``stock`` a line with this size draws on."""
        if self.has_variants and size:
            variant = self.find_variant(size)
            if variant is None:
                raise VariantNotFound(
                    f"Variant {size} not found for {self.name}",
                    product_id=str(self.id),
                    size=size,
                )
            return variant
        return self

    def available(self, size=None) -> int:
        return self._stock_holder(size).stock or 0

    def reserve(self, quantity, size=None):
        """Take ``quantity`` units out of stock or raise ``InsufficientStock``."""
        if self.is_booking:
            return

        holder = self._stock_holder(size)
        if (holder.stock or 0) < quantity:
            label = f"{self.name} ({size})" if holder is not self else self.name
            raise InsufficientStock(
                f"Insufficient stock for {label}",
                product_id=str(self.id),
                size=size,
                requested=quantity,
                available=holder.stock or 0,
            )
        holder.stock -= quantity
        self.updated_at = datetime.now(UTC)

    def release(self, quantity, size=None):
        """Put ``quantity`` units back. A variant removed since ordering is skipped."""
        if self.is_booking:
            return False

        if self.has_variants and size:
            variant = self.find_variant(size)
            if variant is None:
                return False
            variant.stock += quantity
        else:
            self.stock += quantity
        self.updated_at = datetime.now(UTC)
        return True

    def restock(self, quantity, size=None):
        if quantity < 1:
            raise ValidationError({"quantity": ["Restock quantity must be at least 1"]})
        holder = self._stock_holder(size)
        holder.stock = (holder.stock or 0) + quantity
        self.updated_at = datetime.now(UTC)
