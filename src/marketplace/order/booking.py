"""Booking orders for appointment-style products.

Bookings are fulfilled off-platform by the product's tenant, so no stock is
taken and the commission is fixed at creation using the product's own
booking rate.
"""

from datetime import UTC, datetime, timedelta

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Date, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from marketplace.catalogue.management import load_product
from marketplace.catalogue.product import BookingConfig
from marketplace.domain import marketplace
from marketplace.order.numbering import allocate_order_number
from marketplace.order.order import BookingDetails, Order

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class CreateBookingOrder:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    customer_name = String(required=True, max_length=100)
    customer_phone = String(required=True, max_length=20)
    event_date = Date(required=True)
    quantity = Integer(required=True, min_value=1)
    city = String(max_length=100)
    notes = Text()


def check_booking_rules(config, quantity, event_date, city, today=None):
    today = today or datetime.now(UTC).date()

    if quantity < config.min_quantity or quantity > config.max_quantity:
        raise ValidationError(
            {"quantity": [f"Quantity must be between {config.min_quantity} and {config.max_quantity}"]}
        )

    earliest = today + timedelta(days=config.lead_time_days)
    if event_date < earliest:
        raise ValidationError(
            {"event_date": [f"Event date must be at least {config.lead_time_days} days from today"]}
        )

    if not config.serves(city):
        raise ValidationError({"city": [f"Service is not available in {city or 'the selected city'}"]})


@marketplace.command_handler(part_of=Order)
class CreateBookingOrderHandler:
    @handle(CreateBookingOrder)
    def create_booking_order(self, command):
        product = load_product(command.product_id)
        if not product.is_booking:
            raise ValidationError({"product_id": ["This product does not accept bookings"]})

        config = product.booking_config or BookingConfig()
        check_booking_rules(config, command.quantity, command.event_date, command.city)

        order = Order.book(
            order_number=allocate_order_number(),
            customer_id=command.customer_id,
            product=product,
            quantity=command.quantity,
            booking=BookingDetails(
                customer_name=command.customer_name,
                customer_phone=command.customer_phone,
                event_date=command.event_date,
                city=command.city,
                notes=command.notes,
            ),
            commission_rate=config.commission_percentage,
        )
        current_domain.repository_for(Order).add(order)

        logger.info(
            "booking_order_placed",
            order_id=str(order.id),
            product_id=str(product.id),
            tenant_id=product.tenant_id,
            total_price=order.total_price,
            platform_commission=order.platform_commission,
        )
        return str(order.id)
