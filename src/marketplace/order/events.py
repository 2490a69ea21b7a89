"""Domain events for the Order aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Order")
class OrderPlaced:
    """A customer placed a standard or booking order."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    tenant_id = Identifier()
    total_price = Float(required=True)
    is_booking = Boolean(default=False)
    placed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    message = String(max_length=500)
    changed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderCancelled:
    """The order reached the Cancelled state; its stock has been released."""

    __version__ = 1

    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    reason = String(max_length=500)
    cancelled_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderDelivered:
    """The order was delivered and commission settled against its tenant."""

    __version__ = 1

    order_id = Identifier(required=True)
    tenant_id = Identifier()
    total_price = Float(required=True)
    platform_commission = Float(default=0.0)
    tenant_earnings = Float(default=0.0)
    delivered_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderRoutedToTenant:
    """An order was bound to a tenant, by admin assignment or by a tenant claim."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    tenant_id = Identifier(required=True)
    total_price = Float(required=True)
    claimed = Boolean(default=False)
    routed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class PaymentVerified:
    __version__ = 1

    order_id = Identifier(required=True)
    razorpay_order_id = String(required=True)
    razorpay_payment_id = String(required=True)
    verified_at = DateTime(required=True)
