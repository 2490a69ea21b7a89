"""Order aggregate: checkout result, status state machine and tenant binding.

State machine:
    Pending → Accepted → Processing → Packed → Shipped → Out for Delivery → Delivered

Moves are forward-only along that path and may skip steps. Cancelled is
reachable from every non-terminal state. Booking orders, fulfilled
off-platform, finish in Completed instead. Delivered, Cancelled and
Completed are terminal.

Tenant routing is not a status: binding an order to a tenant resets it to
Pending and writes an ``Assigned`` entry into the status history.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    Date,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from marketplace.domain import marketplace
from marketplace.errors import AlreadyAssigned, AlreadyClaimed
from marketplace.inventory.ledger import StockLine
from marketplace.order.commission import commission, round2
from marketplace.order.events import (
    OrderCancelled,
    OrderDelivered,
    OrderPlaced,
    OrderRoutedToTenant,
    OrderStatusChanged,
    PaymentVerified,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "Pending"
    ACCEPTED = "Accepted"
    PROCESSING = "Processing"
    PACKED = "Packed"
    SHIPPED = "Shipped"
    OUT_FOR_DELIVERY = "Out for Delivery"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"


class PaymentMethod(Enum):
    UPI = "UPI"
    CARD = "Card"
    NET_BANKING = "NetBanking"
    COD = "COD"


class PaymentStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


ASSIGNED = "Assigned"

_FULFILMENT_PATH = [
    OrderStatus.PENDING,
    OrderStatus.ACCEPTED,
    OrderStatus.PROCESSING,
    OrderStatus.PACKED,
    OrderStatus.SHIPPED,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
]

TERMINAL_STATES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.COMPLETED}


def allowed_transitions(current: OrderStatus, is_booking: bool = False) -> set[OrderStatus]:
    """Statuses an order in ``current`` may move to."""
    if current in TERMINAL_STATES:
        return set()

    rank = _FULFILMENT_PATH.index(current)
    targets = set(_FULFILMENT_PATH[rank + 1 :])
    targets.add(OrderStatus.CANCELLED)
    if is_booking:
        targets.add(OrderStatus.COMPLETED)
    return targets


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@marketplace.value_object(part_of="Order")
class ShippingAddress:
    """Delivery address captured at checkout, unaffected by later profile edits."""

    name = String(required=True, max_length=100)
    phone = String(required=True, max_length=20)
    address_line1 = String(required=True, max_length=255)
    address_line2 = String(max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    pincode = String(required=True, max_length=10)


@marketplace.value_object(part_of="Order")
class OrderPricing:
    """Price breakdown fixed at checkout.

    Every component is stored as given rather than derived, so the discount
    and totals the customer saw remain auditable.
    """

    items_price = Float(default=0.0, min_value=0.0)
    tax_price = Float(default=0.0, min_value=0.0)
    shipping_price = Float(default=0.0, min_value=0.0)
    gift_wrap_price = Float(default=0.0, min_value=0.0)
    packing_price = Float(default=0.0, min_value=0.0)
    discount_price = Float(default=0.0, min_value=0.0)
    total_price = Float(required=True, min_value=0.0)


@marketplace.value_object(part_of="Order")
class PaymentInfo:
    razorpay_order_id = String(max_length=100)
    razorpay_payment_id = String(max_length=100)
    razorpay_signature = String(max_length=256)
    status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)


@marketplace.value_object(part_of="Order")
class BookingDetails:
    customer_name = String(required=True, max_length=100)
    customer_phone = String(required=True, max_length=20)
    event_date = Date(required=True)
    city = String(max_length=100)
    notes = String(max_length=1000)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@marketplace.entity(part_of="Order")
class OrderItem:
    """A purchased line with the product's price and name as they were at checkout."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)
    image = String(max_length=500)
    size = String(max_length=50)
    gift_wrap = Boolean(default=False)
    custom_photo_url = String(max_length=500)
    custom_photo_public_id = String(max_length=255)
    tenant_id = Identifier()


@marketplace.entity(part_of="Order")
class StatusEntry:
    """One line of the order's append-only audit trail."""

    status = String(required=True, max_length=30)
    message = String(max_length=500)
    sequence = Integer(required=True, min_value=0)
    recorded_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@marketplace.aggregate
class Order:
    order_number = String(required=True, max_length=20, unique=True)
    customer_id = Identifier(required=True)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(ShippingAddress)
    booking = ValueObject(BookingDetails)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.COD.value)
    payment_info = ValueObject(PaymentInfo)
    pricing = ValueObject(OrderPricing)
    coupon_code = String(max_length=50)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    status_history = HasMany(StatusEntry)
    is_booking = Boolean(default=False)
    tenant_id = Identifier()
    routed_to_tenant = Boolean(default=False)
    platform_commission = Float(default=0.0)
    tenant_earnings = Float(default=0.0)
    commission_settled = Boolean(default=False)
    delivered_at = DateTime()
    cancelled_at = DateTime()
    cancellation_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factories
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number,
        customer_id,
        items,
        shipping_address,
        pricing,
        payment_method=PaymentMethod.COD.value,
        payment_info=None,
        coupon_code=None,
    ):
        """Create a standard order from checkout data.

        Args:
            items: list of dicts with product_id, name, quantity, price and
                optional image, size, gift_wrap, custom photo and tenant_id.
            shipping_address: ``ShippingAddress`` or dict of its fields.
            pricing: ``OrderPricing`` or dict of its fields.
        """
        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            customer_id=customer_id,
            shipping_address=_as(ShippingAddress, shipping_address),
            pricing=_as(OrderPricing, pricing),
            payment_method=payment_method or PaymentMethod.COD.value,
            payment_info=_as(PaymentInfo, payment_info) or PaymentInfo(),
            coupon_code=coupon_code,
            status=OrderStatus.PENDING.value,
            created_at=now,
            updated_at=now,
        )
        for item in items:
            order.add_items(OrderItem(**item))
        order._record(OrderStatus.PENDING.value, "Order placed successfully")

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=str(customer_id),
                total_price=order.pricing.total_price,
                is_booking=False,
                placed_at=now,
            )
        )
        return order

    @classmethod
    def book(cls, order_number, customer_id, product, quantity, booking, commission_rate):
        """Create a booking order for an appointment-style product.

        Commission is settled immediately at the product's booking rate since
        fulfilment happens off-platform and never passes through Delivered.
        """
        now = datetime.now(UTC)
        unit_price = product.unit_price
        total = round2(unit_price * quantity)
        platform, earnings = commission(total, commission_rate)

        order = cls(
            order_number=order_number,
            customer_id=customer_id,
            booking=_as(BookingDetails, booking),
            pricing=OrderPricing(items_price=total, total_price=total),
            payment_method=PaymentMethod.COD.value,
            payment_info=PaymentInfo(),
            status=OrderStatus.PENDING.value,
            is_booking=True,
            tenant_id=product.tenant_id,
            routed_to_tenant=False,
            platform_commission=platform,
            tenant_earnings=earnings,
            commission_settled=True,
            created_at=now,
            updated_at=now,
        )
        order.add_items(
            OrderItem(
                product_id=str(product.id),
                name=product.name,
                quantity=quantity,
                price=unit_price,
                image=product.image,
                tenant_id=product.tenant_id,
            )
        )
        order._record(OrderStatus.PENDING.value, "Booking request placed successfully")

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=str(customer_id),
                tenant_id=product.tenant_id,
                total_price=total,
                is_booking=True,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Audit trail
    # -------------------------------------------------------------------
    def _record(self, status, message):
        now = datetime.now(UTC)
        self.add_status_history(
            StatusEntry(
                status=status,
                message=message,
                sequence=len(self.status_history or []),
                recorded_at=now,
            )
        )
        self.updated_at = now

    def timeline(self) -> list:
        """Status history in the order it was written."""
        return sorted(self.status_history, key=lambda entry: entry.sequence)

    # -------------------------------------------------------------------
    # State machine
    # -------------------------------------------------------------------
    @property
    def is_terminal(self) -> bool:
        return OrderStatus(self.status) in TERMINAL_STATES

    @property
    def total_price(self) -> float:
        return self.pricing.total_price if self.pricing else 0.0

    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in allowed_transitions(current, self.is_booking):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def transition_to(self, status, message=None):
        """Move to ``status`` and append it to the history. Returns the previous status."""
        try:
            target = OrderStatus(status)
        except ValueError:
            raise ValidationError({"status": [f"Invalid order status: {status}"]}) from None

        self._assert_can_transition(target)

        previous = self.status
        now = datetime.now(UTC)
        self.status = target.value

        message = message or f"Order status updated to {target.value}"
        if target is OrderStatus.CANCELLED:
            self.cancelled_at = now
            self.cancellation_reason = message
        elif target in (OrderStatus.DELIVERED, OrderStatus.COMPLETED):
            self.delivered_at = now

        self._record(target.value, message)

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                customer_id=str(self.customer_id),
                previous_status=previous,
                new_status=target.value,
                message=message,
                changed_at=now,
            )
        )
        if target is OrderStatus.CANCELLED:
            self.raise_(
                OrderCancelled(
                    order_id=str(self.id),
                    customer_id=str(self.customer_id),
                    reason=message,
                    cancelled_at=now,
                )
            )
        return previous

    def cancel(self, reason=None):
        if self.is_terminal:
            raise ValidationError({"status": [f"Cannot cancel order with status: {self.status}"]})
        return self.transition_to(OrderStatus.CANCELLED.value, reason or "Cancelled by user")

    def settle_commission(self, rate_percent):
        """Split the total between platform and tenant. Runs once per order."""
        if self.commission_settled:
            raise ValidationError({"commission": ["Commission has already been settled for this order"]})

        self.platform_commission, self.tenant_earnings = commission(self.total_price, rate_percent)
        self.commission_settled = True

        self.raise_(
            OrderDelivered(
                order_id=str(self.id),
                tenant_id=self.tenant_id,
                total_price=self.total_price,
                platform_commission=self.platform_commission,
                tenant_earnings=self.tenant_earnings,
                delivered_at=self.delivered_at or datetime.now(UTC),
            )
        )

    def stock_lines(self) -> list[StockLine]:
        return [StockLine(product_id=str(item.product_id), quantity=item.quantity, size=item.size) for item in self.items]

    # -------------------------------------------------------------------
    # Tenant routing
    # -------------------------------------------------------------------
    def route_to(self, tenant_id, business_name, claimed=False):
        """Bind the order to a tenant. An order is routed at most once."""
        if self.routed_to_tenant:
            if claimed:
                raise AlreadyClaimed(
                    "This order has already been accepted by another tenant",
                    order_id=str(self.id),
                    tenant_id=str(self.tenant_id),
                )
            raise AlreadyAssigned(
                "Order is already assigned to a tenant",
                order_id=str(self.id),
                tenant_id=str(self.tenant_id),
            )
        if self.is_terminal:
            raise ValidationError({"status": [f"Cannot route an order with status: {self.status}"]})

        now = datetime.now(UTC)
        self.tenant_id = tenant_id
        self.routed_to_tenant = True
        self.status = OrderStatus.PENDING.value
        verb = "accepted by" if claimed else "assigned to"
        self._record(ASSIGNED, f"Order {verb} tenant: {business_name}")

        self.raise_(
            OrderRoutedToTenant(
                order_id=str(self.id),
                order_number=self.order_number,
                tenant_id=str(tenant_id),
                total_price=self.total_price,
                claimed=claimed,
                routed_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    @property
    def is_paid(self) -> bool:
        return bool(self.payment_info) and self.payment_info.status == PaymentStatus.COMPLETED.value

    def _assert_unpaid(self):
        if self.is_paid:
            raise ValidationError({"payment": ["Payment has already been verified for this order"]})

    def record_payment(self, razorpay_order_id, razorpay_payment_id, razorpay_signature):
        self._assert_unpaid()

        self.payment_info = PaymentInfo(
            razorpay_order_id=razorpay_order_id,
            razorpay_payment_id=razorpay_payment_id,
            razorpay_signature=razorpay_signature,
            status=PaymentStatus.COMPLETED.value,
        )
        self.updated_at = datetime.now(UTC)

        self.raise_(
            PaymentVerified(
                order_id=str(self.id),
                razorpay_order_id=razorpay_order_id,
                razorpay_payment_id=razorpay_payment_id,
                verified_at=self.updated_at,
            )
        )

    def record_payment_failure(self, razorpay_order_id=None):
        """Mark the payment failed. A verified payment is never overwritten."""
        self._assert_unpaid()
        current = self.payment_info or PaymentInfo()
        self.payment_info = PaymentInfo(
            razorpay_order_id=razorpay_order_id or current.razorpay_order_id,
            razorpay_payment_id=current.razorpay_payment_id,
            razorpay_signature=current.razorpay_signature,
            status=PaymentStatus.FAILED.value,
        )
        self.updated_at = datetime.now(UTC)


def _as(vo_cls, value):
    if value is None or isinstance(value, vo_cls):
        return value
    return vo_cls(**value)
