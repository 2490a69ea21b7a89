"""Order status updates by platform admins and by the tenant an order is routed to."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace import settings
from marketplace.domain import marketplace
from marketplace.errors import NotAuthorized, TenantNotFound
from marketplace.inventory import ledger
from marketplace.order.order import Order, OrderStatus
from marketplace.order.queries import load_order
from marketplace.tenant.management import load_tenant
from marketplace.utils.concurrency import retry_on_conflict, save_if_unchanged

logger = structlog.get_logger(__name__)

TENANT_SETTABLE_STATUSES = {
    OrderStatus.PENDING.value,
    OrderStatus.ACCEPTED.value,
    OrderStatus.PROCESSING.value,
    OrderStatus.OUT_FOR_DELIVERY.value,
    OrderStatus.DELIVERED.value,
    OrderStatus.CANCELLED.value,
}


@marketplace.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=30)
    message = String(max_length=500)


@marketplace.command(part_of="Order")
class UpdateTenantOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=30)
    message = String(max_length=500)
    tenant_id = Identifier()  # Acting tenant; empty when a platform admin acts


def _commission_rate(tenant_id) -> float:
    try:
        rate = load_tenant(tenant_id).commission_rate
    except TenantNotFound:
        logger.warning("commission_tenant_missing", tenant_id=str(tenant_id))
        rate = None
    return settings.default_commission_rate() if rate is None else rate


def apply_status_change(order, status, message=None):
    """Transition ``order`` and run the side effects of the state it lands in.

    Cancelled puts the stock of every line back (bookings never took any).
    Delivered settles the commission of a tenant-routed order; it is a
    terminal state, so this runs once.
    """
    previous = order.transition_to(status, message)

    if order.status == OrderStatus.CANCELLED.value and not order.is_booking:
        ledger.commit(ledger.release_lines(order.stock_lines()))

    if order.status == OrderStatus.DELIVERED.value and order.tenant_id and not order.commission_settled:
        order.settle_commission(_commission_rate(order.tenant_id))

    logger.info(
        "order_status_changed",
        order_id=str(order.id),
        previous_status=previous,
        new_status=order.status,
    )
    return previous


@marketplace.command_handler(part_of=Order)
class OrderStatusHandler:
    @retry_on_conflict()
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        order = load_order(command.order_id)
        apply_status_change(order, command.status, command.message)
        save_if_unchanged(current_domain.repository_for(Order), order)
        return order.status

    @retry_on_conflict()
    @handle(UpdateTenantOrderStatus)
    def update_tenant_status(self, command):
        if command.status not in TENANT_SETTABLE_STATUSES:
            raise ValidationError({"status": ["Invalid order status"]})

        order = load_order(command.order_id)
        if command.tenant_id and str(order.tenant_id) != str(command.tenant_id):
            raise NotAuthorized("You can only update your own orders", order_id=str(order.id))

        apply_status_change(order, command.status, command.message)
        save_if_unchanged(current_domain.repository_for(Order), order)
        return order.status
