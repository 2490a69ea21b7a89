"""Order cancellation by the customer who placed it or by a platform admin."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import NotAuthorized
from marketplace.order.order import Order, OrderStatus
from marketplace.order.queries import load_order
from marketplace.order.status import apply_status_change
from marketplace.tenant.account import ADMIN_ROLES
from marketplace.utils.concurrency import retry_on_conflict, save_if_unchanged


@marketplace.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    requested_by = Identifier(required=True)
    requester_role = String(max_length=20, default="user")
    reason = String(max_length=500)


@marketplace.command_handler(part_of=Order)
class CancelOrderHandler:
    @retry_on_conflict()
    @handle(CancelOrder)
    def cancel_order(self, command):
        order = load_order(command.order_id)

        is_owner = str(order.customer_id) == str(command.requested_by)
        if not is_owner and command.requester_role not in ADMIN_ROLES:
            raise NotAuthorized("Not authorized to cancel this order", order_id=str(order.id))

        if order.is_terminal:
            raise ValidationError({"status": [f"Cannot cancel order with status: {order.status}"]})

        apply_status_change(order, OrderStatus.CANCELLED.value, command.reason or "Cancelled by user")
        save_if_unchanged(current_domain.repository_for(Order), order)
