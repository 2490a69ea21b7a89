"""Order event handler: tells customers and tenants what happened to an order."""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from marketplace.domain import marketplace
from marketplace.notification.dispatch import format_rupees, notify, order_ref
from marketplace.order.events import OrderPlaced, OrderRoutedToTenant, OrderStatusChanged
from marketplace.order.order import Order
from marketplace.tenant.tenant import Tenant

logger = structlog.get_logger(__name__)


@marketplace.event_handler(part_of=Order)
class OrderNotificationHandler:
    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        kind = "booking" if event.is_booking else "order"
        notify(
            event.customer_id,
            "Order Placed",
            f"Your {kind} #{event.order_number} worth {format_rupees(event.total_price)} has been placed.",
            f"/orders/{event.order_id}",
        )

    @handle(OrderStatusChanged)
    def on_status_changed(self, event: OrderStatusChanged) -> None:
        notify(
            event.customer_id,
            f"Order {event.new_status}",
            event.message or f"Your order #{event.order_number} is now {event.new_status}.",
            f"/orders/{event.order_id}",
        )

    @handle(OrderRoutedToTenant)
    def on_routed_to_tenant(self, event: OrderRoutedToTenant) -> None:
        """Admin assignments are announced to the tenant; claimants already know."""
        if event.claimed:
            logger.debug("claim_notification_skipped", order_id=str(event.order_id), tenant_id=str(event.tenant_id))
            return

        try:
            tenant = current_domain.repository_for(Tenant).get(event.tenant_id)
        except ObjectNotFoundError:
            logger.warning("routed_tenant_missing", order_id=str(event.order_id), tenant_id=str(event.tenant_id))
            return

        notify(
            tenant.user_id,
            "New Order Assigned",
            f"You have been assigned order #{order_ref(event.order_id)} worth {format_rupees(event.total_price)}",
            f"/tenant/orders/{event.order_id}",
        )
