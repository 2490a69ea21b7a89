"""Tenant routing: binding an order to exactly one tenant.

Two ways in:

* an admin assigns the order to a tenant (or only announces it to them);
* an approved tenant claims an open order, first to accept wins.

The ``routed_to_tenant`` check and the binding are written with a version
compare-and-swap. Of several tenants racing for the same order one write
lands; the others retry, re-read the routed order and get ``AlreadyClaimed``.
"""

import structlog
from protean import handle
from protean.fields import Boolean, Identifier
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.errors import NotAuthorized, TenantNotApproved
from marketplace.notification.dispatch import format_rupees, notify, order_ref
from marketplace.order.order import Order
from marketplace.order.queries import load_order
from marketplace.tenant.management import load_tenant
from marketplace.utils.concurrency import retry_on_conflict, save_if_unchanged

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class AssignOrderToTenant:
    order_id = Identifier(required=True)
    tenant_id = Identifier(required=True)
    notify_only = Boolean(default=False)


@marketplace.command(part_of="Order")
class AcceptOrder:
    order_id = Identifier(required=True)
    tenant_id = Identifier()  # The claiming tenant, taken from the caller's identity


@marketplace.command_handler(part_of=Order)
class TenantRoutingHandler:
    @retry_on_conflict()
    @handle(AssignOrderToTenant)
    def assign_to_tenant(self, command):
        """Returns True when the order was bound, False when the tenant was only notified."""
        tenant = load_tenant(command.tenant_id)
        if not tenant.is_approved:
            raise TenantNotApproved("Tenant must be approved to receive orders", tenant_id=str(tenant.id))

        order = load_order(command.order_id)

        if command.notify_only:
            notify(
                tenant.user_id,
                "New Order Available",
                f"Order #{order_ref(order.id)} worth {format_rupees(order.total_price)} is available. "
                "First to accept gets the order!",
                f"/tenant/orders/{order.id}",
            )
            logger.info("order_offered_to_tenant", order_id=str(order.id), tenant_id=str(tenant.id))
            return False

        order.route_to(str(tenant.id), tenant.business_name, claimed=False)
        save_if_unchanged(current_domain.repository_for(Order), order)
        logger.info("order_assigned", order_id=str(order.id), tenant_id=str(tenant.id))
        return True

    @retry_on_conflict()
    @handle(AcceptOrder)
    def accept_order(self, command):
        if not command.tenant_id:
            raise NotAuthorized("You are not a registered tenant")

        tenant = load_tenant(command.tenant_id)
        if not tenant.is_approved:
            raise TenantNotApproved("Only approved tenants can accept orders", tenant_id=str(tenant.id))

        order = load_order(command.order_id)
        order.route_to(str(tenant.id), tenant.business_name, claimed=True)
        save_if_unchanged(current_domain.repository_for(Order), order)
        logger.info("order_claimed", order_id=str(order.id), tenant_id=str(tenant.id))
        return True
