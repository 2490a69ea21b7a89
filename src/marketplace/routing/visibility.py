"""Who may look at an order.

Customers see their own orders, platform admins see everything. A tenant
sees orders nobody has claimed yet and orders routed to itself, never an
order routed to another tenant.
"""

from marketplace.tenant.account import ADMIN_ROLES


def can_view_order(order, user_id=None, role=None, tenant_id=None) -> bool:
    if role in ADMIN_ROLES:
        return True
    if user_id and str(order.customer_id) == str(user_id):
        return True
    if tenant_id:
        if not order.routed_to_tenant:
            return True
        return str(order.tenant_id) == str(tenant_id)
    return False
