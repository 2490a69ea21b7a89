"""Read paths over orders."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product, ProductType
from marketplace.errors import OrderNotFound
from marketplace.order.commission import round2
from marketplace.order.order import Order, OrderStatus

PAGE_SIZE = 100
LOW_STOCK_THRESHOLD = 10
DASHBOARD_LIST_SIZE = 10


def load_order(order_id):
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise OrderNotFound("Order not found", order_id=str(order_id)) from None


def _query():
    return current_domain.repository_for(Order)._dao.query.order_by("-created_at")


def _every(query):
    """All matches of ``query``, read ``PAGE_SIZE`` records at a time."""
    query = query.limit(PAGE_SIZE)
    results, offset = [], 0
    while True:
        page = query.offset(offset).all()
        results.extend(page.items)
        if not page.has_next:
            return results
        offset += PAGE_SIZE


def orders_for_customer(customer_id):
    return _every(_query().filter(customer_id=str(customer_id)))


def orders_for_tenant(tenant_id):
    """Orders routed to ``tenant_id``. Booking orders that merely name the tenant are excluded."""
    return _every(_query().filter(tenant_id=str(tenant_id), routed_to_tenant=True))


def unassigned_orders():
    """Standard orders still open for a tenant to claim."""
    orders = _every(_query().filter(routed_to_tenant=False, is_booking=False))
    return [o for o in orders if not o.is_terminal]


def all_orders(status=None):
    query = _query()
    if status:
        query = query.filter(status=OrderStatus(status).value)
    return _every(query)


def tenant_stats(tenant):
    """Order counts and earnings for one tenant.

    Revenue and commission count delivered orders only. Commission is the
    amount settled on each order, so a later rate change does not rewrite it.
    """
    orders = orders_for_tenant(tenant.id)
    delivered = [o for o in orders if o.status == OrderStatus.DELIVERED.value]
    open_statuses = (OrderStatus.PENDING.value, OrderStatus.PROCESSING.value)

    total_revenue = round2(sum(o.total_price for o in delivered))
    commission_amount = round2(sum(o.platform_commission or 0.0 for o in delivered))
    products = current_domain.repository_for(Product)._dao.query.filter(tenant_id=str(tenant.id))

    return {
        "product_count": products.all().total,
        "total_orders": len(orders),
        "pending_orders": sum(1 for o in orders if o.status in open_statuses),
        "completed_orders": len(delivered),
        "total_revenue": total_revenue,
        "commission_rate": tenant.commission_rate,
        "commission_amount": commission_amount,
        "net_revenue": round2(total_revenue - commission_amount),
    }


def dashboard_stats():
    """Platform-wide figures for the admin dashboard."""
    orders = _every(_query())
    by_status = {status.value: 0 for status in OrderStatus}
    for order in orders:
        by_status[order.status] += 1

    low_stock = (
        current_domain.repository_for(Product)
        ._dao.query.filter(
            stock__lte=LOW_STOCK_THRESHOLD,
            is_active=True,
            has_variants=False,
            product_type=ProductType.STANDARD.value,
        )
        .order_by("stock")
        .limit(DASHBOARD_LIST_SIZE)
        .all()
        .items
    )

    return {
        "total_orders": len(orders),
        "pending_orders": by_status[OrderStatus.PENDING.value],
        "delivered_orders": by_status[OrderStatus.DELIVERED.value],
        "orders_by_status": by_status,
        "total_revenue": round2(
            sum(o.total_price for o in orders if o.status != OrderStatus.CANCELLED.value)
        ),
        "platform_commission": round2(sum(o.platform_commission or 0.0 for o in orders)),
        "low_stock_products": low_stock,
        "recent_orders": orders[:DASHBOARD_LIST_SIZE],
    }
