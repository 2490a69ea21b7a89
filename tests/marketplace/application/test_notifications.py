"""Application tests for order notifications."""

from marketplace.notification.dispatch import format_rupees, notify, order_ref
from marketplace.order.order import Order
from marketplace.order.status import UpdateOrderStatus
from marketplace.routing.assignment import AcceptOrder, AssignOrderToTenant
from marketplace.tenant.tenant import Tenant
from protean.utils.globals import current_domain


def _titles(dispatcher, recipient):
    return [n["title"] for n in dispatcher.sent_to(recipient)]


class TestCustomerNotifications:
    def test_order_placed(self, make_product, place_order, dispatcher):
        order_id = place_order(make_product(), total_price=1048.0)
        order = current_domain.repository_for(Order).get(order_id)

        note = dispatcher.sent_to("cust-1")[-1]
        assert note["title"] == "Order Placed"
        assert order.order_number in note["message"]
        assert "₹1048" in note["message"]
        assert note["link"] == f"/orders/{order_id}"

    def test_status_change(self, make_product, place_order, dispatcher):
        order_id = place_order(make_product())
        current_domain.process(
            UpdateOrderStatus(order_id=order_id, status="Shipped", message="On its way"), asynchronous=False
        )

        note = dispatcher.sent_to("cust-1")[-1]
        assert (note["title"], note["message"]) == ("Order Shipped", "On its way")

    def test_failed_delivery_does_not_fail_the_operation(self, make_product, place_order, dispatcher):
        dispatcher.configure(should_succeed=False)
        order_id = place_order(make_product())

        current_domain.process(UpdateOrderStatus(order_id=order_id, status="Accepted"), asynchronous=False)

        assert current_domain.repository_for(Order).get(order_id).status == "Accepted"
        assert dispatcher.sent == []


class TestTenantNotifications:
    def test_assignment_is_announced(self, make_product, place_order, make_tenant, dispatcher):
        tenant_id = make_tenant()
        user_id = current_domain.repository_for(Tenant).get(tenant_id).user_id
        order_id = place_order(make_product(), total_price=750.5)

        current_domain.process(AssignOrderToTenant(order_id=order_id, tenant_id=tenant_id), asynchronous=False)

        note = dispatcher.sent_to(user_id)[-1]
        assert note["title"] == "New Order Assigned"
        assert f"#{order_ref(order_id)}" in note["message"]
        assert "₹750.50" in note["message"]
        assert note["link"] == f"/tenant/orders/{order_id}"

    def test_claiming_tenant_is_not_notified(self, make_product, place_order, make_tenant, dispatcher):
        tenant_id = make_tenant()
        user_id = current_domain.repository_for(Tenant).get(tenant_id).user_id
        order_id = place_order(make_product())

        current_domain.process(AcceptOrder(order_id=order_id, tenant_id=tenant_id), asynchronous=False)
        assert "New Order Assigned" not in _titles(dispatcher, user_id)


class TestHelpers:
    def test_notify_without_recipient_is_skipped(self, dispatcher):
        assert notify(None, "Title", "Message") is None
        assert dispatcher.sent == []

    def test_order_ref(self):
        assert order_ref("5f1c9a2b-77aa-4e1d-9b0c-3e2d1a9fbc4d") == "9FBC4D"

    def test_format_rupees(self):
        assert format_rupees(1500.0) == "₹1500"
        assert format_rupees(99.5) == "₹99.50"
