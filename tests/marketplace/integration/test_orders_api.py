"""Integration tests for the order endpoints via TestClient."""

import hashlib
import hmac

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from marketplace.api import order_router, product_router, register_error_handlers, tenant_router
from marketplace.order.order import Order
from protean.utils.globals import current_domain

CUSTOMER = {"X-User-Id": "cust-1"}
ADMIN = {"X-User-Id": "admin-1", "X-User-Role": "admin"}
SUPERADMIN = {"X-User-Id": "root-1", "X-User-Role": "superadmin"}

ADDRESS = {
    "name": "Asha Rao",
    "phone": "9876543210",
    "address_line1": "12 MG Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "pincode": "560001",
}


@pytest.fixture()
def client():
    app = FastAPI()
    register_error_handlers(app)
    app.include_router(order_router)
    app.include_router(product_router)
    app.include_router(tenant_router)
    return TestClient(app, raise_server_exceptions=False)


def _tenant_headers(tenant_id):
    return {"X-User-Id": f"user-{tenant_id}", "X-User-Role": "tenant", "X-Tenant-Id": tenant_id}


def _checkout(client, product_id, quantity=1, headers=CUSTOMER, **overrides):
    body = {
        "items": [{"product_id": product_id, "quantity": quantity}],
        "shipping_address": ADDRESS,
        "payment_method": "COD",
        "items_price": 500.0 * quantity,
        "total_price": 500.0 * quantity,
    }
    body.update(overrides)
    return client.post("/orders", json=body, headers=headers)


class TestCreateOrderEndpoint:
    def test_create_order(self, client, make_product):
        product_id = make_product(stock=3)
        response = _checkout(client, product_id, quantity=2)

        assert response.status_code == 201
        data = response.json()
        assert data["order_number"].startswith("PK")
        assert data["status"] == "Pending"
        assert data["items"][0]["quantity"] == 2
        order = current_domain.repository_for(Order).get(data["order_id"])
        assert str(order.customer_id) == "cust-1"

    def test_requires_identity(self, client, make_product):
        response = _checkout(client, make_product(), headers={})
        assert response.status_code == 401
        assert response.json() == {"error": "Not authorized, no token"}

    def test_insufficient_stock(self, client, make_product):
        product_id = make_product(name="Brass Lamp", stock=1)
        response = _checkout(client, product_id, quantity=2)
        assert response.status_code == 400
        assert response.json() == {"error": "Insufficient stock for Brass Lamp"}

    def test_unknown_product(self, client):
        response = _checkout(client, "missing")
        assert response.status_code == 404

    def test_empty_items(self, client):
        response = client.post(
            "/orders",
            json={"items": [], "shipping_address": ADDRESS, "total_price": 0},
            headers=CUSTOMER,
        )
        assert response.status_code == 400
        assert response.json() == {"error": "No order items"}


class TestReadEndpoints:
    def test_get_own_order(self, client, make_product):
        order_id = _checkout(client, make_product()).json()["order_id"]
        response = client.get(f"/orders/{order_id}", headers=CUSTOMER)

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "Pending"
        assert data["status_history"][0]["message"] == "Order placed successfully"
        assert data["pricing"]["total_price"] == 500.0

    def test_other_customer_is_forbidden(self, client, make_product):
        order_id = _checkout(client, make_product()).json()["order_id"]
        response = client.get(f"/orders/{order_id}", headers={"X-User-Id": "cust-2"})
        assert response.status_code == 403

    def test_placed_orders(self, client, make_product):
        product_id = make_product(stock=5)
        _checkout(client, product_id)
        _checkout(client, product_id)
        response = client.get("/orders/placed", headers=CUSTOMER)
        assert response.json()["count"] == 2

    def test_admin_listing_requires_admin(self, client):
        assert client.get("/orders", headers=CUSTOMER).status_code == 403
        assert client.get("/orders", headers=ADMIN).status_code == 200


class TestStatusEndpoints:
    def test_admin_updates_status(self, client, make_product):
        order_id = _checkout(client, make_product()).json()["order_id"]
        response = client.put(f"/orders/{order_id}/status", json={"status": "Shipped"}, headers=ADMIN)

        assert response.status_code == 200
        assert response.json() == {"status": "Shipped"}

    def test_illegal_transition(self, client, make_product):
        order_id = _checkout(client, make_product()).json()["order_id"]
        client.put(f"/orders/{order_id}/status", json={"status": "Delivered"}, headers=ADMIN)
        response = client.put(f"/orders/{order_id}/status", json={"status": "Shipped"}, headers=ADMIN)

        assert response.status_code == 400
        assert response.json() == {"error": {"status": ["Cannot transition from Delivered to Shipped"]}}

    def test_customer_cancels(self, client, make_product):
        order_id = _checkout(client, make_product()).json()["order_id"]
        response = client.put(f"/orders/{order_id}/cancel", json={"reason": "Wrong size"}, headers=CUSTOMER)

        assert response.status_code == 200
        assert current_domain.repository_for(Order).get(order_id).cancellation_reason == "Wrong size"

    def test_stranger_cannot_cancel(self, client, make_product):
        order_id = _checkout(client, make_product()).json()["order_id"]
        response = client.put(f"/orders/{order_id}/cancel", headers={"X-User-Id": "cust-2"})
        assert response.status_code == 403
        assert response.json() == {"error": "Not authorized to cancel this order"}


class TestRoutingEndpoints:
    def test_claim_race_has_one_winner(self, client, make_product, make_tenant):
        first, second = make_tenant(), make_tenant()
        order_id = _checkout(client, make_product()).json()["order_id"]

        assert client.post(f"/orders/{order_id}/accept", headers=_tenant_headers(first)).status_code == 200
        response = client.post(f"/orders/{order_id}/accept", headers=_tenant_headers(second))

        assert response.status_code == 400
        assert response.json() == {"error": "This order has already been accepted by another tenant"}

    def test_available_orders_for_tenant(self, client, make_product, make_tenant):
        tenant_id = make_tenant()
        product_id = make_product(stock=5)
        open_id = _checkout(client, product_id).json()["order_id"]
        claimed_id = _checkout(client, product_id).json()["order_id"]
        client.post(f"/orders/{claimed_id}/accept", headers=_tenant_headers(tenant_id))

        available = client.get("/orders/available", headers=_tenant_headers(tenant_id)).json()
        mine = client.get("/orders/my-orders", headers=_tenant_headers(tenant_id)).json()

        assert [o["order_id"] for o in available["orders"]] == [open_id]
        assert [o["order_id"] for o in mine["orders"]] == [claimed_id]

    def test_other_tenant_cannot_view_claimed_order(self, client, make_product, make_tenant):
        owner, other = make_tenant(), make_tenant()
        order_id = _checkout(client, make_product()).json()["order_id"]
        client.post(f"/orders/{order_id}/accept", headers=_tenant_headers(owner))

        assert client.get(f"/orders/{order_id}", headers=_tenant_headers(owner)).status_code == 200
        assert client.get(f"/orders/{order_id}", headers=_tenant_headers(other)).status_code == 403

    def test_assignment_is_superadmin_only(self, client, make_product, make_tenant):
        tenant_id = make_tenant()
        order_id = _checkout(client, make_product()).json()["order_id"]

        denied = client.post(f"/orders/{order_id}/assign-tenant", json={"tenant_id": tenant_id}, headers=ADMIN)
        assert denied.status_code == 403

        response = client.post(f"/orders/{order_id}/assign-tenant", json={"tenant_id": tenant_id}, headers=SUPERADMIN)
        assert response.status_code == 200
        assert response.json() == {"message": "Order assigned to tenant successfully"}

    def test_unapproved_tenant(self, client, make_product, make_tenant):
        tenant_id = make_tenant(approved=False)
        order_id = _checkout(client, make_product()).json()["order_id"]
        response = client.post(f"/orders/{order_id}/assign-tenant", json={"tenant_id": tenant_id}, headers=SUPERADMIN)
        assert response.status_code == 400
        assert response.json() == {"error": "Tenant must be approved to receive orders"}


class TestPaymentEndpoints:
    def test_verify(self, client, make_product, monkeypatch):
        monkeypatch.setenv("RAZORPAY_KEY_SECRET", "s3cret")
        order_id = _checkout(client, make_product(), payment_method="UPI").json()["order_id"]
        signature = hmac.new(b"s3cret", b"order_1|pay_1", hashlib.sha256).hexdigest()

        response = client.post(
            f"/orders/{order_id}/payment/verify",
            json={"razorpay_order_id": "order_1", "razorpay_payment_id": "pay_1", "razorpay_signature": signature},
            headers=CUSTOMER,
        )
        assert response.status_code == 200

    def test_bad_signature(self, client, make_product, monkeypatch):
        monkeypatch.setenv("RAZORPAY_KEY_SECRET", "s3cret")
        order_id = _checkout(client, make_product(), payment_method="UPI").json()["order_id"]

        response = client.post(
            f"/orders/{order_id}/payment/verify",
            json={"razorpay_order_id": "order_1", "razorpay_payment_id": "pay_1", "razorpay_signature": "forged"},
            headers=CUSTOMER,
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Payment verification failed"}

    def test_verified_payment_cannot_be_failed_later(self, client, make_product, monkeypatch):
        monkeypatch.setenv("RAZORPAY_KEY_SECRET", "s3cret")
        order_id = _checkout(client, make_product(), payment_method="UPI").json()["order_id"]
        signature = hmac.new(b"s3cret", b"order_1|pay_1", hashlib.sha256).hexdigest()
        client.post(
            f"/orders/{order_id}/payment/verify",
            json={"razorpay_order_id": "order_1", "razorpay_payment_id": "pay_1", "razorpay_signature": signature},
            headers=CUSTOMER,
        )

        response = client.post(
            f"/orders/{order_id}/payment/failure", json={"description": "Late webhook"}, headers=CUSTOMER
        )

        assert response.status_code == 400
        order = client.get(f"/orders/{order_id}", headers=CUSTOMER).json()
        assert (order["status"], order["payment_status"]) == ("Pending", "completed")


class TestStatsEndpoints:
    def _delivered_for(self, client, product_id, tenant_id):
        order_id = _checkout(client, product_id).json()["order_id"]
        client.post(f"/orders/{order_id}/assign-tenant", json={"tenant_id": tenant_id}, headers=SUPERADMIN)
        client.put(f"/orders/{order_id}/status", json={"status": "Delivered"}, headers=ADMIN)
        return order_id

    def test_tenant_reads_own_stats(self, client, make_product, make_tenant):
        tenant_id = make_tenant()
        self._delivered_for(client, make_product(), tenant_id)

        response = client.get(f"/tenants/{tenant_id}/stats", headers=_tenant_headers(tenant_id))

        assert response.status_code == 200
        data = response.json()
        assert (data["completed_orders"], data["total_revenue"]) == (1, 500.0)
        assert (data["commission_amount"], data["net_revenue"]) == (50.0, 450.0)

    def test_other_tenant_is_forbidden(self, client, make_tenant):
        tenant_id, other = make_tenant(), make_tenant()

        response = client.get(f"/tenants/{tenant_id}/stats", headers=_tenant_headers(other))

        assert response.status_code == 403
        assert response.json() == {"error": "Access denied"}

    def test_customer_is_forbidden_and_admin_allowed(self, client, make_tenant):
        tenant_id = make_tenant()
        assert client.get(f"/tenants/{tenant_id}/stats", headers=CUSTOMER).status_code == 403
        assert client.get(f"/tenants/{tenant_id}/stats", headers=ADMIN).json()["total_orders"] == 0

    def test_unknown_tenant(self, client):
        response = client.get("/tenants/missing/stats", headers=ADMIN)
        assert response.status_code == 404

    def test_dashboard_is_admin_only(self, client, make_product, make_tenant):
        product_id = make_product(stock=5)
        delivered = self._delivered_for(client, product_id, make_tenant())
        _checkout(client, product_id)

        assert client.get("/orders/stats", headers=CUSTOMER).status_code == 403
        response = client.get("/orders/stats", headers=ADMIN)

        assert response.status_code == 200
        data = response.json()
        assert (data["total_orders"], data["pending_orders"], data["delivered_orders"]) == (2, 1, 1)
        assert data["total_revenue"] == 1000.0
        assert data["platform_commission"] == 50.0
        assert data["low_stock_products"] == [
            {"product_id": product_id, "name": "Handmade Mug", "stock": 3, "sku": None}
        ]
        assert data["recent_orders"][-1]["order_id"] == delivered
