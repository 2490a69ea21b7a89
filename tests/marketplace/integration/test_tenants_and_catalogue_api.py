"""Integration tests for tenant, product and cart endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from marketplace.api import cart_router, product_router, register_error_handlers, tenant_router
from marketplace.tenant.management import load_tenant

CUSTOMER = {"X-User-Id": "cust-1"}
ADMIN = {"X-User-Id": "admin-1", "X-User-Role": "admin"}
SUPERADMIN = {"X-User-Id": "root-1", "X-User-Role": "superadmin"}


@pytest.fixture()
def client():
    app = FastAPI()
    register_error_handlers(app)
    app.include_router(tenant_router)
    app.include_router(product_router)
    app.include_router(cart_router)
    return TestClient(app, raise_server_exceptions=False)


def _apply(client, email="meera@crafts.example"):
    response = client.post(
        "/tenants/apply",
        json={"business_name": "Crafts Co", "owner_name": "Meera Nair", "email": email, "phone": "9000000000"},
    )
    assert response.status_code == 201
    return response.json()["tenant_id"]


class TestTenantEndpoints:
    def test_apply_and_approve(self, client):
        tenant_id = _apply(client)
        assert client.put(f"/tenants/{tenant_id}/approve", headers=ADMIN).status_code == 403

        response = client.put(f"/tenants/{tenant_id}/approve", headers=SUPERADMIN)
        assert response.status_code == 200
        assert load_tenant(tenant_id).is_approved

    def test_suspend_and_reactivate(self, client):
        tenant_id = _apply(client)
        client.put(f"/tenants/{tenant_id}/approve", headers=SUPERADMIN)

        client.put(f"/tenants/{tenant_id}/suspend", json={"reason": "Late shipments"}, headers=SUPERADMIN)
        assert load_tenant(tenant_id).status == "suspended"

        client.put(f"/tenants/{tenant_id}/reactivate", headers=SUPERADMIN)
        assert load_tenant(tenant_id).status == "approved"

    def test_commission_rate(self, client):
        tenant_id = _apply(client)
        response = client.put(f"/tenants/{tenant_id}/commission", json={"commission_rate": 140}, headers=ADMIN)
        assert response.status_code == 400

        client.put(f"/tenants/{tenant_id}/commission", json={"commission_rate": 12}, headers=ADMIN)
        assert client.get(f"/tenants/{tenant_id}", headers=ADMIN).json()["commission_rate"] == 12.0

    def test_unknown_tenant(self, client):
        response = client.put("/tenants/missing/approve", headers=SUPERADMIN)
        assert response.status_code == 404
        assert response.json() == {"error": "Tenant not found"}


class TestProductAndCartEndpoints:
    def test_create_restock_and_read(self, client):
        created = client.post(
            "/products",
            json={"name": "Block Print Kurta", "price": 1200, "variants": [{"size": "M", "stock": 1}]},
            headers=ADMIN,
        )
        assert created.status_code == 201
        product_id = created.json()["product_id"]

        client.post(f"/products/{product_id}/restock", json={"quantity": 4, "size": "M"}, headers=ADMIN)

        product = client.get(f"/products/{product_id}").json()
        assert product["variants"] == [{"size": "M", "price": 1200.0, "stock": 5}]

    def test_customers_cannot_create_products(self, client):
        response = client.post("/products", json={"name": "Mug", "price": 100}, headers=CUSTOMER)
        assert response.status_code == 403

    def test_cart_flow(self, client, make_product):
        product_id = make_product()
        cart = client.post("/cart/items", json={"product_id": product_id, "quantity": 2}, headers=CUSTOMER).json()
        item_id = cart["items"][0]["item_id"]

        cart = client.put(f"/cart/items/{item_id}", json={"quantity": 3}, headers=CUSTOMER).json()
        assert cart["items"][0]["quantity"] == 3

        cart = client.delete("/cart", headers=CUSTOMER).json()
        assert cart["items"] == []
