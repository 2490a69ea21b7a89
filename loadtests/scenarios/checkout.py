"""Checkout load test scenarios.

CheckoutJourney walks one customer from a fresh product through a delivered
order. CouponShopper validates its own coupon against random cart totals
and checks out with it.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    coupon_data,
    order_data,
    product_data,
    tenant_application,
    unique_user_id,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import CheckoutState, Principal

ADMIN = Principal(user_id="lt-admin", role="superadmin")

FULFILMENT_STEPS = ["Accepted", "Processing", "Out for Delivery", "Delivered"]


class CheckoutJourney(SequentialTaskSet):
    """Onboard tenant -> List product -> Place order -> Tenant ships it to Delivered.

    Each journey owns its product and tenant, so the only contention is on
    the order number sequence. Delivery settles the commission split.
    """

    def on_start(self):
        self.state = CheckoutState()
        self.customer = Principal(user_id=unique_user_id())

    @task
    def onboard_tenant(self):
        with self.client.post(
            "/tenants/apply",
            json=tenant_application(),
            catch_response=True,
            name="POST /tenants/apply",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Tenant application failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()
                return
            self.state.tenant_id = resp.json()["tenant_id"]

        with self.client.put(
            f"/tenants/{self.state.tenant_id}/approve",
            headers=ADMIN.headers(),
            catch_response=True,
            name="PUT /tenants/{id}/approve",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Tenant approval failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def list_product(self):
        self.state.product = product_data(stock=50, with_variants=random.random() < 0.3)
        payload = {**self.state.product, "tenant_id": self.state.tenant_id}
        with self.client.post(
            "/products",
            json=payload,
            headers=ADMIN.headers(),
            catch_response=True,
            name="POST /products",
        ) as resp:
            if resp.status_code == 201:
                self.state.product_id = resp.json()["product_id"]
            else:
                resp.failure(f"Create product failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def place_order(self):
        size = "M" if self.state.product.get("variants") else None
        payload = order_data(self.state.product, self.state.product_id, quantity=random.randint(1, 3), size=size)
        with self.client.post(
            "/orders",
            json=payload,
            headers=self.customer.headers(),
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_id = resp.json()["order_id"]
            else:
                resp.failure(f"Place order failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def view_order(self):
        with self.client.get(
            f"/orders/{self.state.order_id}",
            headers=self.customer.headers(),
            catch_response=True,
            name="GET /orders/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"View order failed: {resp.status_code} {extract_error_detail(resp)}")

    @task
    def fulfil(self):
        tenant = Principal(user_id=f"owner-{self.state.tenant_id}", role="tenant", tenant_id=self.state.tenant_id)
        for status in FULFILMENT_STEPS:
            with self.client.put(
                f"/orders/{self.state.order_id}/tenant-status",
                json={"status": status},
                headers=tenant.headers(),
                catch_response=True,
                name="PUT /orders/{id}/tenant-status",
            ) as resp:
                if resp.status_code != 200:
                    resp.failure(f"Move to {status} failed: {resp.status_code} {extract_error_detail(resp)}")
                    self.interrupt()
                    return
                self.state.current_status = status

    @task
    def done(self):
        self.interrupt()


class CheckoutUser(HttpUser):
    """Customers running full checkouts end to end."""

    wait_time = between(1, 3)
    tasks = [CheckoutJourney]


class CouponShopper(HttpUser):
    """Validates coupons against random carts and checks out with them.

    Every user creates its own coupon on start so per-user limits do not
    collide across users.
    """

    wait_time = between(0.5, 2)

    def on_start(self):
        self.customer = Principal(user_id=unique_user_id())
        self.coupon = coupon_data()
        self.client.post("/coupons", json=self.coupon, headers=ADMIN.headers(), name="POST /coupons")

        self.product = product_data(stock=100_000)
        resp = self.client.post("/products", json=self.product, headers=ADMIN.headers(), name="POST /products")
        self.product_id = resp.json().get("product_id") if resp.status_code == 201 else None

    @task(5)
    def validate_coupon(self):
        with self.client.post(
            "/coupons/validate",
            json={"code": self.coupon["code"], "cart_total": round(random.uniform(200, 5000), 2)},
            headers=self.customer.headers(),
            catch_response=True,
            name="POST /coupons/validate",
        ) as resp:
            if resp.status_code == 200 or "already used" in extract_error_detail(resp).lower():
                resp.success()
            else:
                resp.failure(f"Validate coupon failed: {resp.status_code} {extract_error_detail(resp)}")

    @task(1)
    def checkout_with_coupon(self):
        if not self.product_id:
            return
        payload = order_data(self.product, self.product_id)
        payload["coupon_code"] = self.coupon["code"]
        with self.client.post(
            "/orders",
            json=payload,
            headers=self.customer.headers(),
            catch_response=True,
            name="POST /orders [coupon]",
        ) as resp:
            # Per-user limit is 1; repeat checkouts are expected to be rejected.
            if resp.status_code == 201 or "already used" in extract_error_detail(resp).lower():
                resp.success()
            else:
                resp.failure(f"Coupon checkout failed: {resp.status_code} {extract_error_detail(resp)}")
