"""Contention scenarios for the optimistic concurrency paths.

HotProductBuyer has every user checking out the same low-stock product, so
stock reservations collide and the retry loop is exercised until the product
sells out. ClaimRacer has several tenants racing to accept each offered order;
exactly one accept per order should succeed.

The shared product and tenants are created once per run in ``test_start``.
"""

import logging

import requests
from locust import HttpUser, between, events, task

from loadtests.data_generators import order_data, product_data, tenant_application, unique_user_id
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import ContentionState, Principal

logger = logging.getLogger("loadtest")

ADMIN = Principal(user_id="lt-admin", role="superadmin")
HOT_STOCK = 200
RACING_TENANTS = 3

shared = ContentionState()


@events.test_start.add_listener
def create_shared_fixtures(environment, **_kwargs):
    host = environment.host
    if not host:
        return

    shared.product = product_data(stock=HOT_STOCK)
    resp = requests.post(f"{host}/products", json=shared.product, headers=ADMIN.headers(), timeout=10)
    if resp.status_code != 201:
        logger.error("Could not create hot product: %s", extract_error_detail(resp))
        return
    shared.product_id = resp.json()["product_id"]

    for _ in range(RACING_TENANTS):
        resp = requests.post(f"{host}/tenants/apply", json=tenant_application(), timeout=10)
        if resp.status_code != 201:
            logger.error("Could not create racing tenant: %s", extract_error_detail(resp))
            continue
        tenant_id = resp.json()["tenant_id"]
        requests.put(f"{host}/tenants/{tenant_id}/approve", headers=ADMIN.headers(), timeout=10)
        shared.tenant_ids.append(tenant_id)

    logger.info("Hot product %s with %d units, %d racing tenants", shared.product_id, HOT_STOCK, len(shared.tenant_ids))


class HotProductBuyer(HttpUser):
    """Every user buys one unit of the same product until stock runs out."""

    wait_time = between(0.1, 0.5)

    def on_start(self):
        self.customer = Principal(user_id=unique_user_id())

    @task
    def buy_hot_product(self):
        if not shared.product_id:
            return
        with self.client.post(
            "/orders",
            json=order_data(shared.product, shared.product_id),
            headers=self.customer.headers(),
            catch_response=True,
            name="POST /orders [hot]",
        ) as resp:
            detail = extract_error_detail(resp) if resp.status_code >= 400 else ""
            if resp.status_code == 201:
                shared.order_ids.append(resp.json()["order_id"])
            elif "insufficient stock" in detail.lower():
                # Sold out is the expected end state, not a failure.
                resp.success()
            else:
                resp.failure(f"Hot checkout failed: {resp.status_code} {detail}")


class ClaimRacer(HttpUser):
    """Offers an order to every racing tenant, then has all of them accept it."""

    wait_time = between(0.5, 1.5)

    @task
    def race_for_order(self):
        if not shared.order_ids or not shared.tenant_ids:
            return
        order_id = shared.order_ids.pop()

        for tenant_id in shared.tenant_ids:
            self.client.post(
                f"/orders/{order_id}/assign-tenant",
                json={"tenant_id": tenant_id, "notify_only": True},
                headers=ADMIN.headers(),
                name="POST /orders/{id}/assign-tenant [notify]",
            )

        winners = 0
        for tenant_id in shared.tenant_ids:
            tenant = Principal(user_id=f"owner-{tenant_id}", role="tenant", tenant_id=tenant_id)
            with self.client.post(
                f"/orders/{order_id}/accept",
                headers=tenant.headers(),
                catch_response=True,
                name="POST /orders/{id}/accept",
            ) as resp:
                if resp.status_code == 200:
                    winners += 1
                elif "already" in extract_error_detail(resp).lower():
                    resp.success()
                else:
                    resp.failure(f"Accept failed: {resp.status_code} {extract_error_detail(resp)}")

        if winners != 1:
            logger.error("Order %s was claimed by %d tenants", order_id, winners)
