"""Per-user state tracking for Locust load test scenarios.

Each Locust user keeps its own state. IDs returned by creation endpoints are
recorded here so follow-up requests can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class Principal:
    """Identity headers a simulated caller sends on every request."""

    user_id: str
    role: str = "user"
    tenant_id: str | None = None

    def headers(self) -> dict:
        headers = {"X-User-Id": self.user_id, "X-User-Role": self.role}
        if self.tenant_id:
            headers["X-Tenant-Id"] = self.tenant_id
        return headers


@dataclass
class CheckoutState:
    """Tracks one customer's path from product to delivered order."""

    product_id: str | None = None
    product: dict = field(default_factory=dict)
    tenant_id: str | None = None
    order_id: str | None = None
    current_status: str = "Pending"
    coupon_code: str | None = None


@dataclass
class ContentionState:
    """Shared-nothing record of the hot product and orders a contention user races on."""

    product_id: str | None = None
    product: dict = field(default_factory=dict)
    order_ids: list[str] = field(default_factory=list)
    tenant_ids: list[str] = field(default_factory=list)
