import json

import pytest
from protean.integrations.pytest import DomainFixture
from protean.utils.globals import current_domain


@pytest.fixture(scope="session")
def marketplace_bed():
    from marketplace.domain import marketplace

    bed = DomainFixture(marketplace)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(marketplace_bed):
    with marketplace_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def dispatcher():
    """A fresh fake dispatcher per test, installed as the process-wide one."""
    from marketplace.notification import reset_dispatcher, set_dispatcher
    from marketplace.notification.fake_adapter import FakeDispatcher

    fake = FakeDispatcher()
    set_dispatcher(fake)
    yield fake
    reset_dispatcher()


@pytest.fixture(autouse=True)
def _reset_verifier():
    from marketplace.payment import reset_verifier

    yield
    reset_verifier()


# ---------------------------------------------------------------------------
# Builders shared by application, integration and bdd tests
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_product():
    from marketplace.catalogue.management import CreateProduct

    def _make(**overrides):
        defaults = {"name": "Handmade Mug", "price": 500.0, "stock": 10}
        defaults.update(overrides)
        for key in ("variants", "booking_config"):
            if key in defaults and not isinstance(defaults[key], str):
                defaults[key] = json.dumps(defaults[key])
        return current_domain.process(CreateProduct(**defaults), asynchronous=False)

    return _make


@pytest.fixture()
def make_tenant():
    """Apply as a tenant and, unless told otherwise, approve the application."""
    from marketplace.tenant.management import ApplyAsTenant, ApproveTenant

    counter = {"n": 0}

    def _make(approved=True, **overrides):
        counter["n"] += 1
        defaults = {
            "business_name": f"Crafts Co {counter['n']}",
            "owner_name": "Meera Nair",
            "email": f"owner{counter['n']}@crafts.example",
            "phone": "9000000000",
        }
        defaults.update(overrides)
        tenant_id = current_domain.process(ApplyAsTenant(**defaults), asynchronous=False)
        if approved:
            current_domain.process(ApproveTenant(tenant_id=tenant_id), asynchronous=False)
        return tenant_id

    return _make


@pytest.fixture()
def place_order():
    from marketplace.order.creation import CreateOrder

    def _place(product_id, quantity=1, size=None, customer_id="cust-1", **overrides):
        defaults = {
            "customer_id": customer_id,
            "items": json.dumps([{"product_id": product_id, "quantity": quantity, "size": size}]),
            "shipping_address": json.dumps(SHIPPING_ADDRESS),
            "payment_method": "COD",
            "items_price": 500.0 * quantity,
            "total_price": 500.0 * quantity,
        }
        defaults.update(overrides)
        return current_domain.process(CreateOrder(**defaults), asynchronous=False)

    return _place


SHIPPING_ADDRESS = {
    "name": "Asha Rao",
    "phone": "9876543210",
    "address_line1": "12 MG Road",
    "city": "Bengaluru",
    "state": "Karnataka",
    "pincode": "560001",
}
