"""Shared BDD fixtures and step definitions for the marketplace."""

import pytest
from marketplace.catalogue.product import Product
from marketplace.order.order import Order
from protean.utils.globals import current_domain
from pytest_bdd import given, parsers, then


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def products():
    """Product ids by name."""
    return {}


@pytest.fixture()
def tenants():
    """Tenant ids by business name."""
    return {}


@pytest.fixture()
def outcomes():
    """Captured errors keyed by the actor that hit them."""
    return {}


@pytest.fixture()
def placed():
    """Order ids in placement order."""
    return []


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.re(r'a product "(?P<name>[^"]+)" with (?P<stock>\d+) units? in stock'))
def product_in_stock(name, stock, products, make_product):
    products[name] = make_product(name=name, stock=int(stock))


@given(parsers.parse('an approved tenant "{name}"'))
def approved_tenant(name, tenants, make_tenant):
    tenants[name] = make_tenant(business_name=name)


@given("an open order", target_fixture="order_id")
def open_order(make_product, place_order):
    return place_order(make_product(), total_price=1000.0)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.re(r'"(?P<name>[^"]+)" has (?P<stock>\d+) units? in stock'))
def stock_level(name, stock, products):
    assert current_domain.repository_for(Product).get(products[name]).stock == int(stock)


@then(parsers.re(r"there (?:is|are) (?P<count>\d+) orders?"))
def order_count(count):
    assert len(current_domain.repository_for(Order)._dao.query.all().items) == int(count)
