"""Route handlers block on persistence and conflict backoff, so none may run on the event loop."""

import inspect

import pytest
from fastapi.routing import APIRoute
from marketplace.api import cart_router, coupon_router, order_router, product_router, tenant_router

ROUTES = [
    route
    for router in (order_router, tenant_router, product_router, cart_router, coupon_router)
    for route in router.routes
    if isinstance(route, APIRoute)
]


@pytest.mark.parametrize("route", ROUTES, ids=lambda route: f"{sorted(route.methods)[0]} {route.path}")
def test_handler_is_synchronous(route):
    assert not inspect.iscoroutinefunction(route.endpoint)
