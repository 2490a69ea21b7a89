from marketplace.api.catalogue import cart_router, product_router
from marketplace.api.errors import register_error_handlers
from marketplace.api.orders import order_router
from marketplace.api.promotions import coupon_router
from marketplace.api.tenants import tenant_router

__all__ = [
    "cart_router",
    "coupon_router",
    "order_router",
    "product_router",
    "register_error_handlers",
    "tenant_router",
]
