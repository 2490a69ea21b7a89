"""FastAPI routes for products and the shopping cart."""

import json

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from marketplace.api.auth import Principal, current_principal, require_tenant_or_admin
from marketplace.api.schemas import (
    AddToCartRequest,
    CartItemResponse,
    CartResponse,
    CreateProductRequest,
    ProductIdResponse,
    ProductResponse,
    RestockRequest,
    StatusResponse,
    UpdateCartItemRequest,
    VariantResponse,
)
from marketplace.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartItem, find_cart
from marketplace.catalogue.management import CreateProduct, RestockProduct, load_product

product_router = APIRouter(prefix="/products", tags=["products"])
cart_router = APIRouter(prefix="/cart", tags=["cart"])


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
@product_router.post("", status_code=201, response_model=ProductIdResponse)
def create_product(
    body: CreateProductRequest, principal: Principal = Depends(require_tenant_or_admin)
) -> ProductIdResponse:
    command = CreateProduct(
        name=body.name,
        description=body.description,
        price=body.price,
        discount_price=body.discount_price,
        tenant_id=body.tenant_id if principal.is_admin else principal.tenant_id,
        stock=body.stock,
        sku=body.sku,
        image=body.image,
        variants=json.dumps([v.model_dump() for v in body.variants]) if body.variants else None,
        product_type=body.product_type,
        booking_config=json.dumps(body.booking_config.model_dump()) if body.booking_config else None,
        gift_wrap_available=body.gift_wrap_available,
    )
    return ProductIdResponse(product_id=current_domain.process(command, asynchronous=False))


@product_router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: str) -> ProductResponse:
    product = load_product(product_id)
    return ProductResponse(
        product_id=str(product.id),
        name=product.name,
        price=product.price,
        discount_price=product.discount_price or 0.0,
        tenant_id=str(product.tenant_id) if product.tenant_id else None,
        product_type=product.product_type,
        has_variants=bool(product.has_variants),
        stock=product.stock or 0,
        variants=[VariantResponse(size=v.size, price=v.price, stock=v.stock) for v in product.variants],
        is_active=product.is_active,
    )


@product_router.post("/{product_id}/restock", response_model=StatusResponse)
def restock_product(
    product_id: str, body: RestockRequest, principal: Principal = Depends(require_tenant_or_admin)
) -> StatusResponse:
    command = RestockProduct(product_id=product_id, quantity=body.quantity, size=body.size)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
def _cart_response(customer_id) -> CartResponse:
    cart = find_cart(customer_id)
    items = cart.items if cart else []
    return CartResponse(
        customer_id=str(customer_id),
        items=[
            CartItemResponse(
                item_id=str(item.id),
                product_id=str(item.product_id),
                quantity=item.quantity,
                size=item.size,
                gift_wrap=bool(item.gift_wrap),
            )
            for item in items
        ],
    )


@cart_router.get("", response_model=CartResponse)
def get_cart(principal: Principal = Depends(current_principal)) -> CartResponse:
    return _cart_response(principal.user_id)


@cart_router.post("/items", status_code=201, response_model=CartResponse)
def add_to_cart(body: AddToCartRequest, principal: Principal = Depends(current_principal)) -> CartResponse:
    command = AddToCart(customer_id=principal.user_id, **body.model_dump())
    current_domain.process(command, asynchronous=False)
    return _cart_response(principal.user_id)


@cart_router.put("/items/{item_id}", response_model=CartResponse)
def update_cart_item(
    item_id: str, body: UpdateCartItemRequest, principal: Principal = Depends(current_principal)
) -> CartResponse:
    command = UpdateCartItem(customer_id=principal.user_id, item_id=item_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return _cart_response(principal.user_id)


@cart_router.delete("/items/{item_id}", response_model=CartResponse)
def remove_from_cart(item_id: str, principal: Principal = Depends(current_principal)) -> CartResponse:
    current_domain.process(RemoveFromCart(customer_id=principal.user_id, item_id=item_id), asynchronous=False)
    return _cart_response(principal.user_id)


@cart_router.delete("", response_model=CartResponse)
def clear_cart(principal: Principal = Depends(current_principal)) -> CartResponse:
    current_domain.process(ClearCart(customer_id=principal.user_id), asynchronous=False)
    return _cart_response(principal.user_id)
