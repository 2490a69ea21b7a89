"""FastAPI routes for orders: checkout, bookings, status, routing and payment."""

import json

from fastapi import APIRouter, Depends, HTTPException
from protean.utils.globals import current_domain

from marketplace.api.auth import (
    Principal,
    current_principal,
    require_admin,
    require_superadmin,
    require_tenant,
    require_tenant_or_admin,
)
from marketplace.api.schemas import (
    AssignTenantRequest,
    CancelOrderRequest,
    CreateBookingRequest,
    CreateOrderRequest,
    DashboardStatsResponse,
    MessageResponse,
    OrderListResponse,
    OrderResponse,
    PaymentFailureRequest,
    StatusResponse,
    UpdateStatusRequest,
    VerifyPaymentRequest,
)
from marketplace.order.booking import CreateBookingOrder
from marketplace.order.cancellation import CancelOrder
from marketplace.order.creation import CreateOrder
from marketplace.order.order import OrderStatus
from marketplace.order.payment import RecordPaymentFailure, VerifyPayment
from marketplace.order.queries import (
    all_orders,
    dashboard_stats,
    load_order,
    orders_for_customer,
    orders_for_tenant,
    unassigned_orders,
)
from marketplace.order.status import UpdateOrderStatus, UpdateTenantOrderStatus
from marketplace.routing.assignment import AcceptOrder, AssignOrderToTenant
from marketplace.routing.visibility import can_view_order

order_router = APIRouter(prefix="/orders", tags=["orders"])


def order_response(order) -> OrderResponse:
    pricing = order.pricing
    return OrderResponse(
        order_id=str(order.id),
        order_number=order.order_number,
        customer_id=str(order.customer_id),
        status=order.status,
        items=[
            {
                "product_id": str(item.product_id),
                "name": item.name,
                "quantity": item.quantity,
                "price": item.price,
                "size": item.size,
                "gift_wrap": bool(item.gift_wrap),
                "image": item.image,
                "custom_photo_url": item.custom_photo_url,
            }
            for item in order.items
        ],
        status_history=[
            {"status": entry.status, "message": entry.message, "recorded_at": entry.recorded_at}
            for entry in order.timeline()
        ],
        pricing={
            "items_price": pricing.items_price or 0.0,
            "tax_price": pricing.tax_price or 0.0,
            "shipping_price": pricing.shipping_price or 0.0,
            "gift_wrap_price": pricing.gift_wrap_price or 0.0,
            "packing_price": pricing.packing_price or 0.0,
            "discount_price": pricing.discount_price or 0.0,
            "total_price": pricing.total_price,
        },
        shipping_address=order.shipping_address.to_dict() if order.shipping_address else None,
        booking=order.booking.to_dict() if order.booking else None,
        payment_method=order.payment_method,
        payment_status=order.payment_info.status if order.payment_info else None,
        coupon_code=order.coupon_code,
        is_booking=bool(order.is_booking),
        tenant_id=str(order.tenant_id) if order.tenant_id else None,
        routed_to_tenant=bool(order.routed_to_tenant),
        platform_commission=order.platform_commission or 0.0,
        tenant_earnings=order.tenant_earnings or 0.0,
        delivered_at=order.delivered_at,
        cancelled_at=order.cancelled_at,
        cancellation_reason=order.cancellation_reason,
        created_at=order.created_at,
    )


def _listing(orders) -> OrderListResponse:
    return OrderListResponse(count=len(orders), orders=[order_response(o) for o in orders])


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
@order_router.post("", status_code=201, response_model=OrderResponse)
def create_order(body: CreateOrderRequest, principal: Principal = Depends(current_principal)) -> OrderResponse:
    command = CreateOrder(
        customer_id=principal.user_id,
        items=json.dumps([item.model_dump() for item in body.items]),
        shipping_address=json.dumps(body.shipping_address.model_dump()),
        payment_method=body.payment_method,
        payment_info=json.dumps(body.payment_info.model_dump()) if body.payment_info else None,
        items_price=body.items_price,
        tax_price=body.tax_price,
        shipping_price=body.shipping_price,
        gift_wrap_price=body.gift_wrap_price,
        packing_price=body.packing_price,
        discount_price=body.discount_price,
        total_price=body.total_price,
        coupon_code=body.coupon_code,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return order_response(load_order(order_id))


@order_router.post("/booking", status_code=201, response_model=OrderResponse)
def create_booking_order(
    body: CreateBookingRequest, principal: Principal = Depends(current_principal)
) -> OrderResponse:
    command = CreateBookingOrder(
        customer_id=principal.user_id,
        product_id=body.product_id,
        customer_name=body.customer_name,
        customer_phone=body.customer_phone,
        event_date=body.event_date,
        quantity=body.quantity,
        city=body.city,
        notes=body.notes,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return order_response(load_order(order_id))


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------
@order_router.get("", response_model=OrderListResponse)
def list_orders(status: OrderStatus | None = None, principal: Principal = Depends(require_admin)):
    return _listing(all_orders(status.value if status else None))


@order_router.get("/placed", response_model=OrderListResponse)
def list_placed_orders(principal: Principal = Depends(current_principal)):
    return _listing(orders_for_customer(principal.user_id))


@order_router.get("/my-orders", response_model=OrderListResponse)
def list_tenant_orders(principal: Principal = Depends(require_tenant)):
    return _listing(orders_for_tenant(principal.tenant_id))


@order_router.get("/available", response_model=OrderListResponse)
def list_available_orders(principal: Principal = Depends(require_tenant)):
    return _listing(unassigned_orders())


@order_router.get("/stats", response_model=DashboardStatsResponse)
def get_dashboard_stats(principal: Principal = Depends(require_admin)) -> DashboardStatsResponse:
    stats = dashboard_stats()
    low_stock = stats.pop("low_stock_products")
    recent = stats.pop("recent_orders")
    return DashboardStatsResponse(
        **stats,
        low_stock_products=[
            {"product_id": str(p.id), "name": p.name, "stock": p.stock or 0, "sku": p.sku} for p in low_stock
        ],
        recent_orders=[order_response(o) for o in recent],
    )


@order_router.get("/{order_id}", response_model=OrderResponse)
def get_order(order_id: str, principal: Principal = Depends(current_principal)):
    order = load_order(order_id)
    if not can_view_order(order, principal.user_id, principal.role, principal.tenant_id):
        raise HTTPException(status_code=403, detail="Not authorized to view this order")
    return order_response(order)


# ---------------------------------------------------------------------------
# Status transitions
# ---------------------------------------------------------------------------
@order_router.put("/{order_id}/status", response_model=StatusResponse)
def update_order_status(
    order_id: str, body: UpdateStatusRequest, principal: Principal = Depends(require_admin)
) -> StatusResponse:
    command = UpdateOrderStatus(order_id=order_id, status=body.status, message=body.message)
    return StatusResponse(status=current_domain.process(command, asynchronous=False))


@order_router.put("/{order_id}/tenant-status", response_model=StatusResponse)
def update_tenant_order_status(
    order_id: str, body: UpdateStatusRequest, principal: Principal = Depends(require_tenant_or_admin)
) -> StatusResponse:
    command = UpdateTenantOrderStatus(
        order_id=order_id,
        status=body.status,
        message=body.message,
        tenant_id=None if principal.is_admin else principal.tenant_id,
    )
    return StatusResponse(status=current_domain.process(command, asynchronous=False))


@order_router.put("/{order_id}/cancel", response_model=StatusResponse)
def cancel_order(
    order_id: str, body: CancelOrderRequest | None = None, principal: Principal = Depends(current_principal)
) -> StatusResponse:
    command = CancelOrder(
        order_id=order_id,
        requested_by=principal.user_id,
        requester_role=principal.role,
        reason=body.reason if body else None,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status=OrderStatus.CANCELLED.value)


# ---------------------------------------------------------------------------
# Tenant routing
# ---------------------------------------------------------------------------
@order_router.post("/{order_id}/assign-tenant", response_model=MessageResponse)
def assign_order_to_tenant(
    order_id: str, body: AssignTenantRequest, principal: Principal = Depends(require_superadmin)
) -> MessageResponse:
    command = AssignOrderToTenant(order_id=order_id, tenant_id=body.tenant_id, notify_only=body.notify_only)
    bound = current_domain.process(command, asynchronous=False)
    if bound:
        return MessageResponse(message="Order assigned to tenant successfully")
    return MessageResponse(message="Tenant notified about the order")


@order_router.post("/{order_id}/accept", response_model=MessageResponse)
def accept_order(order_id: str, principal: Principal = Depends(current_principal)) -> MessageResponse:
    command = AcceptOrder(order_id=order_id, tenant_id=principal.tenant_id)
    current_domain.process(command, asynchronous=False)
    return MessageResponse(message="Order accepted successfully")


# ---------------------------------------------------------------------------
# Payment
# ---------------------------------------------------------------------------
@order_router.post("/{order_id}/payment/verify", response_model=StatusResponse)
def verify_payment(
    order_id: str, body: VerifyPaymentRequest, principal: Principal = Depends(current_principal)
) -> StatusResponse:
    command = VerifyPayment(
        order_id=order_id,
        razorpay_order_id=body.razorpay_order_id,
        razorpay_payment_id=body.razorpay_payment_id,
        razorpay_signature=body.razorpay_signature,
    )
    if not current_domain.process(command, asynchronous=False):
        raise HTTPException(status_code=400, detail="Payment verification failed")
    return StatusResponse(status="completed")


@order_router.post("/{order_id}/payment/failure", response_model=StatusResponse)
def record_payment_failure(
    order_id: str, body: PaymentFailureRequest, principal: Principal = Depends(current_principal)
) -> StatusResponse:
    command = RecordPaymentFailure(
        order_id=order_id,
        razorpay_order_id=body.razorpay_order_id,
        description=body.description,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="failed")
