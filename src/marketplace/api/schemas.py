"""Pydantic request/response schemas for the marketplace API.

These are the external contracts. Requests arrive fully typed here, so the
commands behind them never see stringly-typed form values.
"""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Common
# ---------------------------------------------------------------------------
class StatusResponse(BaseModel):
    status: str = "ok"


class MessageResponse(BaseModel):
    message: str


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class ShippingAddressSchema(BaseModel):
    name: str
    phone: str
    address_line1: str
    address_line2: str | None = None
    city: str
    state: str
    pincode: str


class OrderItemRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)
    size: str | None = None
    gift_wrap: bool = False
    custom_photo_url: str | None = None
    custom_photo_public_id: str | None = None


class PaymentInfoSchema(BaseModel):
    razorpay_order_id: str | None = None
    razorpay_payment_id: str | None = None
    razorpay_signature: str | None = None


class CreateOrderRequest(BaseModel):
    items: list[OrderItemRequest]
    shipping_address: ShippingAddressSchema
    payment_method: Literal["UPI", "Card", "NetBanking", "COD"] = "COD"
    payment_info: PaymentInfoSchema | None = None
    items_price: float = Field(ge=0, default=0.0)
    tax_price: float = Field(ge=0, default=0.0)
    shipping_price: float = Field(ge=0, default=0.0)
    gift_wrap_price: float = Field(ge=0, default=0.0)
    packing_price: float = Field(ge=0, default=0.0)
    discount_price: float = Field(ge=0, default=0.0)
    total_price: float = Field(ge=0)
    coupon_code: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [{"product_id": "prod-001", "quantity": 2, "size": "M"}],
                    "shipping_address": {
                        "name": "Asha Rao",
                        "phone": "9876543210",
                        "address_line1": "12 MG Road",
                        "city": "Bengaluru",
                        "state": "Karnataka",
                        "pincode": "560001",
                    },
                    "payment_method": "UPI",
                    "items_price": 998.0,
                    "shipping_price": 50.0,
                    "total_price": 1048.0,
                }
            ]
        }
    }


class CreateBookingRequest(BaseModel):
    product_id: str
    customer_name: str
    customer_phone: str
    event_date: date
    quantity: int = Field(ge=1)
    city: str | None = None
    notes: str | None = None


class UpdateStatusRequest(BaseModel):
    status: str
    message: str | None = None


class CancelOrderRequest(BaseModel):
    reason: str | None = None


class AssignTenantRequest(BaseModel):
    tenant_id: str | None = None
    notify_only: bool = False


class VerifyPaymentRequest(BaseModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str


class PaymentFailureRequest(BaseModel):
    razorpay_order_id: str | None = None
    description: str | None = None


class OrderItemResponse(BaseModel):
    product_id: str
    name: str
    quantity: int
    price: float
    size: str | None = None
    gift_wrap: bool = False
    image: str | None = None
    custom_photo_url: str | None = None


class StatusEntryResponse(BaseModel):
    status: str
    message: str | None = None
    recorded_at: datetime


class PricingResponse(BaseModel):
    items_price: float
    tax_price: float
    shipping_price: float
    gift_wrap_price: float
    packing_price: float
    discount_price: float
    total_price: float


class BookingResponse(BaseModel):
    customer_name: str
    customer_phone: str
    event_date: date
    city: str | None = None
    notes: str | None = None


class OrderResponse(BaseModel):
    order_id: str
    order_number: str
    customer_id: str
    status: str
    items: list[OrderItemResponse]
    status_history: list[StatusEntryResponse]
    pricing: PricingResponse
    shipping_address: ShippingAddressSchema | None = None
    booking: BookingResponse | None = None
    payment_method: str
    payment_status: str | None = None
    coupon_code: str | None = None
    is_booking: bool
    tenant_id: str | None = None
    routed_to_tenant: bool
    platform_commission: float
    tenant_earnings: float
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    created_at: datetime | None = None


class OrderListResponse(BaseModel):
    count: int
    orders: list[OrderResponse]


class LowStockProductResponse(BaseModel):
    product_id: str
    name: str
    stock: int
    sku: str | None = None


class DashboardStatsResponse(BaseModel):
    total_orders: int
    pending_orders: int
    delivered_orders: int
    orders_by_status: dict[str, int]
    total_revenue: float
    platform_commission: float
    low_stock_products: list[LowStockProductResponse]
    recent_orders: list[OrderResponse]


# ---------------------------------------------------------------------------
# Coupons
# ---------------------------------------------------------------------------
class ValidateCouponRequest(BaseModel):
    code: str | None = None
    cart_total: float = Field(ge=0)


class UseCouponRequest(BaseModel):
    code: str | None = None


class CouponQuoteResponse(BaseModel):
    code: str
    discount_type: str
    discount_value: float
    discount: float
    min_order_value: float
    max_discount: float | None = None
    description: str | None = None


class CreateCouponRequest(BaseModel):
    code: str
    description: str | None = None
    discount_type: Literal["percentage", "fixed"]
    discount_value: float = Field(ge=0)
    min_order_value: float = Field(ge=0, default=0.0)
    max_discount: float | None = Field(ge=0, default=None)
    usage_limit: int | None = Field(ge=1, default=None)
    usage_limit_per_user: int = Field(ge=1, default=1)
    valid_from: datetime | None = None
    valid_until: datetime | None = None


class CouponIdResponse(BaseModel):
    coupon_id: str


# ---------------------------------------------------------------------------
# Tenants
# ---------------------------------------------------------------------------
class BusinessAddressSchema(BaseModel):
    street: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None


class ApplyTenantRequest(BaseModel):
    business_name: str
    owner_name: str
    email: str
    phone: str
    address: BusinessAddressSchema | None = None
    gst_number: str | None = None
    pan_number: str | None = None


class TenantReasonRequest(BaseModel):
    reason: str | None = None


class CommissionRateRequest(BaseModel):
    commission_rate: float


class TenantIdResponse(BaseModel):
    tenant_id: str


class TenantResponse(BaseModel):
    tenant_id: str
    business_name: str
    owner_name: str
    email: str
    phone: str
    status: str
    commission_rate: float
    is_active: bool
    user_id: str | None = None


class TenantStatsResponse(BaseModel):
    product_count: int
    total_orders: int
    pending_orders: int
    completed_orders: int
    total_revenue: float
    commission_rate: float
    commission_amount: float
    net_revenue: float


# ---------------------------------------------------------------------------
# Catalogue and cart
# ---------------------------------------------------------------------------
class VariantSchema(BaseModel):
    size: str
    price: float | None = Field(ge=0, default=None)
    stock: int = Field(ge=0, default=0)
    sku: str | None = None


class BookingConfigSchema(BaseModel):
    commission_percentage: float = Field(ge=0, le=100, default=10.0)
    min_quantity: int = Field(ge=1, default=1)
    max_quantity: int = Field(ge=1, default=100)
    lead_time_days: int = Field(ge=0, default=2)
    available_cities: list[str] = []


class CreateProductRequest(BaseModel):
    name: str
    description: str | None = None
    price: float = Field(ge=0)
    discount_price: float = Field(ge=0, default=0.0)
    stock: int = Field(ge=0, default=0)
    sku: str | None = None
    image: str | None = None
    variants: list[VariantSchema] = []
    product_type: Literal["standard", "booking"] = "standard"
    booking_config: BookingConfigSchema | None = None
    gift_wrap_available: bool = False
    tenant_id: str | None = None


class RestockRequest(BaseModel):
    quantity: int = Field(ge=1)
    size: str | None = None


class ProductIdResponse(BaseModel):
    product_id: str


class VariantResponse(BaseModel):
    size: str
    price: float | None = None
    stock: int


class ProductResponse(BaseModel):
    product_id: str
    name: str
    price: float
    discount_price: float
    tenant_id: str | None = None
    product_type: str
    has_variants: bool
    stock: int
    variants: list[VariantResponse]
    is_active: bool


class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)
    size: str | None = None
    gift_wrap: bool = False


class UpdateCartItemRequest(BaseModel):
    quantity: int = Field(ge=1)


class CartItemResponse(BaseModel):
    item_id: str
    product_id: str
    quantity: int
    size: str | None = None
    gift_wrap: bool = False


class CartResponse(BaseModel):
    customer_id: str
    items: list[CartItemResponse]
