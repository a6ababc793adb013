"""Pydantic request/response schemas for the Storefront API.

These are external contracts, kept separate from the internal Protean
commands and aggregates.
"""

from datetime import datetime

from pydantic import BaseModel


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class ShippingInfoSchema(BaseModel):
    name: str
    email: str | None = None
    phone: str | None = None
    address: str
    city: str
    state: str | None = None
    zip_code: str | None = None
    country: str | None = None
    method: str | None = None


class StatusResponse(BaseModel):
    status: str = "ok"


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class CreateCartRequest(BaseModel):
    customer_id: str | None = None
    session_id: str | None = None


class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = 1  # Values below 1 are treated as 1
    selected_size: str | None = None
    selected_color: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "1",
                    "quantity": 2,
                    "selected_size": "Medium",
                    "selected_color": "White",
                }
            ]
        }
    }


class UpdateCartQuantityRequest(BaseModel):
    new_quantity: int  # Zero or less removes the item


class ApplyPromoCodeRequest(BaseModel):
    code: str


class CheckoutRequest(BaseModel):
    shipping: ShippingInfoSchema
    payment_method: str | None = None
    notes: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping": {
                        "name": "Jane Doe",
                        "email": "jane@example.com",
                        "address": "123 Main St",
                        "city": "Springfield",
                        "state": "IL",
                        "zip_code": "62701",
                        "country": "US",
                        "method": "Standard Shipping (3-5 business days)",
                    },
                    "payment_method": "Credit Card (**** 1234)",
                }
            ]
        }
    }


# ---------------------------------------------------------------------------
# Cart Response Schemas
# ---------------------------------------------------------------------------
class CartIdResponse(BaseModel):
    cart_id: str


class ItemIdResponse(BaseModel):
    item_id: str


class PromoCodeResponse(BaseModel):
    code: str
    rate: float


class CartItemSchema(BaseModel):
    id: str
    product_id: str
    name: str
    sku: str | None = None
    image: str | None = None
    unit_price: float
    original_unit_price: float | None = None
    quantity: int
    selected_size: str | None = None
    selected_color: str | None = None
    line_total: float


class CartTotalsSchema(BaseModel):
    item_count: int
    subtotal: float
    promo_code: str | None = None
    discount_rate: float
    discount: float
    discounted_subtotal: float
    shipping: float
    tax: float
    total: float
    savings: float
    amount_to_free_shipping: float
    free_shipping: bool
    currency: str


class CartResponse(BaseModel):
    cart_id: str
    customer_id: str | None = None
    session_id: str | None = None
    items: list[CartItemSchema]
    totals: CartTotalsSchema


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class UpdateOrderStatusRequest(BaseModel):
    status: str
    note: str | None = None


class CancelOrderRequest(BaseModel):
    """A customer cancellation. Administrators cancel through the status endpoint."""

    reason: str | None = None


class ReorderRequest(BaseModel):
    cart_id: str | None = None
    session_id: str | None = None


# ---------------------------------------------------------------------------
# Order Response Schemas
# ---------------------------------------------------------------------------
class OrderIdResponse(BaseModel):
    order_id: str


class OrderStatusResponse(BaseModel):
    order_id: str
    status: str


class OrderItemSchema(BaseModel):
    product_id: str
    name: str
    sku: str
    image: str | None = None
    unit_price: float
    quantity: int
    selected_size: str | None = None
    selected_color: str | None = None


class OrderPricingSchema(BaseModel):
    subtotal: float
    discount_total: float
    shipping_cost: float
    tax_total: float
    grand_total: float
    currency: str


class TimelineEntrySchema(BaseModel):
    status: str
    occurred_at: datetime
    completed: bool
    description: str | None = None


class OrderResponse(BaseModel):
    order_id: str
    status: str
    placed_at: datetime
    customer_id: str | None = None
    items: list[OrderItemSchema]
    pricing: OrderPricingSchema
    promo_code: str | None = None
    shipping_info: ShippingInfoSchema | None = None
    payment_method: str | None = None
    notes: str | None = None
    timeline: list[TimelineEntrySchema]
    progress: float
    cancellation_reason: str | None = None
    cancelled_by: str | None = None


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    total: int
    displayed_count: int
    page_size: int
    has_more: bool


class OrderStatsResponse(BaseModel):
    total_orders: int
    active_orders: int
    delivered_orders: int
    total_spent: float
    recent_order_ids: list[str]
