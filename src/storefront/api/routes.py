"""FastAPI routes for the Storefront — carts and orders."""

import json

from fastapi import APIRouter, Query
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    AddToCartRequest,
    ApplyPromoCodeRequest,
    CancelOrderRequest,
    CartIdResponse,
    CartResponse,
    CheckoutRequest,
    CreateCartRequest,
    ItemIdResponse,
    OrderIdResponse,
    OrderListResponse,
    OrderResponse,
    OrderStatsResponse,
    OrderStatusResponse,
    PromoCodeResponse,
    ReorderRequest,
    StatusResponse,
    UpdateCartQuantityRequest,
    UpdateOrderStatusRequest,
)
from storefront.cart.cart import ShoppingCart
from storefront.cart.items import AddToCart, RemoveFromCart, UpdateCartQuantity
from storefront.cart.management import ClearCart, CreateCart
from storefront.cart.promo_codes import ApplyPromoCode, RemovePromoCode
from storefront.order.cancellation import CancelOrder
from storefront.order.checkout import Checkout
from storefront.order.collection import order_history
from storefront.order.order import Order, TransitionActor
from storefront.order.query import DateRange, OrderCriteria, SortDirection, SortKey
from storefront.order.reorder import Reorder
from storefront.order.status import UpdateOrderStatus


# ---------------------------------------------------------------------------
# Serializers
# ---------------------------------------------------------------------------
def _cart_response(cart) -> CartResponse:
    totals = cart.totals()
    return CartResponse(
        cart_id=str(cart.id),
        customer_id=str(cart.customer_id) if cart.customer_id else None,
        session_id=cart.session_id,
        items=[
            {
                "id": str(item.id),
                "product_id": str(item.product_id),
                "name": item.name,
                "sku": item.sku,
                "image": item.image,
                "unit_price": item.unit_price,
                "original_unit_price": item.original_unit_price,
                "quantity": item.quantity,
                "selected_size": item.selected_size,
                "selected_color": item.selected_color,
                "line_total": item.line_total,
            }
            for item in cart.items
        ],
        totals={**totals.to_dict(), "free_shipping": totals.free_shipping},
    )


def _order_response(order) -> OrderResponse:
    shipping = order.shipping_info
    return OrderResponse(
        order_id=str(order.id),
        status=order.status,
        placed_at=order.placed_at,
        customer_id=str(order.customer_id) if order.customer_id else None,
        items=[
            {
                "product_id": str(item.product_id),
                "name": item.name,
                "sku": item.sku,
                "image": item.image,
                "unit_price": item.unit_price,
                "quantity": item.quantity,
                "selected_size": item.selected_size,
                "selected_color": item.selected_color,
            }
            for item in order.items
        ],
        pricing=order.pricing.to_dict(),
        promo_code=order.promo_code,
        shipping_info=shipping.to_dict() if shipping else None,
        payment_method=order.payment_method,
        notes=order.notes,
        timeline=[
            {
                "status": entry.status,
                "occurred_at": entry.occurred_at,
                "completed": entry.completed,
                "description": entry.description,
            }
            for entry in order.history
        ],
        progress=order.progress,
        cancellation_reason=order.cancellation_reason,
        cancelled_by=order.cancelled_by,
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.post("", status_code=201, response_model=CartIdResponse)
async def create_cart(body: CreateCartRequest) -> CartIdResponse:
    command = CreateCart(
        customer_id=body.customer_id,
        session_id=body.session_id,
    )
    result = current_domain.process(command, asynchronous=False)
    return CartIdResponse(cart_id=result)


@cart_router.get("/{cart_id}", response_model=CartResponse)
async def get_cart(cart_id: str) -> CartResponse:
    cart = current_domain.repository_for(ShoppingCart).get(cart_id)
    return _cart_response(cart)


@cart_router.post("/{cart_id}/items", response_model=ItemIdResponse)
async def add_cart_item(cart_id: str, body: AddToCartRequest) -> ItemIdResponse:
    command = AddToCart(
        cart_id=cart_id,
        product_id=body.product_id,
        quantity=body.quantity,
        selected_size=body.selected_size,
        selected_color=body.selected_color,
    )
    result = current_domain.process(command, asynchronous=False)
    return ItemIdResponse(item_id=result)


@cart_router.put("/{cart_id}/items/{item_id}", response_model=StatusResponse)
async def update_cart_item_quantity(cart_id: str, item_id: str, body: UpdateCartQuantityRequest) -> StatusResponse:
    command = UpdateCartQuantity(
        cart_id=cart_id,
        item_id=item_id,
        new_quantity=body.new_quantity,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("/{cart_id}/items/{item_id}", response_model=StatusResponse)
async def remove_cart_item(cart_id: str, item_id: str) -> StatusResponse:
    command = RemoveFromCart(
        cart_id=cart_id,
        item_id=item_id,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@cart_router.delete("/{cart_id}/items", response_model=StatusResponse)
async def clear_cart(cart_id: str) -> StatusResponse:
    current_domain.process(ClearCart(cart_id=cart_id), asynchronous=False)
    return StatusResponse()


@cart_router.post("/{cart_id}/promo-code", response_model=PromoCodeResponse)
async def apply_promo_code(cart_id: str, body: ApplyPromoCodeRequest) -> PromoCodeResponse:
    command = ApplyPromoCode(cart_id=cart_id, promo_code=body.code)
    current_domain.process(command, asynchronous=False)

    promo = current_domain.repository_for(ShoppingCart).get(cart_id).applied_promo
    return PromoCodeResponse(code=promo.code, rate=promo.rate)


@cart_router.delete("/{cart_id}/promo-code", response_model=StatusResponse)
async def remove_promo_code(cart_id: str) -> StatusResponse:
    current_domain.process(RemovePromoCode(cart_id=cart_id), asynchronous=False)
    return StatusResponse()


@cart_router.post("/{cart_id}/checkout", status_code=201, response_model=OrderIdResponse)
async def checkout_cart(cart_id: str, body: CheckoutRequest) -> OrderIdResponse:
    """Place an order for the cart's contents and empty the cart."""
    command = Checkout(
        cart_id=cart_id,
        shipping_info=json.dumps(body.shipping.model_dump(exclude_none=True)),
        payment_method=body.payment_method,
        notes=body.notes,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=order_id)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("", response_model=OrderListResponse)
async def list_orders(
    status: str = "all",
    search: str = "",
    sort: SortKey = SortKey.DATE,
    direction: SortDirection = SortDirection.DESC,
    placed_within: DateRange = DateRange.ALL,
    match_address: bool = False,
    page_size: int | None = Query(default=None, ge=1),
    displayed: int | None = Query(default=None, ge=1),
) -> OrderListResponse:
    """Filtered, sorted order history.

    ``displayed`` asks for at least that many orders, loading more pages of
    ``page_size`` until it is reached or the matches run out.
    """
    criteria = OrderCriteria(
        status=status,
        search=search,
        sort_by=sort,
        direction=direction,
        placed_within=placed_within,
        match_address=match_address,
    )
    window = order_history().window(criteria, page_size=page_size)
    while displayed and window.displayed_count < displayed and window.has_more:
        window.load_more()

    return OrderListResponse(
        orders=[_order_response(order) for order in window.visible],
        total=window.total,
        displayed_count=window.displayed_count,
        page_size=window.page_size,
        has_more=window.has_more,
    )


@order_router.get("/stats", response_model=OrderStatsResponse)
async def order_stats() -> OrderStatsResponse:
    history = order_history()
    stats = history.stats()
    return OrderStatsResponse(
        total_orders=stats.total_orders,
        active_orders=stats.active_orders,
        delivered_orders=stats.delivered_orders,
        total_spent=stats.total_spent,
        recent_order_ids=[str(order.id) for order in history.recent()],
    )


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    order = current_domain.repository_for(Order).get(order_id)
    return _order_response(order)


@order_router.put("/{order_id}/status", response_model=OrderStatusResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> OrderStatusResponse:
    current_domain.repository_for(Order).get(order_id)

    command = UpdateOrderStatus(order_id=order_id, status=body.status, note=body.note)
    status = current_domain.process(command, asynchronous=False)
    return OrderStatusResponse(order_id=order_id, status=status)


@order_router.put("/{order_id}/cancel", response_model=OrderStatusResponse)
async def cancel_order(order_id: str, body: CancelOrderRequest) -> OrderStatusResponse:
    current_domain.repository_for(Order).get(order_id)

    command = CancelOrder(order_id=order_id, reason=body.reason, cancelled_by=TransitionActor.CUSTOMER.value)
    status = current_domain.process(command, asynchronous=False)
    return OrderStatusResponse(order_id=order_id, status=status)


@order_router.post("/{order_id}/reorder", response_model=CartIdResponse)
async def reorder(order_id: str, body: ReorderRequest) -> CartIdResponse:
    current_domain.repository_for(Order).get(order_id)

    command = Reorder(order_id=order_id, cart_id=body.cart_id, session_id=body.session_id)
    cart_id = current_domain.process(command, asynchronous=False)
    return CartIdResponse(cart_id=cart_id)
