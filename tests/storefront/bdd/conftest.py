"""Shared BDD fixtures and step definitions for the Storefront."""

from datetime import UTC, datetime, timedelta

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when
from storefront.cart.cart import ShoppingCart
from storefront.catalogue import Product
from storefront.order.order import Order, OrderStatus
from storefront.order.query import OrderQueryEngine

NOW = datetime(2024, 6, 15, 12, tzinfo=UTC)


def _place_order(order_id="ORD-2024-001", placed_at=NOW):
    order = Order.place(
        items_data=[{"product_id": "p-1", "name": "Slim Fit Jeans", "sku": "SF-1", "unit_price": 42.99, "quantity": 1}],
        pricing={"subtotal": 42.99, "shipping_cost": 50.0, "tax_total": 3.44, "grand_total": 96.43},
        order_id=order_id,
        placed_at=placed_at,
    )
    order._events.clear()
    return order


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


@pytest.fixture()
def history_state():
    return {}


# ---------------------------------------------------------------------------
# Given steps: Cart
# ---------------------------------------------------------------------------
@given("an empty cart", target_fixture="cart")
def empty_cart():
    cart = ShoppingCart.create(session_id="sess-bdd")
    cart._events.clear()
    return cart


@given(parsers.cfparse("the cart holds {quantity:d} of a product priced {price:g}"), target_fixture="cart")
def cart_holds(cart, quantity, price):
    product = Product(id=f"p-{len(cart.items) + 1}", name="Test Product", price=price, category="test")
    cart.add_item(product, quantity=quantity)
    cart._events.clear()
    return cart


# ---------------------------------------------------------------------------
# Given steps: Orders
# ---------------------------------------------------------------------------
@given("a new order", target_fixture="order")
def new_order():
    return _place_order()


@given("a new order in an order history", target_fixture="order")
def new_order_in_history(history_state):
    order = _place_order()
    delivered = _place_order("ORD-2024-000", placed_at=NOW - timedelta(days=3))
    delivered.advance(OrderStatus.DELIVERED)

    history_state["engine"] = OrderQueryEngine([order, delivered])
    history_state["delivered_before"] = history_state["engine"].delivered_count
    return order


@given(parsers.cfparse("an order history of {count:d} orders"), target_fixture="orders")
def order_history_of(count):
    orders = []
    for number in range(1, count + 1):
        order = _place_order(f"ORD-2024-{number:03d}", placed_at=NOW - timedelta(hours=number))
        if number % 3 == 0:
            order.advance(OrderStatus.DELIVERED)
        orders.append(order)
    return orders


# ---------------------------------------------------------------------------
# Then steps: Cart (shared, plain assertions)
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the cart subtotal is {amount:g}"))
def cart_subtotal_is(cart, amount):
    assert cart.totals().subtotal == pytest.approx(amount)


@then(parsers.cfparse("the discount is {amount:g}"))
def discount_is(cart, amount):
    assert cart.totals().discount == pytest.approx(amount)


@then(parsers.cfparse("the shipping is {amount:g}"))
def shipping_is(cart, amount):
    assert cart.totals().shipping == pytest.approx(amount)


@then(parsers.cfparse("the tax is {amount:g}"))
def tax_is(cart, amount):
    assert cart.totals().tax == pytest.approx(amount)


@then(parsers.cfparse("the total is {amount:g}"))
def total_is(cart, amount):
    assert cart.totals().total == pytest.approx(amount)


# ---------------------------------------------------------------------------
# Then steps: Order (shared, plain assertions)
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order, status):
    assert order.status == status


@then("the order action is rejected")
def order_action_rejected(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


# ---------------------------------------------------------------------------
# When steps: Promo codes (shared by pricing and promo code scenarios)
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the promo code "{code}" is applied'))
def apply_promo_code(cart, code, error):
    try:
        cart.apply_promo_code(code)
    except ValidationError as exc:
        error["exc"] = exc


@when("the promo code is removed")
def remove_promo_code(cart):
    cart.remove_promo_code()
