"""Application tests for loading and seeding the order collection."""

from datetime import UTC, datetime, timedelta

import pytest
from protean import current_domain
from storefront.order.collection import add_order, get_order, load_orders, order_history
from storefront.order.order import Order, OrderStatus
from storefront.order.seed import seed_orders
from storefront.order.status import UpdateOrderStatus


def _order(number, days_ago):
    return Order.place(
        items_data=[{"product_id": "3", "name": "Premium Cotton Salwar Kameez", "sku": "PC-3", "unit_price": 49.99, "quantity": 1}],
        pricing={"subtotal": 49.99, "shipping_cost": 50.0, "tax_total": 4.0, "grand_total": 103.99},
        order_id=f"ORD-2024-{number:03d}",
        placed_at=datetime(2024, 5, 1, tzinfo=UTC) - timedelta(days=days_ago),
    )


class TestLoadOrders:
    def test_most_recent_first(self):
        for number, days_ago in ((1, 5), (2, 1), (3, 9)):
            add_order(_order(number, days_ago))
        assert [str(order.id) for order in load_orders()] == ["ORD-2024-002", "ORD-2024-001", "ORD-2024-003"]

    def test_children_are_loaded(self):
        add_order(_order(1, 0))
        [order] = load_orders()
        assert len(order.items) == 1
        assert [entry.status for entry in order.history] == ["Order Placed", "Processing"]

    def test_limit(self):
        for number in range(1, 6):
            add_order(_order(number, number))
        assert len(load_orders(limit=3)) == 3

    def test_empty(self):
        assert load_orders() == []


class TestGetOrder:
    def test_found(self):
        add_order(_order(7, 0))
        assert get_order("ORD-2024-007").total == 103.99

    def test_missing(self):
        assert get_order("ORD-2024-404") is None


class TestOrderHistory:
    def test_delivered_count_increases_after_delivery(self):
        add_order(_order(1, 0))
        add_order(_order(2, 1))
        before = order_history().delivered_count

        for status in ("Shipped", "Delivered"):
            current_domain.process(UpdateOrderStatus(order_id="ORD-2024-001", status=status), asynchronous=False)

        history = order_history()
        assert history.delivered_count == before + 1
        assert history.get("ORD-2024-001").status == OrderStatus.DELIVERED.value
        assert len(history.get("ORD-2024-001").timeline) >= 3


class TestSeedOrders:
    def test_seeded_orders_are_persisted(self):
        seeded = seed_orders(count=15, seed=21)
        history = order_history()
        assert len(history) == 15
        assert {str(o.id) for o in seeded} == {str(o.id) for o in history}
        assert history.total_spent == pytest.approx(sum(o.total for o in seeded))
