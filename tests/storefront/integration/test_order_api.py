"""Integration tests for Order API endpoints via TestClient."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from protean import current_domain
from storefront.api import cart_router, order_router, register_exception_handlers
from storefront.cart.cart import ShoppingCart
from storefront.order.seed import seed_orders


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(cart_router)
    app.include_router(order_router)
    register_exception_handlers(app)
    return TestClient(app)


@pytest.fixture()
def seeded():
    return {str(order.id): order for order in seed_orders(count=30, seed=1234)}


def _first_with(seeded, *statuses):
    return next(order_id for order_id, order in seeded.items() if order.status in statuses)


class TestListOrders:
    def test_first_window(self, client, seeded):
        response = client.get("/orders")
        assert response.status_code == 200
        body = response.json()
        assert body["total"] == 30
        assert body["page_size"] == 12
        assert body["displayed_count"] == 12
        assert len(body["orders"]) == 12
        assert body["has_more"] is True

    def test_newest_first(self, client, seeded):
        placed = [order["placed_at"] for order in client.get("/orders").json()["orders"]]
        assert placed == sorted(placed, reverse=True)

    def test_displayed_loads_more(self, client, seeded):
        body = client.get("/orders", params={"page_size": 10, "displayed": 25}).json()
        assert body["displayed_count"] == 30
        assert len(body["orders"]) == 30
        assert body["has_more"] is False

    def test_status_filter(self, client, seeded):
        expected = sum(1 for order in seeded.values() if order.status == "Delivered")
        body = client.get("/orders", params={"status": "delivered", "displayed": 30}).json()
        assert body["total"] == expected
        assert all(order["status"] == "Delivered" for order in body["orders"])

    def test_sort_by_total(self, client, seeded):
        body = client.get("/orders", params={"sort": "total", "direction": "asc", "page_size": 30}).json()
        totals = [order["pricing"]["grand_total"] for order in body["orders"]]
        assert totals == sorted(totals)

    def test_search_by_id(self, client, seeded):
        body = client.get("/orders", params={"search": "ORD-2024-007"}).json()
        assert [order["order_id"] for order in body["orders"]] == ["ORD-2024-007"]

    def test_invalid_sort_is_422(self, client, seeded):
        assert client.get("/orders", params={"sort": "colour"}).status_code == 422


class TestOrderStats:
    def test_stats(self, client, seeded):
        body = client.get("/orders/stats").json()
        orders = seeded.values()
        assert body["total_orders"] == 30
        assert body["delivered_orders"] == sum(1 for o in orders if o.status == "Delivered")
        assert body["active_orders"] == sum(
            1 for o in orders if o.status not in ("Delivered", "Cancelled", "Returned")
        )
        assert body["total_spent"] == pytest.approx(sum(o.total for o in orders))
        assert len(body["recent_order_ids"]) == 3


class TestGetOrder:
    def test_get(self, client, seeded):
        body = client.get("/orders/ORD-2024-001").json()
        assert body["order_id"] == "ORD-2024-001"
        assert body["timeline"][0]["status"] == "Order Placed"
        assert body["status"] == seeded["ORD-2024-001"].status

    def test_unknown_order_is_404(self, client, seeded):
        assert client.get("/orders/ORD-2024-999").status_code == 404


class TestOrderStatusEndpoint:
    def test_advance(self, client, seeded):
        order_id = _first_with(seeded, "Processing", "Confirmed")
        response = client.put(f"/orders/{order_id}/status", json={"status": "Shipped"})
        assert response.status_code == 200
        assert response.json() == {"order_id": order_id, "status": "Shipped"}
        assert client.get(f"/orders/{order_id}").json()["timeline"][-1]["status"] == "Shipped"

    def test_terminal_order_is_400(self, client, seeded):
        order_id = _first_with(seeded, "Processing", "Confirmed", "Shipped")
        client.put(f"/orders/{order_id}/status", json={"status": "Cancelled", "note": "Out of stock"})

        response = client.put(f"/orders/{order_id}/status", json={"status": "Processing"})
        assert response.status_code == 400
        assert "status" in response.json()["details"]

    def test_unknown_status_is_400(self, client, seeded):
        response = client.put("/orders/ORD-2024-001/status", json={"status": "Teleported"})
        assert response.status_code == 400

    def test_unknown_order_is_404(self, client, seeded):
        assert client.put("/orders/ORD-2024-999/status", json={"status": "Shipped"}).status_code == 404


class TestCancelEndpoint:
    def test_customer_cancel(self, client, seeded):
        order_id = _first_with(seeded, "Processing", "Confirmed")
        response = client.put(f"/orders/{order_id}/cancel", json={"reason": "Changed my mind"})
        assert response.status_code == 200
        assert response.json()["status"] == "Cancelled"
        assert client.get(f"/orders/{order_id}").json()["cancellation_reason"] == "Changed my mind"

    def test_delivered_order_cannot_be_cancelled(self, client, seeded):
        order_id = _first_with(seeded, "Processing", "Confirmed", "Shipped")
        client.put(f"/orders/{order_id}/status", json={"status": "Delivered"})

        response = client.put(f"/orders/{order_id}/cancel", json={"reason": "Too late"})
        assert response.status_code == 400
        assert client.get(f"/orders/{order_id}").json()["status"] == "Delivered"

    def test_cancel_endpoint_always_acts_for_the_customer(self, client, seeded):
        order_id = _first_with(seeded, "Processing", "Confirmed", "Shipped")
        client.put(f"/orders/{order_id}/status", json={"status": "Shipped"})

        response = client.put(f"/orders/{order_id}/cancel", json={"reason": "Please", "cancelled_by": "Admin"})
        assert response.status_code == 400
        assert client.get(f"/orders/{order_id}").json()["status"] == "Shipped"

    def test_admin_cancels_through_the_status_endpoint(self, client, seeded):
        order_id = _first_with(seeded, "Processing", "Confirmed", "Shipped")
        client.put(f"/orders/{order_id}/status", json={"status": "Shipped"})

        response = client.put(f"/orders/{order_id}/status", json={"status": "Cancelled", "note": "Lost in transit"})
        assert response.status_code == 200

        body = client.get(f"/orders/{order_id}").json()
        assert body["status"] == "Cancelled"
        assert body["cancelled_by"] == "Admin"


class TestReorderEndpoint:
    def test_reorder_creates_a_cart(self, client, seeded):
        order = seeded["ORD-2024-002"]
        response = client.post("/orders/ORD-2024-002/reorder", json={"session_id": "sess-777"})
        assert response.status_code == 200

        cart = current_domain.repository_for(ShoppingCart).get(response.json()["cart_id"])
        assert cart.item_count == order.item_count

    def test_unknown_order_is_404(self, client, seeded):
        assert client.post("/orders/ORD-2024-999/reorder", json={}).status_code == 404
