"""Demo order history for development and demos.

Generates a year of plausible orders (ORD-2024-001, ORD-2024-002, ...) spread
over every status. Each order is placed and then walked through the same
transitions an administrator would apply, so its timeline is consistent with
its status.
"""

import random
from datetime import UTC, datetime, timedelta

import structlog

from storefront.catalogue import PRODUCTS
from storefront.config import setting
from storefront.order.collection import add_order, load_orders
from storefront.order.order import Order, OrderStatus, TransitionActor

logger = structlog.get_logger(__name__)

_CITIES = [
    ("New York", "NY"),
    ("Los Angeles", "CA"),
    ("Chicago", "IL"),
    ("Houston", "TX"),
    ("Phoenix", "AZ"),
    ("Philadelphia", "PA"),
    ("San Antonio", "TX"),
    ("San Diego", "CA"),
    ("Dallas", "TX"),
    ("San Jose", "CA"),
]
_STREETS = ["Main", "Oak", "Pine", "Elm", "Maple"]
_PAYMENT_METHODS = [
    "Credit Card (**** 1234)",
    "Credit Card (**** 5678)",
    "PayPal",
    "Credit Card (**** 9012)",
    "Apple Pay",
    "Google Pay",
]
_SHIPPING_METHODS = [
    "Standard Shipping (3-5 business days)",
    "Express Shipping (1-2 business days)",
    "Overnight Shipping",
    "White Glove Delivery",
    "Local Pickup",
]
_COLORS = ["Dark Grey", "Natural Oak", "Cream White", "Black Leather", "White", "Brown", "Blue", "Green"]
_SIZES = ["Small", "Medium", "Large", "XL"]

# Transitions applied after placement to reach each status
_PATHS = {
    OrderStatus.PROCESSING: [],
    OrderStatus.CONFIRMED: [OrderStatus.CONFIRMED],
    OrderStatus.SHIPPED: [OrderStatus.CONFIRMED, OrderStatus.SHIPPED],
    OrderStatus.DELIVERED: [OrderStatus.CONFIRMED, OrderStatus.SHIPPED, OrderStatus.DELIVERED],
    OrderStatus.CANCELLED: [OrderStatus.CANCELLED],
    OrderStatus.RETURNED: [OrderStatus.CONFIRMED, OrderStatus.SHIPPED, OrderStatus.DELIVERED, OrderStatus.RETURNED],
}


def _demo_items(rng):
    items = []
    for _ in range(rng.randint(1, 4)):
        product = rng.choice([p for p in PRODUCTS if p.in_stock])
        # Prices vary by up to 10% either way from the list price
        price = round(product.price * (1 + (rng.random() - 0.5) * 0.2), 2)
        items.append(
            {
                "product_id": product.id,
                "name": product.name,
                "sku": product.sku or product.id,
                "image": product.image,
                "unit_price": price,
                "quantity": rng.randint(1, 3),
                "selected_size": rng.choice(_SIZES),
                "selected_color": rng.choice(_COLORS),
            }
        )
    return items


def demo_order(number, rng, year=2024):
    """Build one demo order; ``number`` becomes the order id suffix."""
    placed_at = datetime(year, 1, 1, 9, tzinfo=UTC) + timedelta(days=rng.randrange(365), minutes=rng.randrange(600))
    status = rng.choice(list(OrderStatus))
    city, state = rng.choice(_CITIES)

    items = _demo_items(rng)
    subtotal = round(sum(item["unit_price"] * item["quantity"] for item in items), 2)
    shipping = round(rng.uniform(10, 60), 2)
    tax = round(subtotal * 0.08, 2)

    order = Order.place(
        items_data=items,
        pricing={
            "subtotal": subtotal,
            "shipping_cost": shipping,
            "tax_total": tax,
            "grand_total": round(subtotal + shipping + tax, 2),
        },
        shipping_info={
            "name": f"Customer {number}",
            "email": f"customer{number}@example.com",
            "phone": f"555-123-{number:04d}",
            "address": f"{rng.randint(1, 9999)} {rng.choice(_STREETS)} Street",
            "city": city,
            "state": state,
            "zip_code": str(rng.randint(10000, 99999)),
            "country": "US",
            "method": rng.choice(_SHIPPING_METHODS),
            "tracking": f"TRK{rng.randrange(10**9)}" if rng.random() > 0.3 else None,
            "estimated_delivery": (placed_at + timedelta(days=rng.randint(1, 7))).date().isoformat(),
        },
        payment_method=rng.choice(_PAYMENT_METHODS),
        notes="Special delivery instructions provided by customer." if rng.random() > 0.7 else None,
        order_id=f"ORD-{year}-{number:03d}",
        placed_at=placed_at,
    )

    for day, step in enumerate(_PATHS[status], start=1):
        order.advance(step, changed_by=TransitionActor.SYSTEM.value, occurred_at=placed_at + timedelta(days=day))
    return order


def generate_demo_orders(count=50, seed=None, year=2024):
    """Return ``count`` demo orders. The same ``seed`` always gives the same orders."""
    rng = random.Random(seed)
    return [demo_order(number, rng, year=year) for number in range(1, count + 1)]


def seed_orders(count=50, seed=None):
    """Generate demo orders and add them to the order collection."""
    orders = generate_demo_orders(count, seed=seed)
    for order in orders:
        add_order(order)

    logger.info("Seeded demo orders", count=len(orders))
    return orders


def load_demo_orders():
    """Give an empty order collection its demo history.

    ``SEED_DEMO_ORDERS`` is how many orders to add (0 turns seeding off) and
    ``DEMO_ORDER_SEED`` makes them reproducible. A collection that already
    holds orders is left as it is.
    """
    count = int(setting("SEED_DEMO_ORDERS") or 0)
    if count < 1 or load_orders(limit=1):
        return []
    return seed_orders(count, seed=setting("DEMO_ORDER_SEED"))
