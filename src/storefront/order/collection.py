"""The order collection — every order the storefront has taken.

Orders live in the Order repository; this module is the read/append seam
the history screens and seeding use. Orders are never deleted: cancelling
or returning an order only changes its status.
"""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.config import setting
from storefront.order.order import Order
from storefront.order.query import OrderQueryEngine


def load_orders(limit=None):
    """Load orders, most recently placed first.

    At most ``ORDER_LOAD_LIMIT`` orders are read; older ones stay in storage.
    """
    repo = current_domain.repository_for(Order)
    records = repo._dao.query.order_by("-placed_at").limit(limit or setting("ORDER_LOAD_LIMIT")).all().items
    return [repo.get(record.id) for record in records]


def get_order(order_id):
    """Return the order with ``order_id``, or ``None`` when there is none."""
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        return None


def add_order(order):
    """Append an order to the collection."""
    current_domain.repository_for(Order).add(order)
    return order


def order_history(limit=None):
    """A query engine over the loaded collection."""
    return OrderQueryEngine(load_orders(limit))
