"""Order history queries — filter, sort and paginate a collection of orders.

Everything here is read-only. ``OrderQueryEngine`` answers questions about a
fixed set of orders; ``OrderWindow`` adds the "load more" view on top of a
filtered, sorted result and remembers how much of it is showing.
"""

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta
from enum import Enum
from math import ceil

from protean.exceptions import ValidationError

from storefront.config import setting
from storefront.order.order import TERMINAL_STATES, OrderStatus


class SortKey(Enum):
    DATE = "date"
    TOTAL = "total"
    STATUS = "status"


class SortDirection(Enum):
    ASC = "asc"
    DESC = "desc"


class DateRange(Enum):
    ALL = "all"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"


@dataclass(frozen=True)
class OrderCriteria:
    """What to show and in which order.

    ``status`` is ``"all"`` or a case-insensitive fragment of the status name.
    ``search`` matches the order id or any item name, and also the shipping
    address when ``match_address`` is set.
    """

    status: str = "all"
    search: str = ""
    sort_by: SortKey = SortKey.DATE
    direction: SortDirection = SortDirection.DESC
    placed_within: DateRange = DateRange.ALL
    match_address: bool = False


@dataclass(frozen=True)
class Page:
    items: list = field(default_factory=list)
    page: int = 1
    per_page: int = 10
    total: int = 0

    @property
    def total_pages(self):
        return ceil(self.total / self.per_page) if self.per_page else 0

    @property
    def has_next(self):
        return self.page < self.total_pages

    @property
    def has_previous(self):
        return self.page > 1


@dataclass(frozen=True)
class OrderStats:
    total_orders: int
    active_orders: int
    delivered_orders: int
    total_spent: float


def _as_utc(moment):
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment


def _placed_since(placed_within, now):
    if placed_within == DateRange.TODAY:
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if placed_within == DateRange.WEEK:
        return now - timedelta(days=7)
    if placed_within == DateRange.MONTH:
        return now - timedelta(days=30)
    return None


def _matches_search(order, query, match_address):
    if query in str(order.id).lower():
        return True
    if any(query in (item.name or "").lower() for item in order.items):
        return True
    return bool(match_address and order.shipping_info and order.shipping_info.matches(query))


def filter_orders(orders, criteria, now=None):
    """Orders matching ``criteria``, in their original relative order."""
    matched = list(orders)

    status = (criteria.status or "all").strip().lower()
    if status != "all":
        matched = [order for order in matched if status in order.status.lower()]

    query = (criteria.search or "").strip().lower()
    if query:
        matched = [order for order in matched if _matches_search(order, query, criteria.match_address)]

    since = _placed_since(criteria.placed_within, _as_utc(now or datetime.now(UTC)))
    if since is not None:
        matched = [order for order in matched if _as_utc(order.placed_at) >= since]

    return matched


_SORT_KEYS = {
    SortKey.DATE: lambda order: _as_utc(order.placed_at),
    SortKey.TOTAL: lambda order: order.total,
    SortKey.STATUS: lambda order: order.status,
}


def sort_orders(orders, sort_by=SortKey.DATE, direction=SortDirection.DESC):
    """Stable sort: orders with equal keys keep their relative order in both directions."""
    return sorted(orders, key=_SORT_KEYS[sort_by], reverse=direction == SortDirection.DESC)


def _require_positive(name, value):
    if value is None or value < 1:
        raise ValidationError({name: [f"{name} must be at least 1, got {value}"]})


class OrderQueryEngine:
    """Search, filter, sort and aggregate over one collection of orders."""

    def __init__(self, orders):
        self._orders = list(orders)

    def __len__(self):
        return len(self._orders)

    def __iter__(self):
        return iter(self._orders)

    # -------------------------------------------------------------------
    # Filtered views
    # -------------------------------------------------------------------
    def query(self, criteria=None, now=None):
        criteria = criteria or OrderCriteria()
        matched = filter_orders(self._orders, criteria, now=now)
        return sort_orders(matched, criteria.sort_by, criteria.direction)

    def window(self, criteria=None, page_size=None, now=None):
        return OrderWindow(self._orders, criteria=criteria, page_size=page_size, now=now)

    def paginate(self, page=1, per_page=10, criteria=None, now=None):
        """Numbered pages over the filtered, sorted result."""
        _require_positive("page", page)
        _require_positive("per_page", per_page)
        matched = self.query(criteria, now=now)
        start = (page - 1) * per_page
        return Page(items=matched[start : start + per_page], page=page, per_page=per_page, total=len(matched))

    # -------------------------------------------------------------------
    # Lookups and aggregates over the unfiltered collection
    # -------------------------------------------------------------------
    def get(self, order_id):
        return next((order for order in self._orders if str(order.id) == str(order_id)), None)

    def orders_by_status(self, status):
        status = OrderStatus(status.value if isinstance(status, OrderStatus) else status)
        return [order for order in self._orders if order.status == status.value]

    def count_by_status(self, status):
        return len(self.orders_by_status(status))

    def recent(self, limit=3):
        return sort_orders(self._orders, SortKey.DATE, SortDirection.DESC)[:limit]

    @property
    def active_order_count(self):
        return sum(1 for order in self._orders if OrderStatus(order.status) not in TERMINAL_STATES)

    @property
    def delivered_count(self):
        return self.count_by_status(OrderStatus.DELIVERED)

    @property
    def total_spent(self):
        return sum(order.total for order in self._orders)

    def stats(self):
        return OrderStats(
            total_orders=len(self._orders),
            active_orders=self.active_order_count,
            delivered_orders=self.delivered_count,
            total_spent=self.total_spent,
        )


class OrderWindow:
    """Incremental "load more" pagination over a filtered, sorted result.

    ``displayed_count`` starts at ``page_size`` and grows by ``page_size``
    with each ``load_more()``, never past the number of matches. Changing
    the criteria or the page size starts over at ``page_size``.
    """

    def __init__(self, orders, criteria=None, page_size=None, now=None):
        self._orders = list(orders)
        self._criteria = criteria or OrderCriteria()
        self._page_size = page_size if page_size is not None else setting("ORDER_PAGE_SIZE")
        self._now = now
        _require_positive("page_size", self._page_size)
        self._refresh()

    def _refresh(self):
        matched = filter_orders(self._orders, self._criteria, now=self._now)
        self._matches = sort_orders(matched, self._criteria.sort_by, self._criteria.direction)
        self.displayed_count = self._page_size

    @property
    def criteria(self):
        return self._criteria

    @property
    def page_size(self):
        return self._page_size

    @property
    def total(self):
        return len(self._matches)

    @property
    def visible(self):
        return self._matches[: self.displayed_count]

    @property
    def has_more(self):
        return self.displayed_count < self.total

    def load_more(self):
        """Show one more page. The window never shrinks, even past the last match."""
        if self.has_more:
            self.displayed_count = min(self.displayed_count + self._page_size, self.total)
        return self.visible

    def update(self, **changes):
        """Change any of the criteria fields; the window resets."""
        self._criteria = replace(self._criteria, **changes)
        self._refresh()

    def filter_by_status(self, status):
        self.update(status=status)

    def search(self, text):
        self.update(search=text)

    def sort(self, sort_by, direction=SortDirection.DESC):
        self.update(sort_by=SortKey(sort_by), direction=SortDirection(direction))

    def set_page_size(self, page_size):
        _require_positive("page_size", page_size)
        self._page_size = page_size
        self._refresh()
