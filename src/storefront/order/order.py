"""Order aggregate — frozen checkout snapshot plus a status lifecycle.

An order's items and pricing are locked at checkout and never recomputed.
Only the status, the timeline and the cancellation details change afterwards.

State Machine (6 states):
    PROCESSING → CONFIRMED → SHIPPED → DELIVERED
    CANCELLED, RETURNED (terminal, reachable from any non-terminal state)
    DELIVERED → RETURNED (goods sent back after delivery)

Administrators set statuses directly and may skip steps. Customers can only
cancel, and only while the order is Processing or Confirmed.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from storefront.domain import storefront
from storefront.order.events import OrderCancelled, OrderPlaced, OrderStatusChanged


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PROCESSING = "Processing"
    CONFIRMED = "Confirmed"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"
    RETURNED = "Returned"


class TransitionActor(Enum):
    CUSTOMER = "Customer"
    ADMIN = "Admin"
    SYSTEM = "System"


# The success path, in order. Progress is measured along it.
FULFILLMENT_STEPS = (
    OrderStatus.PROCESSING,
    OrderStatus.CONFIRMED,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
)

TERMINAL_STATES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.RETURNED})

# Statuses a terminal order may still move to
_TERMINAL_EXITS = {
    OrderStatus.DELIVERED: {OrderStatus.RETURNED},
}

# States from which a customer may cancel
_CUSTOMER_CANCELLABLE_STATES = frozenset({OrderStatus.PROCESSING, OrderStatus.CONFIRMED})

ORDER_PLACED = "Order Placed"

_TIMELINE_DESCRIPTIONS = {
    ORDER_PLACED: "Your order has been received and is being processed.",
    OrderStatus.PROCESSING.value: "Items are being prepared for shipment.",
    OrderStatus.CONFIRMED.value: "Payment confirmed and order details verified.",
    OrderStatus.SHIPPED.value: "Your order has been dispatched from our warehouse.",
    OrderStatus.DELIVERED.value: "Order delivered successfully.",
    OrderStatus.CANCELLED.value: "Order was cancelled.",
    OrderStatus.RETURNED.value: "Order was returned.",
}

_PRICING_TOLERANCE = 0.01


class InvalidTransition(ValidationError):
    """Raised when a status change is not allowed from the order's current status."""

    def __init__(self, message):
        super().__init__({"status": [message]})


def _actor(actor):
    """Coerce an actor name or ``TransitionActor`` member; unknown actors are refused."""
    try:
        return TransitionActor(actor.value if isinstance(actor, TransitionActor) else actor)
    except ValueError:
        raise InvalidTransition(f"Unknown actor: {actor!r}") from None


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class OrderPricing:
    """Financial summary of an order, locked at checkout.

    ``grand_total`` always equals ``subtotal - discount_total + shipping_cost
    + tax_total``; without a promo code that is subtotal + shipping + tax.
    """

    subtotal = Float(default=0.0)
    discount_total = Float(default=0.0)
    shipping_cost = Float(default=0.0)
    tax_total = Float(default=0.0)
    grand_total = Float(default=0.0)
    currency = String(max_length=3, default="USD")

    @invariant.post
    def grand_total_must_add_up(self):
        expected = self.subtotal - self.discount_total + self.shipping_cost + self.tax_total
        if abs(self.grand_total - expected) > _PRICING_TOLERANCE:
            raise ValidationError(
                {"grand_total": [f"Grand total {self.grand_total} does not match its components ({expected:.2f})"]}
            )


@storefront.value_object(part_of="Order")
class ShippingInfo:
    """Who the order goes to and how, captured at checkout."""

    name = String(required=True, max_length=255)
    email = String(max_length=254)
    phone = String(max_length=50)
    address = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    zip_code = String(max_length=20)
    country = String(max_length=100)
    method = String(max_length=100)
    tracking = String(max_length=100)
    estimated_delivery = String(max_length=10)  # ISO date string

    def matches(self, query):
        haystack = " ".join(filter(None, [self.name, self.address, self.city, self.state, self.zip_code]))
        return query in haystack.lower()


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A frozen copy of a cart line, including the price paid."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    sku = String(required=True, max_length=50)
    image = String(max_length=500)
    unit_price = Float(required=True, min_value=0.0)
    original_unit_price = Float(min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    selected_size = String(max_length=50)
    selected_color = String(max_length=50)


@storefront.entity(part_of="Order")
class TimelineEntry:
    """One step of an order's status history.

    ``completed`` is True for historical steps and False for the step the
    order is currently waiting on. ``sequence`` keeps the entries ordered.
    """

    status = String(required=True, max_length=50)
    occurred_at = DateTime(required=True)
    completed = Boolean(default=False)
    description = String(max_length=500)
    sequence = Integer(required=True, min_value=0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    customer_id = Identifier()
    status = String(
        choices=OrderStatus,
        default=OrderStatus.PROCESSING.value,
    )
    placed_at = DateTime(required=True)
    items = HasMany(OrderItem)
    pricing = ValueObject(OrderPricing)
    promo_code = String(max_length=50)
    shipping_info = ValueObject(ShippingInfo)
    payment_method = String(max_length=100)
    notes = Text()
    timeline = HasMany(TimelineEntry)
    cancellation_reason = String(max_length=500)
    cancelled_by = String(max_length=50)
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        items_data,
        pricing,
        shipping_info=None,
        payment_method=None,
        notes=None,
        customer_id=None,
        promo_code=None,
        order_id=None,
        placed_at=None,
    ):
        """Create a new order in Processing from checkout data.

        Args:
            items_data: List of dicts with product_id, name, sku, unit_price,
                        quantity and optionally image, original_unit_price,
                        selected_size, selected_color.
            pricing: ``OrderPricing`` or a dict with its fields.
            shipping_info: ``ShippingInfo`` or a dict with its fields.
            order_id: Explicit identifier (imported or seeded orders).
            placed_at: Placement time; defaults to now.
        """
        if not items_data:
            raise ValidationError({"items": ["An order must contain at least one item"]})

        now = placed_at or datetime.now(UTC)
        if isinstance(pricing, dict):
            pricing = OrderPricing(**pricing)
        if isinstance(shipping_info, dict):
            shipping_info = ShippingInfo(**shipping_info)

        identity = {"id": order_id} if order_id else {}
        order = cls(
            customer_id=customer_id,
            status=OrderStatus.PROCESSING.value,
            placed_at=now,
            items=[OrderItem(**item_data) for item_data in items_data],
            pricing=pricing,
            promo_code=promo_code,
            shipping_info=shipping_info,
            payment_method=payment_method,
            notes=notes,
            timeline=[
                TimelineEntry(
                    status=ORDER_PLACED,
                    occurred_at=now,
                    completed=True,
                    description=_TIMELINE_DESCRIPTIONS[ORDER_PLACED],
                    sequence=0,
                ),
                TimelineEntry(
                    status=OrderStatus.PROCESSING.value,
                    occurred_at=now,
                    completed=False,
                    description=_TIMELINE_DESCRIPTIONS[OrderStatus.PROCESSING.value],
                    sequence=1,
                ),
            ],
            updated_at=now,
            **identity,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                customer_id=str(customer_id) if customer_id else None,
                item_count=order.item_count,
                grand_total=pricing.grand_total,
                currency=pricing.currency,
                promo_code=promo_code,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def current_status(self):
        return OrderStatus(self.status)

    @property
    def is_terminal(self):
        return self.current_status in TERMINAL_STATES

    @property
    def is_cancellable_by_customer(self):
        return self.current_status in _CUSTOMER_CANCELLABLE_STATES

    @property
    def total(self):
        return self.pricing.grand_total if self.pricing else 0.0

    @property
    def item_count(self):
        return sum(item.quantity for item in self.items)

    @property
    def history(self):
        """Timeline entries in the order they were recorded."""
        return sorted(self.timeline, key=lambda entry: entry.sequence)

    @property
    def current_step(self):
        """Index along the fulfillment steps; cancelled and returned orders stay at the first step."""
        status = self.current_status
        if status in (OrderStatus.CANCELLED, OrderStatus.RETURNED):
            return 0
        return FULFILLMENT_STEPS.index(status)

    @property
    def progress(self):
        """Fraction of the fulfillment path covered, between 0.25 and 1.0."""
        return (self.current_step + 1) / len(FULFILLMENT_STEPS)

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = self.current_status
        if target_status == current:
            raise InvalidTransition(f"Order is already {current.value}")
        if current in TERMINAL_STATES and target_status not in _TERMINAL_EXITS.get(current, set()):
            raise InvalidTransition(f"Cannot transition from {current.value} to {target_status.value}")

    def _record_step(self, status, occurred_at, description=None):
        """Close the pending timeline entry and append one for ``status``.

        Terminal statuses have nothing left to wait on, so their entry is
        recorded as completed straight away.
        """
        history = self.history
        if history:
            history[-1].completed = True

        self.add_timeline(
            TimelineEntry(
                status=status.value,
                occurred_at=occurred_at,
                completed=status in TERMINAL_STATES,
                description=description or _TIMELINE_DESCRIPTIONS[status.value],
                sequence=(history[-1].sequence + 1) if history else 0,
            )
        )

    # -------------------------------------------------------------------
    # Order lifecycle transitions
    # -------------------------------------------------------------------
    def advance(self, new_status, changed_by=TransitionActor.ADMIN.value, note=None, occurred_at=None):
        """Set the order's status directly (administrators and the system).

        Steps may be skipped. Moving to Cancelled goes through ``cancel``
        with ``note`` as the reason. ``occurred_at`` backdates the step for
        imported history; it defaults to now.
        """
        try:
            target = OrderStatus(new_status.value if isinstance(new_status, OrderStatus) else new_status)
        except ValueError:
            raise InvalidTransition(f"Unknown order status: {new_status!r}") from None
        actor = _actor(changed_by)
        if actor == TransitionActor.CUSTOMER:
            raise InvalidTransition("Customers cannot change an order's status")

        if target == OrderStatus.CANCELLED:
            self.cancel(reason=note, cancelled_by=actor, occurred_at=occurred_at)
            return

        self._assert_can_transition(target)

        previous = self.current_status
        now = occurred_at or datetime.now(UTC)
        self._record_step(target, now, description=note)
        self.status = target.value
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous.value,
                new_status=target.value,
                changed_by=actor.value,
                changed_at=now,
            )
        )

    def cancel(self, reason=None, cancelled_by=TransitionActor.CUSTOMER.value, occurred_at=None):
        """Cancel the order.

        Customers may cancel while the order is Processing or Confirmed;
        administrators and the system may cancel any order not yet finished.
        """
        current = self.current_status
        actor = _actor(cancelled_by)
        if actor == TransitionActor.CUSTOMER and current not in _CUSTOMER_CANCELLABLE_STATES:
            raise InvalidTransition(
                f"Cannot cancel order in {current.value} state. "
                f"Cancellation is only allowed from: "
                f"{', '.join(s.value for s in FULFILLMENT_STEPS if s in _CUSTOMER_CANCELLABLE_STATES)}"
            )
        self._assert_can_transition(OrderStatus.CANCELLED)

        now = occurred_at or datetime.now(UTC)
        description = _TIMELINE_DESCRIPTIONS[OrderStatus.CANCELLED.value]
        if reason:
            description = f"{description} Reason: {reason}"

        self._record_step(OrderStatus.CANCELLED, now, description=description)
        self.status = OrderStatus.CANCELLED.value
        self.cancellation_reason = reason
        self.cancelled_by = actor.value
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                previous_status=current.value,
                reason=reason,
                cancelled_by=actor.value,
                cancelled_at=now,
            )
        )
