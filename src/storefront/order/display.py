"""Presentation hints for order statuses — icon, colour and step states.

Kept outside the aggregate: the lifecycle only knows ``OrderStatus``; how a
status looks is the UI's business.
"""

from typing import NamedTuple

from storefront.order.order import FULFILLMENT_STEPS, OrderStatus


class StatusStyle(NamedTuple):
    icon: str
    color: str
    label: str


_STYLES = {
    OrderStatus.PROCESSING: StatusStyle(icon="clock", color="amber", label="Processing"),
    OrderStatus.CONFIRMED: StatusStyle(icon="check-circle-2", color="purple", label="Confirmed"),
    OrderStatus.SHIPPED: StatusStyle(icon="truck", color="blue", label="Shipped"),
    OrderStatus.DELIVERED: StatusStyle(icon="check-circle", color="emerald", label="Delivered"),
    OrderStatus.CANCELLED: StatusStyle(icon="x", color="red", label="Cancelled"),
    OrderStatus.RETURNED: StatusStyle(icon="x", color="red", label="Returned"),
}

_FALLBACK = StatusStyle(icon="package", color="slate", label="Unknown")


def status_style(status) -> StatusStyle:
    try:
        return _STYLES[OrderStatus(status.value if isinstance(status, OrderStatus) else status)]
    except ValueError:
        return _FALLBACK


def step_states(status) -> list[tuple[str, str]]:
    """Return ``(step, state)`` pairs for the progress tracker.

    State is one of ``completed``, ``current`` or ``inactive``. Cancelled and
    returned orders only show the first step as completed.
    """
    status = OrderStatus(status.value if isinstance(status, OrderStatus) else status)
    if status in (OrderStatus.CANCELLED, OrderStatus.RETURNED):
        return [(step.value, "completed" if index == 0 else "inactive") for index, step in enumerate(FULFILLMENT_STEPS)]

    current = FULFILLMENT_STEPS.index(status)
    states = []
    for index, step in enumerate(FULFILLMENT_STEPS):
        if index < current:
            states.append((step.value, "completed"))
        elif index == current:
            states.append((step.value, "current"))
        else:
            states.append((step.value, "inactive"))
    return states
