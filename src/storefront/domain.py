"""Storefront bounded context — Shopping Cart and Order Management.

Handles cart pricing and promotions, the order lifecycle state machine,
and the checkout flow that converts carts to orders.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
