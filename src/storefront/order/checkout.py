"""Checkout — converts a shopping cart into an order.

The new order and the emptied cart are saved by the same handler, inside
one unit of work: either both are persisted or neither is.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


def order_from_cart(cart, shipping_info=None, payment_method=None, notes=None, order_id=None):
    """Build an order from the cart's current lines and totals.

    The cart itself is left untouched.
    """
    if not cart.items:
        raise ValidationError({"cart": ["Cannot check out an empty cart"]})

    totals = cart.totals()
    return Order.place(
        items_data=cart.snapshot_items(),
        pricing={
            "subtotal": totals.subtotal,
            "discount_total": totals.discount,
            "shipping_cost": totals.shipping,
            "tax_total": totals.tax,
            "grand_total": totals.total,
            "currency": totals.currency,
        },
        shipping_info=shipping_info,
        payment_method=payment_method,
        notes=notes,
        customer_id=cart.customer_id,
        promo_code=cart.promo_code,
        order_id=order_id,
    )


@storefront.command(part_of="Order")
class Checkout:
    cart_id = Identifier(required=True)
    shipping_info = Text(required=True)  # JSON: ShippingInfo dict
    payment_method = String(max_length=100)
    notes = Text()


@storefront.command_handler(part_of=Order)
class CheckoutHandler:
    @handle(Checkout)
    def checkout(self, command):
        shipping_info = (
            json.loads(command.shipping_info) if isinstance(command.shipping_info, str) else command.shipping_info
        )

        cart_repo = current_domain.repository_for(ShoppingCart)
        cart = cart_repo.get(command.cart_id)

        order = order_from_cart(
            cart,
            shipping_info=shipping_info,
            payment_method=command.payment_method,
            notes=command.notes,
        )
        cart.clear()

        current_domain.repository_for(Order).add(order)
        cart_repo.add(cart)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            cart_id=str(cart.id),
            grand_total=order.pricing.grand_total,
            promo_code=order.promo_code,
        )
        return str(order.id)
