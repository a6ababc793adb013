"""Reorder — copies a past order's items back into a shopping cart.

Reordering does not touch the order. Items go back in at the price that was
paid, since the order's snapshot is the only price record it carries.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.catalogue import Product
from storefront.domain import storefront
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


def reorder_into(order, cart):
    """Add every item of ``order`` to ``cart``; returns the cart."""
    for item in order.items:
        product = Product(
            id=str(item.product_id),
            name=item.name,
            price=item.unit_price,
            original_price=item.original_unit_price,
            category="",
            image=item.image or "",
            sku=item.sku,
        )
        cart.add_item(
            product,
            quantity=item.quantity,
            size=item.selected_size,
            color=item.selected_color,
        )
    return cart


@storefront.command(part_of="Order")
class Reorder:
    order_id = Identifier(required=True)
    cart_id = Identifier()  # A new cart is created when absent
    session_id = String(max_length=255)


@storefront.command_handler(part_of=Order)
class ReorderHandler:
    @handle(Reorder)
    def reorder(self, command):
        try:
            order = current_domain.repository_for(Order).get(command.order_id)
        except ObjectNotFoundError:
            logger.warning("Reorder of unknown order ignored", order_id=str(command.order_id))
            return None

        cart_repo = current_domain.repository_for(ShoppingCart)
        if command.cart_id:
            cart = cart_repo.get(command.cart_id)
        else:
            cart = ShoppingCart.create(session_id=command.session_id, customer_id=order.customer_id)

        reorder_into(order, cart)
        cart_repo.add(cart)

        logger.info("Order items re-added to cart", order_id=str(order.id), cart_id=str(cart.id))
        return str(cart.id)
