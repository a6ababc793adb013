"""Cart promo code management — commands and handler."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.cart.promotions import InvalidPromoCode
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.command(part_of="ShoppingCart")
class ApplyPromoCode:
    """Apply a promo code to a shopping cart, replacing any applied code."""

    cart_id = Identifier(required=True)
    promo_code = String(required=True, max_length=50)


@storefront.command(part_of="ShoppingCart")
class RemovePromoCode:
    cart_id = Identifier(required=True)


@storefront.command_handler(part_of=ShoppingCart)
class PromoCodeHandler:
    @handle(ApplyPromoCode)
    def apply_promo_code(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)
        try:
            promo = cart.apply_promo_code(command.promo_code)
        except InvalidPromoCode:
            logger.info("Promo code rejected", cart_id=str(command.cart_id), promo_code=command.promo_code)
            raise
        repo.add(cart)
        return promo.code

    @handle(RemovePromoCode)
    def remove_promo_code(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get(command.cart_id)
        cart.remove_promo_code()
        repo.add(cart)
