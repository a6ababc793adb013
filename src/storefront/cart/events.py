"""Domain events for the ShoppingCart aggregate."""

from protean.fields import Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="ShoppingCart")
class CartItemAdded:
    """A product was added to the shopping cart, or an existing line grew."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    selected_size = String()
    selected_color = String()


@storefront.event(part_of="ShoppingCart")
class CartQuantityUpdated:
    """The quantity of a cart item was changed."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class CartItemRemoved:
    """An item was removed from the shopping cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier()


@storefront.event(part_of="ShoppingCart")
class CartCleared:
    """All items (and any promo code) were removed from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    items_removed = Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class PromoCodeApplied:
    """A promo code was applied, replacing any previously applied code."""

    __version__ = 1

    cart_id = Identifier(required=True)
    promo_code = String(required=True)
    discount_rate = Float(required=True)
    replaced_code = String()


@storefront.event(part_of="ShoppingCart")
class PromoCodeRemoved:
    """The applied promo code was removed from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    promo_code = String(required=True)
