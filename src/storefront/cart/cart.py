"""Shopping Cart aggregate — line items, promo code slot and computed totals.

The cart is a standard CQRS aggregate owned by one session. Totals are never
stored: every read of ``totals()`` runs the pricing pipeline over the current
items, so the figures are consistent as soon as a mutation returns.

A cart line is identified by ``(product_id, selected_size, selected_color)``:
adding the same product in another size or colour opens a new line.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemRemoved,
    CartQuantityUpdated,
    PromoCodeApplied,
    PromoCodeRemoved,
)
from storefront.cart.pricing import calculate_totals
from storefront.cart.promotions import PromoCode, PromotionEngine
from storefront.domain import storefront


@storefront.entity(part_of="ShoppingCart")
class CartItem:
    """One cart slot: a product, its quantity and the selected variant.

    Pricing, name, SKU and image are copied from the catalogue when the
    product is first added.
    """

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    sku = String(max_length=50)
    image = String(max_length=500)
    unit_price = Float(required=True, min_value=0.0)
    original_unit_price = Float(min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    selected_size = String(max_length=50)
    selected_color = String(max_length=50)
    added_at = DateTime()

    @property
    def line_total(self):
        return self.unit_price * self.quantity

    def is_line_for(self, product_id, size=None, color=None):
        return (
            str(self.product_id) == str(product_id)
            and (self.selected_size or None) == (size or None)
            and (self.selected_color or None) == (color or None)
        )


@storefront.aggregate
class ShoppingCart:
    customer_id = Identifier()  # Nullable for guest carts
    session_id = String(max_length=255)
    items = HasMany(CartItem)
    promo_code = String(max_length=50)
    discount_rate = Float(default=0.0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def promo_slot_must_hold_a_valid_rate(self):
        rate = self.discount_rate or 0.0
        if self.promo_code and not 0 < rate < 1:
            raise ValidationError({"discount_rate": [f"Discount rate must be between 0 and 1, got {rate}"]})
        if not self.promo_code and rate:
            raise ValidationError({"discount_rate": ["A discount rate requires an applied promo code"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, session_id=None, customer_id=None):
        now = datetime.now(UTC)
        return cls(
            session_id=session_id,
            customer_id=customer_id,
            discount_rate=0.0,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def subtotal(self):
        return sum(item.unit_price * item.quantity for item in self.items)

    @property
    def item_count(self):
        return sum(item.quantity for item in self.items)

    @property
    def applied_promo(self):
        if not self.promo_code:
            return None
        return PromoCode(code=self.promo_code, rate=self.discount_rate)

    def totals(self, policy=None):
        """Subtotal, discount, shipping, tax and total for the current items."""
        return calculate_totals(
            self.subtotal,
            item_count=self.item_count,
            promo_code=self.applied_promo,
            policy=policy,
        )

    def get_item(self, item_id):
        return next((i for i in self.items if str(i.id) == str(item_id)), None)

    def snapshot_items(self):
        """Frozen copies of the cart lines, as recorded on an order."""
        return [
            {
                "product_id": str(item.product_id),
                "name": item.name,
                "sku": item.sku or str(item.product_id),
                "image": item.image,
                "unit_price": item.unit_price,
                "original_unit_price": item.original_unit_price,
                "quantity": item.quantity,
                "selected_size": item.selected_size,
                "selected_color": item.selected_color,
            }
            for item in self.items
        ]

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product, quantity=1, size=None, color=None):
        """Add a product to the cart, or grow the matching line.

        ``quantity`` is coerced to at least 1.
        """
        if not getattr(product, "in_stock", True):
            raise ValidationError({"product_id": [f"Product {product.id} is out of stock"]})

        quantity = max(1, int(quantity or 1))
        existing = next((i for i in self.items if i.is_line_for(product.id, size, color)), None)
        now = datetime.now(UTC)

        if existing:
            existing.quantity += quantity
            item = existing
        else:
            item = CartItem(
                product_id=str(product.id),
                name=product.name,
                sku=getattr(product, "sku", None) or str(product.id),
                image=getattr(product, "image", None),
                unit_price=product.price,
                original_unit_price=getattr(product, "original_price", None),
                quantity=quantity,
                selected_size=size,
                selected_color=color,
                added_at=now,
            )
            self.add_items(item)

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product.id),
                quantity=quantity,
                new_quantity=item.quantity,
                selected_size=size,
                selected_color=color,
            )
        )
        return item

    def update_quantity(self, item_id, new_quantity):
        """Overwrite a line's quantity; zero or less removes the line.

        Unknown ids and unchanged quantities are no-ops.
        """
        if new_quantity <= 0:
            self.remove_item(item_id)
            return

        item = self.get_item(item_id)
        if item is None or item.quantity == new_quantity:
            return

        previous_quantity = item.quantity
        item.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                item_id=str(item_id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )

    def remove_item(self, item_id):
        """Remove a line regardless of its quantity. Absent ids are already removed."""
        item = self.get_item(item_id)
        if item is None:
            return

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                item_id=str(item_id),
                product_id=str(item.product_id),
            )
        )

    def clear(self):
        """Empty the cart and drop the applied promo code."""
        removed = len(self.items)

        with atomic_change(self):
            for item in list(self.items):
                self.remove_items(item)
            self.promo_code = None
            self.discount_rate = 0.0
            self.updated_at = datetime.now(UTC)

        self.raise_(CartCleared(cart_id=str(self.id), items_removed=removed))

    # -------------------------------------------------------------------
    # Promo codes
    # -------------------------------------------------------------------
    def apply_promo_code(self, code, engine=None):
        """Apply ``code``, replacing any code already applied.

        An invalid code raises ``InvalidPromoCode`` before anything changes.
        """
        promo = (engine or PromotionEngine()).apply(code)
        replaced = self.promo_code

        with atomic_change(self):
            self.promo_code = promo.code
            self.discount_rate = promo.rate
            self.updated_at = datetime.now(UTC)

        self.raise_(
            PromoCodeApplied(
                cart_id=str(self.id),
                promo_code=promo.code,
                discount_rate=promo.rate,
                replaced_code=replaced if replaced != promo.code else None,
            )
        )
        return promo

    def remove_promo_code(self, engine=None):
        if not self.promo_code:
            return

        removed = self.promo_code
        (engine or PromotionEngine()).remove()

        with atomic_change(self):
            self.promo_code = None
            self.discount_rate = 0.0
            self.updated_at = datetime.now(UTC)

        self.raise_(PromoCodeRemoved(cart_id=str(self.id), promo_code=removed))
