"""Cart pricing pipeline.

The order of the steps matters and is fixed:

    1. subtotal            = sum(unit_price * quantity)
    2. discount            = subtotal * promo rate (0 without a code)
    3. discounted_subtotal = subtotal - discount
    4. shipping            = 0 above the free-shipping threshold, else the flat fee
    5. tax                 = discounted_subtotal * tax rate (shipping is not taxed)
    6. total               = discounted_subtotal + shipping + tax

``savings`` is a display figure only and never feeds into ``total``.
"""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Float, Integer, String

from storefront.config import setting
from storefront.domain import storefront

_TOLERANCE = 1e-6


@storefront.value_object
class PricingPolicy:
    """Shipping and tax parameters applied to every cart."""

    free_shipping_threshold = Float(required=True, min_value=0.0)
    flat_shipping_fee = Float(required=True, min_value=0.0)
    tax_rate = Float(required=True, min_value=0.0)
    currency = String(max_length=3, default="USD")

    @invariant.post
    def tax_rate_must_be_a_fraction(self):
        if self.tax_rate is not None and self.tax_rate >= 1:
            raise ValidationError({"tax_rate": [f"Tax rate must be below 1, got {self.tax_rate}"]})

    @classmethod
    def from_config(cls):
        return cls(
            free_shipping_threshold=float(setting("FREE_SHIPPING_THRESHOLD")),
            flat_shipping_fee=float(setting("FLAT_SHIPPING_FEE")),
            tax_rate=float(setting("TAX_RATE")),
            currency=setting("CURRENCY"),
        )


@storefront.value_object
class CartTotals:
    """Computed cart totals. Never stored; recomputed from the items on demand."""

    item_count = Integer(default=0)
    subtotal = Float(default=0.0)
    promo_code = String(max_length=50)
    discount_rate = Float(default=0.0)
    discount = Float(default=0.0)
    discounted_subtotal = Float(default=0.0)
    shipping = Float(default=0.0)
    tax = Float(default=0.0)
    total = Float(default=0.0)
    savings = Float(default=0.0)
    amount_to_free_shipping = Float(default=0.0)
    currency = String(max_length=3, default="USD")

    @invariant.post
    def total_must_add_up(self):
        expected = self.subtotal - self.discount + self.shipping + self.tax
        if abs(self.total - expected) > _TOLERANCE:
            raise ValidationError({"total": [f"Total {self.total} does not match its components ({expected})"]})

    @property
    def free_shipping(self):
        return self.shipping == 0


def calculate_totals(subtotal, item_count=0, promo_code=None, policy=None):
    """Run the pricing pipeline over a cart subtotal.

    Args:
        subtotal: Sum of ``unit_price * quantity`` over the cart's items.
        item_count: Sum of quantities, carried through for display.
        promo_code: The applied ``PromoCode`` or ``None``.
        policy: ``PricingPolicy``; defaults to the configured one.
    """
    policy = policy or PricingPolicy.from_config()
    rate = promo_code.rate if promo_code else 0.0

    discount = subtotal * rate
    discounted_subtotal = subtotal - discount
    shipping = 0.0 if discounted_subtotal > policy.free_shipping_threshold else policy.flat_shipping_fee
    tax = discounted_subtotal * policy.tax_rate
    total = discounted_subtotal + shipping + tax
    savings = discount + (policy.flat_shipping_fee if subtotal > policy.free_shipping_threshold else 0.0)

    return CartTotals(
        item_count=item_count,
        subtotal=subtotal,
        promo_code=promo_code.code if promo_code else None,
        discount_rate=rate,
        discount=discount,
        discounted_subtotal=discounted_subtotal,
        shipping=shipping,
        tax=tax,
        total=total,
        savings=savings,
        amount_to_free_shipping=max(0.0, policy.free_shipping_threshold - subtotal),
        currency=policy.currency,
    )
