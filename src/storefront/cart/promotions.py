"""Promotion engine — validates promo codes and yields their discount rate.

The engine is stateless: it only answers "what is this code worth?". The
cart that asked keeps the single applied-code slot, so applying a second
code replaces the first rather than stacking with it.
"""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Float, String

from storefront.config import setting
from storefront.domain import storefront


class InvalidPromoCode(ValidationError):
    """Raised when a code is not in the promotion table."""

    def __init__(self, code):
        super().__init__({"promo_code": [f"Invalid promo code: {code!r}"]})
        self.code = code


@storefront.value_object
class PromoCode:
    """A promo code paired with the fraction of the subtotal it takes off."""

    code = String(required=True, max_length=50)
    rate = Float(required=True)

    @invariant.post
    def rate_must_be_a_fraction(self):
        if self.rate is not None and not 0 < self.rate < 1:
            raise ValidationError({"rate": [f"Discount rate must be between 0 and 1, got {self.rate}"]})


def normalize_code(code):
    return (code or "").strip().upper()


class PromotionEngine:
    """Looks promo codes up in a fixed table of valid codes."""

    def __init__(self, codes=None):
        table = codes if codes is not None else setting("PROMO_CODES")
        self._codes = {normalize_code(code): float(rate) for code, rate in table.items()}

    @property
    def codes(self):
        return sorted(self._codes)

    def is_valid(self, code):
        return normalize_code(code) in self._codes

    def apply(self, code):
        """Return the ``PromoCode`` for ``code``.

        Raises ``InvalidPromoCode`` for unknown codes. Nothing is mutated
        either way, so a caller holding a previously applied code keeps it.
        """
        normalized = normalize_code(code)
        rate = self._codes.get(normalized)
        if rate is None:
            raise InvalidPromoCode(code)
        return PromoCode(code=normalized, rate=rate)

    def remove(self):
        """Clearing a promo code never fails; there is nothing to look up."""
        return None
