"""Tests for cart totals, promo codes and clearing."""

import pytest
from protean.exceptions import ValidationError
from storefront.cart.cart import ShoppingCart
from storefront.cart.events import CartCleared, PromoCodeApplied, PromoCodeRemoved
from storefront.cart.promotions import InvalidPromoCode, PromotionEngine
from storefront.catalogue import Product


def _product(product_id="p-100", price=100.0):
    return Product(id=product_id, name=f"Product {product_id}", price=price, category="test")


def _cart_with(price=100.0, quantity=2):
    cart = ShoppingCart.create(session_id="sess-001")
    cart.add_item(_product(price=price), quantity=quantity)
    cart._events.clear()
    return cart


def _assert_consistent(totals):
    assert totals.total == pytest.approx(totals.subtotal - totals.discount + totals.shipping + totals.tax)


class TestTotals:
    def test_plain_cart(self):
        totals = _cart_with().totals()
        assert totals.subtotal == 200.0
        assert totals.shipping == 50.0
        assert totals.tax == pytest.approx(16.0)
        assert totals.total == pytest.approx(266.0)

    def test_with_save10(self):
        cart = _cart_with()
        cart.apply_promo_code("SAVE10")
        totals = cart.totals()
        assert totals.discount == pytest.approx(20.0)
        assert totals.discounted_subtotal == pytest.approx(180.0)
        assert totals.shipping == 50.0
        assert totals.tax == pytest.approx(14.4)
        assert totals.total == pytest.approx(244.4)

    @pytest.mark.parametrize("code", [None, "SAVE10", "FREESHIP"])
    def test_subtotal_600_ships_free(self, code):
        cart = _cart_with(price=300.0, quantity=2)
        if code:
            cart.apply_promo_code(code)
        assert cart.totals().shipping == 0.0

    def test_threshold_is_checked_after_the_discount(self):
        # 600 - 20% = 480, below the free-shipping threshold
        cart = _cart_with(price=300.0, quantity=2)
        cart.apply_promo_code("WELCOME20")
        assert cart.totals().shipping == 50.0

    def test_totals_stay_consistent_across_mutations(self):
        cart = ShoppingCart.create(session_id="sess-001")
        _assert_consistent(cart.totals())

        first = cart.add_item(_product("p-1", 120.0), quantity=2)
        _assert_consistent(cart.totals())
        cart.add_item(_product("p-2", 45.5), quantity=3)
        _assert_consistent(cart.totals())
        cart.apply_promo_code("WELCOME20")
        _assert_consistent(cart.totals())
        cart.update_quantity(first.id, 5)
        _assert_consistent(cart.totals())
        cart.remove_item(first.id)
        _assert_consistent(cart.totals())
        cart.clear()
        _assert_consistent(cart.totals())


class TestApplyPromoCode:
    def test_apply(self):
        cart = _cart_with()
        promo = cart.apply_promo_code("save10")
        assert promo.code == "SAVE10"
        assert cart.promo_code == "SAVE10"
        assert cart.discount_rate == 0.10
        assert cart.applied_promo == promo

    def test_apply_raises_event(self):
        cart = _cart_with()
        cart.apply_promo_code("SAVE10")
        [event] = cart._events
        assert isinstance(event, PromoCodeApplied)
        assert event.promo_code == "SAVE10"
        assert event.discount_rate == 0.10
        assert event.replaced_code is None

    def test_second_code_replaces_the_first(self):
        cart = _cart_with()
        cart.apply_promo_code("SAVE10")
        cart.apply_promo_code("WELCOME20")
        assert cart.promo_code == "WELCOME20"
        assert cart.totals().discount == pytest.approx(40.0)
        assert cart._events[-1].replaced_code == "SAVE10"

    def test_invalid_code_leaves_the_applied_code(self):
        cart = _cart_with()
        cart.apply_promo_code("SAVE10")
        before = cart.totals()

        with pytest.raises(InvalidPromoCode):
            cart.apply_promo_code("NOPE")

        assert cart.promo_code == "SAVE10"
        assert cart.totals() == before

    def test_custom_engine(self):
        cart = _cart_with()
        cart.apply_promo_code("HALF", engine=PromotionEngine(codes={"HALF": 0.5}))
        assert cart.totals().discount == pytest.approx(100.0)


class TestRemovePromoCode:
    def test_round_trip_restores_totals(self):
        cart = _cart_with()
        untouched = cart.totals()

        cart.apply_promo_code("SAVE10")
        cart.remove_promo_code()

        assert cart.totals() == untouched
        assert cart.promo_code is None
        assert cart.applied_promo is None

    def test_remove_raises_event(self):
        cart = _cart_with()
        cart.apply_promo_code("FREESHIP")
        cart._events.clear()
        cart.remove_promo_code()
        [event] = cart._events
        assert isinstance(event, PromoCodeRemoved)
        assert event.promo_code == "FREESHIP"

    def test_remove_without_code_is_a_no_op(self):
        cart = _cart_with()
        cart.remove_promo_code()
        assert cart._events == []


class TestClear:
    def test_clear_empties_the_cart_and_drops_the_code(self):
        cart = _cart_with()
        cart.apply_promo_code("SAVE10")
        cart.clear()
        assert len(cart.items) == 0
        assert cart.promo_code is None
        assert cart.discount_rate == 0.0
        assert cart.totals().subtotal == 0.0

    def test_clear_raises_event(self):
        cart = _cart_with()
        cart.clear()
        [event] = cart._events
        assert isinstance(event, CartCleared)
        assert event.items_removed == 1


class TestPromoSlotInvariant:
    def test_rate_without_code_is_rejected(self):
        cart = _cart_with()
        with pytest.raises(ValidationError):
            cart.discount_rate = 0.2
