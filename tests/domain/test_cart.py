from datetime import datetime, timedelta, timezone

from returns.result import Failure, Success

from order_core.core.domain.model.cart import Cart, CartItem
from order_core.core.domain.model.catalog import PaymentMethod, ShippingMethod
from order_core.core.domain.model.coupon import Coupon, DiscountPolicy, Percentage
from order_core.core.domain.model.errors import (
    BusinessRuleViolation,
    InvalidCoupon,
    InvalidPrice,
    InvalidProductData,
)
from order_core.core.domain.model.identifiers import (
    CouponCode,
    PaymentMethodId,
    ProductId,
    ProductName,
    ShippingMethodId,
    SkuId,
)
from order_core.core.domain.model.money import MAX_YEN, Money

NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


def item(sku_id=None, price=1000, quantity=1):
    return CartItem.create(
        sku_id or SkuId.new(),
        ProductId.new(),
        ProductName("Product"),
        Money(price),
        quantity,
    ).unwrap()


def coupon(percent=20, valid_until=NOW + timedelta(days=1)):
    return Coupon.create(
        code=CouponCode("SPRING20"),
        name="Spring sale",
        discount_policy=DiscountPolicy(Percentage(percent)),
        valid_from=NOW - timedelta(days=1),
        valid_until=valid_until,
    ).unwrap()


class TestCartItem:
    def test_zero_quantity_rejected(self):
        result = CartItem.create(
            SkuId.new(), ProductId.new(), ProductName("P"), Money(100), 0
        )
        assert isinstance(result.failure(), InvalidProductData)

    def test_non_positive_price_rejected(self):
        result = CartItem.create(
            SkuId.new(), ProductId.new(), ProductName("P"), Money(0), 1
        )
        assert isinstance(result.failure(), InvalidPrice)

    def test_decrease_to_zero_rejected(self):
        it = item(quantity=2)
        assert isinstance(it.decrease_quantity(2), Failure)
        assert it.decrease_quantity(1) == Success(None)
        assert it.quantity == 1


class TestContents:
    def test_same_sku_merges_into_one_line(self):
        sku = SkuId.new()
        cart = Cart()
        cart.add_item(item(sku, quantity=2))
        cart.add_item(item(sku, quantity=3))

        assert cart.item_count() == 1
        assert cart.get_item(sku).quantity == 5
        assert cart.total_quantity() == 5

    def test_update_quantity_zero_removes(self):
        sku = SkuId.new()
        cart = Cart()
        cart.add_item(item(sku))
        assert cart.update_item_quantity(sku, 0) == Success(None)
        assert cart.is_empty()
        assert not cart.contains_sku(sku)

    def test_update_unknown_sku_fails(self):
        cart = Cart()
        assert isinstance(cart.update_item_quantity(SkuId.new(), 3), Failure)

    def test_clear(self):
        cart = Cart()
        cart.add_item(item())
        cart.clear()
        assert cart.is_empty()


class TestTotals:
    def test_totals_follow_contents(self):
        cart = Cart()
        cart.add_item(item(price=1000, quantity=2))
        cart.add_item(item(price=500, quantity=1))

        assert cart.total() == Success(Money(2500))
        assert cart.tax_amount() == Success(Money(250))
        assert cart.total_with_tax() == Success(Money(2750))

        cart.items[0].update_quantity(1)
        assert cart.total() == Success(Money(1500))

    def test_overflow_propagates(self):
        cart = Cart()
        cart.add_item(item(price=MAX_YEN, quantity=2))
        assert isinstance(cart.total(), Failure)

    def test_calculate_with_coupon_shipping_and_cod(self):
        cart = Cart()
        cart.add_item(item(price=2000))
        assert cart.apply_coupon(coupon(), NOW) == Success(None)
        cart.apply_shipping_method(
            ShippingMethod(ShippingMethodId("standard"), "Standard", Money(500))
        )
        cart.apply_payment_method(PaymentMethod(PaymentMethodId("cod"), "COD"), NOW)

        calc = cart.calculate(NOW).unwrap()
        assert calc.original_subtotal == Money(2000)
        assert calc.discount_amount == Money(400)
        assert calc.final_subtotal == Money(1600)
        assert calc.tax_amount == Money(160)
        assert calc.total_with_tax == Money(1760)
        assert calc.shipping_fee == Money(500)
        assert calc.payment_fee == Money(330)
        assert calc.grand_total == Money(2590)

    def test_calculate_without_options(self):
        cart = Cart()
        cart.add_item(item(price=999))
        calc = cart.calculate(NOW).unwrap()
        assert calc.discount_amount == Money(0)
        assert calc.grand_total == Money(1099)


class TestCheckoutOptions:
    def test_inactive_shipping_method_rejected(self):
        method = ShippingMethod(
            ShippingMethodId("pickup"), "Pickup", Money(0), is_active=False
        )
        result = Cart().apply_shipping_method(method)
        assert isinstance(result.failure(), BusinessRuleViolation)

    def test_inactive_payment_method_rejected(self):
        cart = Cart()
        cart.add_item(item())
        method = PaymentMethod(PaymentMethodId("cod"), "COD", is_active=False)
        assert isinstance(cart.apply_payment_method(method, NOW), Failure)
        assert cart.payment_fee is None

    def test_expired_coupon_rejected_on_attach(self):
        expired = coupon(valid_until=NOW + timedelta(hours=1))
        result = Cart().apply_coupon(expired, NOW + timedelta(days=1))
        assert isinstance(result.failure(), InvalidCoupon)

    def test_remove_coupon(self):
        cart = Cart()
        cart.add_item(item(price=2000))
        cart.apply_coupon(coupon(), NOW).unwrap()
        cart.remove_coupon()
        assert cart.calculate(NOW).unwrap().discount_amount == Money(0)
