"""Shopping cart aggregate.

Items are unique by SKU: adding a SKU that is already in the cart grows the
existing line. Totals are derived on every call and never cached.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List

from returns.result import Failure, Result, Success

from order_core.core.domain.model.catalog import PaymentMethod, ShippingMethod
from order_core.core.domain.model.coupon import Coupon, PurchaseInfo, PurchaseItem
from order_core.core.domain.model.errors import (
    BusinessRuleViolation,
    DomainError,
    InvalidCoupon,
    InvalidPrice,
    InvalidProductData,
)
from order_core.core.domain.model.identifiers import ProductId, ProductName, SkuId
from order_core.core.domain.model.money import Money
from order_core.core.domain.model.stock import MAX_QUANTITY
from order_core.core.domain.service import coupon_discount_service


@dataclass
class CartItem:
    sku_id: SkuId
    product_id: ProductId
    product_name: ProductName
    unit_price: Money
    quantity: int

    @staticmethod
    def create(
        sku_id: SkuId,
        product_id: ProductId,
        product_name: ProductName,
        unit_price: Money,
        quantity: int,
    ) -> Result["CartItem", DomainError]:
        if quantity <= 0:
            return Failure(InvalidProductData("quantity must be greater than 0"))
        if quantity > MAX_QUANTITY:
            return Failure(InvalidProductData("quantity is out of range"))
        if not unit_price.is_positive():
            return Failure(InvalidPrice("unit price must be greater than 0"))
        return Success(CartItem(sku_id, product_id, product_name, unit_price, quantity))

    def subtotal(self) -> Result[Money, DomainError]:
        return self.unit_price.multiply(self.quantity)

    def increase_quantity(self, amount: int) -> Result[None, DomainError]:
        if amount <= 0:
            return Failure(InvalidProductData("increase amount must be greater than 0"))
        if self.quantity + amount > MAX_QUANTITY:
            return Failure(InvalidProductData("quantity overflow"))
        self.quantity += amount
        return Success(None)

    def decrease_quantity(self, amount: int) -> Result[None, DomainError]:
        if amount <= 0:
            return Failure(InvalidProductData("decrease amount must be greater than 0"))
        if amount >= self.quantity:
            return Failure(
                InvalidProductData("cannot decrease quantity to zero or below")
            )
        self.quantity -= amount
        return Success(None)

    def update_quantity(self, quantity: int) -> Result[None, DomainError]:
        if quantity <= 0:
            return Failure(InvalidProductData("quantity must be greater than 0"))
        if quantity > MAX_QUANTITY:
            return Failure(InvalidProductData("quantity is out of range"))
        self.quantity = quantity
        return Success(None)


@dataclass(frozen=True)
class CartCalculation:
    original_subtotal: Money
    discount_amount: Money
    final_subtotal: Money
    tax_amount: Money
    total_with_tax: Money
    shipping_fee: Money
    payment_fee: Money
    grand_total: Money


@dataclass
class Cart:
    items: List[CartItem] = field(default_factory=list)
    shipping_fee: Money | None = None
    payment_fee: Money | None = None
    coupon: Coupon | None = None

    # ---- contents --------------------------------------------------------------

    def add_item(self, item: CartItem) -> Result[None, DomainError]:
        existing = self.get_item(item.sku_id)
        if existing is not None:
            return existing.increase_quantity(item.quantity)
        self.items.append(item)
        return Success(None)

    def remove_item(self, sku_id: SkuId) -> None:
        self.items = [i for i in self.items if i.sku_id != sku_id]

    def update_item_quantity(
        self, sku_id: SkuId, quantity: int
    ) -> Result[None, DomainError]:
        if quantity == 0:
            self.remove_item(sku_id)
            return Success(None)
        item = self.get_item(sku_id)
        if item is None:
            return Failure(InvalidProductData("item not found in cart"))
        return item.update_quantity(quantity)

    def clear(self) -> None:
        self.items.clear()

    def contains_sku(self, sku_id: SkuId) -> bool:
        return self.get_item(sku_id) is not None

    def get_item(self, sku_id: SkuId) -> CartItem | None:
        return next((i for i in self.items if i.sku_id == sku_id), None)

    def is_empty(self) -> bool:
        return not self.items

    def item_count(self) -> int:
        return len(self.items)

    def total_quantity(self) -> int:
        return sum(i.quantity for i in self.items)

    # ---- totals ----------------------------------------------------------------

    def total(self) -> Result[Money, DomainError]:
        acc: Result[Money, DomainError] = Success(Money.zero())
        for item in self.items:
            acc = acc.bind(lambda total, it=item: it.subtotal().bind(total.add))
        return acc

    def tax_amount(self) -> Result[Money, DomainError]:
        return self.total().map(lambda total: total.tax_amount())

    def total_with_tax(self) -> Result[Money, DomainError]:
        return self.total().bind(lambda total: total.with_tax())

    # ---- checkout options ------------------------------------------------------

    def apply_shipping_method(self, method: ShippingMethod) -> Result[None, DomainError]:
        if not method.is_active:
            return Failure(
                BusinessRuleViolation(f"shipping method '{method.id.value}' is not active")
            )
        self.shipping_fee = method.price
        return Success(None)

    def apply_payment_method(
        self, method: PaymentMethod, now: datetime | None = None
    ) -> Result[None, DomainError]:
        """Fee is charged on the subtotal after any coupon already attached."""
        return (
            self.calculate(now)
            .bind(lambda calc: method.calculate_fee(calc.final_subtotal))
            .map(self._set_payment_fee)
        )

    def _set_payment_fee(self, fee: Money) -> None:
        self.payment_fee = fee

    def apply_coupon(
        self, coupon: Coupon, now: datetime | None = None
    ) -> Result[None, DomainError]:
        if not coupon.is_valid(now):
            return Failure(
                InvalidCoupon("coupon is expired or not yet valid", code=coupon.code.value)
            )
        if not coupon.is_valid_usage_limit():
            return Failure(
                InvalidCoupon("coupon usage limit exceeded", code=coupon.code.value)
            )
        self.coupon = coupon
        return Success(None)

    def remove_coupon(self) -> None:
        self.coupon = None

    def calculate(self, now: datetime | None = None) -> Result[CartCalculation, DomainError]:
        return self.total().bind(lambda subtotal: self._calculate_from(subtotal, now))

    def purchase_info(self, subtotal: Money) -> PurchaseInfo:
        return PurchaseInfo(
            items=tuple(
                PurchaseItem(i.sku_id, i.product_id, i.unit_price, i.quantity)
                for i in self.items
            ),
            subtotal=subtotal,
            shipping_fee=self.shipping_fee or Money.zero(),
            payment_fee=self.payment_fee or Money.zero(),
        )

    def _discount(
        self, subtotal: Money, now: datetime | None
    ) -> Result[Money, DomainError]:
        if self.coupon is None:
            return Success(Money.zero())
        return coupon_discount_service.apply_coupon(
            self.coupon, self.purchase_info(subtotal), now
        ).map(lambda r: r.discount_amount)

    def _calculate_from(
        self, subtotal: Money, now: datetime | None
    ) -> Result[CartCalculation, DomainError]:
        shipping_fee = self.shipping_fee or Money.zero()
        payment_fee = self.payment_fee or Money.zero()

        def build(discount: Money) -> Result[CartCalculation, DomainError]:
            return subtotal.subtract(discount).bind(
                lambda final_subtotal: final_subtotal.with_tax().bind(
                    lambda with_tax: with_tax.add(shipping_fee)
                    .bind(lambda t: t.add(payment_fee))
                    .map(
                        lambda grand_total: CartCalculation(
                            original_subtotal=subtotal,
                            discount_amount=discount,
                            final_subtotal=final_subtotal,
                            tax_amount=final_subtotal.tax_amount(),
                            total_with_tax=with_tax,
                            shipping_fee=shipping_fee,
                            payment_fee=payment_fee,
                            grand_total=grand_total,
                        )
                    )
                )
            )

        return self._discount(subtotal, now).bind(build)
