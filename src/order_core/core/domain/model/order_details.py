"""Immutable records that make up an order snapshot."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence

from returns.result import Failure, Result, Success

from order_core.core.domain.model.contact import (
    Address,
    Email,
    PersonalInfo,
    PhoneNumber,
)
from order_core.core.domain.model.errors import DomainError, InvalidProductData
from order_core.core.domain.model.identifiers import (
    PaymentMethodId,
    ProductName,
    ShippingMethodId,
    SkuCode,
    SkuId,
    SkuName,
)
from order_core.core.domain.model.money import (
    TAX_RATE_PERCENT,
    Money,
    ceil_div,
    sum_money,
)

MAX_ORDER_ITEM_QUANTITY = 999


@dataclass(frozen=True)
class OrderNumber:
    value: str

    MAX_LENGTH = 20

    @staticmethod
    def generate(year: int, sequence: int) -> "OrderNumber":
        return OrderNumber(f"ORD-{year}-{sequence:06d}")

    @staticmethod
    def parse(raw: str) -> Result["OrderNumber", DomainError]:
        # non-ORD values are accepted as-is (imported / hand-assigned numbers)
        if not raw:
            return Failure(InvalidProductData("order number cannot be empty"))
        if len(raw) > OrderNumber.MAX_LENGTH:
            return Failure(
                InvalidProductData(
                    f"order number cannot exceed {OrderNumber.MAX_LENGTH} characters"
                )
            )
        return Success(OrderNumber(raw))

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class OrderItem:
    sku_id: SkuId
    sku_code: SkuCode
    product_name: ProductName
    sku_name: SkuName
    unit_price: Money
    quantity: int

    @staticmethod
    def create(
        sku_id: SkuId,
        sku_code: SkuCode,
        product_name: ProductName,
        sku_name: SkuName,
        unit_price: Money,
        quantity: int,
    ) -> Result["OrderItem", DomainError]:
        return _check_quantity(quantity).map(
            lambda q: OrderItem(sku_id, sku_code, product_name, sku_name, unit_price, q)
        )

    def subtotal(self) -> Result[Money, DomainError]:
        return self.unit_price.multiply(self.quantity)

    def update_quantity(self, quantity: int) -> Result["OrderItem", DomainError]:
        return _check_quantity(quantity).map(lambda q: replace(self, quantity=q))

    def is_same_sku(self, sku_id: SkuId) -> bool:
        return self.sku_id == sku_id


def _check_quantity(quantity: int) -> Result[int, DomainError]:
    if quantity <= 0:
        return Failure(InvalidProductData("quantity must be positive"))
    if quantity > MAX_ORDER_ITEM_QUANTITY:
        return Failure(
            InvalidProductData(f"quantity cannot exceed {MAX_ORDER_ITEM_QUANTITY}")
        )
    return Success(quantity)


@dataclass(frozen=True)
class CustomerInfo:
    personal_info: PersonalInfo
    email: Email
    phone: PhoneNumber

    def full_name(self) -> str:
        return self.personal_info.full_name()


@dataclass(frozen=True)
class ShippingInfo:
    method_id: ShippingMethodId
    method_name: str
    fee: Money
    address: Address

    def formatted_address(self) -> str:
        return self.address.formatted()


@dataclass(frozen=True)
class PaymentDetails:
    """Opaque, gateway-specific payload (usually a JSON string)."""

    details: str


@dataclass(frozen=True)
class PaymentInfo:
    method_id: PaymentMethodId
    method_name: str
    fee: Money
    payment_details: PaymentDetails | None = None

    def has_details(self) -> bool:
        return self.payment_details is not None


@dataclass(frozen=True)
class OrderPricing:
    subtotal: Money
    shipping_fee: Money
    payment_fee: Money
    tax_amount: Money
    total: Money

    @staticmethod
    def calculate(
        items: Sequence[OrderItem], shipping_fee: Money, payment_fee: Money
    ) -> Result["OrderPricing", DomainError]:
        """tax = ceil(10% of subtotal + shipping + payment); total adds it on top."""

        def price(subtotal: Money) -> Result[OrderPricing, DomainError]:
            return sum_money((subtotal, shipping_fee, payment_fee)).bind(
                lambda pretax: pretax.with_tax().map(
                    lambda total: OrderPricing(
                        subtotal=subtotal,
                        shipping_fee=shipping_fee,
                        payment_fee=payment_fee,
                        tax_amount=pretax.tax_amount(),
                        total=total,
                    )
                )
            )

        subtotal: Result[Money, DomainError] = Success(Money.zero())
        for item in items:
            subtotal = subtotal.bind(
                lambda acc, it=item: it.subtotal().bind(acc.add)
            )
        return subtotal.bind(price)

    def verify(self) -> bool:
        pretax = self.subtotal.yen + self.shipping_fee.yen + self.payment_fee.yen
        expected_tax = ceil_div(pretax * TAX_RATE_PERCENT, 100)
        return (
            self.tax_amount.yen == expected_tax
            and self.total.yen == pretax + self.tax_amount.yen
        )
