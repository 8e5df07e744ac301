from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import FrozenSet, Sequence, Tuple, Union

from returns.result import Failure, Result, Success

from order_core.core.domain.model.clock import now_utc
from order_core.core.domain.model.errors import DomainError, InvalidCoupon
from order_core.core.domain.model.identifiers import (
    CouponCode,
    CouponId,
    ProductId,
    SkuId,
)
from order_core.core.domain.model.money import Money

# ---- discount policy -------------------------------------------------------


@dataclass(frozen=True)
class FixedAmount:
    amount: Money


@dataclass(frozen=True)
class Percentage:
    percent: int


DiscountType = Union[FixedAmount, Percentage]


@dataclass(frozen=True)
class MinimumPurchase:
    amount: Money


@dataclass(frozen=True)
class ProductSpecific:
    product_ids: FrozenSet[ProductId]


@dataclass(frozen=True)
class CategorySpecific:
    category_ids: FrozenSet[str]


DiscountCondition = Union[MinimumPurchase, ProductSpecific, CategorySpecific]


@dataclass(frozen=True)
class DiscountPolicy:
    discount_type: DiscountType
    condition: DiscountCondition | None = None

    def describe(self) -> str:
        if isinstance(self.discount_type, FixedAmount):
            return f"{self.discount_type.amount.format_jpy()} off"
        return f"{self.discount_type.percent}% off"


# ---- coupon ----------------------------------------------------------------


@dataclass(frozen=True)
class Coupon:
    id: CouponId
    code: CouponCode
    name: str
    discount_policy: DiscountPolicy
    valid_from: datetime
    valid_until: datetime
    description: str = ""
    usage_limit: int | None = None
    usage_count: int = 0

    @staticmethod
    def create(
        code: CouponCode,
        name: str,
        discount_policy: DiscountPolicy,
        valid_from: datetime,
        valid_until: datetime,
        description: str = "",
        usage_limit: int | None = None,
        usage_count: int = 0,
        id: CouponId | None = None,
    ) -> Result["Coupon", DomainError]:
        def invalid(message: str) -> Result["Coupon", DomainError]:
            return Failure(InvalidCoupon(message, code=code.value))

        if not name.strip():
            return invalid("coupon name cannot be empty")
        if valid_from >= valid_until:
            return invalid("valid_from must be before valid_until")
        if usage_limit is not None and usage_limit < 0:
            return invalid("usage_limit must be >= 0")
        if usage_count < 0:
            return invalid("usage_count must be >= 0")

        dt = discount_policy.discount_type
        if isinstance(dt, Percentage) and not 0 < dt.percent <= 100:
            return invalid("percentage discount must be between 1 and 100")
        if isinstance(dt, FixedAmount) and not dt.amount.is_positive():
            return invalid("fixed discount amount must be positive")

        return Success(
            Coupon(
                id=id or CouponId.new(),
                code=code,
                name=name,
                discount_policy=discount_policy,
                valid_from=valid_from,
                valid_until=valid_until,
                description=description,
                usage_limit=usage_limit,
                usage_count=usage_count,
            )
        )

    def is_valid(self, now: datetime | None = None) -> bool:
        """True while ``now`` is inside the validity window (both ends inclusive)."""
        at = now or now_utc()
        return self.valid_from <= at <= self.valid_until

    def is_valid_usage_limit(self) -> bool:
        return self.usage_limit is None or self.usage_count < self.usage_limit

    def with_incremented_usage(self) -> "Coupon":
        return replace(self, usage_count=self.usage_count + 1)


# ---- purchase context ------------------------------------------------------


@dataclass(frozen=True)
class PurchaseItem:
    sku_id: SkuId
    product_id: ProductId
    unit_price: Money
    quantity: int


@dataclass(frozen=True)
class PurchaseInfo:
    """What the customer is about to buy, as seen by coupon conditions."""

    items: Tuple[PurchaseItem, ...]
    subtotal: Money
    shipping_fee: Money = field(default_factory=Money.zero)
    payment_fee: Money = field(default_factory=Money.zero)

    @staticmethod
    def from_items(items: Sequence[PurchaseItem]) -> Result["PurchaseInfo", DomainError]:
        subtotal: Result[Money, DomainError] = Success(Money.zero())
        for item in items:
            subtotal = subtotal.bind(
                lambda acc, it=item: it.unit_price.multiply(it.quantity).bind(acc.add)
            )
        return subtotal.map(lambda total: PurchaseInfo(tuple(items), total))

    def contains_product(self, product_id: ProductId) -> bool:
        return any(item.product_id == product_id for item in self.items)

    def meets_minimum_amount(self, minimum: Money) -> bool:
        return self.subtotal >= minimum
