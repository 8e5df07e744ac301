"""Coupon eligibility and discount computation.

Applying a coupon never touches its usage counter. Callers that commit a
purchase bump the counter through the coupon repository afterwards, so a
preview can be run any number of times.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from fractions import Fraction

from returns.result import Failure, Result, Success

from order_core.core.domain.model.coupon import (
    CategorySpecific,
    Coupon,
    FixedAmount,
    MinimumPurchase,
    ProductSpecific,
    PurchaseInfo,
)
from order_core.core.domain.model.errors import DomainError, InvalidCoupon
from order_core.core.domain.model.money import Money


@dataclass(frozen=True)
class DiscountResult:
    discount_amount: Money
    discounted_amount: Money
    message: str


def apply_coupon(
    coupon: Coupon, purchase_info: PurchaseInfo, now: datetime | None = None
) -> Result[DiscountResult, DomainError]:
    return (
        validate_coupon(coupon, now)
        .bind(lambda _: check_condition(coupon, purchase_info))
        .bind(lambda _: calculate_discount(coupon, purchase_info.subtotal))
        .bind(lambda discount: _to_result(coupon, purchase_info.subtotal, discount))
    )


def validate_coupon(
    coupon: Coupon, now: datetime | None = None
) -> Result[None, DomainError]:
    if not coupon.is_valid(now):
        return Failure(_invalid(coupon, "coupon is not within its validity period"))
    if not coupon.is_valid_usage_limit():
        return Failure(_invalid(coupon, "coupon usage limit has been reached"))
    return Success(None)


def check_condition(
    coupon: Coupon, purchase_info: PurchaseInfo
) -> Result[None, DomainError]:
    condition = coupon.discount_policy.condition
    if condition is None:
        return Success(None)

    if isinstance(condition, MinimumPurchase):
        if not purchase_info.meets_minimum_amount(condition.amount):
            return Failure(
                _invalid(
                    coupon,
                    f"minimum purchase of {condition.amount.format_jpy()} not met",
                )
            )
        return Success(None)

    if isinstance(condition, ProductSpecific):
        if not any(purchase_info.contains_product(p) for p in condition.product_ids):
            return Failure(_invalid(coupon, "no eligible products in the cart"))
        return Success(None)

    if isinstance(condition, CategorySpecific):
        # needs product -> category lookup that the purchase context does not carry
        return Failure(
            _invalid(coupon, "category-specific coupons are not supported")
        )

    raise AssertionError(f"unknown discount condition: {condition!r}")


def calculate_discount(coupon: Coupon, subtotal: Money) -> Result[Money, DomainError]:
    discount_type = coupon.discount_policy.discount_type
    if isinstance(discount_type, FixedAmount):
        return Success(min(discount_type.amount, subtotal))
    return subtotal.percentage(Fraction(discount_type.percent, 100))


def _to_result(
    coupon: Coupon, subtotal: Money, discount: Money
) -> Result[DiscountResult, DomainError]:
    return subtotal.subtract(discount).map(
        lambda discounted: DiscountResult(
            discount_amount=discount,
            discounted_amount=discounted,
            message=(
                f"Coupon '{coupon.name}' applied "
                f"({coupon.discount_policy.describe()}): "
                f"discount {discount.format_jpy()}"
            ),
        )
    )


def _invalid(coupon: Coupon, message: str) -> InvalidCoupon:
    return InvalidCoupon(message, code=coupon.code.value)


class CouponDiscountService:
    def apply_coupon(
        self, coupon: Coupon, purchase_info: PurchaseInfo, now: datetime | None = None
    ) -> Result[DiscountResult, DomainError]:
        return apply_coupon(coupon, purchase_info, now)
