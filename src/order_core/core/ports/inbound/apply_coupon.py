from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from returns.result import Result

from order_core.core.domain.model.errors import DomainError
from order_core.core.domain.model.money import Money
from order_core.core.ports.inbound.calculate_cart import CartLine


@dataclass(frozen=True)
class ApplyCouponCommand:
    coupon_code: str
    items: Sequence[CartLine]
    preview: bool = True


@dataclass(frozen=True)
class CouponApplication:
    coupon_code: str
    subtotal: Money
    discount_amount: Money
    discounted_amount: Money
    message: str
    usage_recorded: bool


class ApplyCouponUseCase(Protocol):
    def apply_coupon(
        self, command: ApplyCouponCommand
    ) -> Result[CouponApplication, DomainError]: ...
