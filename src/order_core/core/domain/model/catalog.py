from __future__ import annotations

from dataclasses import dataclass

from returns.result import Failure, Result, Success

from order_core.core.domain.model.errors import BusinessRuleViolation, DomainError
from order_core.core.domain.model.identifiers import PaymentMethodId, ShippingMethodId
from order_core.core.domain.model.money import Money
from order_core.core.domain.service.payment_fee_calculator import calculate_fee


@dataclass(frozen=True)
class ShippingMethod:
    id: ShippingMethodId
    name: str
    price: Money
    description: str = ""
    is_active: bool = True
    sort_order: int = 0


@dataclass(frozen=True)
class PaymentMethod:
    id: PaymentMethodId
    name: str
    description: str = ""
    is_active: bool = True
    sort_order: int = 0

    def calculate_fee(self, amount: Money) -> Result[Money, DomainError]:
        if not self.is_active:
            return Failure(
                BusinessRuleViolation(f"payment method '{self.id.value}' is not active")
            )
        return Success(calculate_fee(self.id.value, amount))
