from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from returns.result import Result

from order_core.core.domain.model.cart import CartCalculation
from order_core.core.domain.model.errors import DomainError
from order_core.core.domain.model.identifiers import ProductId, ProductName, SkuId
from order_core.core.domain.model.money import Money


@dataclass(frozen=True)
class CartLine:
    sku_id: str  # UUID string
    quantity: int


@dataclass(frozen=True)
class CalculateCartCommand:
    items: Sequence[CartLine]
    shipping_method_id: str | None = None
    payment_method_id: str | None = None
    coupon_code: str | None = None


@dataclass(frozen=True)
class CartLineView:
    sku_id: SkuId
    product_id: ProductId
    product_name: ProductName
    unit_price: Money
    quantity: int
    subtotal: Money


@dataclass(frozen=True)
class CartCalculationResult:
    items: Sequence[CartLineView]
    calculation: CartCalculation
    total_quantity: int
    item_count: int
    coupon_code: str | None = None


class CalculateCartUseCase(Protocol):
    def calculate_cart(
        self, command: CalculateCartCommand
    ) -> Result[CartCalculationResult, DomainError]: ...
