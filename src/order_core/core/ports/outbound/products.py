from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from returns.result import Result

from order_core.core.domain.model.errors import DomainError
from order_core.core.domain.model.identifiers import (
    ProductId,
    ProductName,
    SkuCode,
    SkuId,
    SkuName,
)
from order_core.core.domain.model.money import Money


@dataclass(frozen=True)
class VariantSummary:
    """Read model of a sellable SKU as the catalogue exposes it."""

    sku_id: SkuId
    product_id: ProductId
    sku_code: SkuCode
    product_name: ProductName
    sku_name: SkuName
    price: Money
    sale_price: Money | None
    stock_quantity: int
    reserved_quantity: int
    is_sold_out: bool

    def current_price(self) -> Money:
        return self.sale_price if self.sale_price is not None else self.price

    @property
    def available_quantity(self) -> int:
        return self.stock_quantity - self.reserved_quantity


class ProductRepository(Protocol):
    def find_variants_by_ids(
        self, sku_ids: Sequence[SkuId]
    ) -> Result[Sequence[VariantSummary], DomainError]: ...
