from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Sequence, Tuple

from returns.result import Result, Success

from order_core.adapters.outbound.in_memory_inventory import InMemoryInventory
from order_core.core.domain.model.errors import DomainError
from order_core.core.domain.model.identifiers import ProductName, SkuId
from order_core.core.domain.model.stock import Sku, SkuStatus
from order_core.core.ports.outbound.products import ProductRepository, VariantSummary


@dataclass
class InMemoryProductRepository(ProductRepository):
    """SKU catalogue; live stock figures come from the shared inventory."""

    inventory: InMemoryInventory
    _skus: Dict[SkuId, Tuple[Sku, ProductName]] = field(default_factory=dict)

    def add(self, sku: Sku, product_name: ProductName) -> None:
        self._skus[sku.id] = (sku, product_name)
        self.inventory.track(sku.id, sku.stock)

    def find_variants_by_ids(
        self, sku_ids: Sequence[SkuId]
    ) -> Result[Sequence[VariantSummary], DomainError]:
        # unknown ids are skipped; callers decide whether that is an error
        summaries = []
        for sku_id in sku_ids:
            entry = self._skus.get(sku_id)
            if entry is None:
                continue
            sku, product_name = entry
            stock = self.inventory.snapshot(sku_id) or sku.stock
            summaries.append(
                VariantSummary(
                    sku_id=sku.id,
                    product_id=sku.product_id,
                    sku_code=sku.sku_code,
                    product_name=product_name,
                    sku_name=sku.name,
                    price=sku.base_price,
                    sale_price=sku.sale_price,
                    stock_quantity=stock.total_quantity,
                    reserved_quantity=stock.reserved_quantity,
                    is_sold_out=(
                        stock.is_sold_out() or sku.status is not SkuStatus.ACTIVE
                    ),
                )
            )
        return Success(tuple(summaries))
