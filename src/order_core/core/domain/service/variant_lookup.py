"""Resolve requested (sku, quantity) lines against the product catalogue."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from returns.result import Failure, Result, Success

from order_core.core.domain.model.errors import DomainError, InvalidInput, NotFound
from order_core.core.domain.model.identifiers import SkuId
from order_core.core.ports.outbound.products import ProductRepository, VariantSummary


@dataclass(frozen=True)
class ResolvedLine:
    variant: VariantSummary
    quantity: int


def merge_lines(
    lines: Sequence[Tuple[str, int]],
) -> Result[List[Tuple[SkuId, int]], DomainError]:
    """Parse SKU ids and fold repeated SKUs into one line, keeping first-seen order."""
    if not lines:
        return Failure(InvalidInput("at least one item is required"))

    merged: Dict[SkuId, int] = {}
    for i, (raw_sku, quantity) in enumerate(lines):
        if quantity <= 0:
            return Failure(InvalidInput(f"items[{i}].quantity must be > 0"))
        parsed = SkuId.parse(raw_sku)
        if not isinstance(parsed, Success):
            return Failure(InvalidInput(f"items[{i}].sku_id must be a valid UUID"))
        sku_id = parsed.unwrap()
        merged[sku_id] = merged.get(sku_id, 0) + quantity
    return Success(list(merged.items()))


def resolve_lines(
    products: ProductRepository,
    lines: Sequence[Tuple[str, int]],
    check_stock: bool = True,
) -> Result[List[ResolvedLine], DomainError]:
    return merge_lines(lines).bind(
        lambda merged: products.find_variants_by_ids([sku for sku, _ in merged]).bind(
            lambda variants: _match(merged, variants, check_stock)
        )
    )


def _match(
    merged: Sequence[Tuple[SkuId, int]],
    variants: Sequence[VariantSummary],
    check_stock: bool,
) -> Result[List[ResolvedLine], DomainError]:
    by_id = {v.sku_id: v for v in variants}
    resolved: List[ResolvedLine] = []
    for sku_id, quantity in merged:
        variant = by_id.get(sku_id)
        if variant is None:
            return Failure(
                NotFound("SKU not found", resource="sku", key=str(sku_id))
            )
        if check_stock:
            if variant.is_sold_out:
                return Failure(InvalidInput(f"SKU {variant.sku_code.value} is sold out"))
            if variant.available_quantity < quantity:
                return Failure(
                    InvalidInput(
                        f"insufficient stock for SKU {variant.sku_code.value}: "
                        f"requested={quantity} available={variant.available_quantity}"
                    )
                )
        resolved.append(ResolvedLine(variant, quantity))
    return Success(resolved)
