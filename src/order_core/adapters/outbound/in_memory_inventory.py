from __future__ import annotations

import threading
from copy import copy
from dataclasses import dataclass, field
from typing import Callable, Dict, Sequence

from returns.result import Failure, Result, Success

from order_core.core.domain.model.errors import DomainError, NotFound
from order_core.core.domain.model.identifiers import SkuId
from order_core.core.domain.model.stock import Stock
from order_core.core.ports.outbound.inventory import InventoryGateway, Reservation


@dataclass
class InMemoryInventory(InventoryGateway):
    """Process-local stock store.

    Every batch runs under one lock and is applied to copies first, so a
    batch either commits for every SKU or leaves all of them untouched.
    """

    _stocks: Dict[SkuId, Stock] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def track(self, sku_id: SkuId, stock: Stock) -> None:
        with self._lock:
            self._stocks[sku_id] = copy(stock)

    def snapshot(self, sku_id: SkuId) -> Stock | None:
        with self._lock:
            stock = self._stocks.get(sku_id)
            return copy(stock) if stock is not None else None

    def reserve(
        self, reservations: Sequence[Reservation]
    ) -> Result[None, DomainError]:
        return self._apply(reservations, lambda s, q: s.reserve(q))

    def release(
        self, reservations: Sequence[Reservation]
    ) -> Result[None, DomainError]:
        return self._apply(reservations, lambda s, q: s.release_reservation(q))

    def consume(
        self, reservations: Sequence[Reservation]
    ) -> Result[None, DomainError]:
        return self._apply(reservations, lambda s, q: s.consume(q))

    def restore(
        self, reservations: Sequence[Reservation]
    ) -> Result[None, DomainError]:
        return self._apply(
            reservations, lambda s, q: s.restock(q).bind(lambda _: s.reserve(q))
        )

    def _apply(
        self,
        reservations: Sequence[Reservation],
        op: Callable[[Stock, int], Result[None, DomainError]],
    ) -> Result[None, DomainError]:
        with self._lock:
            staged: Dict[SkuId, Stock] = {}
            for r in reservations:
                current = staged.get(r.sku_id) or self._stocks.get(r.sku_id)
                if current is None:
                    return Failure(
                        NotFound("no stock record", resource="sku", key=str(r.sku_id))
                    )
                working = copy(current)
                result = op(working, r.quantity)
                if not isinstance(result, Success):
                    return result
                staged[r.sku_id] = working

            # commit
            self._stocks.update(staged)
            return Success(None)
