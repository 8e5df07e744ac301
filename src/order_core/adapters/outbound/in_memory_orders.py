from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Dict

from returns.result import Failure, Result, Success

from order_core.core.domain.model.errors import DomainError, NotFound, RepositoryError
from order_core.core.domain.model.identifiers import OrderId
from order_core.core.domain.model.order import Order
from order_core.core.ports.outbound.orders import OrderRepository


@dataclass
class InMemoryOrderRepository(OrderRepository):
    fail_on_save: bool = False
    fail_on_update: bool = False
    _store: Dict[str, Order] = field(default_factory=dict)
    _sequences: Dict[int, int] = field(default_factory=dict)

    def save(self, order: Order) -> Result[OrderId, DomainError]:
        if self.fail_on_save:
            return Failure(RepositoryError("order store is unavailable"))
        key = str(order.id)
        if key in self._store:
            return Failure(RepositoryError("order_id already exists"))
        # stored by value: callers mutating their copy must go through update()
        self._store[key] = deepcopy(order)
        return Success(order.id)

    def update(self, order: Order) -> Result[None, DomainError]:
        if self.fail_on_update:
            return Failure(RepositoryError("order store is unavailable"))
        key = str(order.id)
        if key not in self._store:
            return Failure(NotFound("order not found", resource="order", key=key))
        self._store[key] = deepcopy(order)
        return Success(None)

    def find_by_id(self, order_id: OrderId) -> Result[Order, DomainError]:
        key = str(order_id)
        if key not in self._store:
            return Failure(NotFound("order not found", resource="order", key=key))
        return Success(deepcopy(self._store[key]))

    def get_next_sequence_number(self, year: int) -> Result[int, DomainError]:
        seq = self._sequences.get(year, 0) + 1
        self._sequences[year] = seq
        return Success(seq)
