from __future__ import annotations

from typing import Protocol

from returns.result import Result

from order_core.core.domain.model.errors import DomainError
from order_core.core.domain.model.identifiers import OrderId
from order_core.core.domain.model.order import Order


class OrderRepository(Protocol):
    def save(self, order: Order) -> Result[OrderId, DomainError]: ...

    def update(self, order: Order) -> Result[None, DomainError]: ...

    def find_by_id(self, order_id: OrderId) -> Result[Order, DomainError]: ...

    def get_next_sequence_number(self, year: int) -> Result[int, DomainError]: ...
