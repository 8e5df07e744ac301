from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from returns.result import Result

from order_core.core.domain.model.errors import DomainError
from order_core.core.ports.inbound.get_order import OrderView


@dataclass(frozen=True)
class ChangeOrderStatusCommand:
    order_id: str  # UUID string
    status: str  # e.g. "paid", "shipped"


@dataclass(frozen=True)
class CancelOrderCommand:
    order_id: str
    reason: str


class ChangeOrderStatusUseCase(Protocol):
    def change_status(
        self, command: ChangeOrderStatusCommand
    ) -> Result[OrderView, DomainError]: ...

    def cancel(self, command: CancelOrderCommand) -> Result[OrderView, DomainError]: ...
