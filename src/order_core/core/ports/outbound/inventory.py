from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from returns.result import Result

from order_core.core.domain.model.errors import DomainError
from order_core.core.domain.model.identifiers import SkuId


@dataclass(frozen=True)
class Reservation:
    sku_id: SkuId
    quantity: int


class InventoryGateway(Protocol):
    """Stock mutations across several SKUs. Each call is all-or-nothing."""

    def reserve(
        self, reservations: Sequence[Reservation]
    ) -> Result[None, DomainError]: ...

    def release(
        self, reservations: Sequence[Reservation]
    ) -> Result[None, DomainError]: ...

    def consume(
        self, reservations: Sequence[Reservation]
    ) -> Result[None, DomainError]: ...

    def restore(
        self, reservations: Sequence[Reservation]
    ) -> Result[None, DomainError]:
        """Undo a ``consume``: put the units back and hold them again."""
        ...
