from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Union

from returns.result import Result

from order_core.core.domain.model.errors import DomainError
from order_core.core.domain.model.identifiers import OrderId
from order_core.core.domain.model.money import Money
from order_core.core.domain.model.order import OrderStatus
from order_core.core.domain.model.order_details import OrderNumber


@dataclass(frozen=True)
class OrderPlaced:
    order_id: OrderId
    order_number: OrderNumber
    total: Money


@dataclass(frozen=True)
class OrderStatusChanged:
    order_id: OrderId
    previous: OrderStatus
    current: OrderStatus


OrderEvent = Union[OrderPlaced, OrderStatusChanged]


class EventPublisher(Protocol):
    def publish(self, event: OrderEvent) -> Result[None, DomainError]: ...
