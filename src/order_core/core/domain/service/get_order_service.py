from __future__ import annotations

from dataclasses import dataclass

from returns.result import Result

from order_core.core.domain.model.errors import DomainError
from order_core.core.domain.service.order_views import parse_order_id, to_order_view
from order_core.core.ports.inbound.get_order import (
    GetOrderQuery,
    GetOrderUseCase,
    OrderView,
)
from order_core.core.ports.outbound.orders import OrderRepository


@dataclass(frozen=True)
class GetOrderDeps:
    orders: OrderRepository


@dataclass(frozen=True)
class GetOrderService(GetOrderUseCase):
    deps: GetOrderDeps

    def get_order(self, query: GetOrderQuery) -> Result[OrderView, DomainError]:
        return (
            parse_order_id(query.order_id)
            .bind(self.deps.orders.find_by_id)
            .map(to_order_view)
        )
