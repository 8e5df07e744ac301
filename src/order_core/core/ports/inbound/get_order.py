from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, Sequence

from returns.result import Result

from order_core.core.domain.model.errors import DomainError
from order_core.core.domain.model.identifiers import OrderId
from order_core.core.domain.model.money import Money
from order_core.core.domain.model.order import OrderStatus
from order_core.core.domain.model.order_details import OrderNumber, OrderPricing


@dataclass(frozen=True)
class GetOrderQuery:
    order_id: str  # UUID string


@dataclass(frozen=True)
class OrderLineView:
    sku_id: str
    sku_code: str
    product_name: str
    sku_name: str
    unit_price: Money
    quantity: int
    subtotal: Money


@dataclass(frozen=True)
class OrderView:
    order_id: OrderId
    order_number: OrderNumber
    status: OrderStatus
    customer_name: str
    customer_email: str
    shipping_method: str
    shipping_address: str
    payment_method: str
    lines: Sequence[OrderLineView]
    pricing: OrderPricing
    created_at: datetime
    updated_at: datetime
    paid_at: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None
    notes: str | None = None


class GetOrderUseCase(Protocol):
    def get_order(self, query: GetOrderQuery) -> Result[OrderView, DomainError]: ...
