from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, Sequence

from returns.result import Result

from order_core.core.domain.model.errors import DomainError
from order_core.core.domain.model.identifiers import OrderId
from order_core.core.domain.model.order import OrderStatus
from order_core.core.domain.model.order_details import OrderNumber, OrderPricing


@dataclass(frozen=True)
class OrderLineInput:
    sku_id: str  # UUID string
    quantity: int


@dataclass(frozen=True)
class CustomerInput:
    first_name: str
    last_name: str
    email: str
    phone: str


@dataclass(frozen=True)
class AddressInput:
    postal_code: str
    prefecture: str
    city: str
    street: str
    building: str | None = None


@dataclass(frozen=True)
class CreateOrderCommand:
    items: Sequence[OrderLineInput]
    customer: CustomerInput
    shipping_address: AddressInput
    shipping_method_id: str
    payment_method_id: str
    payment_details: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class OrderReceipt:
    order_id: OrderId
    order_number: OrderNumber
    status: OrderStatus
    pricing: OrderPricing
    created_at: datetime


class CreateOrderUseCase(Protocol):
    def create_order(
        self, command: CreateOrderCommand
    ) -> Result[OrderReceipt, DomainError]: ...
