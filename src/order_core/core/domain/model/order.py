"""Order aggregate root and its status state machine.

The allowed transitions live in ``ORDER_TRANSITIONS`` and nowhere else.
Delivered, Cancelled and Refunded are terminal for the normal flow; only
Delivered may still move to Refunded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, List, Sequence

from returns.result import Failure, Result, Success

from order_core.core.domain.model.clock import now_utc
from order_core.core.domain.model.delivery import DeliveryInfo
from order_core.core.domain.model.errors import (
    BusinessRuleViolation,
    DomainError,
    InvalidProductData,
)
from order_core.core.domain.model.identifiers import OrderId
from order_core.core.domain.model.order_details import (
    CustomerInfo,
    OrderItem,
    OrderNumber,
    OrderPricing,
    PaymentInfo,
    ShippingInfo,
)

MAX_NOTE_LENGTH = 1000


class OrderStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"

    @staticmethod
    def parse(raw: str) -> Result["OrderStatus", DomainError]:
        try:
            return Success(OrderStatus(raw))
        except ValueError:
            return Failure(InvalidProductData(f"invalid order status: {raw}"))

    def __str__(self) -> str:
        return self.value


ORDER_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PAID, OrderStatus.CANCELLED}),
    OrderStatus.PAID: frozenset(
        {OrderStatus.PROCESSING, OrderStatus.CANCELLED, OrderStatus.REFUNDED}
    ),
    OrderStatus.PROCESSING: frozenset(
        {OrderStatus.SHIPPED, OrderStatus.CANCELLED, OrderStatus.REFUNDED}
    ),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.REFUNDED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}

NON_CANCELLABLE: FrozenSet[OrderStatus] = frozenset(
    {OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.REFUNDED}
)

DELIVERY_INFO_STATUSES: FrozenSet[OrderStatus] = frozenset(
    {OrderStatus.PAID, OrderStatus.PROCESSING}
)


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ORDER_TRANSITIONS[current]


@dataclass
class OrderTimestamps:
    created_at: datetime
    updated_at: datetime
    paid_at: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None

    @staticmethod
    def started_at(at: datetime) -> "OrderTimestamps":
        return OrderTimestamps(created_at=at, updated_at=at)

    def record(self, status: OrderStatus, at: datetime) -> None:
        """Refresh ``updated_at`` and stamp the status milestone if not yet set."""
        self.updated_at = at
        attr = _MILESTONES.get(status)
        if attr is not None and getattr(self, attr) is None:
            setattr(self, attr, at)


_MILESTONES: Dict[OrderStatus, str] = {
    OrderStatus.PAID: "paid_at",
    OrderStatus.SHIPPED: "shipped_at",
    OrderStatus.DELIVERED: "delivered_at",
    OrderStatus.CANCELLED: "cancelled_at",
}


@dataclass
class Order:
    id: OrderId
    order_number: OrderNumber
    customer_info: CustomerInfo
    items: List[OrderItem]
    shipping_info: ShippingInfo
    payment_info: PaymentInfo
    pricing: OrderPricing
    status: OrderStatus
    timestamps: OrderTimestamps
    delivery_info: DeliveryInfo | None = None
    notes: str | None = None

    @staticmethod
    def create(
        order_number: OrderNumber,
        customer_info: CustomerInfo,
        items: Sequence[OrderItem],
        shipping_info: ShippingInfo,
        payment_info: PaymentInfo,
        order_id: OrderId | None = None,
        created_at: datetime | None = None,
    ) -> Result["Order", DomainError]:
        if not items:
            return Failure(InvalidProductData("order must have at least one item"))

        at = created_at or now_utc()
        return OrderPricing.calculate(
            items, shipping_info.fee, payment_info.fee
        ).map(
            lambda pricing: Order(
                id=order_id or OrderId.new(),
                order_number=order_number,
                customer_info=customer_info,
                items=list(items),
                shipping_info=shipping_info,
                payment_info=payment_info,
                pricing=pricing,
                status=OrderStatus.PENDING,
                timestamps=OrderTimestamps.started_at(at),
            )
        )

    # ---- lifecycle -------------------------------------------------------------

    def update_status(
        self, target: OrderStatus, at: datetime | None = None
    ) -> Result[None, DomainError]:
        if not can_transition(self.status, target):
            return Failure(
                BusinessRuleViolation(
                    f"invalid status transition from {self.status} to {target}"
                )
            )
        self.status = target
        self.timestamps.record(target, at or now_utc())
        return Success(None)

    def cancel(
        self, reason: str, at: datetime | None = None
    ) -> Result[None, DomainError]:
        # also allowed from SHIPPED (order recalled before hand-over)
        if not self.can_be_cancelled():
            return Failure(
                BusinessRuleViolation(f"cannot cancel order in status {self.status}")
            )
        if len(reason) > MAX_NOTE_LENGTH:
            return Failure(
                InvalidProductData(f"note cannot exceed {MAX_NOTE_LENGTH} characters")
            )
        self.status = OrderStatus.CANCELLED
        self.notes = reason
        self.timestamps.record(OrderStatus.CANCELLED, at or now_utc())
        return Success(None)

    def add_note(
        self, note: str, at: datetime | None = None
    ) -> Result[None, DomainError]:
        if len(note) > MAX_NOTE_LENGTH:
            return Failure(
                InvalidProductData(f"note cannot exceed {MAX_NOTE_LENGTH} characters")
            )
        self.notes = note
        self.timestamps.updated_at = at or now_utc()
        return Success(None)

    def add_delivery_info(
        self, delivery_info: DeliveryInfo, at: datetime | None = None
    ) -> Result[None, DomainError]:
        if self.status not in DELIVERY_INFO_STATUSES:
            return Failure(
                BusinessRuleViolation(
                    f"cannot add delivery info to order in status {self.status}"
                )
            )
        self.delivery_info = delivery_info
        self.timestamps.updated_at = at or now_utc()
        return Success(None)

    # ---- queries ---------------------------------------------------------------

    def can_be_cancelled(self) -> bool:
        return self.status not in NON_CANCELLABLE

    def can_be_modified(self) -> bool:
        return self.status is OrderStatus.PENDING

    def total_item_count(self) -> int:
        return sum(item.quantity for item in self.items)
