"""Order lifecycle transitions and their stock side effects.

Stock reserved at checkout is consumed when the order ships and released
when the order is cancelled or refunded before shipping. Orders that have
already shipped keep their stock consumed; returns are handled elsewhere.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Tuple

import structlog
from returns.result import Failure, Result, Success

from order_core.core.domain.model.clock import now_utc
from order_core.core.domain.model.errors import DomainError, InvalidInput
from order_core.core.domain.model.order import Order, OrderStatus
from order_core.core.domain.service.order_views import parse_order_id, to_order_view
from order_core.core.ports.inbound.change_order_status import (
    CancelOrderCommand,
    ChangeOrderStatusCommand,
    ChangeOrderStatusUseCase,
)
from order_core.core.ports.inbound.get_order import OrderView
from order_core.core.ports.outbound.events import EventPublisher, OrderStatusChanged
from order_core.core.ports.outbound.inventory import InventoryGateway, Reservation
from order_core.core.ports.outbound.orders import OrderRepository

logger = structlog.get_logger(__name__)

_STOCK_CONSUMED = frozenset({OrderStatus.SHIPPED, OrderStatus.DELIVERED})

StockUndo = Callable[[], Result[None, DomainError]]


@dataclass(frozen=True)
class ChangeOrderStatusDeps:
    orders: OrderRepository
    inventory: InventoryGateway
    events: EventPublisher
    clock: Callable[[], datetime] = field(default=now_utc)


@dataclass(frozen=True)
class ChangeOrderStatusService(ChangeOrderStatusUseCase):
    deps: ChangeOrderStatusDeps

    def change_status(
        self, command: ChangeOrderStatusCommand
    ) -> Result[OrderView, DomainError]:
        target = OrderStatus.parse(command.status)
        if isinstance(target, Failure):
            return Failure(InvalidInput(f"unknown order status: {command.status}"))
        status = target.unwrap()
        return self._transition(
            command.order_id, lambda order, at: order.update_status(status, at)
        )

    def cancel(self, command: CancelOrderCommand) -> Result[OrderView, DomainError]:
        if not command.reason.strip():
            return Failure(InvalidInput("cancellation reason is required"))
        return self._transition(
            command.order_id, lambda order, at: order.cancel(command.reason, at)
        )

    def _transition(
        self,
        raw_order_id: str,
        apply: Callable[[Order, datetime], Result[None, DomainError]],
    ) -> Result[OrderView, DomainError]:
        def run(order: Order) -> Result[Order, DomainError]:
            previous = order.status
            return (
                apply(order, self.deps.clock())
                .bind(lambda _: self._sync_stock(order, previous))
                .bind(lambda undo: self._update(order, undo))
                .bind(lambda _: self._publish(order, previous))
                .map(lambda _: order)
            )

        return (
            parse_order_id(raw_order_id)
            .bind(self.deps.orders.find_by_id)
            .bind(run)
            .map(to_order_view)
        )

    def _sync_stock(
        self, order: Order, previous: OrderStatus
    ) -> Result[StockUndo, DomainError]:
        """Apply the stock side effect and return how to take it back."""
        reservations = _reservations(order)
        inventory = self.deps.inventory

        def undo_consume() -> Result[None, DomainError]:
            return inventory.restore(reservations)

        def undo_release() -> Result[None, DomainError]:
            return inventory.reserve(reservations)

        if order.status is OrderStatus.SHIPPED:
            return inventory.consume(reservations).map(
                lambda _: _log_stock("stock_consumed", order, undo_consume)
            )
        if (
            order.status in (OrderStatus.CANCELLED, OrderStatus.REFUNDED)
            and previous not in _STOCK_CONSUMED
        ):
            return inventory.release(reservations).map(
                lambda _: _log_stock("stock_released", order, undo_release)
            )
        return Success(_nothing_to_undo)

    def _update(self, order: Order, undo: StockUndo) -> Result[None, DomainError]:
        result = self.deps.orders.update(order)
        if not isinstance(result, Success):
            # the stored order keeps its old status, so its stock must match it
            reverted = undo()
            if not isinstance(reverted, Success):
                logger.error(
                    "stock_revert_failed",
                    order_number=order.order_number.value,
                    error=str(reverted.failure()),
                )
            return Failure(result.failure())
        return Success(None)

    def _publish(self, order: Order, previous: OrderStatus) -> Result[None, DomainError]:
        logger.info(
            "order_status_changed",
            order_number=order.order_number.value,
            previous=previous.value,
            current=order.status.value,
        )
        return self.deps.events.publish(
            OrderStatusChanged(order_id=order.id, previous=previous, current=order.status)
        )


def _reservations(order: Order) -> Tuple[Reservation, ...]:
    return tuple(Reservation(item.sku_id, item.quantity) for item in order.items)


def _log_stock(event: str, order: Order, undo: StockUndo) -> StockUndo:
    logger.info(event, order_number=order.order_number.value)
    return undo


def _nothing_to_undo() -> Result[None, DomainError]:
    return Success(None)
