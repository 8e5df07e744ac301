from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import structlog
from returns.result import Failure, Result, Success

from order_core.core.domain.model.errors import DomainError, PublishError
from order_core.core.ports.outbound.events import (
    EventPublisher,
    OrderEvent,
    OrderPlaced,
    OrderStatusChanged,
)

logger = structlog.get_logger(__name__)


@dataclass
class LoggingEventPublisher(EventPublisher):
    fail: bool = False
    published: List[OrderEvent] = field(default_factory=list)

    def publish(self, event: OrderEvent) -> Result[None, DomainError]:
        if self.fail:
            return Failure(PublishError("publisher is down"))

        if isinstance(event, OrderPlaced):
            logger.info(
                "order_placed",
                order_id=str(event.order_id),
                order_number=event.order_number.value,
                total=event.total.yen,
            )
        elif isinstance(event, OrderStatusChanged):
            logger.info(
                "order_status_event",
                order_id=str(event.order_id),
                previous=event.previous.value,
                current=event.current.value,
            )
        self.published.append(event)
        return Success(None)
