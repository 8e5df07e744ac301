from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet

from returns.result import Failure, Result, Success

from order_core.core.domain.model.clock import now_utc
from order_core.core.domain.model.contact import (
    Address,
    Email,
    PersonalInfo,
    PhoneNumber,
)
from order_core.core.domain.model.errors import BusinessRuleViolation, DomainError
from order_core.core.domain.model.identifiers import DeliveryInfoId


class DeliveryStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    FAILED = "failed"


# FAILED is reachable from every state and is handled separately
_DELIVERY_TRANSITIONS: Dict[DeliveryStatus, FrozenSet[DeliveryStatus]] = {
    DeliveryStatus.PENDING: frozenset({DeliveryStatus.PROCESSING}),
    DeliveryStatus.PROCESSING: frozenset({DeliveryStatus.SHIPPED}),
    DeliveryStatus.SHIPPED: frozenset({DeliveryStatus.IN_TRANSIT}),
    DeliveryStatus.IN_TRANSIT: frozenset({DeliveryStatus.DELIVERED}),
    DeliveryStatus.DELIVERED: frozenset(),
    DeliveryStatus.FAILED: frozenset(),
}


def can_transition(current: DeliveryStatus, target: DeliveryStatus) -> bool:
    return target is DeliveryStatus.FAILED or target in _DELIVERY_TRANSITIONS[current]


@dataclass
class DeliveryInfo:
    email: Email
    personal_info: PersonalInfo
    address: Address
    phone_number: PhoneNumber
    shipping_method: str | None = None
    id: DeliveryInfoId = field(default_factory=DeliveryInfoId.new)
    status: DeliveryStatus = DeliveryStatus.PENDING
    carrier: str | None = None
    tracking_number: str | None = None
    created_at: datetime = field(default_factory=now_utc)
    updated_at: datetime = field(default_factory=now_utc)
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None

    def update_status(self, target: DeliveryStatus) -> Result[None, DomainError]:
        if not can_transition(self.status, target):
            return Failure(
                BusinessRuleViolation(
                    f"invalid delivery status transition: "
                    f"{self.status.value} -> {target.value}"
                )
            )
        self.status = target
        self.updated_at = now_utc()
        return Success(None)

    def set_tracking_info(
        self, carrier: str, tracking_number: str
    ) -> Result[None, DomainError]:
        if self.status is DeliveryStatus.DELIVERED:
            return Failure(
                BusinessRuleViolation("tracking info cannot change after delivery")
            )
        if not carrier.strip() or not tracking_number.strip():
            return Failure(
                BusinessRuleViolation("carrier and tracking number are required")
            )
        self.carrier = carrier
        self.tracking_number = tracking_number
        self.updated_at = now_utc()
        return Success(None)

    def has_tracking_info(self) -> bool:
        return self.carrier is not None and self.tracking_number is not None

    def mark_as_processing(self) -> Result[None, DomainError]:
        return self.update_status(DeliveryStatus.PROCESSING)

    def mark_as_shipped(self) -> Result[None, DomainError]:
        if not self.has_tracking_info():
            return Failure(
                BusinessRuleViolation("tracking info is required before shipping")
            )
        return self.update_status(DeliveryStatus.SHIPPED).map(
            lambda _: self._stamp_shipped()
        )

    def mark_as_in_transit(self) -> Result[None, DomainError]:
        return self.update_status(DeliveryStatus.IN_TRANSIT)

    def mark_as_delivered(self) -> Result[None, DomainError]:
        return self.update_status(DeliveryStatus.DELIVERED).map(
            lambda _: self._stamp_delivered()
        )

    def mark_as_failed(self) -> Result[None, DomainError]:
        return self.update_status(DeliveryStatus.FAILED)

    def _stamp_shipped(self) -> None:
        self.shipped_at = self.updated_at

    def _stamp_delivered(self) -> None:
        self.delivered_at = self.updated_at
