from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict

from returns.result import Failure, Result, Success

from order_core.core.domain.model.catalog import PaymentMethod, ShippingMethod
from order_core.core.domain.model.errors import DomainError, NotFound
from order_core.core.domain.model.identifiers import PaymentMethodId, ShippingMethodId
from order_core.core.ports.outbound.payment_methods import PaymentMethodRepository
from order_core.core.ports.outbound.shipping_methods import ShippingMethodRepository


@dataclass
class InMemoryShippingMethodRepository(ShippingMethodRepository):
    _methods: Dict[str, ShippingMethod] = field(default_factory=dict)

    def add(self, method: ShippingMethod) -> None:
        self._methods[method.id.value] = method

    def find_by_id(
        self, method_id: ShippingMethodId
    ) -> Result[ShippingMethod, DomainError]:
        method = self._methods.get(method_id.value)
        if method is None:
            return Failure(
                NotFound(
                    "shipping method not found",
                    resource="shipping_method",
                    key=method_id.value,
                )
            )
        return Success(method)


@dataclass
class InMemoryPaymentMethodRepository(PaymentMethodRepository):
    _methods: Dict[str, PaymentMethod] = field(default_factory=dict)

    def add(self, method: PaymentMethod) -> None:
        self._methods[method.id.value] = method

    def find_by_id(
        self, method_id: PaymentMethodId
    ) -> Result[PaymentMethod, DomainError]:
        method = self._methods.get(method_id.value)
        if method is None:
            return Failure(
                NotFound(
                    "payment method not found",
                    resource="payment_method",
                    key=method_id.value,
                )
            )
        return Success(method)
