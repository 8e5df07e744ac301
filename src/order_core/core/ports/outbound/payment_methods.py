from __future__ import annotations

from typing import Protocol

from returns.result import Result

from order_core.core.domain.model.catalog import PaymentMethod
from order_core.core.domain.model.errors import DomainError
from order_core.core.domain.model.identifiers import PaymentMethodId


class PaymentMethodRepository(Protocol):
    def find_by_id(
        self, method_id: PaymentMethodId
    ) -> Result[PaymentMethod, DomainError]: ...
