from __future__ import annotations

from typing import Protocol

from returns.result import Result

from order_core.core.domain.model.coupon import Coupon
from order_core.core.domain.model.errors import DomainError
from order_core.core.domain.model.identifiers import CouponCode


class CouponRepository(Protocol):
    def find_by_code(self, code: CouponCode) -> Result[Coupon, DomainError]: ...

    def update_usage_count(self, coupon: Coupon) -> Result[None, DomainError]: ...
