from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Dict

from returns.result import Failure, Result, Success

from order_core.core.domain.model.coupon import Coupon
from order_core.core.domain.model.errors import DomainError, InvalidCoupon, NotFound
from order_core.core.domain.model.identifiers import CouponCode
from order_core.core.ports.outbound.coupons import CouponRepository


@dataclass
class InMemoryCouponRepository(CouponRepository):
    _by_code: Dict[str, Coupon] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def add(self, coupon: Coupon) -> None:
        with self._lock:
            self._by_code[coupon.code.value] = coupon

    def find_by_code(self, code: CouponCode) -> Result[Coupon, DomainError]:
        with self._lock:
            coupon = self._by_code.get(code.value)
        if coupon is None:
            return Failure(
                NotFound("coupon not found", resource="coupon", key=code.value)
            )
        return Success(coupon)

    def update_usage_count(self, coupon: Coupon) -> Result[None, DomainError]:
        """Store an incremented coupon only if nobody else counted a use since it was read."""
        key = coupon.code.value
        with self._lock:
            stored = self._by_code.get(key)
            if stored is None:
                return Failure(NotFound("coupon not found", resource="coupon", key=key))
            if stored.usage_count != coupon.usage_count - 1:
                return Failure(
                    InvalidCoupon("usage count changed concurrently", code=key)
                )
            if not stored.is_valid_usage_limit():
                return Failure(InvalidCoupon("usage limit reached", code=key))
            self._by_code[key] = coupon
            return Success(None)
