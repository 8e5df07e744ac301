from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List

import structlog
from returns.result import Result, Success

from order_core.core.domain.model.clock import now_utc
from order_core.core.domain.model.coupon import Coupon, PurchaseInfo, PurchaseItem
from order_core.core.domain.model.errors import DomainError
from order_core.core.domain.model.identifiers import CouponCode
from order_core.core.domain.service.coupon_discount_service import (
    CouponDiscountService,
    DiscountResult,
)
from order_core.core.domain.service.variant_lookup import ResolvedLine, resolve_lines
from order_core.core.ports.inbound.apply_coupon import (
    ApplyCouponCommand,
    ApplyCouponUseCase,
    CouponApplication,
)
from order_core.core.ports.outbound.coupons import CouponRepository
from order_core.core.ports.outbound.products import ProductRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ApplyCouponDeps:
    coupons: CouponRepository
    products: ProductRepository
    discounts: CouponDiscountService = field(default_factory=CouponDiscountService)
    clock: Callable[[], datetime] = field(default=now_utc)


@dataclass(frozen=True)
class ApplyCouponService(ApplyCouponUseCase):
    deps: ApplyCouponDeps

    def apply_coupon(
        self, command: ApplyCouponCommand
    ) -> Result[CouponApplication, DomainError]:
        now = self.deps.clock()
        lines = [(ln.sku_id, ln.quantity) for ln in command.items]

        def discount(coupon: Coupon) -> Result[CouponApplication, DomainError]:
            return (
                resolve_lines(self.deps.products, lines, check_stock=False)
                .bind(_purchase_info)
                .bind(
                    lambda info: self.deps.discounts.apply_coupon(coupon, info, now)
                    .bind(lambda result: self._record_usage(coupon, command, result))
                    .map(lambda recorded: _to_application(coupon, info, *recorded))
                )
            )

        result = (
            CouponCode.parse(command.coupon_code)
            .bind(self.deps.coupons.find_by_code)
            .bind(discount)
        )

        if isinstance(result, Success):
            app = result.unwrap()
            logger.info(
                "coupon_applied",
                coupon_code=app.coupon_code,
                discount=app.discount_amount.yen,
                preview=command.preview,
            )
        else:
            logger.info(
                "coupon_rejected",
                coupon_code=command.coupon_code,
                error=str(result.failure()),
            )
        return result

    def _record_usage(
        self, coupon: Coupon, command: ApplyCouponCommand, result: DiscountResult
    ) -> Result[tuple, DomainError]:
        if command.preview:
            return Success((result, False))
        return self.deps.coupons.update_usage_count(
            coupon.with_incremented_usage()
        ).map(lambda _: (result, True))


def _purchase_info(lines: List[ResolvedLine]) -> Result[PurchaseInfo, DomainError]:
    return PurchaseInfo.from_items(
        [
            PurchaseItem(
                sku_id=ln.variant.sku_id,
                product_id=ln.variant.product_id,
                unit_price=ln.variant.current_price(),
                quantity=ln.quantity,
            )
            for ln in lines
        ]
    )


def _to_application(
    coupon: Coupon, info: PurchaseInfo, result: DiscountResult, recorded: bool
) -> CouponApplication:
    return CouponApplication(
        coupon_code=coupon.code.value,
        subtotal=info.subtotal,
        discount_amount=result.discount_amount,
        discounted_amount=result.discounted_amount,
        message=result.message,
        usage_recorded=recorded,
    )
