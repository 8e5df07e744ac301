from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List

import structlog
from returns.pipeline import flow
from returns.pointfree import bind, map_
from returns.result import Result, Success

from order_core.core.domain.model.cart import Cart, CartItem
from order_core.core.domain.model.clock import now_utc
from order_core.core.domain.model.errors import DomainError
from order_core.core.domain.model.identifiers import (
    CouponCode,
    PaymentMethodId,
    ShippingMethodId,
)
from order_core.core.domain.service.variant_lookup import ResolvedLine, resolve_lines
from order_core.core.ports.inbound.calculate_cart import (
    CalculateCartCommand,
    CalculateCartUseCase,
    CartCalculationResult,
    CartLineView,
)
from order_core.core.ports.outbound.coupons import CouponRepository
from order_core.core.ports.outbound.payment_methods import PaymentMethodRepository
from order_core.core.ports.outbound.products import ProductRepository
from order_core.core.ports.outbound.shipping_methods import ShippingMethodRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CalculateCartDeps:
    products: ProductRepository
    shipping_methods: ShippingMethodRepository
    payment_methods: PaymentMethodRepository
    coupons: CouponRepository
    clock: Callable[[], datetime] = field(default=now_utc)


@dataclass(frozen=True)
class CalculateCartService(CalculateCartUseCase):
    deps: CalculateCartDeps

    def calculate_cart(
        self, command: CalculateCartCommand
    ) -> Result[CartCalculationResult, DomainError]:
        now = self.deps.clock()
        result = flow(
            [(ln.sku_id, ln.quantity) for ln in command.items],
            lambda lines: resolve_lines(self.deps.products, lines),
            bind(_build_cart),
            # coupon first: the payment fee is charged on the discounted subtotal
            bind(lambda cart: self._attach_coupon(cart, command, now)),
            bind(lambda cart: self._attach_shipping(cart, command)),
            bind(lambda cart: self._attach_payment(cart, command, now)),
            bind(lambda cart: cart.calculate(now).map(lambda calc: (cart, calc))),
            map_(lambda pair: _to_result(pair[0], pair[1], command)),
        )

        if isinstance(result, Success):
            calc = result.unwrap().calculation
            logger.info(
                "cart_calculated",
                item_count=result.unwrap().item_count,
                discount=calc.discount_amount.yen,
                grand_total=calc.grand_total.yen,
            )
        else:
            logger.info("cart_calculation_failed", error=str(result.failure()))
        return result

    def _attach_coupon(
        self, cart: Cart, command: CalculateCartCommand, now: datetime
    ) -> Result[Cart, DomainError]:
        if not command.coupon_code:
            return Success(cart)
        return (
            CouponCode.parse(command.coupon_code)
            .bind(self.deps.coupons.find_by_code)
            .bind(lambda coupon: cart.apply_coupon(coupon, now))
            .map(lambda _: cart)
        )

    def _attach_shipping(
        self, cart: Cart, command: CalculateCartCommand
    ) -> Result[Cart, DomainError]:
        if not command.shipping_method_id:
            return Success(cart)
        return (
            ShippingMethodId.parse(command.shipping_method_id)
            .bind(self.deps.shipping_methods.find_by_id)
            .bind(cart.apply_shipping_method)
            .map(lambda _: cart)
        )

    def _attach_payment(
        self, cart: Cart, command: CalculateCartCommand, now: datetime
    ) -> Result[Cart, DomainError]:
        if not command.payment_method_id:
            return Success(cart)
        return (
            PaymentMethodId.parse(command.payment_method_id)
            .bind(self.deps.payment_methods.find_by_id)
            .bind(lambda method: cart.apply_payment_method(method, now))
            .map(lambda _: cart)
        )


def _build_cart(lines: List[ResolvedLine]) -> Result[Cart, DomainError]:
    cart: Result[Cart, DomainError] = Success(Cart())
    for line in lines:
        v = line.variant
        cart = cart.bind(
            lambda c, v=v, q=line.quantity: CartItem.create(
                v.sku_id, v.product_id, v.product_name, v.current_price(), q
            )
            .bind(c.add_item)
            .map(lambda _: c)
        )
    return cart


def _to_result(cart, calculation, command: CalculateCartCommand) -> CartCalculationResult:
    views = tuple(
        CartLineView(
            sku_id=item.sku_id,
            product_id=item.product_id,
            product_name=item.product_name,
            unit_price=item.unit_price,
            quantity=item.quantity,
            subtotal=item.subtotal().unwrap(),
        )
        for item in cart.items
    )
    return CartCalculationResult(
        items=views,
        calculation=calculation,
        total_quantity=cart.total_quantity(),
        item_count=cart.item_count(),
        coupon_code=command.coupon_code or None,
    )
