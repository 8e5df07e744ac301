from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, List, Tuple

import structlog
from returns.pipeline import flow
from returns.pointfree import bind, map_
from returns.result import Failure, Result, Success

from order_core.core.domain.model.catalog import PaymentMethod, ShippingMethod
from order_core.core.domain.model.clock import now_utc
from order_core.core.domain.model.contact import (
    Address,
    Email,
    PersonalInfo,
    PhoneNumber,
)
from order_core.core.domain.model.errors import (
    BusinessRuleViolation,
    DomainError,
    InvalidInput,
)
from order_core.core.domain.model.identifiers import PaymentMethodId, ShippingMethodId
from order_core.core.domain.model.money import Money
from order_core.core.domain.model.order import Order
from order_core.core.domain.model.order_details import (
    CustomerInfo,
    OrderItem,
    OrderNumber,
    PaymentDetails,
    PaymentInfo,
    ShippingInfo,
)
from order_core.core.domain.service.payment_fee_calculator import PaymentFeeCalculator
from order_core.core.domain.service.variant_lookup import ResolvedLine, resolve_lines
from order_core.core.ports.inbound.create_order import (
    CreateOrderCommand,
    CreateOrderUseCase,
    OrderReceipt,
)
from order_core.core.ports.outbound.events import EventPublisher, OrderPlaced
from order_core.core.ports.outbound.inventory import InventoryGateway, Reservation
from order_core.core.ports.outbound.orders import OrderRepository
from order_core.core.ports.outbound.payment_methods import PaymentMethodRepository
from order_core.core.ports.outbound.products import ProductRepository
from order_core.core.ports.outbound.shipping_methods import ShippingMethodRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CreateOrderDeps:
    products: ProductRepository
    orders: OrderRepository
    shipping_methods: ShippingMethodRepository
    payment_methods: PaymentMethodRepository
    inventory: InventoryGateway
    events: EventPublisher
    fees: PaymentFeeCalculator = field(default_factory=PaymentFeeCalculator)
    clock: Callable[[], datetime] = field(default=now_utc)


@dataclass(frozen=True)
class CreateOrderContext:
    command: CreateOrderCommand
    customer: CustomerInfo | None = None
    shipping_address: Address | None = None
    items: Tuple[OrderItem, ...] = ()
    shipping_info: ShippingInfo | None = None
    payment_info: PaymentInfo | None = None
    order: Order | None = None


@dataclass(frozen=True)
class CreateOrderService(CreateOrderUseCase):
    deps: CreateOrderDeps

    def create_order(
        self, command: CreateOrderCommand
    ) -> Result[OrderReceipt, DomainError]:
        result = flow(
            command,
            _validate_command,
            map_(lambda cmd: CreateOrderContext(command=cmd)),
            bind(_with_customer),
            bind(self._with_items),
            bind(self._with_shipping),
            bind(self._with_payment),
            bind(self._with_order),
            bind(self._reserve_stock),
            bind(self._persist),
            bind(self._publish),
            map_(_to_receipt),
        )

        if isinstance(result, Success):
            receipt = result.unwrap()
            logger.info(
                "order_created",
                order_id=str(receipt.order_id),
                order_number=receipt.order_number.value,
                total=receipt.pricing.total.yen,
            )
        else:
            logger.warning("order_creation_failed", error=str(result.failure()))
        return result

    # ---- building --------------------------------------------------------------

    def _with_items(
        self, ctx: CreateOrderContext
    ) -> Result[CreateOrderContext, DomainError]:
        lines = [(ln.sku_id, ln.quantity) for ln in ctx.command.items]
        return (
            resolve_lines(self.deps.products, lines)
            .bind(_to_order_items)
            .map(lambda items: replace(ctx, items=items))
        )

    def _with_shipping(
        self, ctx: CreateOrderContext
    ) -> Result[CreateOrderContext, DomainError]:
        def build(method: ShippingMethod) -> Result[CreateOrderContext, DomainError]:
            if not method.is_active:
                return Failure(
                    BusinessRuleViolation(
                        f"shipping method '{method.id.value}' is not active"
                    )
                )
            info = ShippingInfo(
                method_id=method.id,
                method_name=method.name,
                fee=method.price,
                address=ctx.shipping_address,
            )
            return Success(replace(ctx, shipping_info=info))

        return (
            ShippingMethodId.parse(ctx.command.shipping_method_id)
            .bind(self.deps.shipping_methods.find_by_id)
            .bind(build)
        )

    def _with_payment(
        self, ctx: CreateOrderContext
    ) -> Result[CreateOrderContext, DomainError]:
        def build(method: PaymentMethod) -> Result[CreateOrderContext, DomainError]:
            if not method.is_active:
                return Failure(
                    BusinessRuleViolation(
                        f"payment method '{method.id.value}' is not active"
                    )
                )
            return _items_subtotal(ctx.items).map(
                lambda subtotal: replace(
                    ctx,
                    payment_info=PaymentInfo(
                        method_id=method.id,
                        method_name=method.name,
                        fee=self.deps.fees.calculate_fee(method.id.value, subtotal),
                        payment_details=(
                            PaymentDetails(ctx.command.payment_details)
                            if ctx.command.payment_details
                            else None
                        ),
                    ),
                )
            )

        return (
            PaymentMethodId.parse(ctx.command.payment_method_id)
            .bind(self.deps.payment_methods.find_by_id)
            .bind(build)
        )

    def _with_order(
        self, ctx: CreateOrderContext
    ) -> Result[CreateOrderContext, DomainError]:
        now = self.deps.clock()

        def build(sequence: int) -> Result[Order, DomainError]:
            return Order.create(
                order_number=OrderNumber.generate(now.year, sequence),
                customer_info=ctx.customer,
                items=ctx.items,
                shipping_info=ctx.shipping_info,
                payment_info=ctx.payment_info,
                created_at=now,
            )

        def with_note(order: Order) -> Result[Order, DomainError]:
            if not ctx.command.notes:
                return Success(order)
            return order.add_note(ctx.command.notes, at=now).map(lambda _: order)

        return (
            self.deps.orders.get_next_sequence_number(now.year)
            .bind(build)
            .bind(with_note)
            .map(lambda order: replace(ctx, order=order))
        )

    # ---- side effects ----------------------------------------------------------

    def _reserve_stock(
        self, ctx: CreateOrderContext
    ) -> Result[CreateOrderContext, DomainError]:
        reservations = _reservations(ctx.order)
        return self.deps.inventory.reserve(reservations).map(
            lambda _: _log_reserved(ctx, reservations)
        )

    def _persist(
        self, ctx: CreateOrderContext
    ) -> Result[CreateOrderContext, DomainError]:
        result = self.deps.orders.save(ctx.order)
        if not isinstance(result, Success):
            # give the stock back so a failed save does not leak reservations
            released = self.deps.inventory.release(_reservations(ctx.order))
            if not isinstance(released, Success):
                logger.error(
                    "stock_release_failed",
                    order_id=str(ctx.order.id),
                    error=str(released.failure()),
                )
            return Failure(result.failure())
        return Success(ctx)

    def _publish(
        self, ctx: CreateOrderContext
    ) -> Result[CreateOrderContext, DomainError]:
        event = OrderPlaced(
            order_id=ctx.order.id,
            order_number=ctx.order.order_number,
            total=ctx.order.pricing.total,
        )
        return self.deps.events.publish(event).map(lambda _: ctx)


def _validate_command(
    cmd: CreateOrderCommand,
) -> Result[CreateOrderCommand, DomainError]:
    if not cmd.items:
        return Failure(InvalidInput("at least one item is required"))
    if not cmd.shipping_method_id.strip():
        return Failure(InvalidInput("shipping_method_id is required"))
    if not cmd.payment_method_id.strip():
        return Failure(InvalidInput("payment_method_id is required"))

    for i, ln in enumerate(cmd.items):
        if not ln.sku_id.strip():
            return Failure(InvalidInput(f"items[{i}].sku_id is required"))
        if ln.quantity <= 0:
            return Failure(InvalidInput(f"items[{i}].quantity must be > 0"))

    return Success(cmd)


def _with_customer(ctx: CreateOrderContext) -> Result[CreateOrderContext, DomainError]:
    c = ctx.command.customer
    a = ctx.command.shipping_address
    return PersonalInfo.parse(c.first_name, c.last_name).bind(
        lambda person: Email.parse(c.email).bind(
            lambda email: PhoneNumber.parse(c.phone).bind(
                lambda phone: Address.parse(
                    a.postal_code, a.prefecture, a.city, a.street, a.building
                ).map(
                    lambda address: replace(
                        ctx,
                        customer=CustomerInfo(person, email, phone),
                        shipping_address=address,
                    )
                )
            )
        )
    )


def _to_order_items(
    lines: List[ResolvedLine],
) -> Result[Tuple[OrderItem, ...], DomainError]:
    items: Result[Tuple[OrderItem, ...], DomainError] = Success(())
    for line in lines:
        v = line.variant
        items = items.bind(
            lambda acc, v=v, q=line.quantity: OrderItem.create(
                v.sku_id, v.sku_code, v.product_name, v.sku_name, v.current_price(), q
            ).map(lambda item: (*acc, item))
        )
    return items


def _items_subtotal(items: Tuple[OrderItem, ...]) -> Result[Money, DomainError]:
    total: Result[Money, DomainError] = Success(Money.zero())
    for item in items:
        total = total.bind(lambda acc, it=item: it.subtotal().bind(acc.add))
    return total


def _reservations(order: Order) -> Tuple[Reservation, ...]:
    return tuple(Reservation(item.sku_id, item.quantity) for item in order.items)


def _log_reserved(
    ctx: CreateOrderContext, reservations: Tuple[Reservation, ...]
) -> CreateOrderContext:
    logger.info(
        "stock_reserved",
        order_number=ctx.order.order_number.value,
        skus=[str(r.sku_id) for r in reservations],
    )
    return ctx


def _to_receipt(ctx: CreateOrderContext) -> OrderReceipt:
    order = ctx.order
    return OrderReceipt(
        order_id=order.id,
        order_number=order.order_number,
        status=order.status,
        pricing=order.pricing,
        created_at=order.timestamps.created_at,
    )
