from __future__ import annotations

from returns.result import Failure, Result

from order_core.core.domain.model.errors import DomainError, InvalidInput
from order_core.core.domain.model.identifiers import OrderId
from order_core.core.domain.model.order import Order
from order_core.core.ports.inbound.get_order import OrderLineView, OrderView


def parse_order_id(raw: str) -> Result[OrderId, DomainError]:
    parsed = OrderId.parse(raw)
    if isinstance(parsed, Failure):
        return Failure(InvalidInput("order_id must be a valid UUID"))
    return parsed


def to_order_view(order: Order) -> OrderView:
    lines = tuple(
        OrderLineView(
            sku_id=str(item.sku_id),
            sku_code=item.sku_code.value,
            product_name=item.product_name.value,
            sku_name=item.sku_name.value,
            unit_price=item.unit_price,
            quantity=item.quantity,
            subtotal=item.subtotal().unwrap(),
        )
        for item in order.items
    )
    ts = order.timestamps
    return OrderView(
        order_id=order.id,
        order_number=order.order_number,
        status=order.status,
        customer_name=order.customer_info.full_name(),
        customer_email=order.customer_info.email.value,
        shipping_method=order.shipping_info.method_name,
        shipping_address=order.shipping_info.formatted_address(),
        payment_method=order.payment_info.method_name,
        lines=lines,
        pricing=order.pricing,
        created_at=ts.created_at,
        updated_at=ts.updated_at,
        paid_at=ts.paid_at,
        shipped_at=ts.shipped_at,
        delivered_at=ts.delivered_at,
        cancelled_at=ts.cancelled_at,
        notes=order.notes,
    )
