from returns.result import Failure, Success

from order_core.core.domain.model.errors import (
    BusinessRuleViolation,
    InvalidProductData,
)
from order_core.core.domain.model.money import Money
from order_core.core.domain.model.order import Order, OrderStatus
from order_core.core.domain.model.order_details import (
    OrderNumber,
    OrderPricing,
)


class TestOrderNumber:
    def test_generate_pads_sequence(self):
        assert OrderNumber.generate(2024, 1).value == "ORD-2024-000001"
        assert OrderNumber.generate(2025, 123456).value == "ORD-2025-123456"

    def test_parse_accepts_custom_numbers(self):
        assert OrderNumber.parse("LEGACY-42") == Success(OrderNumber("LEGACY-42"))

    def test_parse_rejects_empty_and_long(self):
        assert isinstance(OrderNumber.parse(""), Failure)
        assert isinstance(OrderNumber.parse("X" * 21), Failure)


class TestOrderItem:
    def test_quantity_bounds(self, make_item):
        item = make_item(quantity=1)
        assert isinstance(item.update_quantity(0), Failure)
        assert isinstance(item.update_quantity(1000), Failure)
        assert item.update_quantity(999).unwrap().quantity == 999
        # original is immutable
        assert item.quantity == 1

    def test_subtotal(self, make_item):
        assert make_item(price=1200, quantity=3).subtotal() == Success(Money(3600))

    def test_is_same_sku(self, make_item):
        item = make_item()
        assert item.is_same_sku(item.sku_id)


class TestPricing:
    def test_tax_covers_shipping_and_payment_fees(self, make_item):
        pricing = OrderPricing.calculate(
            [make_item(price=1000, quantity=2)], Money(500), Money(100)
        ).unwrap()

        assert pricing.subtotal == Money(2000)
        assert pricing.tax_amount == Money(260)
        assert pricing.total == Money(2860)
        assert pricing.verify()

    def test_tax_rounds_up(self, make_item):
        pricing = OrderPricing.calculate(
            [make_item(price=999, quantity=1)], Money(0), Money(0)
        ).unwrap()
        assert pricing.tax_amount == Money(100)
        assert pricing.total == Money(1099)

    def test_verify_detects_tampering(self, make_item):
        pricing = OrderPricing.calculate([make_item()], Money(0), Money(0)).unwrap()
        broken = OrderPricing(
            pricing.subtotal,
            pricing.shipping_fee,
            pricing.payment_fee,
            Money(1),
            pricing.total,
        )
        assert not broken.verify()


class TestOrder:
    def test_create_starts_pending(self, make_order):
        order = make_order()

        assert order.status is OrderStatus.PENDING
        assert order.pricing.total == Money(2860)
        assert order.timestamps.created_at == order.timestamps.updated_at
        assert order.timestamps.paid_at is None
        assert order.can_be_modified()
        assert order.total_item_count() == 2

    def test_create_without_items_fails(
        self, customer_info, shipping_info, payment_info
    ):
        result = Order.create(
            order_number=OrderNumber.generate(2024, 1),
            customer_info=customer_info,
            items=[],
            shipping_info=shipping_info,
            payment_info=payment_info,
        )
        assert isinstance(result.failure(), InvalidProductData)

    def test_cancel_records_reason(self, make_order):
        order = make_order()

        assert order.cancel("customer request") == Success(None)

        assert order.status is OrderStatus.CANCELLED
        assert order.notes == "customer request"
        assert order.timestamps.cancelled_at is not None
        assert not order.can_be_cancelled()

    def test_cancel_allowed_from_shipped(self, make_order):
        order = make_order()
        for status in (OrderStatus.PAID, OrderStatus.PROCESSING, OrderStatus.SHIPPED):
            order.update_status(status).unwrap()
        assert order.cancel("recalled") == Success(None)

    def test_cancel_rejected_after_delivery(self, make_order):
        order = make_order()
        for status in (
            OrderStatus.PAID,
            OrderStatus.PROCESSING,
            OrderStatus.SHIPPED,
            OrderStatus.DELIVERED,
        ):
            order.update_status(status).unwrap()

        result = order.cancel("too late")

        assert isinstance(result.failure(), BusinessRuleViolation)
        assert order.status is OrderStatus.DELIVERED

    def test_cancel_reason_too_long(self, make_order):
        order = make_order()
        assert isinstance(order.cancel("x" * 1001), Failure)
        assert order.status is OrderStatus.PENDING

    def test_add_note(self, make_order):
        order = make_order()
        assert order.add_note("leave at the door") == Success(None)
        assert order.notes == "leave at the door"
        assert isinstance(order.add_note("x" * 1001), Failure)
        assert order.notes == "leave at the door"

    def test_modification_only_while_pending(self, make_order):
        order = make_order()
        order.update_status(OrderStatus.PAID).unwrap()
        assert not order.can_be_modified()

    def test_delivery_info_only_when_paid_or_processing(
        self, make_order, customer_info, shipping_info
    ):
        from order_core.core.domain.model.delivery import DeliveryInfo

        def info():
            return DeliveryInfo(
                email=customer_info.email,
                personal_info=customer_info.personal_info,
                address=shipping_info.address,
                phone_number=customer_info.phone,
            )

        order = make_order()
        assert isinstance(order.add_delivery_info(info()), Failure)

        order.update_status(OrderStatus.PAID).unwrap()
        assert order.add_delivery_info(info()) == Success(None)
        assert order.delivery_info is not None
