from datetime import datetime, timezone

import pytest
from returns.result import Failure

from order_core.bootstrap import DEMO_TSHIRT_SKU
from order_core.core.domain.model.errors import (
    BusinessRuleViolation,
    InvalidInput,
    NotFound,
    PublishError,
    RepositoryError,
)
from order_core.core.domain.model.order import OrderStatus
from order_core.core.domain.service.change_order_status_service import (
    ChangeOrderStatusDeps,
    ChangeOrderStatusService,
)
from order_core.core.ports.inbound.change_order_status import (
    CancelOrderCommand,
    ChangeOrderStatusCommand,
)
from order_core.core.ports.inbound.create_order import (
    AddressInput,
    CreateOrderCommand,
    CustomerInput,
    OrderLineInput,
)
from order_core.core.ports.inbound.get_order import GetOrderQuery
from order_core.core.ports.outbound.events import OrderStatusChanged


@pytest.fixture
def order_id(usecases):
    receipt = usecases.create_order.create_order(
        CreateOrderCommand(
            items=(OrderLineInput(DEMO_TSHIRT_SKU, 2),),
            customer=CustomerInput("Hanako", "Sato", "hanako@example.com", "03-1234-5678"),
            shipping_address=AddressInput("530-0001", "Osaka", "Kita", "4-5-6 Umeda"),
            shipping_method_id="express",
            payment_method_id="credit_card",
        )
    ).unwrap()
    return str(receipt.order_id)


@pytest.fixture
def service(usecases):
    return usecases.change_order_status


def advance(service, order_id, *statuses):
    for status in statuses:
        service.change_status(ChangeOrderStatusCommand(order_id, status)).unwrap()


class TestChangeStatus:
    def test_paid_sets_timestamp_and_publishes(self, service, adapters, order_id):
        view = service.change_status(ChangeOrderStatusCommand(order_id, "paid")).unwrap()

        assert view.status is OrderStatus.PAID
        assert view.paid_at is not None

        event = adapters.events.published[-1]
        assert isinstance(event, OrderStatusChanged)
        assert (event.previous, event.current) == (OrderStatus.PENDING, OrderStatus.PAID)

    def test_change_is_persisted(self, service, usecases, order_id):
        advance(service, order_id, "paid", "processing")

        view = usecases.get_order.get_order(GetOrderQuery(order_id)).unwrap()
        assert view.status is OrderStatus.PROCESSING

    def test_shipping_consumes_reserved_stock(
        self, service, adapters, order_id, tshirt_sku
    ):
        advance(service, order_id, "paid", "processing", "shipped")

        stock = adapters.inventory.snapshot(tshirt_sku)
        assert stock.total_quantity == 18
        assert stock.reserved_quantity == 0

    def test_invalid_transition_leaves_order_unchanged(
        self, service, usecases, order_id
    ):
        result = service.change_status(ChangeOrderStatusCommand(order_id, "shipped"))

        assert isinstance(result.failure(), BusinessRuleViolation)

        view = usecases.get_order.get_order(GetOrderQuery(order_id)).unwrap()
        assert view.status is OrderStatus.PENDING

    def test_unknown_status(self, service, order_id):
        result = service.change_status(ChangeOrderStatusCommand(order_id, "lost"))
        assert isinstance(result.failure(), InvalidInput)

    def test_bad_order_id(self, service):
        result = service.change_status(ChangeOrderStatusCommand("123", "paid"))
        assert isinstance(result.failure(), InvalidInput)

    def test_unknown_order(self, service):
        result = service.change_status(
            ChangeOrderStatusCommand("00000000-0000-0000-0000-000000000000", "paid")
        )
        assert isinstance(result.failure(), NotFound)

    def test_refund_before_shipping_releases_stock(
        self, service, adapters, order_id, tshirt_sku
    ):
        advance(service, order_id, "paid", "refunded")

        stock = adapters.inventory.snapshot(tshirt_sku)
        assert (stock.total_quantity, stock.reserved_quantity) == (20, 0)

    def test_refund_after_delivery_keeps_stock_consumed(
        self, service, adapters, order_id, tshirt_sku
    ):
        advance(service, order_id, "paid", "processing", "shipped", "delivered", "refunded")

        stock = adapters.inventory.snapshot(tshirt_sku)
        assert (stock.total_quantity, stock.reserved_quantity) == (18, 0)

    def test_publish_failure_is_reported(self, service, adapters, order_id):
        adapters.events.fail = True
        result = service.change_status(ChangeOrderStatusCommand(order_id, "paid"))
        assert isinstance(result.failure(), PublishError)


class TestStoreFailure:
    def test_failed_ship_gives_consumed_stock_back(
        self, service, adapters, order_id, tshirt_sku
    ):
        advance(service, order_id, "paid", "processing")
        adapters.orders.fail_on_update = True

        result = service.change_status(ChangeOrderStatusCommand(order_id, "shipped"))

        assert isinstance(result.failure(), RepositoryError)
        stock = adapters.inventory.snapshot(tshirt_sku)
        assert (stock.total_quantity, stock.reserved_quantity) == (20, 2)

        adapters.orders.fail_on_update = False
        advance(service, order_id, "shipped")

        stock = adapters.inventory.snapshot(tshirt_sku)
        assert (stock.total_quantity, stock.reserved_quantity) == (18, 0)

    def test_failed_cancel_holds_the_reservation_again(
        self, service, usecases, adapters, order_id, tshirt_sku
    ):
        adapters.orders.fail_on_update = True

        result = service.cancel(CancelOrderCommand(order_id, "changed my mind"))

        assert isinstance(result.failure(), RepositoryError)
        assert adapters.inventory.snapshot(tshirt_sku).reserved_quantity == 2
        view = usecases.get_order.get_order(GetOrderQuery(order_id)).unwrap()
        assert view.status is OrderStatus.PENDING

        adapters.orders.fail_on_update = False
        service.cancel(CancelOrderCommand(order_id, "changed my mind")).unwrap()

        stock = adapters.inventory.snapshot(tshirt_sku)
        assert (stock.total_quantity, stock.reserved_quantity) == (20, 0)


class TestClock:
    def test_transition_uses_injected_clock(self, adapters, order_id):
        paid_at = datetime(2099, 6, 1, 12, 0, tzinfo=timezone.utc)
        service = ChangeOrderStatusService(
            ChangeOrderStatusDeps(
                orders=adapters.orders,
                inventory=adapters.inventory,
                events=adapters.events,
                clock=lambda: paid_at,
            )
        )

        view = service.change_status(ChangeOrderStatusCommand(order_id, "paid")).unwrap()

        assert view.paid_at == paid_at
        assert view.updated_at == paid_at


class TestCancel:
    def test_cancel_releases_stock_and_records_reason(
        self, service, adapters, order_id, tshirt_sku
    ):
        view = service.cancel(CancelOrderCommand(order_id, "changed my mind")).unwrap()

        assert view.status is OrderStatus.CANCELLED
        assert view.notes == "changed my mind"
        assert view.cancelled_at is not None
        assert adapters.inventory.snapshot(tshirt_sku).reserved_quantity == 0

    def test_cancel_requires_reason(self, service, order_id):
        result = service.cancel(CancelOrderCommand(order_id, "  "))
        assert isinstance(result.failure(), InvalidInput)

    def test_cancel_after_shipping_keeps_stock_consumed(
        self, service, adapters, order_id, tshirt_sku
    ):
        advance(service, order_id, "paid", "processing", "shipped")

        view = service.cancel(CancelOrderCommand(order_id, "recalled")).unwrap()

        assert view.status is OrderStatus.CANCELLED
        stock = adapters.inventory.snapshot(tshirt_sku)
        assert (stock.total_quantity, stock.reserved_quantity) == (18, 0)

    def test_cannot_cancel_twice(self, service, order_id):
        service.cancel(CancelOrderCommand(order_id, "first")).unwrap()
        result = service.cancel(CancelOrderCommand(order_id, "second"))
        assert isinstance(result, Failure)
        assert isinstance(result.failure(), BusinessRuleViolation)
