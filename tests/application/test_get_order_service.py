from returns.result import Success

from order_core.bootstrap import DEMO_HOODIE_SKU, DEMO_TSHIRT_SKU
from order_core.core.domain.model.errors import InvalidInput, NotFound
from order_core.core.domain.model.money import Money
from order_core.core.domain.model.order import OrderStatus
from order_core.core.ports.inbound.create_order import (
    AddressInput,
    CreateOrderCommand,
    CustomerInput,
    OrderLineInput,
)
from order_core.core.ports.inbound.get_order import GetOrderQuery


def test_view_reflects_order(usecases):
    receipt = usecases.create_order.create_order(
        CreateOrderCommand(
            items=(
                OrderLineInput(DEMO_TSHIRT_SKU, 1),
                OrderLineInput(DEMO_HOODIE_SKU, 1),
            ),
            customer=CustomerInput("Taro", "Yamada", "taro@example.com", "09012345678"),
            shipping_address=AddressInput(
                "150-0001", "Tokyo", "Shibuya", "1-2-3", building="Room 101"
            ),
            shipping_method_id="standard",
            payment_method_id="bank_transfer",
            notes="gift wrap",
        )
    ).unwrap()

    result = usecases.get_order.get_order(GetOrderQuery(str(receipt.order_id)))

    assert isinstance(result, Success)
    view = result.unwrap()
    assert view.order_number == receipt.order_number
    assert view.status is OrderStatus.PENDING
    assert view.customer_name == "Taro Yamada"
    assert view.shipping_address == "〒150-0001 Tokyo Shibuya 1-2-3 Room 101"
    assert view.payment_method == "Bank transfer"
    assert [ln.sku_code for ln in view.lines] == ["TSHIRT-WHT-M", "HOODIE-NVY-L"]
    assert view.lines[1].unit_price == Money(4800)
    assert view.pricing.subtotal == Money(6800)
    assert view.notes == "gift wrap"


def test_malformed_id(usecases):
    result = usecases.get_order.get_order(GetOrderQuery("abc"))
    assert isinstance(result.failure(), InvalidInput)


def test_missing_order(usecases):
    result = usecases.get_order.get_order(
        GetOrderQuery("11111111-2222-3333-4444-555555555555")
    )
    assert isinstance(result.failure(), NotFound)
