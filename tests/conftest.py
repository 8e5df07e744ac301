from pathlib import Path
from uuid import UUID

import pytest

from order_core.bootstrap import (
    DEMO_CAP_SKU,
    DEMO_HOODIE_SKU,
    DEMO_TSHIRT_SKU,
    Adapters,
    build_usecases,
    seed_demo_data,
)
from order_core.config import Settings
from order_core.core.domain.model.contact import (
    Address,
    Email,
    PersonalInfo,
    PhoneNumber,
)
from order_core.core.domain.model.identifiers import (
    PaymentMethodId,
    ProductName,
    ShippingMethodId,
    SkuCode,
    SkuId,
    SkuName,
)
from order_core.core.domain.model.money import Money
from order_core.core.domain.model.order import Order
from order_core.core.domain.model.order_details import (
    CustomerInfo,
    OrderItem,
    OrderNumber,
    PaymentInfo,
    ShippingInfo,
)
from order_core.utils.logging import configure_logging


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/adapters/" in test_path:
            item.add_marker(pytest.mark.adapters)


@pytest.fixture(scope="session", autouse=True)
def quiet_logging():
    configure_logging(Settings.for_testing())


@pytest.fixture
def settings():
    return Settings.for_testing()


@pytest.fixture
def adapters(settings):
    adapters = Adapters()
    seed_demo_data(adapters, settings)
    return adapters


@pytest.fixture
def usecases(settings, adapters):
    return build_usecases(settings, adapters)


@pytest.fixture
def tshirt_sku():
    return SkuId(UUID(DEMO_TSHIRT_SKU))


@pytest.fixture
def hoodie_sku():
    return SkuId(UUID(DEMO_HOODIE_SKU))


@pytest.fixture
def cap_sku():
    return SkuId(UUID(DEMO_CAP_SKU))


@pytest.fixture
def customer_info():
    return CustomerInfo(
        personal_info=PersonalInfo.parse("Taro", "Yamada").unwrap(),
        email=Email.parse("taro@example.com").unwrap(),
        phone=PhoneNumber.parse("090-1234-5678").unwrap(),
    )


@pytest.fixture
def shipping_info():
    return ShippingInfo(
        method_id=ShippingMethodId("standard"),
        method_name="Standard",
        fee=Money(500),
        address=Address.parse("150-0001", "Tokyo", "Shibuya", "1-2-3").unwrap(),
    )


@pytest.fixture
def payment_info():
    return PaymentInfo(
        method_id=PaymentMethodId("credit_card"),
        method_name="Credit card",
        fee=Money(100),
    )


@pytest.fixture
def make_item():
    def _make(price=1000, quantity=2, code="TEST-001"):
        return OrderItem.create(
            sku_id=SkuId.new(),
            sku_code=SkuCode(code),
            product_name=ProductName("Test Product"),
            sku_name=SkuName("Test SKU"),
            unit_price=Money(price),
            quantity=quantity,
        ).unwrap()

    return _make


@pytest.fixture
def make_order(customer_info, shipping_info, payment_info, make_item):
    def _make(items=None):
        return Order.create(
            order_number=OrderNumber.generate(2024, 1),
            customer_info=customer_info,
            items=items if items is not None else [make_item()],
            shipping_info=shipping_info,
            payment_info=payment_info,
        ).unwrap()

    return _make
