from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import UUID

import structlog

from order_core.adapters.outbound.in_memory_coupons import InMemoryCouponRepository
from order_core.adapters.outbound.in_memory_inventory import InMemoryInventory
from order_core.adapters.outbound.in_memory_methods import (
    InMemoryPaymentMethodRepository,
    InMemoryShippingMethodRepository,
)
from order_core.adapters.outbound.in_memory_orders import InMemoryOrderRepository
from order_core.adapters.outbound.in_memory_products import InMemoryProductRepository
from order_core.adapters.outbound.logging_events import LoggingEventPublisher
from order_core.config import Settings
from order_core.core.domain.model.catalog import PaymentMethod, ShippingMethod
from order_core.core.domain.model.coupon import (
    Coupon,
    DiscountPolicy,
    FixedAmount,
    MinimumPurchase,
    Percentage,
)
from order_core.core.domain.model.identifiers import (
    CouponCode,
    PaymentMethodId,
    ProductId,
    ProductName,
    ShippingMethodId,
    SkuCode,
    SkuId,
    SkuName,
)
from order_core.core.domain.model.money import Money
from order_core.core.domain.model.stock import Sku
from order_core.core.domain.service.apply_coupon_service import (
    ApplyCouponDeps,
    ApplyCouponService,
)
from order_core.core.domain.service.calculate_cart_service import (
    CalculateCartDeps,
    CalculateCartService,
)
from order_core.core.domain.service.change_order_status_service import (
    ChangeOrderStatusDeps,
    ChangeOrderStatusService,
)
from order_core.core.domain.service.create_order_service import (
    CreateOrderDeps,
    CreateOrderService,
)
from order_core.core.domain.service.get_order_service import (
    GetOrderDeps,
    GetOrderService,
)

logger = structlog.get_logger(__name__)

# fixed ids so the CLI examples and manual HTTP calls are reproducible
DEMO_TSHIRT_SKU = "6f0a6d0e-3b8f-4c1e-9a51-0d2c6a7e1001"
DEMO_HOODIE_SKU = "6f0a6d0e-3b8f-4c1e-9a51-0d2c6a7e1002"
DEMO_CAP_SKU = "6f0a6d0e-3b8f-4c1e-9a51-0d2c6a7e1003"

DEMO_TEE_PRODUCT = "6f0a6d0e-3b8f-4c1e-9a51-0d2c6a7e2001"
DEMO_HOODIE_PRODUCT = "6f0a6d0e-3b8f-4c1e-9a51-0d2c6a7e2002"
DEMO_CAP_PRODUCT = "6f0a6d0e-3b8f-4c1e-9a51-0d2c6a7e2003"


@dataclass
class Adapters:
    inventory: InMemoryInventory = field(default_factory=InMemoryInventory)
    orders: InMemoryOrderRepository = field(default_factory=InMemoryOrderRepository)
    coupons: InMemoryCouponRepository = field(default_factory=InMemoryCouponRepository)
    shipping_methods: InMemoryShippingMethodRepository = field(
        default_factory=InMemoryShippingMethodRepository
    )
    payment_methods: InMemoryPaymentMethodRepository = field(
        default_factory=InMemoryPaymentMethodRepository
    )
    events: LoggingEventPublisher = field(default_factory=LoggingEventPublisher)
    products: InMemoryProductRepository | None = None

    def __post_init__(self) -> None:
        if self.products is None:
            self.products = InMemoryProductRepository(inventory=self.inventory)


@dataclass(frozen=True)
class UseCases:
    calculate_cart: CalculateCartService
    create_order: CreateOrderService
    get_order: GetOrderService
    change_order_status: ChangeOrderStatusService
    apply_coupon: ApplyCouponService


def build_usecases(
    settings: Settings | None = None, adapters: Adapters | None = None
) -> UseCases:
    settings = settings or Settings.from_env()
    if adapters is None:
        adapters = Adapters()
        if settings.seed_demo_data:
            seed_demo_data(adapters, settings)

    calculate_cart = CalculateCartService(
        CalculateCartDeps(
            products=adapters.products,
            shipping_methods=adapters.shipping_methods,
            payment_methods=adapters.payment_methods,
            coupons=adapters.coupons,
        )
    )
    create_order = CreateOrderService(
        CreateOrderDeps(
            products=adapters.products,
            orders=adapters.orders,
            shipping_methods=adapters.shipping_methods,
            payment_methods=adapters.payment_methods,
            inventory=adapters.inventory,
            events=adapters.events,
        )
    )
    get_order = GetOrderService(GetOrderDeps(orders=adapters.orders))
    change_order_status = ChangeOrderStatusService(
        ChangeOrderStatusDeps(
            orders=adapters.orders,
            inventory=adapters.inventory,
            events=adapters.events,
        )
    )
    apply_coupon = ApplyCouponService(
        ApplyCouponDeps(coupons=adapters.coupons, products=adapters.products)
    )

    return UseCases(
        calculate_cart=calculate_cart,
        create_order=create_order,
        get_order=get_order,
        change_order_status=change_order_status,
        apply_coupon=apply_coupon,
    )


def build_calculate_cart(settings: Settings | None = None) -> CalculateCartService:
    # CLI entry point; HTTP uses build_usecases()
    return build_usecases(settings).calculate_cart


def seed_demo_data(adapters: Adapters, settings: Settings) -> None:
    threshold = settings.low_stock_threshold

    def add_sku(
        sku_id: str,
        product_id: str,
        code: str,
        product: str,
        name: str,
        price: int,
        stock: int,
        sale_price: int | None = None,
    ) -> None:
        sku = Sku.create(
            id=SkuId(UUID(sku_id)),
            product_id=ProductId(UUID(product_id)),
            sku_code=SkuCode(code),
            name=SkuName(name),
            base_price=Money(price),
            initial_stock=stock,
            low_stock_threshold=threshold,
        ).unwrap()
        if sale_price is not None:
            sku.set_sale_price(Money(sale_price)).unwrap()
        adapters.products.add(sku, ProductName(product))

    add_sku(
        DEMO_TSHIRT_SKU, DEMO_TEE_PRODUCT, "TSHIRT-WHT-M", "Organic Tee", "White / M",
        2000, 20,
    )
    add_sku(
        DEMO_HOODIE_SKU, DEMO_HOODIE_PRODUCT, "HOODIE-NVY-L", "Zip Hoodie", "Navy / L",
        6000, 3,
        sale_price=4800,
    )
    add_sku(DEMO_CAP_SKU, DEMO_CAP_PRODUCT, "CAP-BLK", "Logo Cap", "Black", 1500, 0)

    adapters.shipping_methods.add(
        ShippingMethod(ShippingMethodId("standard"), "Standard", Money(500), sort_order=1)
    )
    adapters.shipping_methods.add(
        ShippingMethod(ShippingMethodId("express"), "Express", Money(1000), sort_order=2)
    )

    for sort_order, (method_id, name) in enumerate(
        [
            ("credit_card", "Credit card"),
            ("cod", "Cash on delivery"),
            ("convenience_store", "Convenience store"),
            ("bank_transfer", "Bank transfer"),
        ],
        start=1,
    ):
        adapters.payment_methods.add(
            PaymentMethod(PaymentMethodId(method_id), name, sort_order=sort_order)
        )

    valid_from = datetime(2024, 1, 1, tzinfo=timezone.utc)
    valid_until = datetime(2099, 12, 31, tzinfo=timezone.utc)
    adapters.coupons.add(
        Coupon.create(
            code=CouponCode("WELCOME10"),
            name="Welcome 10%",
            discount_policy=DiscountPolicy(
                Percentage(10), MinimumPurchase(Money(3000))
            ),
            valid_from=valid_from,
            valid_until=valid_until,
        ).unwrap()
    )
    adapters.coupons.add(
        Coupon.create(
            code=CouponCode("SAVE500"),
            name="500 yen off",
            discount_policy=DiscountPolicy(FixedAmount(Money(500))),
            valid_from=valid_from,
            valid_until=valid_until,
            usage_limit=100,
        ).unwrap()
    )

    logger.info("demo_data_seeded", skus=3, coupons=2)
