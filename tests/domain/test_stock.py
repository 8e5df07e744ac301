from returns.result import Failure, Success

from order_core.core.domain.model.errors import (
    InsufficientStock,
    InvalidPrice,
    InvalidStock,
)
from order_core.core.domain.model.identifiers import (
    ProductId,
    SkuCode,
    SkuId,
    SkuName,
)
from order_core.core.domain.model.money import Money
from order_core.core.domain.model.stock import (
    Decrease,
    Increase,
    Sku,
    SkuStatus,
    Stock,
)


def make_sku(price=6000, stock=10):
    return Sku.create(
        id=SkuId.new(),
        product_id=ProductId.new(),
        sku_code=SkuCode("HOODIE-NVY-L"),
        name=SkuName("Navy / L"),
        base_price=Money(price),
        initial_stock=stock,
    ).unwrap()


class TestStock:
    def test_reserve_beyond_available_fails_and_leaves_state(self):
        stock = Stock.create(10).unwrap()
        stock.reserve(8).unwrap()

        result = stock.reserve(3)

        assert isinstance(result.failure(), InsufficientStock)
        assert result.failure().requested == 3
        assert result.failure().available == 2
        assert (stock.total_quantity, stock.reserved_quantity) == (10, 8)

    def test_reserve_up_to_available(self):
        stock = Stock.create(10, 3).unwrap()
        assert isinstance(stock.reserve(8), Failure)
        assert stock.reserve(7) == Success(None)
        assert stock.reserved_quantity == 10
        assert stock.is_sold_out()

    def test_consume_drains_reserved_then_total(self):
        stock = Stock.create(10, 3).unwrap()
        assert stock.consume(5) == Success(None)
        assert (stock.total_quantity, stock.reserved_quantity) == (5, 0)

    def test_reserved_cannot_exceed_total_on_create(self):
        assert isinstance(Stock.create(5, 6), Failure)
        assert isinstance(Stock.create(-1), Failure)

    def test_release_more_than_reserved_fails(self):
        stock = Stock.create(10, 2).unwrap()
        assert isinstance(stock.release_reservation(3).failure(), InvalidStock)
        assert stock.release_reservation(2) == Success(None)
        assert stock.available_quantity == 10

    def test_consume_draws_from_reserved_first(self):
        stock = Stock.create(10, 4).unwrap()

        assert stock.consume(6) == Success(None)

        assert stock.total_quantity == 4
        assert stock.reserved_quantity == 0

    def test_consume_more_than_total_fails(self):
        stock = Stock.create(10, 8).unwrap()
        result = stock.consume(11)
        assert isinstance(result.failure(), InsufficientStock)
        assert (stock.total_quantity, stock.reserved_quantity) == (10, 8)

    def test_adjust(self):
        stock = Stock.create(10, 6).unwrap()
        assert stock.adjust(Increase(5)) == Success(None)
        assert stock.total_quantity == 15
        assert isinstance(stock.adjust(Decrease(10)), Failure)
        assert stock.adjust(Decrease(9)) == Success(None)
        assert stock.total_quantity == 6
        assert stock.reserved_quantity <= stock.total_quantity

    def test_status_flags(self):
        assert Stock.create(3).unwrap().can_purchase(3)
        assert not Stock.create(3).unwrap().can_purchase(4)
        assert Stock.create(0).unwrap().is_sold_out()
        assert Stock.create(3).unwrap().is_low_stock()
        assert not Stock.create(30).unwrap().is_low_stock()
        assert Stock.create(5, low_stock_threshold=5).unwrap().is_low_stock()
        assert not Stock.create(6, low_stock_threshold=5).unwrap().is_low_stock()
        assert not Stock.create(0).unwrap().is_low_stock()
        assert Stock.create(0).unwrap().status_description() == "Sold Out"
        assert Stock.create(4).unwrap().status_description() == "Low Stock (4)"
        assert Stock.create(30).unwrap().status_description() == "In Stock (30)"


class TestSku:
    def test_non_positive_base_price_rejected(self):
        result = Sku.create(
            id=SkuId.new(),
            product_id=ProductId.new(),
            sku_code=SkuCode("X-1"),
            name=SkuName("X"),
            base_price=Money(0),
            initial_stock=1,
        )
        assert isinstance(result.failure(), InvalidPrice)

    def test_sale_price_must_be_below_base(self):
        sku = make_sku(price=6000)
        assert isinstance(sku.set_sale_price(Money(6000)), Failure)
        assert sku.set_sale_price(Money(4800)) == Success(None)
        assert sku.current_price() == Money(4800)
        assert sku.is_on_sale()

    def test_discount_figures(self):
        sku = make_sku(price=6000)
        sku.set_sale_price(Money(4800)).unwrap()
        assert sku.discount_percentage() == 20
        assert sku.savings_amount() == Money(1200)

        sku.clear_sale_price()
        assert sku.discount_percentage() is None
        assert sku.savings_amount() == Money(0)
        assert sku.current_price() == Money(6000)

    def test_discount_percentage_rounds_half_up(self):
        sku = make_sku(price=200)
        sku.set_sale_price(Money(199)).unwrap()
        # 0.5% rounds up to 1
        assert sku.discount_percentage() == 1

    def test_base_price_cannot_drop_below_sale_price(self):
        sku = make_sku(price=6000)
        sku.set_sale_price(Money(4800)).unwrap()
        assert isinstance(sku.update_base_price(Money(4800)), Failure)
        assert sku.update_base_price(Money(7000)) == Success(None)

    def test_purchasable_depends_on_status_and_stock(self):
        sku = make_sku(stock=1)
        assert sku.is_purchasable()
        sku.deactivate()
        assert sku.status is SkuStatus.INACTIVE
        assert not sku.is_purchasable()
        sku.activate()
        sku.reserve_stock(1).unwrap()
        assert not sku.is_purchasable()

    def test_stock_changes_touch_updated_at(self):
        sku = make_sku()
        before = sku.updated_at
        sku.adjust_stock(Increase(1)).unwrap()
        assert sku.updated_at >= before
        assert sku.stock.total_quantity == 11
