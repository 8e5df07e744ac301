import threading

import pytest
from returns.result import Success

from order_core.adapters.outbound.in_memory_inventory import InMemoryInventory
from order_core.core.domain.model.errors import InsufficientStock, NotFound
from order_core.core.domain.model.identifiers import SkuId
from order_core.core.domain.model.stock import Stock
from order_core.core.ports.outbound.inventory import Reservation


@pytest.fixture
def skus():
    return SkuId.new(), SkuId.new()


@pytest.fixture
def inventory(skus):
    inv = InMemoryInventory()
    inv.track(skus[0], Stock.create(10).unwrap())
    inv.track(skus[1], Stock.create(1).unwrap())
    return inv


class TestBatches:
    def test_reserve_release_consume(self, inventory, skus):
        a, _ = skus
        assert inventory.reserve([Reservation(a, 3)]) == Success(None)
        assert inventory.release([Reservation(a, 1)]) == Success(None)
        assert inventory.consume([Reservation(a, 2)]) == Success(None)

        stock = inventory.snapshot(a)
        assert (stock.total_quantity, stock.reserved_quantity) == (8, 0)

    def test_restore_undoes_consume(self, inventory, skus):
        a, b = skus
        batch = [Reservation(a, 3), Reservation(b, 1)]
        inventory.reserve(batch).unwrap()
        inventory.consume(batch).unwrap()

        assert inventory.restore(batch) == Success(None)

        stock_a, stock_b = inventory.snapshot(a), inventory.snapshot(b)
        assert (stock_a.total_quantity, stock_a.reserved_quantity) == (10, 3)
        assert (stock_b.total_quantity, stock_b.reserved_quantity) == (1, 1)

    def test_batch_is_all_or_nothing(self, inventory, skus):
        a, b = skus

        result = inventory.reserve([Reservation(a, 2), Reservation(b, 5)])

        assert isinstance(result.failure(), InsufficientStock)
        assert inventory.snapshot(a).reserved_quantity == 0
        assert inventory.snapshot(b).reserved_quantity == 0

    def test_repeated_sku_in_one_batch_accumulates(self, inventory, skus):
        a, _ = skus
        result = inventory.reserve([Reservation(a, 6), Reservation(a, 6)])
        assert isinstance(result.failure(), InsufficientStock)
        assert inventory.snapshot(a).reserved_quantity == 0

    def test_unknown_sku(self, inventory):
        result = inventory.reserve([Reservation(SkuId.new(), 1)])
        assert isinstance(result.failure(), NotFound)

    def test_snapshot_is_a_copy(self, inventory, skus):
        a, _ = skus
        inventory.snapshot(a).reserve(5).unwrap()
        assert inventory.snapshot(a).reserved_quantity == 0
        assert inventory.snapshot(SkuId.new()) is None


def test_concurrent_reservations_never_oversell(inventory, skus):
    a, _ = skus
    outcomes = []
    barrier = threading.Barrier(20)

    def worker():
        barrier.wait()
        outcomes.append(inventory.reserve([Reservation(a, 1)]))

    threads = [threading.Thread(target=worker) for _ in range(20)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    succeeded = [r for r in outcomes if isinstance(r, Success)]
    assert len(succeeded) == 10
    assert inventory.snapshot(a).reserved_quantity == 10
