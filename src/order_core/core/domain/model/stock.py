"""Per-SKU stock bookkeeping and the SKU entity that owns it.

Invariant: ``reserved_quantity <= total_quantity`` after every operation.
A failed operation leaves the stock untouched.

The arithmetic here assumes a consistent snapshot. Making reserve/consume
atomic against a shared store is the persistence adapter's job (see
``InMemoryInventory``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Union

from returns.result import Failure, Result, Success

from order_core.core.domain.model.clock import now_utc
from order_core.core.domain.model.errors import (
    DomainError,
    InsufficientStock,
    InvalidPrice,
    InvalidProductData,
    InvalidStock,
)
from order_core.core.domain.model.identifiers import (
    ProductId,
    SkuCode,
    SkuId,
    SkuName,
)
from order_core.core.domain.model.money import Money

MAX_QUANTITY = 2**32 - 1
DEFAULT_LOW_STOCK_THRESHOLD = 5


@dataclass(frozen=True)
class Increase:
    amount: int


@dataclass(frozen=True)
class Decrease:
    amount: int


StockAdjustment = Union[Increase, Decrease]


@dataclass
class Stock:
    total_quantity: int
    reserved_quantity: int = 0
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD

    @staticmethod
    def create(
        total: int,
        reserved: int = 0,
        low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
    ) -> Result["Stock", DomainError]:
        if total < 0 or reserved < 0:
            return Failure(InvalidStock("stock quantities must be >= 0"))
        if total > MAX_QUANTITY:
            return Failure(InvalidStock("total quantity is out of range"))
        if reserved > total:
            return Failure(
                InvalidStock("reserved quantity cannot exceed total quantity")
            )
        return Success(Stock(total, reserved, low_stock_threshold))

    @property
    def available_quantity(self) -> int:
        return self.total_quantity - self.reserved_quantity

    def can_purchase(self, quantity: int) -> bool:
        return self.available_quantity >= quantity

    def is_sold_out(self) -> bool:
        return self.available_quantity == 0

    def is_low_stock(self) -> bool:
        return 0 < self.available_quantity <= self.low_stock_threshold

    def reserve(self, quantity: int) -> Result[None, DomainError]:
        if quantity <= 0:
            return Failure(InvalidStock("reservation quantity must be > 0"))
        if quantity > self.available_quantity:
            return Failure(
                InsufficientStock(
                    "not enough available stock to reserve",
                    requested=quantity,
                    available=self.available_quantity,
                )
            )
        self.reserved_quantity += quantity
        return Success(None)

    def release_reservation(self, quantity: int) -> Result[None, DomainError]:
        if quantity <= 0:
            return Failure(InvalidStock("release quantity must be > 0"))
        if quantity > self.reserved_quantity:
            return Failure(
                InvalidStock("cannot release more than reserved quantity")
            )
        self.reserved_quantity -= quantity
        return Success(None)

    def adjust(self, adjustment: StockAdjustment) -> Result[None, DomainError]:
        if adjustment.amount < 0:
            return Failure(InvalidStock("adjustment amount must be >= 0"))
        if isinstance(adjustment, Increase):
            return self.restock(adjustment.amount)
        if adjustment.amount > self.available_quantity:
            return Failure(
                InsufficientStock(
                    "cannot decrease below reserved quantity",
                    requested=adjustment.amount,
                    available=self.available_quantity,
                )
            )
        self.total_quantity -= adjustment.amount
        return Success(None)

    def consume(self, quantity: int) -> Result[None, DomainError]:
        """Finalize a sale, drawing from reservations first."""
        if quantity <= 0:
            return Failure(InvalidStock("consume quantity must be > 0"))
        if quantity > self.total_quantity:
            return Failure(
                InsufficientStock(
                    "cannot consume more than total stock",
                    requested=quantity,
                    available=self.total_quantity,
                )
            )

        # whatever is not covered by reservations comes out of available stock
        from_reserved = min(quantity, self.reserved_quantity)
        self.reserved_quantity -= from_reserved
        self.total_quantity -= quantity
        return Success(None)

    def restock(self, quantity: int) -> Result[None, DomainError]:
        if quantity < 0:
            return Failure(InvalidStock("restock quantity must be >= 0"))
        if self.total_quantity + quantity > MAX_QUANTITY:
            return Failure(InvalidProductData("inventory quantity would overflow"))
        self.total_quantity += quantity
        return Success(None)

    def status_description(self) -> str:
        if self.is_sold_out():
            return "Sold Out"
        if self.available_quantity <= self.low_stock_threshold:
            return f"Low Stock ({self.available_quantity})"
        return f"In Stock ({self.available_quantity})"


class SkuStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DISCONTINUED = "discontinued"


@dataclass
class Sku:
    id: SkuId
    product_id: ProductId
    sku_code: SkuCode
    name: SkuName
    base_price: Money
    stock: Stock
    sale_price: Money | None = None
    status: SkuStatus = SkuStatus.ACTIVE
    created_at: datetime = field(default_factory=now_utc)
    updated_at: datetime = field(default_factory=now_utc)

    @staticmethod
    def create(
        id: SkuId,
        product_id: ProductId,
        sku_code: SkuCode,
        name: SkuName,
        base_price: Money,
        initial_stock: int,
        low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
    ) -> Result["Sku", DomainError]:
        if not base_price.is_positive():
            return Failure(InvalidPrice("base price must be positive"))
        return Stock.create(initial_stock, 0, low_stock_threshold).map(
            lambda stock: Sku(
                id=id,
                product_id=product_id,
                sku_code=sku_code,
                name=name,
                base_price=base_price,
                stock=stock,
            )
        )

    # ---- pricing -------------------------------------------------------------

    def current_price(self) -> Money:
        return self.sale_price if self.sale_price is not None else self.base_price

    def is_on_sale(self) -> bool:
        return self.sale_price is not None

    def set_sale_price(self, sale_price: Money) -> Result[None, DomainError]:
        if sale_price >= self.base_price:
            return Failure(InvalidPrice("sale price must be less than base price"))
        self.sale_price = sale_price
        self._touch()
        return Success(None)

    def clear_sale_price(self) -> None:
        self.sale_price = None
        self._touch()

    def update_base_price(self, price: Money) -> Result[None, DomainError]:
        if not price.is_positive():
            return Failure(InvalidPrice("base price must be positive"))
        if self.sale_price is not None and self.sale_price >= price:
            return Failure(
                InvalidPrice("base price must be higher than current sale price")
            )
        self.base_price = price
        self._touch()
        return Success(None)

    def discount_percentage(self) -> int | None:
        if self.sale_price is None:
            return None
        discount = self.base_price.yen - self.sale_price.yen
        # round half up, matching the catalogue display
        return (discount * 200 + self.base_price.yen) // (2 * self.base_price.yen)

    def savings_amount(self) -> Money:
        if self.sale_price is None:
            return Money.zero()
        return Money(self.base_price.yen - self.sale_price.yen)

    # ---- status ----------------------------------------------------------------

    def activate(self) -> None:
        self.status = SkuStatus.ACTIVE
        self._touch()

    def deactivate(self) -> None:
        self.status = SkuStatus.INACTIVE
        self._touch()

    def discontinue(self) -> None:
        self.status = SkuStatus.DISCONTINUED
        self._touch()

    def is_purchasable(self) -> bool:
        return self.status is SkuStatus.ACTIVE and self.stock.available_quantity > 0

    # ---- stock -----------------------------------------------------------------

    def reserve_stock(self, quantity: int) -> Result[None, DomainError]:
        return self.stock.reserve(quantity).map(lambda _: self._touch())

    def release_reservation(self, quantity: int) -> Result[None, DomainError]:
        return self.stock.release_reservation(quantity).map(lambda _: self._touch())

    def adjust_stock(self, adjustment: StockAdjustment) -> Result[None, DomainError]:
        return self.stock.adjust(adjustment).map(lambda _: self._touch())

    def _touch(self) -> None:
        self.updated_at = now_utc()
