"""Japanese yen amounts as checked unsigned integers.

All rounding is a ceiling to the next whole yen. Amounts are bounded by an
unsigned 32-bit range so overflow behaves the same as the stored column.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from typing import Iterable

from returns.result import Failure, Result, Success

from order_core.core.domain.model.errors import DomainError, InvalidProductData

MAX_YEN = 2**32 - 1
TAX_RATE_PERCENT = 10


def ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


@dataclass(frozen=True, order=True)
class Money:
    yen: int

    def __post_init__(self) -> None:
        if isinstance(self.yen, bool) or not isinstance(self.yen, int):
            raise ValueError(f"yen must be int, got {type(self.yen).__name__}")
        if not 0 <= self.yen <= MAX_YEN:
            raise ValueError(f"yen out of range: {self.yen}")

    @staticmethod
    def zero() -> "Money":
        return Money(0)

    @staticmethod
    def from_yen(yen: int) -> "Money":
        return Money(yen)

    @staticmethod
    def parse(text: str) -> Result["Money", DomainError]:
        """Parse an integer yen amount such as ``"1500"``. Decimals are rejected."""
        trimmed = text.strip()
        if not trimmed.isdigit():
            return Failure(InvalidProductData(f"invalid yen amount: {text!r}"))
        yen = int(trimmed)
        if yen > MAX_YEN:
            return Failure(InvalidProductData("yen amount out of range"))
        return Success(Money(yen))

    def is_zero(self) -> bool:
        return self.yen == 0

    def is_positive(self) -> bool:
        return self.yen > 0

    def add(self, other: "Money") -> Result["Money", DomainError]:
        total = self.yen + other.yen
        if total > MAX_YEN:
            return Failure(InvalidProductData("money overflow in addition"))
        return Success(Money(total))

    def subtract(self, other: "Money") -> Result["Money", DomainError]:
        if other.yen > self.yen:
            return Failure(
                InvalidProductData("cannot subtract larger amount from smaller amount")
            )
        return Success(Money(self.yen - other.yen))

    def multiply(self, multiplier: int) -> Result["Money", DomainError]:
        if multiplier < 0:
            return Failure(InvalidProductData("multiplier must be >= 0"))
        product = self.yen * multiplier
        if product > MAX_YEN:
            return Failure(InvalidProductData("money overflow in multiplication"))
        return Success(Money(product))

    def percentage(self, ratio: float | int | Decimal | Fraction) -> Result["Money", DomainError]:
        """ceil(amount * ratio) for a ratio in [0, 1].

        Floats go through ``str`` first so 0.1 means exactly one tenth.
        """
        try:
            exact = Fraction(str(ratio)) if isinstance(ratio, float) else Fraction(ratio)
        except (ValueError, OverflowError):
            return Failure(InvalidProductData(f"percentage is not a finite number: {ratio}"))
        if not 0 <= exact <= 1:
            return Failure(InvalidProductData("percentage must be between 0.0 and 1.0"))
        yen = ceil_div(self.yen * exact.numerator, exact.denominator)
        return Success(Money(yen))

    def apply_discount(self, discount_percent: int) -> Result["Money", DomainError]:
        if not 0 <= discount_percent <= 100:
            return Failure(
                InvalidProductData("discount percentage must be between 0 and 100")
            )
        return self.percentage(Fraction(discount_percent, 100)).bind(self.subtract)

    def tax_amount(self) -> "Money":
        return Money(ceil_div(self.yen * TAX_RATE_PERCENT, 100))

    def with_tax(self) -> Result["Money", DomainError]:
        return self.add(self.tax_amount())

    def format_jpy(self) -> str:
        return f"¥{self.yen}"

    def __str__(self) -> str:
        return self.format_jpy()


def sum_money(values: Iterable[Money]) -> Result[Money, DomainError]:
    total: Result[Money, DomainError] = Success(Money.zero())
    for value in values:
        total = total.bind(lambda acc, v=value: acc.add(v))
    return total
