"""Payment handling fees by payment method.

Cash on delivery is banded by order amount (lower bound inclusive, upper
bound exclusive). Convenience store payment is a flat fee. Everything else
is free.
"""

from __future__ import annotations

from typing import Sequence, Tuple

from order_core.core.domain.model.money import Money

CASH_ON_DELIVERY = "cod"
CONVENIENCE_STORE = "convenience_store"

CONVENIENCE_STORE_FEE = 200

# (upper bound exclusive, fee); the last band is open-ended
COD_FEE_BANDS: Sequence[Tuple[int | None, int]] = (
    (10_000, 330),
    (30_000, 440),
    (100_000, 660),
    (300_000, 1_100),
    (None, 1_650),
)


def cod_fee(amount: Money) -> Money:
    for upper, fee in COD_FEE_BANDS:
        if upper is None or amount.yen < upper:
            return Money(fee)
    raise AssertionError("unreachable: last COD band is open-ended")


def calculate_fee(payment_method_id: str, amount: Money) -> Money:
    if payment_method_id == CASH_ON_DELIVERY:
        return cod_fee(amount)
    if payment_method_id == CONVENIENCE_STORE:
        return Money(CONVENIENCE_STORE_FEE)
    return Money.zero()


class PaymentFeeCalculator:
    """Stateless; kept as a class so it can be passed around as a dependency."""

    def calculate_fee(self, payment_method_id: str, amount: Money) -> Money:
        return calculate_fee(payment_method_id, amount)
