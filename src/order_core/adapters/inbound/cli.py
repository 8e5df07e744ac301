from __future__ import annotations

import json
from typing import Any

from returns.result import Success

from order_core.core.ports.inbound.calculate_cart import (
    CalculateCartCommand,
    CalculateCartUseCase,
    CartLine,
)


def run_cli(usecase: CalculateCartUseCase, raw: str) -> int:
    """
    raw: JSON string.
    Example:
      {"items":[{"sku_id":"<uuid>","quantity":2}],
       "shipping_method_id":"standard","payment_method_id":"cod",
       "coupon_code":"WELCOME10"}
    """
    try:
        payload = json.loads(raw)
        cmd = _parse_command(payload)
    except (ValueError, KeyError, TypeError) as e:
        print(f"invalid_input: {e}")
        return 2

    result = usecase.calculate_cart(cmd)

    if isinstance(result, Success):
        res = result.unwrap()
        calc = res.calculation
        print(
            "[ok]",
            {
                "items": [
                    {
                        "sku_id": str(v.sku_id),
                        "product_name": v.product_name.value,
                        "quantity": v.quantity,
                        "subtotal": v.subtotal.format_jpy(),
                    }
                    for v in res.items
                ],
                "original_subtotal": calc.original_subtotal.format_jpy(),
                "discount_amount": calc.discount_amount.format_jpy(),
                "tax_amount": calc.tax_amount.format_jpy(),
                "shipping_fee": calc.shipping_fee.format_jpy(),
                "payment_fee": calc.payment_fee.format_jpy(),
                "grand_total": calc.grand_total.format_jpy(),
            },
        )
        return 0

    err = result.failure()
    print("[ng]", str(err))
    return 1


def _parse_command(payload: dict[str, Any]) -> CalculateCartCommand:
    if not isinstance(payload, dict):
        raise TypeError("request must be a JSON object")
    items = [
        CartLine(sku_id=str(x["sku_id"]), quantity=int(x["quantity"]))
        for x in payload.get("items", [])
    ]
    return CalculateCartCommand(
        items=items,
        shipping_method_id=payload.get("shipping_method_id"),
        payment_method_id=payload.get("payment_method_id"),
        coupon_code=payload.get("coupon_code"),
    )
