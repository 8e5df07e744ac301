from __future__ import annotations

import re
from dataclasses import dataclass
from uuid import UUID, uuid4

from returns.result import Failure, Result, Success

from order_core.core.domain.model.errors import (
    DomainError,
    InvalidCoupon,
    InvalidProductData,
    InvalidSKUCode,
)


@dataclass(frozen=True)
class SkuId:
    value: UUID

    @staticmethod
    def new() -> "SkuId":
        return SkuId(uuid4())

    @staticmethod
    def parse(raw: str) -> Result["SkuId", DomainError]:
        return _parse_uuid(raw, "SKU ID").map(SkuId)

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ProductId:
    value: UUID

    @staticmethod
    def new() -> "ProductId":
        return ProductId(uuid4())

    @staticmethod
    def parse(raw: str) -> Result["ProductId", DomainError]:
        return _parse_uuid(raw, "product ID").map(ProductId)

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class OrderId:
    value: UUID

    @staticmethod
    def new() -> "OrderId":
        return OrderId(uuid4())

    @staticmethod
    def parse(raw: str) -> Result["OrderId", DomainError]:
        return _parse_uuid(raw, "order ID").map(OrderId)

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class CouponId:
    value: UUID

    @staticmethod
    def new() -> "CouponId":
        return CouponId(uuid4())


@dataclass(frozen=True)
class DeliveryInfoId:
    value: UUID

    @staticmethod
    def new() -> "DeliveryInfoId":
        return DeliveryInfoId(uuid4())


@dataclass(frozen=True)
class ShippingMethodId:
    value: str

    @staticmethod
    def parse(raw: str) -> Result["ShippingMethodId", DomainError]:
        if not raw.strip():
            return Failure(InvalidProductData("shipping method ID cannot be empty"))
        return Success(ShippingMethodId(raw))


@dataclass(frozen=True)
class PaymentMethodId:
    value: str

    @staticmethod
    def parse(raw: str) -> Result["PaymentMethodId", DomainError]:
        if not raw.strip():
            return Failure(InvalidProductData("payment method ID cannot be empty"))
        return Success(PaymentMethodId(raw))


def _parse_uuid(raw: str, label: str) -> Result[UUID, DomainError]:
    try:
        return Success(UUID(raw))
    except (ValueError, AttributeError, TypeError):
        return Failure(InvalidProductData(f"invalid {label} format: {raw}"))


# ---- names and codes -------------------------------------------------------

_NAME_MAX = 255
_SKU_CODE_MAX = 50
_SKU_CODE_PATTERN = re.compile(r"^[A-Z0-9-]+$")


@dataclass(frozen=True)
class ProductName:
    value: str

    @staticmethod
    def parse(raw: str) -> Result["ProductName", DomainError]:
        return _validate_name(raw, "product name").map(ProductName)


@dataclass(frozen=True)
class SkuName:
    value: str

    @staticmethod
    def parse(raw: str) -> Result["SkuName", DomainError]:
        return _validate_name(raw, "SKU name").map(SkuName)


@dataclass(frozen=True)
class SkuCode:
    value: str

    @staticmethod
    def parse(raw: str) -> Result["SkuCode", DomainError]:
        code = raw.strip()
        if not code:
            return Failure(InvalidSKUCode("SKU code cannot be empty"))
        if len(code) > _SKU_CODE_MAX:
            return Failure(
                InvalidSKUCode(f"SKU code cannot exceed {_SKU_CODE_MAX} characters")
            )
        if not _SKU_CODE_PATTERN.match(code):
            return Failure(
                InvalidSKUCode("SKU code may only contain A-Z, 0-9 and hyphens")
            )
        return Success(SkuCode(code))


@dataclass(frozen=True)
class CouponCode:
    value: str

    MAX_LENGTH = 10

    @staticmethod
    def parse(raw: str) -> Result["CouponCode", DomainError]:
        if not raw:
            return Failure(InvalidCoupon("coupon code cannot be empty", code=raw))
        if len(raw) > CouponCode.MAX_LENGTH:
            return Failure(
                InvalidCoupon(
                    f"coupon code cannot exceed {CouponCode.MAX_LENGTH} characters",
                    code=raw,
                )
            )
        return Success(CouponCode(raw))


def _validate_name(raw: str, label: str) -> Result[str, DomainError]:
    if not raw.strip():
        return Failure(InvalidProductData(f"{label} cannot be empty"))
    if len(raw) > _NAME_MAX:
        return Failure(
            InvalidProductData(f"{label} cannot exceed {_NAME_MAX} characters")
        )
    return Success(raw)
