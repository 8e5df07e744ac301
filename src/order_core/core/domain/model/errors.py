from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DomainError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class InsufficientStock(DomainError):
    requested: int
    available: int

    def __str__(self) -> str:
        return (
            f"insufficient_stock: requested={self.requested} "
            f"available={self.available} ({self.message})"
        )


@dataclass(frozen=True)
class InvalidProductData(DomainError):
    pass


@dataclass(frozen=True)
class InvalidPrice(DomainError):
    pass


@dataclass(frozen=True)
class InvalidSKUCode(DomainError):
    pass


@dataclass(frozen=True)
class InvalidStock(DomainError):
    pass


@dataclass(frozen=True)
class BusinessRuleViolation(DomainError):
    pass


@dataclass(frozen=True)
class InvalidCoupon(DomainError):
    code: str

    def __str__(self) -> str:
        return f"invalid_coupon: {self.code} ({self.message})"


@dataclass(frozen=True)
class InvalidCustomerInfo(DomainError):
    pass


# ---- application layer -----------------------------------------------------


@dataclass(frozen=True)
class ApplicationError(DomainError):
    pass


@dataclass(frozen=True)
class InvalidInput(ApplicationError):
    pass


@dataclass(frozen=True)
class NotFound(ApplicationError):
    resource: str
    key: str

    def __str__(self) -> str:
        return f"not_found: {self.resource}={self.key} ({self.message})"


@dataclass(frozen=True)
class RepositoryError(ApplicationError):
    pass


@dataclass(frozen=True)
class PublishError(ApplicationError):
    pass
