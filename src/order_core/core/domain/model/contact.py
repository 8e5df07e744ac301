from __future__ import annotations

import re
from dataclasses import dataclass

from returns.result import Failure, Result, Success

from order_core.core.domain.model.errors import DomainError, InvalidCustomerInfo

_EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
# landline 0X-XXXX-XXXX / mobile 0X0-XXXX-XXXX, with or without hyphens
_PHONE_PATTERN = re.compile(r"^(0\d{1,4}-\d{1,4}-\d{1,4}|0\d{9,10})$")
_POSTAL_CODE_PATTERN = re.compile(r"^\d{3}-\d{4}$")


@dataclass(frozen=True)
class Email:
    value: str

    @staticmethod
    def parse(raw: str) -> Result["Email", DomainError]:
        if not raw:
            return Failure(InvalidCustomerInfo("email is required"))
        if len(raw) > 255:
            return Failure(InvalidCustomerInfo("email is too long"))
        if not _EMAIL_PATTERN.match(raw):
            return Failure(InvalidCustomerInfo(f"invalid email format: {raw}"))
        return Success(Email(raw))


@dataclass(frozen=True)
class PhoneNumber:
    value: str

    @staticmethod
    def parse(raw: str) -> Result["PhoneNumber", DomainError]:
        if not raw:
            return Failure(InvalidCustomerInfo("phone number is required"))
        if len(raw) > 20:
            return Failure(InvalidCustomerInfo("phone number is too long"))
        if not _PHONE_PATTERN.match(raw):
            return Failure(InvalidCustomerInfo(f"invalid phone number format: {raw}"))
        return Success(PhoneNumber(raw))

    def formatted(self) -> str:
        digits = self.value.replace("-", "")
        if len(digits) == 10:
            return f"{digits[0:2]}-{digits[2:6]}-{digits[6:10]}"
        if len(digits) == 11:
            return f"{digits[0:3]}-{digits[3:7]}-{digits[7:11]}"
        return self.value

    def __str__(self) -> str:
        return self.formatted()


@dataclass(frozen=True)
class PersonalInfo:
    first_name: str
    last_name: str

    @staticmethod
    def parse(first_name: str, last_name: str) -> Result["PersonalInfo", DomainError]:
        return (
            _validate_person_name(first_name, "first name")
            .bind(lambda _: _validate_person_name(last_name, "last name"))
            .map(lambda _: PersonalInfo(first_name.strip(), last_name.strip()))
        )

    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __str__(self) -> str:
        return self.full_name()


def _validate_person_name(raw: str, label: str) -> Result[str, DomainError]:
    if not raw.strip():
        return Failure(InvalidCustomerInfo(f"{label} is required"))
    if len(raw) > 50:
        return Failure(InvalidCustomerInfo(f"{label} must be 50 characters or fewer"))
    return Success(raw)


@dataclass(frozen=True)
class Address:
    postal_code: str
    prefecture: str
    city: str
    street: str
    building: str | None = None

    @staticmethod
    def parse(
        postal_code: str,
        prefecture: str,
        city: str,
        street: str,
        building: str | None = None,
    ) -> Result["Address", DomainError]:
        postal = postal_code.strip()
        if not _POSTAL_CODE_PATTERN.match(postal):
            return Failure(InvalidCustomerInfo("postal code must look like 123-4567"))

        fields = {"prefecture": prefecture, "city": city, "street": street}
        for label, value in fields.items():
            if not value.strip():
                return Failure(InvalidCustomerInfo(f"{label} is required"))
            if len(value.strip()) > 100:
                return Failure(
                    InvalidCustomerInfo(f"{label} must be 100 characters or fewer")
                )

        bldg = building.strip() if building else None
        if bldg is not None and len(bldg) > 100:
            return Failure(
                InvalidCustomerInfo("building must be 100 characters or fewer")
            )

        return Success(
            Address(
                postal_code=postal,
                prefecture=prefecture.strip(),
                city=city.strip(),
                street=street.strip(),
                building=bldg or None,
            )
        )

    def formatted(self) -> str:
        parts = [f"〒{self.postal_code}", self.prefecture, self.city, self.street]
        if self.building:
            parts.append(self.building)
        return " ".join(parts)
