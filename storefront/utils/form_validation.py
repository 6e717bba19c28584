"""Validation for checkout, donation and quantity forms.

Single-value checks return a bool. Form checks collect every problem into a
``ValidationResult`` so a UI can show all field errors at once; nested address
errors on checkout are reported as ``shippingAddress.<field>``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^[\d\s\-+()]+$")
MIN_PHONE_LENGTH = 10


@dataclass
class FieldError:
    field: str
    message: str


@dataclass
class ValidationResult:
    errors: List[FieldError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add(self, field_name: str, message: str) -> None:
        self.errors.append(FieldError(field_name, message))

    def as_dict(self) -> Dict[str, str]:
        out: Dict[str, str] = {}
        for err in self.errors:
            out.setdefault(err.field, err.message)
        return out


def _strip(v: Any) -> str:
    return "" if v is None else str(v).strip()


def validate_email(email: Optional[str]) -> bool:
    return bool(EMAIL_PATTERN.match(_strip(email)))


def validate_phone(phone: Optional[str]) -> bool:
    raw = "" if phone is None else str(phone)
    return len(raw.strip()) >= MIN_PHONE_LENGTH and bool(PHONE_PATTERN.match(raw))


def validate_name(name: Optional[str]) -> bool:
    return len(_strip(name)) >= 2


def validate_amount(amount: Any, minimum: float = 0) -> bool:
    try:
        value = float(amount)
    except (TypeError, ValueError):
        return False
    # NaN compares False against everything
    return value > minimum


def validate_address(address: Optional[Dict[str, Any]]) -> ValidationResult:
    address = address or {}
    result = ValidationResult()

    if len(_strip(address.get("line1"))) < 5:
        result.add("line1", "Street address must be at least 5 characters")
    if len(_strip(address.get("city"))) < 2:
        result.add("city", "City is required")
    if len(_strip(address.get("country"))) != 2:
        result.add("country", "Valid country code is required")

    return result


def _validate_person(form: Dict[str, Any], result: ValidationResult) -> None:
    if not validate_name(form.get("firstName")):
        result.add("firstName", "First name must be at least 2 characters")
    if not validate_name(form.get("lastName")):
        result.add("lastName", "Last name must be at least 2 characters")
    if not validate_email(form.get("email")):
        result.add("email", "Please enter a valid email address")


def validate_checkout_form(form: Dict[str, Any]) -> ValidationResult:
    result = ValidationResult()
    _validate_person(form, result)

    if not validate_phone(form.get("phone")):
        result.add("phone", "Please enter a valid phone number")

    for err in validate_address(form.get("shippingAddress")).errors:
        result.add(f"shippingAddress.{err.field}", err.message)

    return result


def validate_donation_form(form: Dict[str, Any]) -> ValidationResult:
    result = ValidationResult()
    _validate_person(form, result)

    if not validate_amount(form.get("amount"), 1):
        result.add("amount", "Donation amount must be at least 1")

    return result


def validate_quantity(quantity: int, max_inventory: int) -> ValidationResult:
    result = ValidationResult()
    if quantity < 1:
        result.add("quantity", "Quantity must be at least 1")
    if quantity > max_inventory:
        result.add("quantity", f"Only {max_inventory} items available")
    return result
