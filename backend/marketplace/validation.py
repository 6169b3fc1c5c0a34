from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

PROFILE_ADDRESS_FIELDS = {
    "street": "Street is required",
    "city": "City is required",
    "state": "State is required",
    "country": "Country is required",
    "postalCode": "Postal code is required",
}


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate email)."""


class FormValidationError(ValidationError):
    """Field-keyed validation failure: errors maps field path -> message."""

    def __init__(self, errors: dict[str, str]):
        super().__init__("Validation failed")
        self.errors = errors


def to_decimal(value: Any) -> Decimal | None:
    """Parse a number, returning None for blanks and junk. Booleans are rejected."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    return number


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def validate_product(data: dict) -> dict[str, str]:
    errors: dict[str, str] = {}
    name = data.get("name")
    if _blank(name):
        errors["name"] = "Product name is required"
    elif len(str(name).strip()) < 3:
        errors["name"] = "Product name must be at least 3 characters"

    if _blank(data.get("boxSize")):
        errors["boxSize"] = "Box size is required"
    return errors


def validate_offer_product(data: dict) -> dict[str, str]:
    """
    One offer line item: product reference, positive price, and at least one
    daily quantity above zero. Quantities may not be negative.
    """
    errors: dict[str, str] = {}
    if _blank(data.get("productId")) and _blank(data.get("produceName")):
        errors["produceName"] = "Product name is required"

    price = data.get("price")
    parsed_price = to_decimal(price)
    if _blank(price):
        errors["price"] = "Price is required"
    elif parsed_price is None:
        errors["price"] = "Price must be a number"
    elif parsed_price <= 0:
        errors["price"] = "Price must be positive"

    if "totalQuantity" in data and data["totalQuantity"] is not None:
        total = to_decimal(data["totalQuantity"])
        if total is None or total < 0:
            errors["totalQuantity"] = "Total quantity must be zero or more"

    daily = data.get("dailyQuantities")
    if not isinstance(daily, dict):
        errors["dailyQuantities"] = "At least one daily quantity is required"
        return errors

    quantities = {day: to_decimal(qty) for day, qty in daily.items()}
    for day, qty in quantities.items():
        if qty is None or qty < 0:
            errors[f"dailyQuantities.{day}"] = "Quantity must be zero or more"
    if not any(qty is not None and qty > 0 for qty in quantities.values()):
        errors["dailyQuantities"] = "At least one daily quantity is required"
    return errors


def validate_offer(data: dict) -> dict[str, str]:
    errors: dict[str, str] = {}
    week = data.get("weekNumber")
    if isinstance(week, bool) or not isinstance(week, int):
        errors["weekNumber"] = "Week number is required"

    products = data.get("products")
    if not isinstance(products, list) or not products:
        errors["products"] = "At least one product is required"
        return errors

    for index, product in enumerate(products):
        if not isinstance(product, dict):
            errors[f"products[{index}]"] = "Invalid product entry"
            continue
        for field, message in validate_offer_product(product).items():
            errors[f"products[{index}].{field}"] = message
    return errors


def validate_profile(data: dict) -> dict[str, str]:
    errors: dict[str, str] = {}
    if _blank(data.get("companyName")):
        errors["companyName"] = "Company name is required"
    if _blank(data.get("vatNumber")):
        errors["vatNumber"] = "VAT number is required"

    address = data.get("address")
    if not isinstance(address, dict):
        address = {}
    for field, message in PROFILE_ADDRESS_FIELDS.items():
        if _blank(address.get(field)):
            errors[f"address.{field}"] = message
    for field, label in (("lat", "Latitude"), ("lng", "Longitude")):
        if to_decimal(address.get(field)) is None:
            errors[f"address.{field}"] = f"{label} is required"
    return errors


def validate_form(validator: Callable[[dict], dict[str, str]], data: dict | None) -> tuple[bool, dict[str, str]]:
    errors = validator(data or {})
    return (not errors), errors


def require_valid(validator: Callable[[dict], dict[str, str]], data: dict | None) -> dict:
    """Return the payload unchanged, or raise FormValidationError."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    is_valid, errors = validate_form(validator, data)
    if not is_valid:
        raise FormValidationError(errors)
    return data
