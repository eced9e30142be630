"""Field-level validation for incoming request bodies.

Each validator inspects an already-parsed request schema and returns every
violation it finds instead of stopping at the first one. Routers call these
once, before anything is handed to a service.
"""

import re
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from email_validator import EmailNotValidError, validate_email

from records.models import MAX_INT

if TYPE_CHECKING:
    from records.schemas.officer import OfficerRequest
    from records.schemas.product import ProductRequest

SKU_PATTERN = re.compile(r"^[A-Z]{3}-[0-9]{6}$")

MIN_PRICE = Decimal("0.01")
MAX_PRICE = Decimal("999999.99")


@dataclass(frozen=True)
class FieldViolation:
    field: str
    rejected_value: object
    message: str
    code: str | None = None


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _is_email(value: str) -> bool:
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def validate_product_request(request: "ProductRequest") -> list[FieldViolation]:
    violations: list[FieldViolation] = []

    if _is_blank(request.name):
        violations.append(
            FieldViolation("name", request.name, "Product name is required", "NotBlank")
        )
    elif not 3 <= len(request.name) <= 100:  # type: ignore[arg-type]
        violations.append(
            FieldViolation(
                "name",
                request.name,
                "Product name must be between 3 and 100 characters",
                "Size",
            )
        )

    if request.price is None:
        violations.append(FieldViolation("price", None, "Price is required", "NotNull"))
    elif request.price < MIN_PRICE:
        violations.append(
            FieldViolation("price", request.price, "Price must be greater than 0", "DecimalMin")
        )
    elif request.price > MAX_PRICE:
        violations.append(
            FieldViolation(
                "price", request.price, "Price must be less than 1,000,000", "DecimalMax"
            )
        )

    if request.description is not None and len(request.description) > 500:
        violations.append(
            FieldViolation(
                "description",
                request.description,
                "Description cannot exceed 500 characters",
                "Size",
            )
        )

    if request.quantity is None:
        violations.append(FieldViolation("quantity", None, "Quantity is required", "NotNull"))
    elif request.quantity < 0:
        violations.append(
            FieldViolation("quantity", request.quantity, "Quantity cannot be negative", "Min")
        )
    elif request.quantity > MAX_INT:
        violations.append(
            FieldViolation("quantity", request.quantity, f"Quantity cannot exceed {MAX_INT}", "Max")
        )

    if _is_blank(request.sku):
        violations.append(FieldViolation("sku", request.sku, "SKU is required", "NotBlank"))
    elif not SKU_PATTERN.match(request.sku):  # type: ignore[arg-type]
        violations.append(
            FieldViolation(
                "sku",
                request.sku,
                "SKU must follow the pattern: 3 uppercase letters, hyphen, 6 digits "
                "(e.g., ABC-123456)",
                "Pattern",
            )
        )

    if request.contact_email is not None and not _is_email(request.contact_email):
        violations.append(
            FieldViolation(
                "contactEmail",
                request.contact_email,
                "Contact email must be a valid email address",
                "Email",
            )
        )

    return violations


def validate_stock_quantity(quantity: int | None, *, allow_zero: bool) -> list[FieldViolation]:
    """Check a stock amount.

    Absolute updates accept zero (emptying the shelf); reservations and
    additions need a strictly positive amount.
    """
    if quantity is None:
        return [FieldViolation("quantity", None, "Quantity is required", "NotNull")]
    minimum = 0 if allow_zero else 1
    if quantity < minimum:
        message = (
            "Stock quantity cannot be negative" if allow_zero else "Quantity must be at least 1"
        )
        return [FieldViolation("quantity", quantity, message, "Min")]
    if quantity > MAX_INT:
        return [FieldViolation("quantity", quantity, f"Quantity cannot exceed {MAX_INT}", "Max")]
    return []


def validate_officer_request(request: "OfficerRequest") -> list[FieldViolation]:
    violations: list[FieldViolation] = []

    if request.rank is None:
        violations.append(FieldViolation("rank", None, "Rank is required", "NotNull"))

    if _is_blank(request.last_name):
        violations.append(
            FieldViolation("lastName", request.last_name, "Last name is required", "NotBlank")
        )
    elif len(request.last_name) > 50:  # type: ignore[arg-type]
        violations.append(
            FieldViolation(
                "lastName", request.last_name, "Last name cannot exceed 50 characters", "Size"
            )
        )

    if request.first_name is not None and len(request.first_name) > 50:
        violations.append(
            FieldViolation(
                "firstName",
                request.first_name,
                "First name cannot exceed 50 characters",
                "Size",
            )
        )

    return violations
