from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import List, Optional

PRICE_INTEGER_DIGITS = 10
PRICE_FRACTION_DIGITS = 2
# counts are 32-bit integer columns
MAX_COUNT = 2**31 - 1

# field -> (max length, required)
_TEXT_FIELDS = (
    ("name", 255, True),
    ("sku", 100, True),
    ("category", 100, True),
    ("supplier", 255, True),
    ("barcode", 100, False),
)


@dataclass(frozen=True)
class FieldViolation:
    field: str
    message: str

    def as_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


def normalize_barcode(barcode: Optional[str]) -> Optional[str]:
    """Blank barcodes are stored as NULL so they never take part in uniqueness."""
    if barcode is None or not barcode.strip():
        return None
    return barcode


def _check_non_negative_int(field: str, value, out: List[FieldViolation]):
    if value is None:
        out.append(FieldViolation(field, f"{field} is required"))
    elif isinstance(value, bool) or not isinstance(value, int):
        out.append(FieldViolation(field, f"{field} must be an integer"))
    elif value < 0:
        out.append(FieldViolation(field, f"{field} must be non-negative"))
    elif value > MAX_COUNT:
        out.append(FieldViolation(field, f"{field} must not exceed {MAX_COUNT}"))


def _check_price(value, out: List[FieldViolation]):
    if value is None:
        out.append(FieldViolation("price", "price is required"))
        return
    try:
        price = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        out.append(FieldViolation("price", "price must be a decimal number"))
        return
    if not price.is_finite():
        out.append(FieldViolation("price", "price must be a decimal number"))
        return
    if price <= 0:
        out.append(FieldViolation("price", "price must be greater than 0"))
        return

    # trailing zeros do not count: 19.990 is a valid price
    sign, digits, exponent = price.normalize().as_tuple()
    fraction_digits = max(0, -exponent)
    integer_digits = max(0, len(digits) + exponent)
    if integer_digits > PRICE_INTEGER_DIGITS or fraction_digits > PRICE_FRACTION_DIGITS:
        out.append(
            FieldViolation(
                "price",
                f"price must have at most {PRICE_INTEGER_DIGITS} integer digits "
                f"and {PRICE_FRACTION_DIGITS} decimal places",
            )
        )


def validate_product(draft) -> List[FieldViolation]:
    """
    Check a product draft against the field rules of the products table.

    `draft` is anything exposing the product attributes (a ProductIn, a Product
    row, a SimpleNamespace). Returns one FieldViolation per failing rule; an
    empty list means the draft may be persisted.
    """
    violations: List[FieldViolation] = []

    for field, max_len, required in _TEXT_FIELDS:
        value = getattr(draft, field, None)
        if value is None or (isinstance(value, str) and not value.strip()):
            if required:
                violations.append(FieldViolation(field, f"{field} is required"))
            continue
        if not isinstance(value, str):
            violations.append(FieldViolation(field, f"{field} must be a string"))
        elif len(value) > max_len:
            violations.append(
                FieldViolation(field, f"{field} must not exceed {max_len} characters")
            )

    _check_non_negative_int("quantity", getattr(draft, "quantity", None), violations)
    _check_price(getattr(draft, "price", None), violations)
    _check_non_negative_int(
        "min_stock_level", getattr(draft, "min_stock_level", None), violations
    )
    return violations
