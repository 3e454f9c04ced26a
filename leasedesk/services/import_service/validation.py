"""Row validation rules for canonical vehicle offer rows."""

import math
from dataclasses import dataclass

from .constants import INT64_MAX, INT64_MIN, YEAR_MAX, YEAR_MIN
from .converters import CanonicalOfferRow, LenientValue, ValueKind

REQUIRED_FIELD_EMPTY = "Required field is empty"


@dataclass(frozen=True)
class RowValidationError:
    """A single field-level violation for one row."""

    field: str
    message: str


def _is_storable_int(value: int | None) -> bool:
    return value is not None and INT64_MIN <= value <= INT64_MAX


def _check_lenient(field: str, value: LenientValue) -> RowValidationError | None:
    if value.kind is ValueKind.PARSED:
        if isinstance(value.value, int) and not isinstance(value.value, bool):
            if not _is_storable_int(value.value):
                return RowValidationError(field, f"Invalid {field} value")
        return None
    if value.kind is ValueKind.RAW_TEXT:
        return RowValidationError(field, f"Unrecognized value '{value.value}'")
    return RowValidationError(field, REQUIRED_FIELD_EMPTY)


def validate_row(row: CanonicalOfferRow) -> list[RowValidationError]:
    """Check presence and range rules, reporting every violation.

    Only the offer code, the numeric fields and the lenient fields are
    enforced; descriptive text fields may be empty. Integers must fit in
    64 bits and prices must be finite to be storable.
    """
    errors: list[RowValidationError] = []

    if not row.offer_code:
        errors.append(RowValidationError("offer_code", REQUIRED_FIELD_EMPTY))

    if row.year is None or not YEAR_MIN <= row.year <= YEAR_MAX:
        errors.append(RowValidationError("year", "Invalid year value"))

    if not _is_storable_int(row.mileage_km):
        errors.append(RowValidationError("mileage_km", "Invalid mileage value"))

    for field in ("key_count", "has_encumbrance", "is_deregistered"):
        error = _check_lenient(field, getattr(row, field))
        if error:
            errors.append(error)

    if not _is_storable_int(row.days_on_sale):
        errors.append(RowValidationError("days_on_sale", "Invalid days_on_sale value"))

    if row.price is None or not math.isfinite(row.price):
        errors.append(RowValidationError("price", "Invalid price value"))

    return errors
