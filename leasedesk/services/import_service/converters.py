"""Row conversion: raw spreadsheet cells -> canonical vehicle offer row."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Sequence

from .normalizers import (
    build_title,
    normalize_text,
    normalize_url,
    parse_boolean,
    parse_integer,
    parse_price,
)


class ValueKind(str, Enum):
    """How a lenient cell was interpreted."""

    PARSED = "parsed"
    RAW_TEXT = "raw_text"
    ABSENT = "absent"


@dataclass(frozen=True)
class LenientValue:
    """A typed cell value that remembers unparsable input.

    A cell that fails its typed parse but is not blank keeps its normalized
    text as RAW_TEXT, so validation can tell "malformed" from "missing".
    """

    kind: ValueKind
    value: int | bool | str | None = None

    @classmethod
    def parsed(cls, value: int | bool) -> "LenientValue":
        return cls(ValueKind.PARSED, value)

    @classmethod
    def raw_text(cls, text: str) -> "LenientValue":
        return cls(ValueKind.RAW_TEXT, text)

    @classmethod
    def absent(cls) -> "LenientValue":
        return cls(ValueKind.ABSENT)

    @property
    def is_parsed(self) -> bool:
        return self.kind is ValueKind.PARSED


def parse_lenient(raw: Any, parser: Callable[[Any], int | bool | None]) -> LenientValue:
    """Parse a cell with ``parser``, falling back to its normalized text."""
    parsed = parser(raw)
    if parsed is not None:
        return LenientValue.parsed(parsed)
    text = normalize_text(raw)
    if text:
        return LenientValue.raw_text(text)
    return LenientValue.absent()


@dataclass(frozen=True)
class CanonicalOfferRow:
    """A fully normalized import row, before persistence.

    Text fields are None when blank. ``title`` is derived and is non-empty
    whenever any of brand/model/modification/offer_code is non-empty.
    """

    offer_code: str | None
    status: str | None
    brand: str | None
    model: str | None
    modification: str | None
    vehicle_type: str | None
    year: int | None
    mileage_km: int | None
    key_count: LenientValue
    pts_type: str | None
    has_encumbrance: LenientValue
    is_deregistered: LenientValue
    responsible_person: str | None
    storage_address: str | None
    days_on_sale: int | None
    price: float | None
    yandex_disk_url: str | None
    booking_status: str | None
    external_id: str | None
    crm_ref: str | None
    website_url: str | None
    title: str


def _text_or_none(raw: Any) -> str | None:
    return normalize_text(raw) or None


def normalize_row(row: Sequence[Any], field_to_column_index: Mapping[str, int]) -> CanonicalOfferRow:
    """Normalize one data row using a resolved column map.

    Unmapped fields, and cells beyond the end of a short row, read as blank.
    This function never raises for bad cell content.

    Args:
        row: Raw row cells.
        field_to_column_index: Canonical field -> column index.

    Returns:
        The canonical row.
    """

    def cell(canonical: str) -> Any:
        index = field_to_column_index.get(canonical)
        if index is None or index >= len(row):
            return None
        return row[index]

    offer_code = _text_or_none(cell("offer_code"))
    brand = _text_or_none(cell("brand"))
    model = _text_or_none(cell("model"))
    modification = _text_or_none(cell("modification"))

    return CanonicalOfferRow(
        offer_code=offer_code,
        status=_text_or_none(cell("status")),
        brand=brand,
        model=model,
        modification=modification,
        vehicle_type=_text_or_none(cell("vehicle_type")),
        year=parse_integer(cell("year")),
        mileage_km=parse_integer(cell("mileage_km")),
        key_count=parse_lenient(cell("key_count"), parse_integer),
        pts_type=_text_or_none(cell("pts_type")),
        has_encumbrance=parse_lenient(cell("has_encumbrance"), parse_boolean),
        is_deregistered=parse_lenient(cell("is_deregistered"), parse_boolean),
        responsible_person=_text_or_none(cell("responsible_person")),
        storage_address=_text_or_none(cell("storage_address")),
        days_on_sale=parse_integer(cell("days_on_sale")),
        price=parse_price(cell("price")),
        yandex_disk_url=normalize_url(cell("yandex_disk_url")),
        booking_status=_text_or_none(cell("booking_status")),
        external_id=_text_or_none(cell("external_id")),
        crm_ref=_text_or_none(cell("crm_ref")),
        website_url=normalize_url(cell("website_url")),
        title=build_title(brand, model, modification, offer_code),
    )
