"""Tests for header resolution, row normalization and row validation."""

import pytest

from conftest import OFFER_HEADERS, make_offer_row
from leasedesk.models import VehicleOffer
from leasedesk.services.import_service import (
    CANONICAL_FIELDS,
    LenientValue,
    ValueKind,
    normalize_row,
    resolve_column_map,
    validate_row,
)


def _normalize(**overrides):
    column_map = resolve_column_map(OFFER_HEADERS)
    return normalize_row(make_offer_row(**overrides), column_map.field_to_column_index)


# =============================================================================
# Header resolution
# =============================================================================


class TestResolveColumnMap:
    """Tests for resolve_column_map."""

    def test_all_russian_headers_resolve(self):
        column_map = resolve_column_map(OFFER_HEADERS)
        assert column_map.missing_required_fields == []
        assert column_map.is_complete
        assert column_map.field_to_column_index == {
            field: index for index, field in enumerate(CANONICAL_FIELDS)
        }

    def test_headers_are_normalized_before_matching(self):
        headers = list(OFFER_HEADERS)
        headers[6] = "  ГОД   ВЫПУСКА: "
        headers[11] = "Снят с учёта"
        column_map = resolve_column_map(headers)
        assert column_map.is_complete
        assert column_map.field_to_column_index["year"] == 6
        assert column_map.field_to_column_index["is_deregistered"] == 11

    def test_english_aliases(self):
        headers = ["Offer code", "Brand", "Model", "Price"]
        column_map = resolve_column_map(headers)
        assert column_map.field_to_column_index["offer_code"] == 0
        assert column_map.field_to_column_index["price"] == 3

    def test_missing_price_is_reported(self):
        headers = [h for h in OFFER_HEADERS if h != "Цена"]
        column_map = resolve_column_map(headers)
        assert column_map.missing_required_fields == ["price"]
        assert not column_map.is_complete

    def test_missing_fields_keep_canonical_order(self):
        column_map = resolve_column_map(["Цена", "Марка"])
        assert column_map.missing_required_fields == [
            f for f in CANONICAL_FIELDS if f not in ("price", "brand")
        ]

    def test_first_duplicate_column_wins(self):
        headers = list(OFFER_HEADERS) + ["Марка"]
        column_map = resolve_column_map(headers)
        assert column_map.field_to_column_index["brand"] == 2

    def test_empty_and_none_headers(self):
        column_map = resolve_column_map([None, "", "Марка"])
        assert column_map.field_to_column_index == {"brand": 2}


# =============================================================================
# Row normalization
# =============================================================================


class TestNormalizeRow:
    """Tests for normalize_row."""

    def test_valid_row(self):
        row = _normalize()
        assert row.offer_code == "OFR-1"
        assert row.year == 2020
        assert row.mileage_km == 45000
        assert row.key_count == LenientValue.parsed(2)
        assert row.has_encumbrance == LenientValue.parsed(False)
        assert row.is_deregistered == LenientValue.parsed(True)
        assert row.price == pytest.approx(1234567.5)
        assert row.website_url == "https://example.com/offers/1"
        assert row.title == "Toyota Camry 2.5 AT"

    def test_blank_text_is_none(self):
        row = _normalize(status="   ", booking_status=None)
        assert row.status is None
        assert row.booking_status is None

    def test_unparsable_lenient_keeps_raw_text(self):
        row = _normalize(key_count="два", has_encumbrance="  не  знаю ")
        assert row.key_count.kind is ValueKind.RAW_TEXT
        assert row.key_count.value == "два"
        assert row.has_encumbrance == LenientValue.raw_text("не знаю")

    def test_blank_lenient_is_absent(self):
        row = _normalize(is_deregistered="")
        assert row.is_deregistered == LenientValue.absent()
        assert not row.is_deregistered.is_parsed

    def test_short_row_reads_as_blank(self):
        column_map = resolve_column_map(OFFER_HEADERS)
        row = normalize_row(["OFR-9", "В продаже"], column_map.field_to_column_index)
        assert row.offer_code == "OFR-9"
        assert row.brand is None
        assert row.price is None
        assert row.key_count == LenientValue.absent()
        assert row.title == "OFR-9"

    def test_unmapped_field_reads_as_blank(self):
        row = normalize_row(["Toyota"], {"brand": 0})
        assert row.brand == "Toyota"
        assert row.offer_code is None
        assert row.title == "Toyota"

    def test_lenient_values_are_tagged(self):
        row = _normalize(key_count="n/a")
        assert row.key_count == LenientValue.raw_text("n/a")
        assert row.has_encumbrance == LenientValue.parsed(False)


# =============================================================================
# Validation
# =============================================================================


class TestValidateRow:
    """Tests for validate_row."""

    def test_valid_row_has_no_errors(self):
        assert validate_row(_normalize()) == []

    def test_year_out_of_range(self):
        errors = validate_row(_normalize(year="1800"))
        assert [(e.field, e.message) for e in errors] == [("year", "Invalid year value")]

    @pytest.mark.parametrize("year", [1950, 2100])
    def test_year_bounds_are_inclusive(self, year):
        assert validate_row(_normalize(year=year)) == []

    def test_empty_offer_code(self):
        errors = validate_row(_normalize(offer_code="  "))
        assert [(e.field, e.message) for e in errors] == [("offer_code", "Required field is empty")]

    def test_unrecognized_lenient_value(self):
        errors = validate_row(_normalize(has_encumbrance="возможно"))
        assert [(e.field, e.message) for e in errors] == [
            ("has_encumbrance", "Unrecognized value 'возможно'")
        ]

    @pytest.mark.parametrize(
        "field, message",
        [
            ("mileage_km", "Invalid mileage value"),
            ("days_on_sale", "Invalid days_on_sale value"),
            ("key_count", "Invalid key_count value"),
        ],
    )
    def test_integer_too_large_to_store(self, field, message):
        errors = validate_row(_normalize(**{field: "99999999999999999999"}))
        assert [(e.field, e.message) for e in errors] == [(field, message)]

    def test_largest_storable_integer(self):
        assert validate_row(_normalize(mileage_km=str(2**63 - 1))) == []

    def test_infinite_price(self):
        errors = validate_row(_normalize(price="9" * 400))
        assert [(e.field, e.message) for e in errors] == [("price", "Invalid price value")]

    def test_reports_every_violation(self):
        row = _normalize(
            offer_code="",
            year="",
            mileage_km="много",
            key_count="",
            has_encumbrance="",
            is_deregistered="",
            days_on_sale="12.5",
            price="",
        )
        fields = [e.field for e in validate_row(row)]
        assert fields == [
            "offer_code",
            "year",
            "mileage_km",
            "key_count",
            "has_encumbrance",
            "is_deregistered",
            "days_on_sale",
            "price",
        ]

    def test_descriptive_fields_may_be_empty(self):
        row = _normalize(brand="", model="", status="", storage_address="", website_url="")
        assert validate_row(row) == []


class TestVehicleOfferFromRow:
    """Tests for the storage boundary conversion."""

    @pytest.mark.asyncio
    async def test_blank_text_stored_as_empty_string(self, init_test_db):
        offer = VehicleOffer.from_row("batch-1", _normalize(booking_status="", crm_ref=None))
        assert offer.booking_status == ""
        assert offer.crm_ref == ""
        assert offer.key_count == 2
        assert offer.has_encumbrance is False
        assert offer.import_batch_id == "batch-1"

    @pytest.mark.asyncio
    async def test_media_flag(self, init_test_db):
        assert VehicleOffer.from_row("b", _normalize()).has_media is True
        assert VehicleOffer.from_row("b", _normalize(yandex_disk_url="")).has_media is False

    @pytest.mark.asyncio
    async def test_unparsed_lenient_value_is_refused(self, init_test_db):
        with pytest.raises(ValueError, match="key_count"):
            VehicleOffer.from_row("b", _normalize(key_count="два"))
