"""Tests for region extraction from storage addresses."""

import pytest

from leasedesk.services.regions import (
    canonicalize_region_label,
    extract_region,
    normalize_region_label,
)


class TestExtractRegion:
    """Tests for extract_region."""

    @pytest.mark.parametrize(
        "address, expected",
        [
            ("420000, Респ. Татарстан, г. Казань, ул. Баумана 1", "Республика Татарстан"),
            ("Республика Татарстан Лаишевский район, с. Столбище", "Республика Татарстан"),
            ("Свердловская обл., г. Екатеринбург", "Свердловская область"),
            ("Московская обл, Одинцовский р-н", "Московская область"),
            ("Пермский край г Пермь ул Ленина 5", "Пермский край"),
            ("Ханты-Мансийский АО - Югра, г. Сургут", "Ханты-Мансийский автономный округ - Югра"),
            ("РФ, Респ. Саха /Якутия/, г. Якутск", "Республика Саха (Якутия)"),
            ("Республика Горный Алтай, с. Чемал", "Республика Горный Алтай"),
            ("г. Москва, ул. Тверская 1", "Москва"),
            ("Санкт-Петербург, Невский пр. 10", "Санкт-Петербург"),
        ],
    )
    def test_known_regions(self, address, expected):
        assert extract_region(address) == expected

    @pytest.mark.parametrize("address", ["", "   ", "ул. Ленина 5", "склад №3"])
    def test_unrecognized(self, address):
        assert extract_region(address) is None

    def test_whitespace_is_collapsed(self):
        assert extract_region("  Респ.   Татарстан ,  г. Казань ") == "Республика Татарстан"


class TestRegionLabels:
    def test_normalize_expands_abbreviations(self):
        assert normalize_region_label("Россия, Тверская обл.") == "Тверская область"

    def test_normalize_strips_zero_width_and_punctuation(self):
        assert normalize_region_label("Респ.\u200b Коми;") == "Республика Коми"

    def test_canonical_labels(self):
        assert canonicalize_region_label("Кемеровская область - Кузбасс") == "Кемеровская область - Кузбасс"
        assert canonicalize_region_label("Удмуртия респ") == "Удмуртская Республика"
        assert canonicalize_region_label("москва") == "Москва"
