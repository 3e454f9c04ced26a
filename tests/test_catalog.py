"""Tests for catalog search, filter metadata and role-based redaction."""

import pytest
import pytest_asyncio
from httpx import AsyncClient

from conftest import OFFER_HEADERS, make_offer_row
from leasedesk.models import VehicleOffer
from leasedesk.services.import_service import normalize_row, resolve_column_map

COLUMN_INDEX = resolve_column_map(OFFER_HEADERS).field_to_column_index


async def _insert_offer(**overrides) -> VehicleOffer:
    row = normalize_row(make_offer_row(**overrides), COLUMN_INDEX)
    offer = VehicleOffer.from_row("batch-1", row)
    await offer.insert()
    return offer


@pytest_asyncio.fixture
async def offers(init_test_db) -> list[VehicleOffer]:
    return [
        await _insert_offer(
            offer_code="OFR-1",
            brand="Toyota",
            model="Camry",
            price="2 100 000",
            year=2020,
            yandex_disk_url="",
            responsible_person="Иванов И.И.",
        ),
        await _insert_offer(
            offer_code="OFR-2",
            brand="BMW",
            model="X5",
            modification="xDrive30d",
            price="5 500 000",
            year=2021,
            storage_address="г. Москва, ул. Тверская 1",
            responsible_person="Петров П.П.",
        ),
        await _insert_offer(
            offer_code="OFR-3",
            brand="BMW",
            model="X3",
            modification="",
            price="3 200 000",
            year=2018,
            has_encumbrance="Да",
            yandex_disk_url="https://cdn.example.com/photos/x3.jpg",
            responsible_person="Петров П.П.",
        ),
    ]


def _codes(response) -> list[str]:
    return [item["offerCode"] for item in response.json()["items"]]


class TestCatalogItems:
    """Tests for GET /api/catalog/items."""

    @pytest.mark.asyncio
    async def test_media_first_then_sort(self, manager_client: AsyncClient, offers):
        response = await manager_client.get(
            "/api/catalog/items", params={"sortBy": "price", "sortDir": "asc"}
        )
        assert response.status_code == 200
        # OFR-1 has no media link, so it comes last despite the lowest price
        assert _codes(response) == ["OFR-3", "OFR-2", "OFR-1"]
        assert response.json()["pagination"] == {"page": 1, "pageSize": 20, "total": 3}

    @pytest.mark.asyncio
    async def test_pagination(self, manager_client: AsyncClient, offers):
        response = await manager_client.get(
            "/api/catalog/items",
            params={"sortBy": "year", "sortDir": "desc", "page": 2, "pageSize": 1},
        )
        assert _codes(response) == ["OFR-3"]
        assert response.json()["pagination"]["total"] == 3

    @pytest.mark.asyncio
    async def test_multi_value_filters(self, manager_client: AsyncClient, offers):
        comma = await manager_client.get("/api/catalog/items", params={"model": "X5,Camry"})
        repeated = await manager_client.get(
            "/api/catalog/items", params=[("model", "X5"), ("model", "Camry")]
        )
        assert sorted(_codes(comma)) == ["OFR-1", "OFR-2"]
        assert sorted(_codes(repeated)) == ["OFR-1", "OFR-2"]

    @pytest.mark.asyncio
    async def test_boolean_filter(self, manager_client: AsyncClient, offers):
        response = await manager_client.get("/api/catalog/items", params={"hasEncumbrance": "true"})
        assert _codes(response) == ["OFR-3"]

    @pytest.mark.asyncio
    async def test_range_filters(self, manager_client: AsyncClient, offers):
        response = await manager_client.get(
            "/api/catalog/items", params={"priceMin": "3000000", "yearMax": "2020"}
        )
        assert _codes(response) == ["OFR-3"]

    @pytest.mark.asyncio
    async def test_unparsable_range_is_ignored(self, manager_client: AsyncClient, offers):
        response = await manager_client.get("/api/catalog/items", params={"priceMin": "дорого"})
        assert response.json()["pagination"]["total"] == 3

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive(self, manager_client: AsyncClient, offers):
        response = await manager_client.get("/api/catalog/items", params={"search": "xdrive"})
        assert _codes(response) == ["OFR-2"]

    @pytest.mark.asyncio
    async def test_search_escapes_regex(self, manager_client: AsyncClient, offers):
        response = await manager_client.get("/api/catalog/items", params={"search": "X.*"})
        assert response.json()["pagination"]["total"] == 0

    @pytest.mark.asyncio
    async def test_city_filter_matches_region(self, manager_client: AsyncClient, offers):
        response = await manager_client.get(
            "/api/catalog/items", params={"city": "Республика Татарстан"}
        )
        assert sorted(_codes(response)) == ["OFR-1", "OFR-3"]

        response = await manager_client.get("/api/catalog/items", params={"city": "Москва"})
        assert _codes(response) == ["OFR-2"]

    @pytest.mark.asyncio
    async def test_invalid_page_size(self, manager_client: AsyncClient, offers):
        response = await manager_client.get("/api/catalog/items", params={"pageSize": 500})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_invalid_sort(self, manager_client: AsyncClient, offers):
        response = await manager_client.get("/api/catalog/items", params={"sortBy": "title"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_requires_login(self, unauthenticated_client: AsyncClient):
        response = await unauthenticated_client.get("/api/catalog/items")
        assert response.status_code == 401


class TestRedaction:
    """Responsible person and website are only visible to stock roles."""

    @pytest.mark.asyncio
    async def test_manager_sees_redacted_items(self, manager_client: AsyncClient, offers):
        response = await manager_client.get("/api/catalog/items")
        for item in response.json()["items"]:
            assert item["responsiblePerson"] is None
            assert item["websiteUrl"] is None

    @pytest.mark.asyncio
    async def test_owner_sees_everything(self, owner_client: AsyncClient, offers):
        response = await owner_client.get("/api/catalog/items", params={"offerCode": "OFR-1"})
        item = response.json()["items"][0]
        assert item["responsiblePerson"] == "Иванов И.И."
        assert item["websiteUrl"] == "https://example.com/offers/1"

    @pytest.mark.asyncio
    async def test_restricted_filters_ignored_for_manager(
        self, manager_client: AsyncClient, owner_client: AsyncClient, offers
    ):
        params = {"responsiblePerson": "Иванов И.И."}
        manager = await manager_client.get("/api/catalog/items", params=params)
        owner = await owner_client.get("/api/catalog/items", params=params)
        assert manager.json()["pagination"]["total"] == 3
        assert _codes(owner) == ["OFR-1"]

    @pytest.mark.asyncio
    async def test_search_skips_restricted_fields_for_manager(
        self, manager_client: AsyncClient, owner_client: AsyncClient, offers
    ):
        params = {"search": "петров"}
        manager = await manager_client.get("/api/catalog/items", params=params)
        owner = await owner_client.get("/api/catalog/items", params=params)
        assert manager.json()["pagination"]["total"] == 0
        assert sorted(_codes(owner)) == ["OFR-2", "OFR-3"]

    @pytest.mark.asyncio
    async def test_single_item_is_redacted(self, manager_client: AsyncClient, offers):
        response = await manager_client.get(f"/api/catalog/items/{offers[0].id}")
        assert response.status_code == 200
        data = response.json()
        assert data["offerCode"] == "OFR-1"
        assert data["responsiblePerson"] is None


class TestCatalogItem:
    """Tests for GET /api/catalog/items/{id}."""

    @pytest.mark.asyncio
    async def test_malformed_id(self, manager_client: AsyncClient, offers):
        response = await manager_client.get("/api/catalog/items/not-an-id")
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_id(self, manager_client: AsyncClient, offers):
        response = await manager_client.get("/api/catalog/items/0123456789abcdef01234567")
        assert response.status_code == 404


class TestCatalogFilters:
    """Tests for GET /api/catalog/filters."""

    @pytest.mark.asyncio
    async def test_filter_metadata(self, owner_client: AsyncClient, offers):
        response = await owner_client.get("/api/catalog/filters")
        assert response.status_code == 200
        data = response.json()

        assert data["brand"] == ["BMW", "Toyota"]
        assert data["hasEncumbrance"] == [False, True]
        assert data["modelsByBrand"] == {"BMW": ["X3", "X5"], "Toyota": ["Camry"]}
        assert data["city"] == ["Москва", "Республика Татарстан"]
        assert data["responsiblePerson"] == ["Иванов И.И.", "Петров П.П."]
        assert data["priceMin"] == 2100000
        assert data["priceMax"] == 5500000
        assert data["yearMin"] == 2018
        assert data["yearMax"] == 2021

    @pytest.mark.asyncio
    async def test_restricted_metadata_omitted_for_manager(
        self, manager_client: AsyncClient, offers
    ):
        data = (await manager_client.get("/api/catalog/filters")).json()
        assert "responsiblePerson" not in data
        assert "websiteUrl" not in data
        assert "brand" in data

    @pytest.mark.asyncio
    async def test_empty_catalog(self, manager_client: AsyncClient):
        data = (await manager_client.get("/api/catalog/filters")).json()
        assert data["brand"] == []
        assert data["city"] == []
        assert data["modelsByBrand"] == {}
        assert data["priceMin"] is None
