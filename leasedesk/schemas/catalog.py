"""Pydantic schemas for the vehicle catalog."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from leasedesk.models import VehicleOffer
from leasedesk.schemas.common import CamelModel

SortField = Literal["created_at", "price", "year", "mileage_km", "days_on_sale"]
SortDirection = Literal["asc", "desc"]


class CatalogQuery(CamelModel):
    """Parsed catalog filters. Multi-value filters match any of their values."""

    offer_code: Optional[list[str]] = None
    status: Optional[list[str]] = None
    city: Optional[list[str]] = None
    brand: Optional[list[str]] = None
    model: Optional[list[str]] = None
    modification: Optional[list[str]] = None
    vehicle_type: Optional[list[str]] = None
    pts_type: Optional[list[str]] = None
    has_encumbrance: Optional[list[bool]] = None
    is_deregistered: Optional[list[bool]] = None
    responsible_person: Optional[list[str]] = None
    storage_address: Optional[list[str]] = None
    booking_status: Optional[list[str]] = None
    external_id: Optional[list[str]] = None
    crm_ref: Optional[list[str]] = None
    website_url: Optional[list[str]] = None
    yandex_disk_url: Optional[list[str]] = None

    search: Optional[str] = None
    sort_by: SortField = "created_at"
    sort_dir: SortDirection = "desc"
    page: int = Field(1, ge=1)
    page_size: int = Field(20, ge=1, le=100)

    price_min: Optional[float] = None
    price_max: Optional[float] = None
    year_min: Optional[float] = None
    year_max: Optional[float] = None
    mileage_min: Optional[float] = None
    mileage_max: Optional[float] = None
    key_count_min: Optional[float] = None
    key_count_max: Optional[float] = None
    days_on_sale_min: Optional[float] = None
    days_on_sale_max: Optional[float] = None


class CatalogItem(CamelModel):
    """A vehicle offer as shown in the catalog.

    ``responsible_person`` and ``website_url`` are None for viewers
    without stock access.
    """

    id: str
    import_batch_id: str
    offer_code: str
    status: str
    brand: str
    model: str
    modification: str
    vehicle_type: str
    year: int
    mileage_km: int
    key_count: int
    pts_type: str
    has_encumbrance: bool
    is_deregistered: bool
    responsible_person: Optional[str] = None
    storage_address: str
    days_on_sale: int
    price: float
    yandex_disk_url: str
    booking_status: str
    external_id: str
    crm_ref: str
    website_url: Optional[str] = None
    title: str
    has_media: bool
    created_at: datetime

    @classmethod
    def from_offer(cls, offer: VehicleOffer, privileged: bool) -> "CatalogItem":
        data = offer.model_dump(exclude={"id", "revision_id"})
        if not privileged:
            data["responsible_person"] = None
            data["website_url"] = None
        return cls(id=str(offer.id), **data)


class CatalogPagination(CamelModel):
    page: int
    page_size: int
    total: int


class CatalogListResponse(CamelModel):
    items: list[CatalogItem]
    pagination: CatalogPagination
