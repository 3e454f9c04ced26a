"""VehicleOffer document model."""

import re
from datetime import datetime
from typing import TYPE_CHECKING

from beanie import Document, Indexed
from pydantic import Field

from leasedesk.models.timestamps import utc_now

if TYPE_CHECKING:
    from leasedesk.services.import_service.converters import CanonicalOfferRow, LenientValue

# Yandex Disk hosts and direct image links count as media
_MEDIA_LINK_RE = re.compile(
    r"disk\.yandex\.|yadi\.sk|\.(?:jpe?g|png|webp|gif|bmp|svg)(?:$|[?#/])",
    re.IGNORECASE,
)


def is_media_link(url: str | None) -> bool:
    """Whether a link points at photos the catalog can preview."""
    return bool(url and _MEDIA_LINK_RE.search(url))


def _require_parsed(name: str, value: "LenientValue") -> int | bool:
    if not value.is_parsed:
        raise ValueError(f"Cannot store {name}: value is {value.kind.value}, not parsed")
    return value.value


class VehicleOffer(Document):
    """A validated vehicle offer imported from a spreadsheet row.

    Text fields are stored as empty strings rather than null. The lenient
    fields (key_count, has_encumbrance, is_deregistered) are always typed
    here; unparsable source values never get this far.
    """

    offer_code: Indexed(str)
    status: str = ""
    brand: Indexed(str) = ""
    model: str = ""
    modification: str = ""
    vehicle_type: str = ""
    year: int
    mileage_km: int
    key_count: int
    pts_type: str = ""
    has_encumbrance: bool
    is_deregistered: bool
    responsible_person: str = ""
    storage_address: str = ""
    days_on_sale: int
    price: float
    yandex_disk_url: str = ""
    booking_status: str = ""
    external_id: str = ""
    crm_ref: str = ""
    website_url: str = ""
    title: str = ""

    # Offers with a media link are listed first in the catalog
    has_media: bool = False

    import_batch_id: Indexed(str)
    created_at: datetime = Field(default_factory=utc_now)

    class Settings:
        name = "vehicle_offers"
        indexes = [
            "created_at",
            "price",
            "year",
        ]

    @classmethod
    def from_row(cls, import_batch_id: str, row: "CanonicalOfferRow") -> "VehicleOffer":
        """Build a document from a validated canonical row.

        Raises:
            ValueError: If a required numeric field is missing or a lenient
                field did not parse.
        """
        for name in ("year", "mileage_km", "days_on_sale", "price"):
            if getattr(row, name) is None:
                raise ValueError(f"Cannot store {name}: value is missing")

        yandex_disk_url = row.yandex_disk_url or ""
        return cls(
            offer_code=row.offer_code or "",
            status=row.status or "",
            brand=row.brand or "",
            model=row.model or "",
            modification=row.modification or "",
            vehicle_type=row.vehicle_type or "",
            year=row.year,
            mileage_km=row.mileage_km,
            key_count=_require_parsed("key_count", row.key_count),
            pts_type=row.pts_type or "",
            has_encumbrance=_require_parsed("has_encumbrance", row.has_encumbrance),
            is_deregistered=_require_parsed("is_deregistered", row.is_deregistered),
            responsible_person=row.responsible_person or "",
            storage_address=row.storage_address or "",
            days_on_sale=row.days_on_sale,
            price=row.price,
            yandex_disk_url=yandex_disk_url,
            booking_status=row.booking_status or "",
            external_id=row.external_id or "",
            crm_ref=row.crm_ref or "",
            website_url=row.website_url or "",
            title=row.title,
            has_media=is_media_link(yandex_disk_url),
            import_batch_id=import_batch_id,
        )
