"""Catalog search and filter metadata over imported vehicle offers."""

import logging
import math
import re
from typing import Any

from pymongo import ASCENDING, DESCENDING

from leasedesk.models import VehicleOffer
from leasedesk.schemas.catalog import CatalogQuery
from leasedesk.services.regions import extract_region

logger = logging.getLogger(__name__)

# Multi-value exact-match filters: query field -> document field
TEXT_FILTER_FIELDS = (
    "offer_code",
    "status",
    "brand",
    "model",
    "modification",
    "vehicle_type",
    "pts_type",
    "responsible_person",
    "storage_address",
    "booking_status",
    "external_id",
    "crm_ref",
    "website_url",
    "yandex_disk_url",
)
BOOLEAN_FILTER_FIELDS = ("has_encumbrance", "is_deregistered")

# Range filters: query prefix -> document field
RANGE_FILTER_FIELDS = {
    "price": "price",
    "year": "year",
    "mileage": "mileage_km",
    "key_count": "key_count",
    "days_on_sale": "days_on_sale",
}

SEARCH_FIELDS = TEXT_FILTER_FIELDS + ("title",)

# Hidden from viewers without stock access
RESTRICTED_FIELDS = frozenset({"responsible_person", "website_url"})

_TRUE_VALUES = frozenset({"true", "1"})
_FALSE_VALUES = frozenset({"false", "0"})


def _split_values(raw_values: list[str]) -> list[str]:
    values = []
    for raw in raw_values:
        values.extend(part.strip() for part in raw.split(","))
    return [value for value in values if value]


def _to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def parse_catalog_query(params: Any) -> CatalogQuery:
    """Build a CatalogQuery from request query parameters.

    ``params`` needs ``getlist`` (Starlette's QueryParams). Multi-value
    filters accept repeated keys and comma-separated values. Unparsable
    numbers and booleans are ignored rather than rejected.

    Raises:
        pydantic.ValidationError: For out-of-range paging or unknown sort
            options.
    """
    data: dict[str, Any] = {}

    for name in TEXT_FILTER_FIELDS + ("city",):
        values = _split_values(params.getlist(_to_camel(name)))
        if values:
            data[name] = values

    for name in BOOLEAN_FILTER_FIELDS:
        flags = []
        for value in _split_values(params.getlist(_to_camel(name))):
            lowered = value.lower()
            if lowered in _TRUE_VALUES:
                flags.append(True)
            elif lowered in _FALSE_VALUES:
                flags.append(False)
        if flags:
            data[name] = flags

    search = _split_values(params.getlist("search"))
    if search:
        data["search"] = search[0]

    for name in ("sort_by", "sort_dir"):
        value = params.get(_to_camel(name))
        if value:
            data[name] = value

    numeric_names = ["page", "page_size"]
    for prefix in RANGE_FILTER_FIELDS:
        numeric_names.extend((f"{prefix}_min", f"{prefix}_max"))
    for name in numeric_names:
        value = (params.get(_to_camel(name)) or "").strip()
        if not value:
            continue
        try:
            number = float(value)
        except ValueError:
            continue
        if math.isnan(number):
            continue
        if name in ("page", "page_size"):
            data[name] = int(number) if number.is_integer() else number
        else:
            data[name] = number

    return CatalogQuery.model_validate(data)


def _contains(value: str) -> dict[str, str]:
    return {"$regex": re.escape(value), "$options": "i"}


def build_catalog_filter(
    query: CatalogQuery,
    privileged: bool,
    city_addresses: list[str] | None = None,
) -> dict[str, Any]:
    """Translate a CatalogQuery into a MongoDB filter document.

    Filters on restricted fields are dropped for non-privileged viewers,
    and free-text search does not look into those fields either.

    A city matches offers whose storage address contains it, plus the
    ``city_addresses`` known to resolve to one of the requested regions.
    """
    clauses: list[dict[str, Any]] = []

    for name in TEXT_FILTER_FIELDS:
        if not privileged and name in RESTRICTED_FIELDS:
            continue
        values = getattr(query, name)
        if values:
            clauses.append({name: {"$in": values}})

    for name in BOOLEAN_FILTER_FIELDS:
        values = getattr(query, name)
        if values:
            clauses.append({name: {"$in": values}})

    if query.city:
        city_clauses: list[dict[str, Any]] = [
            {"storage_address": _contains(city)} for city in query.city
        ]
        if city_addresses:
            city_clauses.append({"storage_address": {"$in": city_addresses}})
        clauses.append({"$or": city_clauses})

    for prefix, field in RANGE_FILTER_FIELDS.items():
        bounds = {}
        minimum = getattr(query, f"{prefix}_min")
        maximum = getattr(query, f"{prefix}_max")
        if minimum is not None:
            bounds["$gte"] = minimum
        if maximum is not None:
            bounds["$lte"] = maximum
        if bounds:
            clauses.append({field: bounds})

    if query.search:
        fields = [f for f in SEARCH_FIELDS if privileged or f not in RESTRICTED_FIELDS]
        clauses.append({"$or": [{field: _contains(query.search)} for field in fields]})

    if not clauses:
        return {}
    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}


async def _addresses_in_regions(regions: list[str]) -> list[str]:
    wanted = set(regions)
    addresses = await _distinct("storage_address")
    return [address for address in addresses if extract_region(address) in wanted]


async def search_catalog(query: CatalogQuery, privileged: bool) -> tuple[list[VehicleOffer], int]:
    """Return one page of matching offers and the total match count.

    Offers with a media link come first, then the requested sort order.
    """
    city_addresses = await _addresses_in_regions(query.city) if query.city else None
    conditions = build_catalog_filter(query, privileged, city_addresses)
    direction = ASCENDING if query.sort_dir == "asc" else DESCENDING

    total = await VehicleOffer.find(conditions).count()
    offers = (
        await VehicleOffer.find(conditions)
        .sort([("has_media", DESCENDING), (query.sort_by, direction), ("_id", direction)])
        .skip((query.page - 1) * query.page_size)
        .limit(query.page_size)
        .to_list()
    )
    logger.debug("Catalog page %d: %d of %d offers", query.page, len(offers), total)
    return offers, total


async def _distinct(field: str) -> list[Any]:
    values = await VehicleOffer.get_motor_collection().distinct(field)
    return sorted(value for value in values if value not in (None, ""))


async def _numeric_ranges() -> dict[str, Any]:
    group: dict[str, Any] = {"_id": None}
    for prefix, field in RANGE_FILTER_FIELDS.items():
        camel = _to_camel(prefix)
        group[f"{camel}Min"] = {"$min": f"${field}"}
        group[f"{camel}Max"] = {"$max": f"${field}"}

    result = await VehicleOffer.get_motor_collection().aggregate([{"$group": group}]).to_list(length=1)
    row = result[0] if result else {}
    return {key: row.get(key) for key in group if key != "_id"}


async def _models_by_brand() -> dict[str, list[str]]:
    pipeline = [
        {"$match": {"brand": {"$ne": ""}, "model": {"$ne": ""}}},
        {"$group": {"_id": {"brand": "$brand", "model": "$model"}}},
    ]
    rows = await VehicleOffer.get_motor_collection().aggregate(pipeline).to_list(length=None)

    models_by_brand: dict[str, list[str]] = {}
    for row in rows:
        models_by_brand.setdefault(row["_id"]["brand"], []).append(row["_id"]["model"])
    return {brand: sorted(models) for brand, models in sorted(models_by_brand.items())}


async def get_catalog_filters(privileged: bool) -> dict[str, Any]:
    """Values available for each catalog filter, keyed by camelCase filter name.

    Restricted fields are omitted entirely for non-privileged viewers.
    """
    metadata: dict[str, Any] = {}
    for name in TEXT_FILTER_FIELDS:
        if not privileged and name in RESTRICTED_FIELDS:
            continue
        metadata[_to_camel(name)] = await _distinct(name)

    for name in BOOLEAN_FILTER_FIELDS:
        metadata[_to_camel(name)] = await _distinct(name)

    addresses = metadata.get("storageAddress") or []
    regions = {region for region in (extract_region(a) for a in addresses) if region}
    metadata["city"] = sorted(regions, key=str.casefold)

    metadata["modelsByBrand"] = await _models_by_brand()
    metadata.update(await _numeric_ranges())
    return metadata


async def get_catalog_item(offer_id: Any) -> VehicleOffer | None:
    return await VehicleOffer.get(offer_id)

