"""Catalog endpoints: offer search, filter metadata and single offers."""

from typing import Any

from bson import ObjectId
from fastapi import APIRouter, HTTPException, Request, status
from pydantic import ValidationError

from leasedesk.schemas.catalog import CatalogItem, CatalogListResponse, CatalogPagination
from leasedesk.services.auth import RequireAuth
from leasedesk.services.catalog import (
    get_catalog_filters,
    get_catalog_item,
    parse_catalog_query,
    search_catalog,
)

router = APIRouter()


@router.get("/items", response_model=CatalogListResponse)
async def list_items(request: Request, current_user: RequireAuth) -> CatalogListResponse:
    """Search offers.

    Multi-value filters take repeated or comma-separated parameters
    (``brand=BMW&brand=Audi`` or ``brand=BMW,Audi``); ranges use
    ``<name>Min``/``<name>Max``; ``search`` matches any text field.
    """
    try:
        query = parse_catalog_query(request.query_params)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=e.errors(include_url=False, include_context=False),
        )

    privileged = current_user.is_privileged
    offers, total = await search_catalog(query, privileged)
    return CatalogListResponse(
        items=[CatalogItem.from_offer(offer, privileged) for offer in offers],
        pagination=CatalogPagination(page=query.page, page_size=query.page_size, total=total),
    )


@router.get("/filters")
async def list_filters(current_user: RequireAuth) -> dict[str, Any]:
    """Distinct values and numeric ranges for every catalog filter."""
    return await get_catalog_filters(current_user.is_privileged)


@router.get("/items/{item_id}", response_model=CatalogItem)
async def get_item(item_id: str, current_user: RequireAuth) -> CatalogItem:
    """Get a single offer by ID."""
    if not ObjectId.is_valid(item_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid item id")

    offer = await get_catalog_item(ObjectId(item_id))
    if offer is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Item not found")
    return CatalogItem.from_offer(offer, current_user.is_privileged)
