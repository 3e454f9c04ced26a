"""Pydantic schemas for the LeaseDesk API."""

from leasedesk.schemas.activity import (
    ActivityEventCreate,
    ActivityEventListResponse,
    ActivityEventResponse,
)
from leasedesk.schemas.auth import AuthUserResponse, LoginRequest, PublicUser
from leasedesk.schemas.catalog import CatalogItem, CatalogListResponse, CatalogQuery
from leasedesk.schemas.import_schemas import (
    ClearImportsResponse,
    ImportBatchDetailResponse,
    ImportBatchListResponse,
    ImportResult,
)

__all__ = [
    "ActivityEventCreate",
    "ActivityEventListResponse",
    "ActivityEventResponse",
    "AuthUserResponse",
    "LoginRequest",
    "PublicUser",
    "CatalogItem",
    "CatalogListResponse",
    "CatalogQuery",
    "ClearImportsResponse",
    "ImportBatchDetailResponse",
    "ImportBatchListResponse",
    "ImportResult",
]
