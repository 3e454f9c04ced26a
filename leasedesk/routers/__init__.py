"""API routers for LeaseDesk."""

from leasedesk.routers import activity, auth, catalog, import_router, media

__all__ = ["auth", "import_router", "catalog", "media", "activity"]
