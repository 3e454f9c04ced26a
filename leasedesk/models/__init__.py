"""MongoDB document models for LeaseDesk."""

from leasedesk.models.activity_event import ACTIVITY_EVENT_TYPES, ActivityEvent
from leasedesk.models.auth_session import AuthSession
from leasedesk.models.import_batch import ImportBatch, ImportStatus
from leasedesk.models.import_error import ImportRowError
from leasedesk.models.user import PRIVILEGED_ROLES, User, UserRole, normalize_login
from leasedesk.models.vehicle_offer import VehicleOffer

__all__ = [
    # Users and sessions
    "User",
    "UserRole",
    "PRIVILEGED_ROLES",
    "normalize_login",
    "AuthSession",
    # Import ledger
    "ImportBatch",
    "ImportStatus",
    "ImportRowError",
    # Catalog
    "VehicleOffer",
    # Activity
    "ActivityEvent",
    "ACTIVITY_EVENT_TYPES",
]
