"""User document model for session-cookie authentication."""

from datetime import datetime
from enum import Enum
from typing import Optional

from beanie import Document, Indexed
from pydantic import Field

from leasedesk.models.timestamps import utc_now


class UserRole(str, Enum):
    """Access roles. Only admins and stock owners see internal contact fields."""

    ADMIN = "admin"
    STOCK_OWNER = "stock_owner"
    MANAGER = "manager"


# Roles allowed to upload stock and see responsible person / website fields
PRIVILEGED_ROLES = frozenset({UserRole.ADMIN, UserRole.STOCK_OWNER})


def normalize_login(raw_login: str) -> str:
    """Logins are case-insensitive and ignore surrounding whitespace."""
    return raw_login.strip().lower()


class User(Document):
    """User document model.

    Fields:
    - login: unique, stored normalized (see normalize_login)
    - hashed_password: pwdlib hash
    - display_name: shown in the UI
    - role: admin / stock_owner / manager
    - is_active: inactive users cannot log in and lose their sessions
    """

    login: Indexed(str, unique=True)
    hashed_password: str
    display_name: str
    role: UserRole = UserRole.MANAGER
    is_active: bool = True

    company: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None

    created_at: datetime = Field(default_factory=utc_now)
    last_login: Optional[datetime] = None

    class Settings:
        name = "users"
        use_state_management = True

    @property
    def is_privileged(self) -> bool:
        return self.role in PRIVILEGED_ROLES

    def __repr__(self) -> str:
        return f"<User(id={self.id}, login={self.login}, role={self.role.value}, is_active={self.is_active})>"
