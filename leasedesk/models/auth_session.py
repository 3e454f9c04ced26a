"""Login session document model."""

from datetime import datetime

from beanie import Document, Indexed, PydanticObjectId
from pydantic import Field

from leasedesk.models.timestamps import utc_now


class AuthSession(Document):
    """A server-side login session.

    Only the SHA-256 hash of the cookie token is stored.
    """

    user_id: Indexed(PydanticObjectId)
    token_hash: Indexed(str, unique=True)
    expires_at: datetime
    created_at: datetime = Field(default_factory=utc_now)
    last_seen_at: datetime = Field(default_factory=utc_now)

    class Settings:
        name = "auth_sessions"
        indexes = [
            "expires_at",
        ]
