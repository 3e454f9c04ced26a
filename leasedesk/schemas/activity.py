"""Pydantic schemas for UI activity events."""

from datetime import datetime
from typing import Any, Optional

from pydantic import Field, field_validator

from leasedesk.models import ACTIVITY_EVENT_TYPES, ActivityEvent
from leasedesk.schemas.common import CamelModel


def _strip_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class ActivityEventCreate(CamelModel):
    """Event reported by the web client."""

    event_type: str
    session_id: str = Field(..., min_length=8, max_length=120)
    page: Optional[str] = Field(None, max_length=240)
    entity_type: Optional[str] = Field(None, max_length=120)
    entity_id: Optional[str] = Field(None, max_length=120)
    payload: Optional[dict[str, Any]] = None

    @field_validator("event_type")
    @classmethod
    def check_event_type(cls, value: str) -> str:
        if value not in ACTIVITY_EVENT_TYPES:
            raise ValueError(f"Unknown event type '{value}'")
        return value

    @field_validator("session_id", mode="before")
    @classmethod
    def strip_session_id(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("page", "entity_type", "entity_id", mode="before")
    @classmethod
    def strip_optional_text(cls, value: Any) -> Any:
        return _strip_optional(value) if isinstance(value, str) else value


class ActivityEventResponse(CamelModel):
    id: str
    user_id: str
    login: str
    session_id: str
    event_type: str
    page: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    payload: Optional[dict[str, Any]] = None
    created_at: datetime

    @classmethod
    def from_document(cls, event: ActivityEvent) -> "ActivityEventResponse":
        return cls(
            id=str(event.id),
            user_id=str(event.user_id),
            login=event.login,
            session_id=event.session_id,
            event_type=event.event_type,
            page=event.page,
            entity_type=event.entity_type,
            entity_id=event.entity_id,
            payload=event.payload,
            created_at=event.created_at,
        )


class ActivityPagination(CamelModel):
    page: int
    page_size: int
    total: int


class ActivityEventListResponse(CamelModel):
    items: list[ActivityEventResponse]
    pagination: ActivityPagination
