"""UI activity event document model."""

from datetime import datetime
from typing import Any, Optional

from beanie import Document, Indexed, PydanticObjectId
from pydantic import Field

from leasedesk.models.timestamps import utc_now

ACTIVITY_EVENT_TYPES: tuple[str, ...] = (
    "login_open",
    "login_success",
    "login_failed",
    "logout",
    "session_start",
    "session_heartbeat",
    "page_view",
    "showcase_open",
    "showcase_filter_drawer_open",
    "showcase_filter_drawer_close",
    "showcase_filters_apply",
    "showcase_filters_reset",
    "showcase_no_results",
    "showcase_sort_change",
    "showcase_view_mode_change",
    "showcase_pagination_click",
    "showcase_page_change",
    "showcase_item_open",
    "showcase_gallery_open",
    "showcase_gallery_navigate",
    "showcase_gallery_close",
    "showcase_contact_click",
    "showcase_source_open",
    "api_error",
)


class ActivityEvent(Document):
    """A client-reported UI event of an authenticated user."""

    user_id: Indexed(PydanticObjectId)
    login: Indexed(str)
    session_id: str
    event_type: Indexed(str)
    page: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    payload: Optional[dict[str, Any]] = None
    created_at: datetime = Field(default_factory=utc_now)

    class Settings:
        name = "activity_events"
        indexes = [
            "created_at",
        ]
