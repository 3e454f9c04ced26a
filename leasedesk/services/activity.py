"""Recording and listing of UI activity events."""

import json
import logging
from datetime import datetime
from typing import Any, Optional

from leasedesk.models import ActivityEvent, User
from leasedesk.models.timestamps import to_naive_utc
from leasedesk.schemas.activity import ActivityEventCreate

logger = logging.getLogger(__name__)


class PayloadTooLargeError(ValueError):
    """Raised when an event payload exceeds the configured size."""


def payload_size(payload: Optional[dict[str, Any]]) -> int:
    """Size in bytes of the payload serialized as compact UTF-8 JSON."""
    if payload is None:
        return 0
    serialized = json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str)
    return len(serialized.encode("utf-8"))


async def record_event(
    user: User,
    event: ActivityEventCreate,
    max_payload_bytes: int,
) -> ActivityEvent:
    """Store an activity event for ``user``.

    Raises:
        PayloadTooLargeError: If the payload is larger than ``max_payload_bytes``.
    """
    size = payload_size(event.payload)
    if size > max_payload_bytes:
        raise PayloadTooLargeError(f"Payload too large ({size} > {max_payload_bytes} bytes)")

    document = ActivityEvent(
        user_id=user.id,
        login=user.login,
        session_id=event.session_id,
        event_type=event.event_type,
        page=event.page,
        entity_type=event.entity_type,
        entity_id=event.entity_id,
        payload=event.payload,
    )
    await document.insert()
    return document


async def search_events(
    page: int = 1,
    page_size: int = 50,
    login: Optional[str] = None,
    event_type: Optional[str] = None,
    created_from: Optional[datetime] = None,
    created_to: Optional[datetime] = None,
) -> tuple[list[ActivityEvent], int]:
    """Newest events first, filtered by login, type and time range."""
    conditions: dict[str, Any] = {}
    if login:
        conditions["login"] = login
    if event_type:
        conditions["event_type"] = event_type

    created_at: dict[str, datetime] = {}
    if created_from:
        created_at["$gte"] = to_naive_utc(created_from)
    if created_to:
        created_at["$lte"] = to_naive_utc(created_to)
    if created_at:
        conditions["created_at"] = created_at

    total = await ActivityEvent.find(conditions).count()
    events = (
        await ActivityEvent.find(conditions)
        .sort([("created_at", -1), ("_id", -1)])
        .skip((page - 1) * page_size)
        .limit(page_size)
        .to_list()
    )
    return events, total
