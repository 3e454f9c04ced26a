"""UI activity event endpoints."""

import logging
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, Request, status

from leasedesk.config import settings
from leasedesk.models import normalize_login
from leasedesk.schemas.activity import (
    ActivityEventCreate,
    ActivityEventListResponse,
    ActivityEventResponse,
    ActivityPagination,
)
from leasedesk.services.activity import PayloadTooLargeError, record_event, search_events
from leasedesk.services.auth import RequireAdmin, RequireAuth

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/events", status_code=status.HTTP_201_CREATED)
async def create_event(
    request: Request,
    event: ActivityEventCreate,
    current_user: RequireAuth,
) -> dict:
    """Record one UI event for the current user."""
    if not request.app.state.activity_rate_limiter.hit(str(current_user.id)):
        logger.info("Activity events rate limited for %s", current_user.login)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many activity events",
        )

    try:
        await record_event(current_user, event, settings.config.activity.max_payload_bytes)
    except PayloadTooLargeError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return {"ok": True}


@router.get("/events", response_model=ActivityEventListResponse)
async def list_events(
    _: RequireAdmin,
    page: Annotated[int, Query(ge=1)] = 1,
    page_size: Annotated[int, Query(alias="pageSize", ge=1, le=100)] = 50,
    login: Annotated[str | None, Query()] = None,
    event_type: Annotated[str | None, Query(alias="eventType")] = None,
    created_from: Annotated[datetime | None, Query(alias="from")] = None,
    created_to: Annotated[datetime | None, Query(alias="to")] = None,
) -> ActivityEventListResponse:
    """List recorded events, newest first."""
    events, total = await search_events(
        page=page,
        page_size=page_size,
        login=normalize_login(login) if login else None,
        event_type=event_type or None,
        created_from=created_from,
        created_to=created_to,
    )
    return ActivityEventListResponse(
        items=[ActivityEventResponse.from_document(e) for e in events],
        pagination=ActivityPagination(page=page, page_size=page_size, total=total),
    )
