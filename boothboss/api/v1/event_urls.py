"""Event URL CRUD endpoints for booth owners."""

import re
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import func, select

from boothboss.constants import RESERVED_URL_PATHS, URL_PATH_PATTERN
from boothboss.core.config import settings
from boothboss.core.deps import Cache, CurrentUser, DBSession, get_event_url_for_user, get_user_id
from boothboss.core.errors import ConflictError, LimitExceededError, NotFoundError
from boothboss.models.event_url import EventUrl
from boothboss.models.settings import Settings
from boothboss.schemas.event_url import (
    EventUrlCreate,
    EventUrlListResponse,
    EventUrlResponse,
    EventUrlUpdate,
    UrlAvailabilityResponse,
    as_utc,
)
from boothboss.schemas.settings import LinkSettingsRequest, SettingsResponse
from boothboss.services.settings_service import SettingsService

router = APIRouter()


async def _path_taken(db: DBSession, url_path: str, exclude_id: UUID | None = None) -> bool:
    query = select(EventUrl.id).where(EventUrl.url_path == url_path)
    if exclude_id is not None:
        query = query.where(EventUrl.id != exclude_id)
    return (await db.execute(query)).first() is not None


@router.get(
    "",
    response_model=EventUrlListResponse,
    summary="List event URLs",
)
async def list_event_urls(user: CurrentUser, db: DBSession) -> EventUrlListResponse:
    """List the user's event URLs, newest first."""
    query = (
        select(EventUrl)
        .where(EventUrl.user_id == get_user_id(user))
        .order_by(EventUrl.created_at.desc())
    )
    event_urls = list((await db.execute(query)).scalars().all())
    return EventUrlListResponse(
        items=[EventUrlResponse.model_validate(e) for e in event_urls],
        total=len(event_urls),
        limit=settings.max_event_urls_per_user,
    )


@router.get(
    "/check",
    response_model=UrlAvailabilityResponse,
    summary="Check URL availability",
)
async def check_availability(
    _user: CurrentUser,
    db: DBSession,
    url_path: str = Query(..., alias="urlPath", min_length=1, max_length=64),
) -> UrlAvailabilityResponse:
    """Whether a path can still be claimed."""
    path = url_path.strip().lower()
    reason = None
    if not 3 <= len(path) <= 30:
        reason = "URL path must be between 3 and 30 characters"
    elif not re.match(URL_PATH_PATTERN, path):
        reason = "URL path may only contain lowercase letters, numbers and hyphens"
    elif path in RESERVED_URL_PATHS:
        reason = "This URL is reserved and cannot be used"
    elif await _path_taken(db, path):
        reason = "URL path is already in use"
    return UrlAvailabilityResponse(url_path=path, available=reason is None, reason=reason)


@router.post(
    "",
    response_model=EventUrlResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create event URL",
)
async def create_event_url(
    data: EventUrlCreate,
    user: CurrentUser,
    db: DBSession,
    cache: Cache,
) -> EventUrlResponse:
    """Claim a new booth path, within the per-user quota."""
    user_id = get_user_id(user)

    count_stmt = select(func.count()).select_from(EventUrl).where(EventUrl.user_id == user_id)
    count = (await db.execute(count_stmt)).scalar() or 0
    if count >= settings.max_event_urls_per_user:
        raise LimitExceededError(
            f"You can create up to {settings.max_event_urls_per_user} URLs with your current plan"
        )

    if await _path_taken(db, data.url_path):
        raise ConflictError("URL path is already in use")

    event_url = EventUrl(user_id=user_id, **data.model_dump())
    db.add(event_url)
    await db.commit()
    await db.refresh(event_url)

    await cache.invalidate_quietly("event-urls")
    return EventUrlResponse.model_validate(event_url)


@router.get(
    "/{event_url_id}",
    response_model=EventUrlResponse,
    summary="Get event URL",
)
async def get_event_url(event_url_id: UUID, user: CurrentUser, db: DBSession) -> EventUrlResponse:
    """Get an event URL by ID."""
    event_url = await get_event_url_for_user(event_url_id, user, db)
    return EventUrlResponse.model_validate(event_url)


@router.patch(
    "/{event_url_id}",
    response_model=EventUrlResponse,
    summary="Update event URL",
)
async def update_event_url(
    event_url_id: UUID,
    data: EventUrlUpdate,
    user: CurrentUser,
    db: DBSession,
    cache: Cache,
) -> EventUrlResponse:
    """Update an event URL. Only provided fields will be updated."""
    event_url = await get_event_url_for_user(event_url_id, user, db)
    old_path = event_url.url_path

    update_data = data.model_dump(exclude_unset=True)
    new_path = update_data.get("url_path")
    if new_path and new_path != old_path and await _path_taken(db, new_path, event_url.id):
        raise ConflictError("URL path is already in use")

    for field, value in update_data.items():
        setattr(event_url, field, value)

    start, end = as_utc(event_url.event_start_date), as_utc(event_url.event_end_date)
    if start and end and end < start:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Event end date must be after start date",
        )

    await db.commit()
    await db.refresh(event_url)

    await cache.invalidate_quietly("event-urls")
    for path in {old_path, event_url.url_path}:
        await cache.invalidate_quietly("booth-settings", url_path=path, urgent=True)
    return EventUrlResponse.model_validate(event_url)


@router.delete(
    "/{event_url_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete event URL",
)
async def delete_event_url(
    event_url_id: UUID,
    user: CurrentUser,
    db: DBSession,
    cache: Cache,
) -> None:
    """Delete an event URL and its settings links. Settings rows are kept."""
    event_url = await get_event_url_for_user(event_url_id, user, db)
    url_path = event_url.url_path
    await db.delete(event_url)
    await db.commit()

    await cache.invalidate_quietly("event-urls")
    await cache.invalidate_quietly("booth-settings", url_path=url_path, urgent=True)


@router.post(
    "/{event_url_id}/settings",
    response_model=SettingsResponse,
    summary="Link settings",
    description="Make an existing settings row the active settings of this event URL.",
)
async def link_settings(
    event_url_id: UUID,
    data: LinkSettingsRequest,
    user: CurrentUser,
    db: DBSession,
    cache: Cache,
) -> SettingsResponse:
    """Point an event URL at one of the user's settings rows."""
    event_url = await get_event_url_for_user(event_url_id, user, db)

    row = await db.get(Settings, data.settings_id)
    if row is None or row.user_id != event_url.user_id:
        raise NotFoundError("Settings not found")

    service = SettingsService(db)
    if not await service.link_settings_to_event_url(row.id, event_url.id):
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to link settings",
        )

    await cache.invalidate_quietly("booth-settings", url_path=event_url.url_path, urgent=True)
    return SettingsResponse.from_row(row)
