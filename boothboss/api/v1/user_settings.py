"""Dashboard endpoints for a user's booth settings."""

import logging
from uuid import UUID

from fastapi import APIRouter, Query
from sqlalchemy.exc import SQLAlchemyError

from boothboss.core.deps import Cache, CurrentUser, DBSession, get_event_url_for_user, get_user_id
from boothboss.schemas.settings import SettingsResponse, SettingsUpdate
from boothboss.services.cache_service import CacheService
from boothboss.services.settings_service import SettingsService

logger = logging.getLogger(__name__)

router = APIRouter()


async def apply_settings_update(
    service: SettingsService,
    cache: CacheService,
    *,
    user_id: UUID,
    data: SettingsUpdate,
    role: str,
    event_url_id: UUID | None,
) -> SettingsResponse:
    """Write settings, then bump cache versions for every booth they serve."""
    row = await service.update_user_settings(
        user_id,
        data.model_dump(exclude_unset=True),
        role=role,
        event_url_id=event_url_id,
    )
    response = SettingsResponse.from_row(row)
    try:
        url_paths = await service.get_linked_url_paths(row.id)
    except SQLAlchemyError:
        # The write is committed; only the per-booth version bumps are lost.
        logger.exception("Failed to resolve booths served by settings %s", row.id)
        await service.db.rollback()
        url_paths = []
    await cache.notify_settings_changed(url_paths)
    return response


@router.get(
    "",
    response_model=SettingsResponse,
    summary="Get settings",
    description="Settings for the user, or for one of their event URLs. Created on first access.",
)
async def get_settings(
    user: CurrentUser,
    db: DBSession,
    event_url_id: UUID | None = Query(None, alias="eventUrlId"),
) -> SettingsResponse:
    """Get the effective settings, creating defaults if the user has none."""
    user_id = get_user_id(user)
    if event_url_id is not None:
        await get_event_url_for_user(event_url_id, user, db)

    service = SettingsService(db)
    row = await service.get_user_settings(user_id, event_url_id)
    if row is None:
        row = await service.create_default_settings_for_user(user_id)

    return SettingsResponse.from_row(row)


@router.patch(
    "",
    response_model=SettingsResponse,
    summary="Update settings",
    description="Partially update settings. Only provided fields will be updated.",
)
async def update_settings(
    data: SettingsUpdate,
    user: CurrentUser,
    db: DBSession,
    cache: Cache,
    event_url_id: UUID | None = Query(None, alias="eventUrlId"),
) -> SettingsResponse:
    """Update the user's settings or the settings of one of their event URLs."""
    return await apply_settings_update(
        SettingsService(db),
        cache,
        user_id=get_user_id(user),
        data=data,
        role=str(user.get("role") or "CUSTOMER"),
        event_url_id=event_url_id,
    )


@router.get(
    "/all",
    response_model=list[SettingsResponse],
    summary="List settings",
    description="Every settings row owned by the user, oldest first.",
)
async def list_settings(user: CurrentUser, db: DBSession) -> list[SettingsResponse]:
    """List all settings rows of the user."""
    rows = await SettingsService(db).get_all_user_settings(get_user_id(user))
    return [SettingsResponse.from_row(row) for row in rows]
