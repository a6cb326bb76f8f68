"""Administrator endpoints: accounts, sessions, settings and analytics."""

import logging
from datetime import datetime
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import func, or_, select

from boothboss.api.v1.sessions import paginate_sessions
from boothboss.api.v1.user_settings import apply_settings_update
from boothboss.core.deps import AdminUser, Cache, DBSession, get_user_id
from boothboss.core.security import hash_password
from boothboss.models.event_url import EventUrl
from boothboss.models.user import User
from boothboss.schemas.analytics import AnalyticsOverview, BoothEventResponse
from boothboss.schemas.common import PaginatedResponse, page_count
from boothboss.schemas.session import BoothSessionResponse
from boothboss.schemas.settings import SettingsResponse, SettingsUpdate
from boothboss.schemas.user import AdminUserCreate, AdminUserUpdate, UserResponse
from boothboss.services.analytics_service import BoothAnalyticsService
from boothboss.services.settings_service import SettingsService

logger = logging.getLogger(__name__)

router = APIRouter()


async def _get_user_or_404(db: DBSession, user_id: UUID) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


async def _ensure_unique(
    db: DBSession, email: str | None, username: str | None, exclude_id: UUID | None = None
) -> None:
    conditions = []
    if email:
        conditions.append(func.lower(User.email) == email.lower())
    if username:
        conditions.append(User.username == username)
    if not conditions:
        return
    query = select(User.id).where(or_(*conditions))
    if exclude_id is not None:
        query = query.where(User.id != exclude_id)
    if (await db.execute(query)).first() is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="An account with this email or username already exists",
        )


# === Users ===


@router.get(
    "/users",
    response_model=PaginatedResponse[UserResponse],
    summary="List users",
)
async def list_users(
    _admin: AdminUser,
    db: DBSession,
    search: str | None = Query(None, max_length=255),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
) -> PaginatedResponse[UserResponse]:
    """Search accounts by email, name or username."""
    base = select(User)
    if search:
        pattern = f"%{search.lower()}%"
        base = base.where(
            or_(
                func.lower(User.email).like(pattern),
                func.lower(User.name).like(pattern),
                func.lower(User.username).like(pattern),
            )
        )

    total = (await db.execute(select(func.count()).select_from(base.subquery()))).scalar() or 0
    users = (
        await db.execute(
            base.order_by(User.created_at.desc()).offset((page - 1) * page_size).limit(page_size)
        )
    ).scalars()

    return PaginatedResponse(
        items=[UserResponse.model_validate(u) for u in users],
        total=total,
        page=page,
        page_size=page_size,
        pages=page_count(total, page_size),
    )


@router.post(
    "/users",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
)
async def create_user(data: AdminUserCreate, admin: AdminUser, db: DBSession) -> UserResponse:
    await _ensure_unique(db, data.email, data.username)
    user = User(
        email=data.email.lower(),
        name=data.name,
        username=data.username,
        role=data.role,
        organization_name=data.organization_name,
        password_hash=hash_password(data.password),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("Admin %s created user %s", admin.get("email"), user.email)
    return UserResponse.model_validate(user)


@router.get(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="Get user",
)
async def get_user(user_id: UUID, _admin: AdminUser, db: DBSession) -> UserResponse:
    return UserResponse.model_validate(await _get_user_or_404(db, user_id))


@router.patch(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="Update user",
)
async def update_user(
    user_id: UUID, data: AdminUserUpdate, _admin: AdminUser, db: DBSession
) -> UserResponse:
    """Update an account. Only provided fields will be updated."""
    user = await _get_user_or_404(db, user_id)
    update_data = data.model_dump(exclude_unset=True)
    await _ensure_unique(db, update_data.get("email"), update_data.get("username"), user.id)

    password = update_data.pop("password", None)
    if password:
        user.password_hash = hash_password(password)
    if update_data.get("email"):
        update_data["email"] = update_data["email"].lower()
    for field, value in update_data.items():
        setattr(user, field, value)

    await db.commit()
    await db.refresh(user)
    return UserResponse.model_validate(user)


@router.delete(
    "/users/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete user",
    description="Delete an account with its settings and event URLs. Sessions are kept.",
)
async def delete_user(user_id: UUID, admin: AdminUser, db: DBSession) -> None:
    if user_id == get_user_id(admin):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot delete your own account",
        )
    user = await _get_user_or_404(db, user_id)
    await db.delete(user)
    await db.commit()
    logger.info("Admin %s deleted user %s", admin.get("email"), user_id)


# === Sessions ===


@router.get(
    "/sessions",
    response_model=PaginatedResponse[BoothSessionResponse],
    summary="List all sessions",
)
async def list_all_sessions(
    _admin: AdminUser,
    db: DBSession,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
    user_id: UUID | None = Query(None, alias="userId"),
    event_url_id: UUID | None = Query(None, alias="eventUrlId"),
    media_type: Literal["photo", "video"] | None = Query(None, alias="mediaType"),
    start_date: datetime | None = Query(None, alias="startDate"),
    end_date: datetime | None = Query(None, alias="endDate"),
    search: str | None = Query(None, max_length=255),
) -> PaginatedResponse[BoothSessionResponse]:
    return await paginate_sessions(
        db,
        page,
        page_size,
        user_id=user_id,
        event_url_id=event_url_id,
        media_type=media_type,
        start_date=start_date,
        end_date=end_date,
        search=search,
    )


# === Settings ===


async def _check_event_url_owner(db: DBSession, user_id: UUID, event_url_id: UUID | None) -> None:
    if event_url_id is None:
        return
    owner = (
        await db.execute(select(EventUrl.user_id).where(EventUrl.id == event_url_id))
    ).scalar_one_or_none()
    if owner != user_id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event URL not found for this user",
        )


@router.get(
    "/settings",
    response_model=SettingsResponse,
    summary="Get a user's settings",
)
async def get_settings_for_user(
    _admin: AdminUser,
    db: DBSession,
    user_id: UUID = Query(..., alias="userId"),
    event_url_id: UUID | None = Query(None, alias="eventUrlId"),
) -> SettingsResponse:
    await _get_user_or_404(db, user_id)
    await _check_event_url_owner(db, user_id, event_url_id)
    row = await SettingsService(db).resolve_effective_settings(user_id, event_url_id)
    return SettingsResponse.from_row(row)


@router.patch(
    "/settings",
    response_model=SettingsResponse,
    summary="Update a user's settings",
)
async def update_settings_for_user(
    data: SettingsUpdate,
    _admin: AdminUser,
    db: DBSession,
    cache: Cache,
    user_id: UUID = Query(..., alias="userId"),
    event_url_id: UUID | None = Query(None, alias="eventUrlId"),
) -> SettingsResponse:
    await _get_user_or_404(db, user_id)
    return await apply_settings_update(
        SettingsService(db),
        cache,
        user_id=user_id,
        data=data,
        role="ADMIN",
        event_url_id=event_url_id,
    )


# === Analytics ===


@router.get(
    "/analytics/summary",
    response_model=AnalyticsOverview,
    summary="System-wide analytics",
)
async def analytics_summary(
    _admin: AdminUser,
    db: DBSession,
    days: int = Query(30, ge=1, le=365),
    limit: int = Query(20, ge=1, le=100),
    user_id: UUID | None = Query(None, alias="userId"),
) -> AnalyticsOverview:
    service = BoothAnalyticsService(db)
    summary = await service.get_summary(days, user_id=user_id)
    events = await service.get_recent_events(limit, user_id=user_id)
    return AnalyticsOverview(
        summary=summary,
        recent_events=[BoothEventResponse.model_validate(e) for e in events],
    )
