"""Endpoints for the owner's captured booth sessions."""

import logging
from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from boothboss.core.deps import CurrentUser, DBSession, get_user_id, is_admin
from boothboss.models.booth_session import BoothSession
from boothboss.models.user import User
from boothboss.schemas.common import PaginatedResponse, page_count
from boothboss.schemas.session import BoothSessionResponse, ResendEmailResponse
from boothboss.services.email_service import BoothEmailService
from boothboss.services.settings_service import SettingsService
from boothboss.services.storage import absolute_media_url, delete_media

logger = logging.getLogger(__name__)

router = APIRouter()


def filter_sessions(
    stmt: Select[Any],
    *,
    user_id: UUID | None = None,
    event_url_id: UUID | None = None,
    media_type: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    search: str | None = None,
) -> Select[Any]:
    """Apply the common listing filters to a BoothSession query."""
    if user_id is not None:
        stmt = stmt.where(BoothSession.user_id == user_id)
    if event_url_id is not None:
        stmt = stmt.where(BoothSession.event_url_id == event_url_id)
    if media_type:
        stmt = stmt.where(BoothSession.media_type == media_type)
    if start_date is not None:
        stmt = stmt.where(BoothSession.created_at >= start_date)
    if end_date is not None:
        stmt = stmt.where(BoothSession.created_at <= end_date)
    if search:
        pattern = f"%{search.lower()}%"
        stmt = stmt.where(
            func.lower(BoothSession.user_name).like(pattern)
            | func.lower(BoothSession.user_email).like(pattern)
        )
    return stmt


async def paginate_sessions(
    db: AsyncSession,
    page: int,
    page_size: int,
    **filters: Any,
) -> PaginatedResponse[BoothSessionResponse]:
    count_stmt = filter_sessions(select(func.count()).select_from(BoothSession), **filters)
    total = (await db.execute(count_stmt)).scalar() or 0

    stmt = (
        filter_sessions(select(BoothSession), **filters)
        .order_by(BoothSession.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    sessions = (await db.execute(stmt)).scalars().all()

    return PaginatedResponse(
        items=[BoothSessionResponse.model_validate(s) for s in sessions],
        total=total,
        page=page,
        page_size=page_size,
        pages=page_count(total, page_size),
    )


async def _get_session_for_user(
    session_id: UUID, user: dict[str, Any], db: AsyncSession
) -> BoothSession:
    query = select(BoothSession).where(BoothSession.id == session_id)
    if not is_admin(user):
        query = query.where(BoothSession.user_id == get_user_id(user))
    session = (await db.execute(query)).scalar_one_or_none()
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found",
        )
    return session


@router.get(
    "",
    response_model=PaginatedResponse[BoothSessionResponse],
    summary="List sessions",
)
async def list_sessions(
    user: CurrentUser,
    db: DBSession,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
    media_type: Literal["photo", "video"] | None = Query(None, alias="mediaType"),
    start_date: datetime | None = Query(None, alias="startDate"),
    end_date: datetime | None = Query(None, alias="endDate"),
    event_url_id: UUID | None = Query(None, alias="eventUrlId"),
) -> PaginatedResponse[BoothSessionResponse]:
    """Paginated captures from the user's booths, newest first."""
    return await paginate_sessions(
        db,
        page,
        page_size,
        user_id=get_user_id(user),
        event_url_id=event_url_id,
        media_type=media_type,
        start_date=start_date,
        end_date=end_date,
    )


@router.get(
    "/{session_id}",
    response_model=BoothSessionResponse,
    summary="Get session",
)
async def get_session(session_id: UUID, user: CurrentUser, db: DBSession) -> BoothSessionResponse:
    session = await _get_session_for_user(session_id, user, db)
    return BoothSessionResponse.model_validate(session)


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete session",
    description="Delete a session and, best effort, its stored media.",
)
async def delete_session(session_id: UUID, user: CurrentUser, db: DBSession) -> None:
    session = await _get_session_for_user(session_id, user, db)
    media_path = session.photo_path
    await db.delete(session)
    await db.commit()
    await delete_media(media_path)


@router.post(
    "/{session_id}/email",
    response_model=ResendEmailResponse,
    summary="Resend email",
    description="Send the capture email again using the booth's current settings.",
)
async def resend_email(session_id: UUID, user: CurrentUser, db: DBSession) -> ResendEmailResponse:
    """Resend the media email for a session."""
    session = await _get_session_for_user(session_id, user, db)
    if session.user_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Session has no booth owner",
        )

    booth_settings = await SettingsService(db).resolve_effective_settings(
        session.user_id, session.event_url_id
    )
    result = await BoothEmailService().send_booth_media(
        booth_settings,
        to=session.user_email,
        user_name=session.user_name,
        media_url=absolute_media_url(session.photo_path),
        media_type=session.media_type,
        event_name=session.event_name,
    )

    session.email_sent = True
    owner = await db.get(User, session.user_id)
    if owner is not None:
        owner.emails_sent += 1
    await db.commit()

    logger.info("Resent capture email for session %s", session.id)
    return ResendEmailResponse(
        success=result.success,
        message_id=result.message_id,
        preview_id=result.preview_id,
    )
