"""Booth funnel analytics endpoints."""

from fastapi import APIRouter, HTTPException, Query, Request, status

from boothboss.core.deps import CurrentUser, DBSession, get_user_id
from boothboss.core.rate_limit import limiter
from boothboss.schemas.analytics import (
    AnalyticsOverview,
    AnalyticsSummary,
    BoothEventResponse,
    TrackRequest,
    TrackResponse,
)
from boothboss.services.analytics_service import BoothAnalyticsService
from boothboss.services.settings_service import SettingsService

router = APIRouter()
user_router = APIRouter()


@router.post("/track", response_model=TrackResponse)
@limiter.limit("120/minute")
async def track(
    request: Request,
    data: TrackRequest,
    db: DBSession,
) -> TrackResponse:
    """Record a booth beacon. Public; called by the booth itself."""
    service = BoothAnalyticsService(db)

    if data.event == "session_start":
        owner_id = None
        if data.event_url:
            event_url = await SettingsService(db).get_active_event_url(data.event_url)
            owner_id = event_url.user_id if event_url else None
        record = await service.track_session_start(
            data.session_id,
            user_agent=data.user_agent or request.headers.get("user-agent"),
            user_id=owner_id,
            event_url=data.event_url,
        )
        return TrackResponse(id=record.id)

    if data.analytics_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing analyticsId parameter",
        )

    if data.event == "session_complete":
        record = await service.track_session_complete(
            data.analytics_id,
            booth_session_id=data.booth_session_id,
            email_domain=data.email_domain,
            duration_ms=data.duration,
        )
        return TrackResponse(id=record.id)

    if not data.event_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing eventType parameter",
        )
    entry = await service.track_event(data.analytics_id, data.event_type, data.metadata)
    return TrackResponse(id=entry.id)


@user_router.get("/summary", response_model=AnalyticsOverview)
async def user_summary(
    user: CurrentUser,
    db: DBSession,
    days: int = Query(30, ge=1, le=365),
    limit: int = Query(20, ge=1, le=100),
) -> AnalyticsOverview:
    """Funnel summary and recent events for the user's booths. Requires authentication."""
    service = BoothAnalyticsService(db)
    user_id = get_user_id(user)
    summary: AnalyticsSummary = await service.get_summary(days, user_id=user_id)
    events = await service.get_recent_events(limit, user_id=user_id)
    return AnalyticsOverview(
        summary=summary,
        recent_events=[BoothEventResponse.model_validate(e) for e in events],
    )
