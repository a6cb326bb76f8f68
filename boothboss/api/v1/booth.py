"""Public endpoints used by a deployed booth."""

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, File, Form, HTTPException, Response, UploadFile, status

from boothboss.core.deps import Cache, DBSession
from boothboss.core.errors import EmailDeliveryError, NotFoundError
from boothboss.models.booth_session import BoothSession
from boothboss.models.user import User
from boothboss.schemas.session import CaptureResponse
from boothboss.schemas.settings import BoothSettingsResponse
from boothboss.services.analytics_service import BoothAnalyticsService
from boothboss.services.email_service import BoothEmailService, EmailAttachment
from boothboss.services.settings_service import SettingsService
from boothboss.services.storage import absolute_media_url, upload_media

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_UPLOAD_BYTES = 100 * 1024 * 1024  # 100 MB

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, max-age=0",
    "Pragma": "no-cache",
    "Expires": "0",
}


@router.get(
    "/{url_path}/settings",
    response_model=BoothSettingsResponse,
    summary="Booth settings",
    description="Public settings of the booth at this path, with its current cache version.",
)
async def get_booth_settings(
    url_path: str,
    response: Response,
    db: DBSession,
    cache: Cache,
) -> BoothSettingsResponse:
    """Resolve the booth's effective settings."""
    row = await SettingsService(db).get_settings_by_url_path(url_path)
    if row is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Booth not found",
        )

    response.headers.update(NO_CACHE_HEADERS)
    version = await cache.current_booth_version(url_path.lower())
    return BoothSettingsResponse.from_row(row, cache_version=version)


@router.post(
    "/{url_path}/capture",
    response_model=CaptureResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a capture",
    description="Store a captured photo or video, record the session and email the guest.",
)
async def capture(
    url_path: str,
    db: DBSession,
    name: Annotated[str, Form(min_length=1, max_length=255)],
    email: Annotated[str, Form(min_length=3, max_length=255)],
    photo: Annotated[UploadFile | None, File()] = None,
    video: Annotated[UploadFile | None, File()] = None,
    filter_name: Annotated[str, Form(alias="filter", max_length=50)] = "normal",
    analytics_id: Annotated[UUID | None, Form(alias="analyticsId")] = None,
) -> CaptureResponse:
    """Handle a completed capture from the booth."""
    media = photo or video
    if media is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A photo or video file is required",
        )
    media_type = "photo" if photo is not None else "video"

    settings_service = SettingsService(db)
    event_url = await settings_service.get_active_event_url(url_path)
    if event_url is None:
        raise NotFoundError("Booth not found")
    booth_settings = await settings_service.get_settings_by_event_url_id(event_url.id)
    if booth_settings is None:
        raise NotFoundError("Booth settings not found")

    content = await media.read()
    if not content:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Uploaded file is empty",
        )
    if len(content) > MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="Uploaded file is too large",
        )

    default_name = "capture.mp4" if media_type == "video" else "capture.jpg"
    content_type = media.content_type or ("video/mp4" if media_type == "video" else "image/jpeg")
    stored = await upload_media(
        content,
        media.filename or default_name,
        content_type,
        booth_settings=booth_settings,
        directory=f"booth/{event_url.url_path}",
    )

    session = BoothSession(
        user_id=event_url.user_id,
        event_url_id=event_url.id,
        event_url_path=event_url.url_path,
        event_name=booth_settings.event_name or event_url.event_name,
        user_name=name,
        user_email=email,
        photo_path=stored.url,
        media_type=media_type,
        filter=filter_name,
    )
    db.add(session)
    owner = await db.get(User, event_url.user_id)
    if owner is not None:
        owner.media_count += 1
    await db.commit()
    await db.refresh(session)

    if analytics_id is not None:
        analytics = BoothAnalyticsService(db)
        try:
            await analytics.track_event(
                analytics_id,
                "media_upload",
                {"storageProvider": stored.provider, "url": stored.url, "mediaType": media_type},
            )
            await analytics.track_session_complete(
                analytics_id,
                booth_session_id=session.id,
                email_domain=email.rpartition("@")[2] or None,
            )
        except NotFoundError:
            logger.warning("Capture referenced unknown analytics session %s", analytics_id)

    media_url = absolute_media_url(stored.url)
    attachments = None
    if media_type == "photo":
        attachments = [
            EmailAttachment(
                filename=f"your-photo{_suffix(media.filename)}",
                content=content,
                content_type=content_type,
            )
        ]

    email_error = None
    preview_id = None
    try:
        result = await BoothEmailService().send_booth_media(
            booth_settings,
            to=email,
            user_name=name,
            media_url=media_url,
            media_type=media_type,
            event_name=session.event_name,
            attachments=attachments,
        )
        preview_id = result.preview_id
        session.email_sent = True
        if owner is not None:
            owner.emails_sent += 1
        await db.commit()
    except EmailDeliveryError as e:
        logger.warning("Capture email to %s failed: %s", email, e.message)
        email_error = e.message

    return CaptureResponse(
        session_id=session.id,
        media_url=media_url,
        media_type=media_type,
        storage_provider=stored.provider,
        email_sent=session.email_sent,
        email_error=email_error,
        preview_id=preview_id,
    )


def _suffix(filename: str | None) -> str:
    if filename and "." in filename:
        return "." + filename.rsplit(".", 1)[1].lower()
    return ".jpg"
