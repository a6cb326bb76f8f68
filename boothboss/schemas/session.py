"""Pydantic schemas for booth sessions (captured media)."""

from datetime import datetime
from uuid import UUID

from boothboss.schemas.common import BaseSchema


class BoothSessionResponse(BaseSchema):
    """A captured photo or video."""

    id: UUID
    user_id: UUID | None
    event_url_id: UUID | None
    event_url_path: str | None
    event_name: str | None
    user_name: str
    user_email: str
    photo_path: str
    media_type: str
    filter: str | None
    template_used: str | None
    email_sent: bool
    shared: bool
    created_at: datetime


class CaptureResponse(BaseSchema):
    """Result of a booth capture upload."""

    session_id: UUID
    media_url: str
    media_type: str
    storage_provider: str
    email_sent: bool
    email_error: str | None = None
    preview_id: str | None = None


class ResendEmailResponse(BaseSchema):
    """Result of re-sending the media email for a session."""

    success: bool
    message_id: str | None = None
    preview_id: str | None = None
