"""Pydantic schemas for development email previews."""

from datetime import datetime

from boothboss.schemas.common import BaseSchema


class EmailAttachmentInfo(BaseSchema):
    """Attachment metadata (content is never returned)."""

    filename: str
    content_type: str
    size: int


class EmailPreviewSummary(BaseSchema):
    """Row in the preview list."""

    id: str
    to: str
    from_address: str
    subject: str
    created_at: datetime
    sent: bool


class EmailPreviewDetail(EmailPreviewSummary):
    """A stored preview including its body."""

    html: str
    attachments: list[EmailAttachmentInfo] = []
