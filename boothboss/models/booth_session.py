"""Completed booth interactions."""

import uuid

from sqlalchemy import Boolean, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from boothboss.models.base import Base


class BoothSession(Base):
    """One captured photo or video.

    Created when the capture completes. Only ``email_sent`` changes afterwards.
    """

    __tablename__ = "booth_sessions"

    # Owner of the booth the capture happened on
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    event_url_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("event_urls.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    event_url_path: Mapped[str | None] = mapped_column(String(191), nullable=True)
    event_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    user_name: Mapped[str] = mapped_column(String(255), nullable=False)
    user_email: Mapped[str] = mapped_column(String(255), nullable=False)

    photo_path: Mapped[str] = mapped_column(Text, nullable=False)
    media_type: Mapped[str] = mapped_column(String(20), default="photo", nullable=False)
    filter: Mapped[str | None] = mapped_column(String(50), nullable=True)
    template_used: Mapped[str | None] = mapped_column(String(255), nullable=True)

    email_sent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    shared: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    def __repr__(self) -> str:
        return f"<BoothSession {self.id} {self.media_type} to={self.user_email}>"
