"""Event URL model and the event-URL/settings junction."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from boothboss.models.base import Base

if TYPE_CHECKING:
    from boothboss.models.settings import Settings
    from boothboss.models.user import User


class EventUrl(Base):
    """A public booth path (``/e/{url_path}``) owned by one user."""

    __tablename__ = "event_urls"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    url_path: Mapped[str] = mapped_column(String(191), unique=True, nullable=False, index=True)
    event_name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    event_start_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    event_end_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    user: Mapped["User"] = relationship("User", back_populates="event_urls")
    settings_links: Mapped[list["EventUrlSettings"]] = relationship(
        "EventUrlSettings",
        back_populates="event_url",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<EventUrl /{self.url_path}>"


class EventUrlSettings(Base):
    """Links an event URL to a settings row.

    At most one row per event URL should be active. Nothing in the schema
    enforces it; writers deactivate the siblings after linking.
    """

    __tablename__ = "event_url_settings"

    event_url_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("event_urls.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    settings_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("settings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    event_url: Mapped["EventUrl"] = relationship("EventUrl", back_populates="settings_links")
    settings: Mapped["Settings"] = relationship("Settings", back_populates="event_url_links")

    def __repr__(self) -> str:
        state = "active" if self.active else "inactive"
        return f"<EventUrlSettings {self.event_url_id} -> {self.settings_id} ({state})>"
