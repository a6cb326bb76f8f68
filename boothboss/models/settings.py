"""Booth settings model."""

import uuid
from typing import TYPE_CHECKING, Any

from sqlalchemy import Boolean, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from boothboss.constants import DEFAULT_SETTINGS as D
from boothboss.models.base import Base, JSONType

if TYPE_CHECKING:
    from boothboss.models.event_url import EventUrlSettings
    from boothboss.models.user import User


class Settings(Base):
    """Flat booth configuration record.

    Owned by exactly one user. Event URLs pick a row through
    ``EventUrlSettings``; several event URLs may share one row.
    """

    __tablename__ = "settings"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # General
    event_name: Mapped[str] = mapped_column(String(255), default=D["event_name"])
    admin_email: Mapped[str] = mapped_column(String(255), default=D["admin_email"])
    countdown_time: Mapped[int] = mapped_column(Integer, default=D["countdown_time"])
    reset_time: Mapped[int] = mapped_column(Integer, default=D["reset_time"])

    # Email delivery (smtp_password is Fernet-encrypted at rest)
    email_subject: Mapped[str] = mapped_column(String(255), default=D["email_subject"])
    email_template: Mapped[str] = mapped_column(Text, default=D["email_template"])
    smtp_host: Mapped[str] = mapped_column(String(255), default=D["smtp_host"])
    smtp_port: Mapped[int] = mapped_column(Integer, default=D["smtp_port"])
    smtp_user: Mapped[str] = mapped_column(String(255), default=D["smtp_user"])
    smtp_password: Mapped[str] = mapped_column(Text, default="")

    # Brand & theme
    company_name: Mapped[str] = mapped_column(String(255), default=D["company_name"])
    company_logo: Mapped[str | None] = mapped_column(Text, nullable=True)
    theme: Mapped[str] = mapped_column(String(50), default=D["theme"])
    primary_color: Mapped[str] = mapped_column(String(16), default=D["primary_color"])
    secondary_color: Mapped[str] = mapped_column(String(16), default=D["secondary_color"])
    background_color: Mapped[str | None] = mapped_column(String(16), nullable=True)
    border_color: Mapped[str | None] = mapped_column(String(16), nullable=True)
    button_color: Mapped[str | None] = mapped_column(String(16), nullable=True)
    text_color: Mapped[str | None] = mapped_column(String(16), nullable=True)

    # Custom journey
    custom_journey_enabled: Mapped[bool] = mapped_column(
        Boolean, default=D["custom_journey_enabled"]
    )
    journey_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    journey_config: Mapped[Any] = mapped_column(JSONType, nullable=True)
    active_journey_id: Mapped[str | None] = mapped_column(String(191), nullable=True)

    # Splash page
    splash_page_enabled: Mapped[bool] = mapped_column(Boolean, default=D["splash_page_enabled"])
    splash_page_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    splash_page_content: Mapped[str | None] = mapped_column(Text, nullable=True)
    splash_page_image: Mapped[str | None] = mapped_column(Text, nullable=True)
    splash_page_button_text: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Capture
    capture_mode: Mapped[str] = mapped_column(String(20), default=D["capture_mode"])
    photo_orientation: Mapped[str] = mapped_column(String(50), default=D["photo_orientation"])
    photo_device: Mapped[str] = mapped_column(String(50), default=D["photo_device"])
    photo_resolution: Mapped[str] = mapped_column(String(50), default=D["photo_resolution"])
    photo_effect: Mapped[str] = mapped_column(String(50), default=D["photo_effect"])
    printer_enabled: Mapped[bool] = mapped_column(Boolean, default=D["printer_enabled"])
    ai_image_correction: Mapped[bool] = mapped_column(Boolean, default=D["ai_image_correction"])
    video_orientation: Mapped[str] = mapped_column(String(50), default=D["video_orientation"])
    video_device: Mapped[str] = mapped_column(String(50), default=D["video_device"])
    video_resolution: Mapped[str] = mapped_column(String(50), default=D["video_resolution"])
    video_effect: Mapped[str] = mapped_column(String(50), default=D["video_effect"])
    video_duration: Mapped[int] = mapped_column(Integer, default=D["video_duration"])

    # Filters (JSON list or comma-separated names)
    filters_enabled: Mapped[bool] = mapped_column(Boolean, default=D["filters_enabled"])
    enabled_filters: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Storage
    storage_provider: Mapped[str] = mapped_column(String(20), default=D["storage_provider"])
    blob_vercel_enabled: Mapped[bool] = mapped_column(Boolean, default=D["blob_vercel_enabled"])
    local_upload_path: Mapped[str] = mapped_column(String(255), default=D["local_upload_path"])
    storage_base_url: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Misc
    show_booth_boss_logo: Mapped[bool] = mapped_column(
        Boolean, default=D["show_booth_boss_logo"]
    )
    custom_css: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_default: Mapped[bool] = mapped_column(Boolean, default=D["is_default"], index=True)

    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="settings")
    event_url_links: Mapped[list["EventUrlSettings"]] = relationship(
        "EventUrlSettings",
        back_populates="settings",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Settings {self.id} user={self.user_id} event={self.event_name!r}>"
