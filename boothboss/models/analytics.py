"""Append-only funnel analytics records."""

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from boothboss.models.base import Base, utcnow


class BoothAnalytics(Base):
    """One booth visit, from session start to (maybe) completion."""

    __tablename__ = "booth_analytics"

    session_id: Mapped[str] = mapped_column(String(191), unique=True, nullable=False)
    booth_session_id: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)
    event_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(512), nullable=True)
    email_domain: Mapped[str | None] = mapped_column(String(191), nullable=True)
    duration_ms: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Booth owner and path, for per-tenant dashboards
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True), nullable=True, index=True
    )
    event_url: Mapped[str | None] = mapped_column(String(191), nullable=True)

    events: Mapped[list["BoothEventLog"]] = relationship(
        "BoothEventLog",
        back_populates="analytics",
        cascade="all, delete-orphan",
    )


class BoothEventLog(Base):
    """A granular step inside a booth visit."""

    __tablename__ = "booth_event_logs"

    analytics_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("booth_analytics.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    event_type: Mapped[str] = mapped_column(String(100), nullable=False)
    # "metadata" is reserved on declarative classes
    event_metadata: Mapped[str | None] = mapped_column("metadata", Text, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False, index=True
    )

    analytics: Mapped["BoothAnalytics"] = relationship("BoothAnalytics", back_populates="events")

    def __repr__(self) -> str:
        return f"<BoothEventLog {self.event_type}>"

    @property
    def details(self) -> dict[str, Any] | None:
        from boothboss.services.normalize import safe_parse_json

        return safe_parse_json(self.event_metadata, None)
