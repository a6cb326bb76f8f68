"""Pydantic schemas for booth funnel analytics."""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import Field

from boothboss.schemas.common import BaseSchema


class TrackRequest(BaseSchema):
    """Analytics beacon sent by the booth."""

    event: Literal["session_start", "session_complete", "event"]
    session_id: str | None = Field(default=None, max_length=191)
    analytics_id: UUID | None = None
    booth_session_id: UUID | None = None
    event_type: str | None = Field(default=None, max_length=100)
    metadata: dict[str, Any] | None = None
    duration: int | None = Field(default=None, ge=0)
    email_domain: str | None = Field(default=None, max_length=191)
    user_agent: str | None = Field(default=None, max_length=512)
    event_url: str | None = Field(default=None, max_length=191)


class TrackResponse(BaseSchema):
    """Acknowledgement of a tracked beacon."""

    success: bool = True
    id: UUID | None = None


class DomainCount(BaseSchema):
    """Number of completed sessions per email domain."""

    domain: str
    count: int


class AnalyticsSummary(BaseSchema):
    """Funnel statistics for a period."""

    period_days: int
    total_sessions: int
    completed_sessions: int
    completion_rate: float  # 0 - 100
    avg_completion_time_ms: float | None
    top_email_domains: list[DomainCount]


class BoothEventResponse(BaseSchema):
    """One step inside a booth visit."""

    id: UUID
    analytics_id: UUID
    event_type: str
    details: dict[str, Any] | None = None
    timestamp: datetime


class AnalyticsOverview(BaseSchema):
    """Summary plus the most recent events."""

    summary: AnalyticsSummary
    recent_events: list[BoothEventResponse]
