"""Booth funnel analytics using SQL aggregation."""

import json
import logging
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from boothboss.core.errors import NotFoundError
from boothboss.models.analytics import BoothAnalytics, BoothEventLog
from boothboss.schemas.analytics import AnalyticsSummary, DomainCount

logger = logging.getLogger(__name__)

SESSION_START = "session_start"
SESSION_COMPLETE = "session_complete"
TOP_DOMAIN_LIMIT = 5


class BoothAnalyticsService:
    """Records booth visits and summarizes them."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # === Tracking ===

    async def track_session_start(
        self,
        session_id: str | None = None,
        *,
        user_agent: str | None = None,
        user_id: UUID | None = None,
        event_url: str | None = None,
    ) -> BoothAnalytics:
        """Open a visit record. Repeated starts for one session id return the same record."""
        session_id = session_id or str(uuid.uuid4())

        existing = (
            await self.db.execute(
                select(BoothAnalytics).where(BoothAnalytics.session_id == session_id)
            )
        ).scalar_one_or_none()
        if existing is not None:
            return existing

        record = BoothAnalytics(
            session_id=session_id,
            event_type=SESSION_START,
            user_agent=user_agent[:512] if user_agent else None,
            user_id=user_id,
            event_url=event_url,
        )
        self.db.add(record)
        await self.db.commit()
        await self.db.refresh(record)
        logger.debug("Tracked session start %s", session_id)
        return record

    async def _get_record(self, analytics_id: UUID) -> BoothAnalytics:
        record = await self.db.get(BoothAnalytics, analytics_id)
        if record is None:
            raise NotFoundError("Analytics session not found")
        return record

    async def track_session_complete(
        self,
        analytics_id: UUID,
        *,
        booth_session_id: UUID | None = None,
        email_domain: str | None = None,
        duration_ms: int | None = None,
    ) -> BoothAnalytics:
        """Mark a visit as completed.

        Raises:
            NotFoundError: Unknown ``analytics_id``.
        """
        record = await self._get_record(analytics_id)
        record.event_type = SESSION_COMPLETE
        record.completed_at = datetime.now(UTC)
        if booth_session_id is not None:
            record.booth_session_id = booth_session_id
        if email_domain:
            record.email_domain = email_domain.lower()
        if duration_ms is not None:
            record.duration_ms = duration_ms
        await self.db.commit()
        await self.db.refresh(record)
        return record

    async def track_event(
        self,
        analytics_id: UUID,
        event_type: str,
        metadata: dict[str, Any] | None = None,
    ) -> BoothEventLog:
        """Append a step to a visit.

        Raises:
            NotFoundError: Unknown ``analytics_id``.
        """
        await self._get_record(analytics_id)
        entry = BoothEventLog(
            analytics_id=analytics_id,
            event_type=event_type,
            event_metadata=json.dumps(metadata) if metadata else None,
        )
        self.db.add(entry)
        await self.db.commit()
        await self.db.refresh(entry)
        return entry

    # === Reporting ===

    def _scoped(self, stmt: Select[Any], since: datetime, user_id: UUID | None) -> Select[Any]:
        stmt = stmt.where(BoothAnalytics.timestamp >= since)
        if user_id is not None:
            stmt = stmt.where(BoothAnalytics.user_id == user_id)
        return stmt

    async def get_summary(self, days: int = 30, user_id: UUID | None = None) -> AnalyticsSummary:
        """Funnel statistics for the last ``days`` days, optionally for one owner."""
        since = datetime.now(UTC) - timedelta(days=days)

        totals_stmt = self._scoped(
            select(
                func.count().label("total"),
                func.count(BoothAnalytics.completed_at).label("completed"),
                func.avg(BoothAnalytics.duration_ms).label("avg_duration"),
            ),
            since,
            user_id,
        )
        row = (await self.db.execute(totals_stmt)).one()
        total = row.total or 0
        completed = row.completed or 0

        domain_count = func.count(BoothAnalytics.id).label("count")
        domains_stmt = self._scoped(
            select(BoothAnalytics.email_domain, domain_count)
            .where(BoothAnalytics.email_domain.is_not(None))
            .group_by(BoothAnalytics.email_domain)
            .order_by(domain_count.desc(), BoothAnalytics.email_domain)
            .limit(TOP_DOMAIN_LIMIT),
            since,
            user_id,
        )
        domains = (await self.db.execute(domains_stmt)).all()

        return AnalyticsSummary(
            period_days=days,
            total_sessions=total,
            completed_sessions=completed,
            completion_rate=round(completed / total * 100, 1) if total > 0 else 0.0,
            avg_completion_time_ms=(
                round(float(row.avg_duration), 1) if row.avg_duration is not None else None
            ),
            top_email_domains=[
                DomainCount(domain=domain, count=count) for domain, count in domains
            ],
        )

    async def get_recent_events(
        self, limit: int = 20, user_id: UUID | None = None
    ) -> list[BoothEventLog]:
        """Most recent funnel steps, newest first."""
        stmt = select(BoothEventLog).order_by(BoothEventLog.timestamp.desc()).limit(limit)
        if user_id is not None:
            stmt = stmt.join(BoothAnalytics, BoothAnalytics.id == BoothEventLog.analytics_id).where(
                BoothAnalytics.user_id == user_id
            )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
