"""Settings resolution and persistence.

A booth's effective configuration is resolved through a chain: the settings
row linked to its event URL, then the owner's own row, then the system
default row. Read paths degrade to ``None``/``[]`` on database errors; write
paths propagate them.
"""

import logging
from collections.abc import Mapping
from typing import Any
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from boothboss.constants import DEFAULT_SETTINGS
from boothboss.core.encryption import encrypt_secret
from boothboss.core.errors import NotFoundError
from boothboss.models.event_url import EventUrl, EventUrlSettings
from boothboss.models.settings import Settings
from boothboss.services.normalize import process_settings_for_storage

logger = logging.getLogger(__name__)

_SETTINGS_COLUMNS = frozenset(Settings.__table__.columns.keys()) - {
    "id",
    "user_id",
    "created_at",
    "updated_at",
}


def _writable(data: Mapping[str, Any]) -> dict[str, Any]:
    """Storage-shaped copy of ``data`` restricted to real columns."""
    processed = process_settings_for_storage(data)
    values = {key: value for key, value in processed.items() if key in _SETTINGS_COLUMNS}
    if values.get("smtp_password"):
        values["smtp_password"] = encrypt_secret(values["smtp_password"])
    return values


class SettingsService:
    """Resolve and persist booth settings."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # === Reads ===

    async def _get_own_settings(self, user_id: UUID) -> Settings | None:
        """The user's own row: the earliest one they created."""
        stmt = (
            select(Settings)
            .where(Settings.user_id == user_id)
            .order_by(Settings.created_at.asc())
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _get_active_link(
        self, event_url_id: UUID, owner_id: UUID | None = None
    ) -> EventUrlSettings | None:
        stmt = select(EventUrlSettings).where(
            EventUrlSettings.event_url_id == event_url_id,
            EventUrlSettings.active == True,  # noqa: E712
        )
        if owner_id is not None:
            stmt = stmt.join(EventUrl, EventUrl.id == EventUrlSettings.event_url_id).where(
                EventUrl.user_id == owner_id
            )
        stmt = stmt.order_by(EventUrlSettings.updated_at.desc()).limit(1)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _get_settings_by_id(self, settings_id: UUID) -> Settings | None:
        return await self.db.get(Settings, settings_id)

    async def get_user_settings(
        self, user_id: UUID, event_url_id: UUID | None = None
    ) -> Settings | None:
        """Settings for a user, preferring the row linked to ``event_url_id``."""
        try:
            if event_url_id is not None:
                link = await self._get_active_link(event_url_id, owner_id=user_id)
                if link is not None:
                    linked = await self._get_settings_by_id(link.settings_id)
                    if linked is not None:
                        return linked
                logger.debug(
                    "No linked settings, falling back to user settings",
                    extra={"user_id": str(user_id), "event_url_id": str(event_url_id)},
                )
            return await self._get_own_settings(user_id)
        except SQLAlchemyError:
            logger.exception("Failed to load settings for user %s", user_id)
            return None

    async def get_settings_by_event_url_id(self, event_url_id: UUID) -> Settings | None:
        """Settings for a booth, linking the owner's row on first access."""
        try:
            link = await self._get_active_link(event_url_id)
            if link is not None:
                linked = await self._get_settings_by_id(link.settings_id)
                if linked is not None:
                    return linked

            event_url = await self.db.get(EventUrl, event_url_id)
            if event_url is None:
                return None

            own = await self._get_own_settings(event_url.user_id)
            if own is None:
                own = await self.create_default_settings_for_user(
                    event_url.user_id, event_name=event_url.event_name
                )
            await self.link_settings_to_event_url(own.id, event_url_id)
            return own
        except SQLAlchemyError:
            logger.exception("Failed to load settings for event URL %s", event_url_id)
            await self.db.rollback()
            return None

    async def get_settings_by_url_path(self, url_path: str) -> Settings | None:
        """Settings for the active booth at ``url_path``."""
        try:
            event_url = await self.get_active_event_url(url_path)
        except SQLAlchemyError:
            logger.exception("Failed to resolve event URL %s", url_path)
            return None
        if event_url is None:
            return None
        return await self.get_settings_by_event_url_id(event_url.id)

    async def get_active_event_url(self, url_path: str) -> EventUrl | None:
        stmt = select(EventUrl).where(
            EventUrl.url_path == url_path.lower(),
            EventUrl.is_active == True,  # noqa: E712
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_default_settings(self) -> Settings | None:
        """The system-wide row flagged ``is_default``."""
        try:
            stmt = (
                select(Settings)
                .where(Settings.is_default == True)  # noqa: E712
                .order_by(Settings.created_at.asc())
                .limit(1)
            )
            result = await self.db.execute(stmt)
            return result.scalar_one_or_none()
        except SQLAlchemyError:
            logger.exception("Failed to load default settings")
            return None

    async def get_all_user_settings(self, user_id: UUID) -> list[Settings]:
        try:
            stmt = (
                select(Settings)
                .where(Settings.user_id == user_id)
                .order_by(Settings.created_at.asc())
            )
            result = await self.db.execute(stmt)
            return list(result.scalars().all())
        except SQLAlchemyError:
            logger.exception("Failed to list settings for user %s", user_id)
            return []

    async def resolve_effective_settings(
        self, user_id: UUID, event_url_id: UUID | None = None
    ) -> Settings:
        """Walk the full chain, creating the user's row as a last resort."""
        if event_url_id is not None:
            linked = await self.get_user_settings(user_id, event_url_id)
            if linked is not None:
                return linked

        own = await self.get_user_settings(user_id)
        if own is not None:
            return own

        default = await self.get_default_settings()
        if default is not None:
            return default

        return await self.create_default_settings_for_user(user_id)

    async def get_linked_url_paths(self, settings_id: UUID) -> list[str]:
        """Paths of active event URLs currently served by ``settings_id``."""
        stmt = (
            select(EventUrl.url_path)
            .join(EventUrlSettings, EventUrlSettings.event_url_id == EventUrl.id)
            .where(
                EventUrlSettings.settings_id == settings_id,
                EventUrlSettings.active == True,  # noqa: E712
                EventUrl.is_active == True,  # noqa: E712
            )
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    # === Writes ===

    async def create_default_settings_for_user(
        self, user_id: UUID, event_name: str | None = None
    ) -> Settings:
        """Create a settings row for ``user_id`` from the defaults."""
        values = _writable(DEFAULT_SETTINGS)
        if event_name:
            values["event_name"] = event_name
        row = Settings(user_id=user_id, **values)
        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)
        logger.info("Created default settings", extra={"user_id": str(user_id)})
        return row

    async def update_user_settings(
        self,
        user_id: UUID,
        data: Mapping[str, Any],
        role: str = "CUSTOMER",
        event_url_id: UUID | None = None,
    ) -> Settings:
        """Create or update settings for a user, optionally scoped to an event URL.

        Raises:
            NotFoundError: ``event_url_id`` is not owned by ``user_id``.
        """
        values = _writable(data)
        log_extra: dict[str, Any] = {
            "user_id": str(user_id),
            "event_url_id": str(event_url_id) if event_url_id else None,
            "role": role,
            "fields": sorted(values),
        }

        if event_url_id is not None:
            stmt = (
                select(EventUrlSettings)
                .join(EventUrl, EventUrl.id == EventUrlSettings.event_url_id)
                .where(
                    EventUrlSettings.event_url_id == event_url_id,
                    EventUrl.user_id == user_id,
                )
                .order_by(EventUrlSettings.active.desc(), EventUrlSettings.updated_at.desc())
                .limit(1)
            )
            link = (await self.db.execute(stmt)).scalar_one_or_none()

            if link is not None:
                row = await self._get_settings_by_id(link.settings_id)
                if row is not None:
                    logger.debug(
                        "Updating linked settings",
                        extra={**log_extra, "branch": "update-linked"},
                    )
                    return await self._apply(row, values)

            event_url = (
                await self.db.execute(
                    select(EventUrl).where(EventUrl.id == event_url_id, EventUrl.user_id == user_id)
                )
            ).scalar_one_or_none()
            if event_url is None:
                logger.warning("Event URL not owned by user", extra=log_extra)
                raise NotFoundError("Event URL not found or not owned by user")

            create_values = {**_writable(DEFAULT_SETTINGS), **values}
            if "event_name" not in values:
                create_values["event_name"] = event_url.event_name
            row = Settings(user_id=user_id, **create_values)
            self.db.add(row)
            await self.db.commit()
            await self.db.refresh(row)
            logger.debug("Created linked settings", extra={**log_extra, "branch": "create-linked"})

            await self.link_settings_to_event_url(row.id, event_url_id)
            return row

        own = await self._get_own_settings(user_id)
        if own is not None:
            logger.debug("Updating user settings", extra={**log_extra, "branch": "update-own"})
            return await self._apply(own, values)

        row = Settings(user_id=user_id, **{**_writable(DEFAULT_SETTINGS), **values})
        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)
        logger.debug("Created user settings", extra={**log_extra, "branch": "create-own"})
        return row

    async def _apply(self, row: Settings, values: Mapping[str, Any]) -> Settings:
        for key, value in values.items():
            setattr(row, key, value)
        await self.db.commit()
        await self.db.refresh(row)
        return row

    async def link_settings_to_event_url(self, settings_id: UUID, event_url_id: UUID) -> bool:
        """Make ``settings_id`` the active settings of ``event_url_id``.

        Sibling links are deactivated in a separate statement after the link
        is written, so a failure between the two can leave two active rows.
        """
        try:
            stmt = select(EventUrlSettings).where(
                EventUrlSettings.event_url_id == event_url_id,
                EventUrlSettings.settings_id == settings_id,
            )
            link = (await self.db.execute(stmt)).scalars().first()

            if link is not None and link.active:
                return True

            if link is None:
                link = EventUrlSettings(
                    event_url_id=event_url_id, settings_id=settings_id, active=True
                )
                self.db.add(link)
            else:
                link.active = True
            await self.db.commit()
            await self.db.refresh(link)

            await self.db.execute(
                update(EventUrlSettings)
                .where(
                    EventUrlSettings.event_url_id == event_url_id,
                    EventUrlSettings.id != link.id,
                )
                .values(active=False)
            )
            await self.db.commit()

            logger.debug(
                "Linked settings to event URL",
                extra={"settings_id": str(settings_id), "event_url_id": str(event_url_id)},
            )
            return True
        except SQLAlchemyError:
            logger.exception(
                "Failed to link settings %s to event URL %s", settings_id, event_url_id
            )
            await self.db.rollback()
            return False
