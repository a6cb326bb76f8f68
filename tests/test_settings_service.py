"""Tests for SettingsService: resolution chain, linking and writes."""

from typing import Any
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from boothboss.core.encryption import decrypt_secret, is_encrypted
from boothboss.core.errors import NotFoundError
from boothboss.models.event_url import EventUrlSettings
from boothboss.models.settings import Settings
from boothboss.models.user import User
from boothboss.services.normalize import SMTP_PASSWORD_MASK
from boothboss.services.settings_service import SettingsService


async def _links(db: AsyncSession, event_url_id: UUID) -> list[EventUrlSettings]:
    stmt = (
        select(EventUrlSettings)
        .where(EventUrlSettings.event_url_id == event_url_id)
        .execution_options(populate_existing=True)
    )
    return list((await db.execute(stmt)).scalars().all())


async def _active_settings_ids(db: AsyncSession, event_url_id: UUID) -> list[UUID]:
    return [link.settings_id for link in await _links(db, event_url_id) if link.active]


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


class TestGetUserSettings:
    async def test_no_settings_returns_none(
        self, db_session: AsyncSession, test_user: User
    ) -> None:
        assert await SettingsService(db_session).get_user_settings(test_user.id) is None

    async def test_own_settings_is_earliest_row(
        self, db_session: AsyncSession, test_user: User, settings_factory: Any
    ) -> None:
        first = await settings_factory(user_id=test_user.id, event_name="First")
        await settings_factory(user_id=test_user.id, event_name="Second")

        row = await SettingsService(db_session).get_user_settings(test_user.id)
        assert row is not None
        assert row.id == first.id

    async def test_prefers_row_linked_to_event_url(
        self,
        db_session: AsyncSession,
        test_user: User,
        settings_factory: Any,
        event_url_factory: Any,
    ) -> None:
        await settings_factory(user_id=test_user.id, event_name="Own")
        event_url = await event_url_factory(user_id=test_user.id)
        linked = await settings_factory(
            user_id=test_user.id, event_url_id=event_url.id, event_name="Linked"
        )

        row = await SettingsService(db_session).get_user_settings(test_user.id, event_url.id)
        assert row is not None
        assert row.id == linked.id

    async def test_unlinked_event_url_falls_back_to_own(
        self,
        db_session: AsyncSession,
        test_user: User,
        settings_factory: Any,
        event_url_factory: Any,
    ) -> None:
        own = await settings_factory(user_id=test_user.id)
        event_url = await event_url_factory(user_id=test_user.id)

        row = await SettingsService(db_session).get_user_settings(test_user.id, event_url.id)
        assert row is not None
        assert row.id == own.id

    async def test_other_users_link_is_ignored(
        self,
        db_session: AsyncSession,
        test_user: User,
        user_factory: Any,
        settings_factory: Any,
        event_url_factory: Any,
    ) -> None:
        """A link on someone else's event URL never leaks into this user's settings."""
        other = await user_factory()
        other_url = await event_url_factory(user_id=other.id)
        await settings_factory(user_id=other.id, event_url_id=other_url.id)
        own = await settings_factory(user_id=test_user.id)

        row = await SettingsService(db_session).get_user_settings(test_user.id, other_url.id)
        assert row is not None
        assert row.id == own.id


class TestGetSettingsByEventUrl:
    async def test_links_owner_row_on_first_access(
        self,
        db_session: AsyncSession,
        test_user: User,
        settings_factory: Any,
        event_url_factory: Any,
    ) -> None:
        own = await settings_factory(user_id=test_user.id)
        event_url = await event_url_factory(user_id=test_user.id)

        row = await SettingsService(db_session).get_settings_by_event_url_id(event_url.id)
        assert row is not None
        assert row.id == own.id
        assert await _active_settings_ids(db_session, event_url.id) == [own.id]

    async def test_creates_defaults_when_owner_has_none(
        self, db_session: AsyncSession, test_user: User, event_url_factory: Any
    ) -> None:
        event_url = await event_url_factory(user_id=test_user.id, event_name="Gala Night")

        row = await SettingsService(db_session).get_settings_by_event_url_id(event_url.id)
        assert row is not None
        assert row.user_id == test_user.id
        assert row.event_name == "Gala Night"
        assert await _active_settings_ids(db_session, event_url.id) == [row.id]

    async def test_database_error_rolls_back_and_returns_none(
        self,
        db_session: AsyncSession,
        test_user: User,
        event_url_factory: Any,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        event_url = await event_url_factory(user_id=test_user.id)
        service = SettingsService(db_session)

        async def _fail(*_args: Any, **_kwargs: Any) -> None:
            raise OperationalError("SELECT", {}, Exception("database is locked"))

        rollback = AsyncMock(wraps=db_session.rollback)
        monkeypatch.setattr(service, "_get_own_settings", _fail)
        monkeypatch.setattr(db_session, "rollback", rollback)

        assert await service.get_settings_by_event_url_id(event_url.id) is None
        rollback.assert_awaited_once()
        assert await _links(db_session, event_url.id) == []

    async def test_unknown_event_url_returns_none(self, db_session: AsyncSession) -> None:
        assert await SettingsService(db_session).get_settings_by_event_url_id(uuid4()) is None

    async def test_by_url_path_is_case_insensitive(
        self,
        db_session: AsyncSession,
        test_user: User,
        settings_factory: Any,
        event_url_factory: Any,
    ) -> None:
        event_url = await event_url_factory(user_id=test_user.id, url_path="summer-gala")
        linked = await settings_factory(user_id=test_user.id, event_url_id=event_url.id)

        row = await SettingsService(db_session).get_settings_by_url_path("Summer-Gala")
        assert row is not None
        assert row.id == linked.id

    async def test_inactive_event_url_is_not_served(
        self, db_session: AsyncSession, test_user: User, event_url_factory: Any
    ) -> None:
        await event_url_factory(user_id=test_user.id, url_path="closed-booth", is_active=False)
        assert await SettingsService(db_session).get_settings_by_url_path("closed-booth") is None


class TestResolveEffectiveSettings:
    async def test_falls_back_to_system_default(
        self,
        db_session: AsyncSession,
        test_user: User,
        admin_user: User,
        settings_factory: Any,
    ) -> None:
        default = await settings_factory(user_id=admin_user.id, is_default=True)

        row = await SettingsService(db_session).resolve_effective_settings(test_user.id)
        assert row.id == default.id

    async def test_creates_row_as_last_resort(
        self, db_session: AsyncSession, test_user: User
    ) -> None:
        row = await SettingsService(db_session).resolve_effective_settings(test_user.id)
        assert row.user_id == test_user.id
        assert await SettingsService(db_session).get_user_settings(test_user.id) is not None

    async def test_list_all_user_settings(
        self, db_session: AsyncSession, test_user: User, settings_factory: Any
    ) -> None:
        first = await settings_factory(user_id=test_user.id)
        second = await settings_factory(user_id=test_user.id)

        rows = await SettingsService(db_session).get_all_user_settings(test_user.id)
        assert [r.id for r in rows] == [first.id, second.id]


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


class TestCreateDefaults:
    async def test_default_password_is_encrypted(
        self, db_session: AsyncSession, test_user: User
    ) -> None:
        row = await SettingsService(db_session).create_default_settings_for_user(test_user.id)
        assert is_encrypted(row.smtp_password)
        assert decrypt_secret(row.smtp_password) == "password"
        assert row.filters_enabled is True
        assert row.is_default is False


class TestUpdateUserSettings:
    async def test_creates_own_row_when_missing(
        self, db_session: AsyncSession, test_user: User
    ) -> None:
        row = await SettingsService(db_session).update_user_settings(
            test_user.id, {"event_name": "Brand New", "countdown_time": 5}
        )
        assert row.event_name == "Brand New"
        assert row.countdown_time == 5
        # Untouched fields come from the defaults
        assert row.reset_time == 30

    async def test_updates_own_row(
        self, db_session: AsyncSession, test_user: User, settings_factory: Any
    ) -> None:
        own = await settings_factory(user_id=test_user.id)
        row = await SettingsService(db_session).update_user_settings(
            test_user.id, {"printer_enabled": "true", "enabled_filters": ["mono", "sepia"]}
        )
        assert row.id == own.id
        assert row.printer_enabled is True
        assert row.enabled_filters == '["mono", "sepia"]'

    async def test_updates_linked_row_not_own(
        self,
        db_session: AsyncSession,
        test_user: User,
        settings_factory: Any,
        event_url_factory: Any,
    ) -> None:
        own = await settings_factory(user_id=test_user.id, event_name="Own")
        event_url = await event_url_factory(user_id=test_user.id)
        linked = await settings_factory(
            user_id=test_user.id, event_url_id=event_url.id, event_name="Linked"
        )

        row = await SettingsService(db_session).update_user_settings(
            test_user.id, {"event_name": "Changed"}, event_url_id=event_url.id
        )
        assert row.id == linked.id
        assert row.event_name == "Changed"

        await db_session.refresh(own)
        assert own.event_name == "Own"

    async def test_creates_linked_row_for_unlinked_event_url(
        self,
        db_session: AsyncSession,
        test_user: User,
        settings_factory: Any,
        event_url_factory: Any,
    ) -> None:
        own = await settings_factory(user_id=test_user.id)
        event_url = await event_url_factory(user_id=test_user.id, event_name="Wedding")

        row = await SettingsService(db_session).update_user_settings(
            test_user.id, {"theme": "midnight"}, event_url_id=event_url.id
        )
        assert row.id != own.id
        assert row.theme == "midnight"
        assert row.event_name == "Wedding"
        assert await _active_settings_ids(db_session, event_url.id) == [row.id]

    async def test_foreign_event_url_raises_not_found(
        self,
        db_session: AsyncSession,
        test_user: User,
        user_factory: Any,
        event_url_factory: Any,
    ) -> None:
        other = await user_factory()
        other_url = await event_url_factory(user_id=other.id)

        with pytest.raises(NotFoundError):
            await SettingsService(db_session).update_user_settings(
                test_user.id, {"theme": "midnight"}, event_url_id=other_url.id
            )

    async def test_new_password_is_encrypted(
        self, db_session: AsyncSession, test_user: User
    ) -> None:
        row = await SettingsService(db_session).update_user_settings(
            test_user.id, {"smtp_password": "app-specific-pw"}
        )
        assert is_encrypted(row.smtp_password)
        assert decrypt_secret(row.smtp_password) == "app-specific-pw"

    async def test_masked_password_keeps_stored_value(
        self, db_session: AsyncSession, test_user: User
    ) -> None:
        service = SettingsService(db_session)
        row = await service.update_user_settings(test_user.id, {"smtp_password": "keep-me"})
        stored = row.smtp_password

        row = await service.update_user_settings(
            test_user.id, {"smtp_password": SMTP_PASSWORD_MASK, "theme": "midnight"}
        )
        assert row.smtp_password == stored
        assert decrypt_secret(row.smtp_password) == "keep-me"

    async def test_unknown_fields_are_ignored(
        self, db_session: AsyncSession, test_user: User
    ) -> None:
        row = await SettingsService(db_session).update_user_settings(
            test_user.id, {"not_a_column": 1, "id": str(uuid4()), "event_name": "Ok"}
        )
        assert row.event_name == "Ok"
        assert row.user_id == test_user.id


class TestLinkSettings:
    async def test_linking_deactivates_siblings(
        self,
        db_session: AsyncSession,
        test_user: User,
        settings_factory: Any,
        event_url_factory: Any,
    ) -> None:
        event_url = await event_url_factory(user_id=test_user.id)
        first = await settings_factory(user_id=test_user.id, event_url_id=event_url.id)
        second = await settings_factory(user_id=test_user.id)

        service = SettingsService(db_session)
        assert await service.link_settings_to_event_url(second.id, event_url.id) is True
        assert await _active_settings_ids(db_session, event_url.id) == [second.id]

        # Relinking the first row reactivates the existing link instead of adding one
        assert await service.link_settings_to_event_url(first.id, event_url.id) is True
        links = await _links(db_session, event_url.id)
        assert len(links) == 2
        assert await _active_settings_ids(db_session, event_url.id) == [first.id]

    async def test_linked_url_paths(
        self,
        db_session: AsyncSession,
        test_user: User,
        settings_factory: Any,
        event_url_factory: Any,
    ) -> None:
        shared = await settings_factory(user_id=test_user.id)
        a = await event_url_factory(user_id=test_user.id, url_path="booth-a")
        b = await event_url_factory(user_id=test_user.id, url_path="booth-b")
        await event_url_factory(user_id=test_user.id, url_path="booth-c")

        service = SettingsService(db_session)
        await service.link_settings_to_event_url(shared.id, a.id)
        await service.link_settings_to_event_url(shared.id, b.id)

        assert sorted(await service.get_linked_url_paths(shared.id)) == ["booth-a", "booth-b"]


def test_settings_columns_cover_defaults() -> None:
    """Every default key maps onto a real column."""
    from boothboss.constants import DEFAULT_SETTINGS

    columns = set(Settings.__table__.columns.keys())
    assert set(DEFAULT_SETTINGS) <= columns
