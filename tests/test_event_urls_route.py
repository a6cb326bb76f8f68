"""Tests for event URL CRUD endpoints.

Covers:
- POST /api/v1/user/event-urls (validation, reserved paths, quota, duplicates)
- GET /api/v1/user/event-urls, GET /api/v1/user/event-urls/check
- GET/PATCH/DELETE /api/v1/user/event-urls/{id}
- POST /api/v1/user/event-urls/{id}/settings (link settings)
"""

import json
from datetime import datetime
from typing import Any

import fakeredis.aioredis
import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from boothboss.core.config import settings
from boothboss.models.event_url import EventUrl, EventUrlSettings
from boothboss.models.settings import Settings
from boothboss.models.user import User
from boothboss.services.cache_service import INVALIDATION_CHANNEL, version_key

# ---------------------------------------------------------------------------
# POST /api/v1/user/event-urls (create)
# ---------------------------------------------------------------------------


class TestCreateEventUrl:
    async def test_create_success(self, client: AsyncClient, test_user: User) -> None:
        response = await client.post(
            "/api/v1/user/event-urls",
            json={"urlPath": "Summer-Party", "eventName": "Summer Party"},
        )
        assert response.status_code == 201

        data = response.json()
        assert data["urlPath"] == "summer-party"
        assert data["eventName"] == "Summer Party"
        assert data["isActive"] is True
        assert data["userId"] == str(test_user.id)

    @pytest.mark.parametrize(
        "url_path",
        ["ab", "has space", "under_score", "x" * 31, "admin", "dashboard", "e"],
    )
    async def test_invalid_or_reserved_paths_return_422(
        self, client: AsyncClient, url_path: str
    ) -> None:
        response = await client.post(
            "/api/v1/user/event-urls",
            json={"urlPath": url_path, "eventName": "Party"},
        )
        assert response.status_code == 422

    async def test_end_before_start_returns_422(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/v1/user/event-urls",
            json={
                "urlPath": "dated-party",
                "eventName": "Party",
                "eventStartDate": "2026-06-02T10:00:00Z",
                "eventEndDate": "2026-06-01T10:00:00Z",
            },
        )
        assert response.status_code == 422

    async def test_mixed_naive_and_utc_dates_are_compared(self, client: AsyncClient) -> None:
        response = await client.post(
            "/api/v1/user/event-urls",
            json={
                "urlPath": "mixed-dates",
                "eventName": "Party",
                "eventStartDate": "2026-01-01T00:00:00Z",
                "eventEndDate": "2026-01-02T00:00:00",
            },
        )
        assert response.status_code == 201

        response = await client.post(
            "/api/v1/user/event-urls",
            json={
                "urlPath": "mixed-reversed",
                "eventName": "Party",
                "eventStartDate": "2026-01-02T00:00:00",
                "eventEndDate": "2026-01-01T00:00:00Z",
            },
        )
        assert response.status_code == 422

    async def test_duplicate_path_returns_409(
        self, client: AsyncClient, user_factory: Any, event_url_factory: Any
    ) -> None:
        other = await user_factory()
        await event_url_factory(user_id=other.id, url_path="taken-path")

        response = await client.post(
            "/api/v1/user/event-urls",
            json={"urlPath": "taken-path", "eventName": "Party"},
        )
        assert response.status_code == 409
        assert response.json()["type"] == "CONFLICT"

    async def test_quota_is_enforced(
        self, client: AsyncClient, test_user: User, event_url_factory: Any
    ) -> None:
        for _ in range(settings.max_event_urls_per_user):
            await event_url_factory(user_id=test_user.id)

        response = await client.post(
            "/api/v1/user/event-urls",
            json={"urlPath": "one-too-many", "eventName": "Party"},
        )
        assert response.status_code == 403
        assert response.json()["type"] == "LIMIT_EXCEEDED"

    async def test_create_bumps_event_url_version(
        self, client: AsyncClient, fake_redis: fakeredis.aioredis.FakeRedis
    ) -> None:
        await client.post(
            "/api/v1/user/event-urls",
            json={"urlPath": "versioned", "eventName": "Party"},
        )
        assert await fake_redis.get(version_key("event-urls")) == "1"


# ---------------------------------------------------------------------------
# GET /api/v1/user/event-urls, /check
# ---------------------------------------------------------------------------


class TestListEventUrls:
    async def test_lists_only_own_urls_with_limit(
        self,
        client: AsyncClient,
        test_user: User,
        user_factory: Any,
        event_url_factory: Any,
    ) -> None:
        await event_url_factory(user_id=test_user.id, url_path="mine-one")
        await event_url_factory(user_id=test_user.id, url_path="mine-two")
        other = await user_factory()
        await event_url_factory(user_id=other.id, url_path="not-mine")

        response = await client.get("/api/v1/user/event-urls")
        assert response.status_code == 200

        data = response.json()
        assert data["total"] == 2
        assert data["limit"] == settings.max_event_urls_per_user
        # Newest first
        assert [item["urlPath"] for item in data["items"]] == ["mine-two", "mine-one"]


class TestCheckAvailability:
    async def test_available(self, client: AsyncClient) -> None:
        response = await client.get(
            "/api/v1/user/event-urls/check", params={"urlPath": "Free-Path"}
        )
        assert response.status_code == 200
        data = response.json()
        assert data == {"urlPath": "free-path", "available": True, "reason": None}

    @pytest.mark.parametrize(
        ("url_path", "reason_fragment"),
        [("ab", "between 3 and 30"), ("bad_path", "lowercase"), ("settings", "reserved")],
    )
    async def test_unavailable_reasons(
        self, client: AsyncClient, url_path: str, reason_fragment: str
    ) -> None:
        response = await client.get("/api/v1/user/event-urls/check", params={"urlPath": url_path})
        data = response.json()
        assert data["available"] is False
        assert reason_fragment in data["reason"]

    async def test_taken(
        self, client: AsyncClient, test_user: User, event_url_factory: Any
    ) -> None:
        await event_url_factory(user_id=test_user.id, url_path="already-here")
        response = await client.get(
            "/api/v1/user/event-urls/check", params={"urlPath": "already-here"}
        )
        assert response.json()["available"] is False


# ---------------------------------------------------------------------------
# GET/PATCH/DELETE /api/v1/user/event-urls/{id}
# ---------------------------------------------------------------------------


class TestEventUrlDetail:
    async def test_get_own(
        self, client: AsyncClient, test_user: User, event_url_factory: Any
    ) -> None:
        event_url = await event_url_factory(user_id=test_user.id)
        response = await client.get(f"/api/v1/user/event-urls/{event_url.id}")
        assert response.status_code == 200
        assert response.json()["id"] == str(event_url.id)

    async def test_get_foreign_returns_404(
        self, client: AsyncClient, user_factory: Any, event_url_factory: Any
    ) -> None:
        other = await user_factory()
        event_url = await event_url_factory(user_id=other.id)
        response = await client.get(f"/api/v1/user/event-urls/{event_url.id}")
        assert response.status_code == 404

    async def test_admin_can_read_any(
        self, admin_client: AsyncClient, user_factory: Any, event_url_factory: Any
    ) -> None:
        other = await user_factory()
        event_url = await event_url_factory(user_id=other.id)
        response = await admin_client.get(f"/api/v1/user/event-urls/{event_url.id}")
        assert response.status_code == 200

    async def test_rename_path_publishes_urgent_invalidation(
        self,
        client: AsyncClient,
        fake_redis: fakeredis.aioredis.FakeRedis,
        test_user: User,
        event_url_factory: Any,
    ) -> None:
        event_url = await event_url_factory(user_id=test_user.id, url_path="old-path")

        pubsub = fake_redis.pubsub()
        await pubsub.subscribe(INVALIDATION_CHANNEL)
        await pubsub.get_message(timeout=1)  # subscribe confirmation

        response = await client.patch(
            f"/api/v1/user/event-urls/{event_url.id}",
            json={"urlPath": "new-path", "eventName": "Renamed"},
        )
        assert response.status_code == 200
        assert response.json()["urlPath"] == "new-path"
        assert response.json()["eventName"] == "Renamed"

        # Both the old and the new path are invalidated
        assert await fake_redis.get(version_key("booth-settings", "old-path")) == "1"
        assert await fake_redis.get(version_key("booth-settings", "new-path")) == "1"

        message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1)
        assert message is not None
        payload = json.loads(message["data"])
        assert payload["resource"] == "booth-settings"
        assert payload["urlPath"] in {"old-path", "new-path"}
        await pubsub.aclose()

    async def test_patch_path_is_normalized(
        self, client: AsyncClient, test_user: User, event_url_factory: Any
    ) -> None:
        event_url = await event_url_factory(user_id=test_user.id, url_path="plain-path")

        response = await client.patch(
            f"/api/v1/user/event-urls/{event_url.id}", json={"urlPath": " Summer-Party "}
        )
        assert response.status_code == 200
        assert response.json()["urlPath"] == "summer-party"

    async def test_patch_dates_against_stored_naive_value(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        test_user: User,
        event_url_factory: Any,
    ) -> None:
        event_url = await event_url_factory(user_id=test_user.id, url_path="dated-booth")
        event_url.event_start_date = datetime(2026, 6, 1, 10, 0)
        await db_session.commit()

        response = await client.patch(
            f"/api/v1/user/event-urls/{event_url.id}",
            json={"eventEndDate": "2026-06-02T10:00:00Z"},
        )
        assert response.status_code == 200

        response = await client.patch(
            f"/api/v1/user/event-urls/{event_url.id}",
            json={"eventEndDate": "2026-05-31T10:00:00Z"},
        )
        assert response.status_code == 422

    async def test_rename_to_taken_path_returns_409(
        self, client: AsyncClient, test_user: User, event_url_factory: Any
    ) -> None:
        await event_url_factory(user_id=test_user.id, url_path="first-path")
        second = await event_url_factory(user_id=test_user.id, url_path="second-path")

        response = await client.patch(
            f"/api/v1/user/event-urls/{second.id}", json={"urlPath": "first-path"}
        )
        assert response.status_code == 409

    async def test_delete_keeps_settings(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        test_user: User,
        event_url_factory: Any,
        settings_factory: Any,
    ) -> None:
        event_url = await event_url_factory(user_id=test_user.id)
        row = await settings_factory(user_id=test_user.id, event_url_id=event_url.id)

        response = await client.delete(f"/api/v1/user/event-urls/{event_url.id}")
        assert response.status_code == 204

        remaining = await db_session.execute(select(EventUrl).where(EventUrl.id == event_url.id))
        assert remaining.scalar_one_or_none() is None
        links = await db_session.execute(
            select(EventUrlSettings).where(EventUrlSettings.event_url_id == event_url.id)
        )
        assert links.first() is None
        assert (
            await db_session.execute(select(Settings.id).where(Settings.id == row.id))
        ).scalar_one() == row.id


# ---------------------------------------------------------------------------
# POST /api/v1/user/event-urls/{id}/settings
# ---------------------------------------------------------------------------


class TestLinkSettings:
    async def test_link_existing_row(
        self,
        client: AsyncClient,
        db_session: AsyncSession,
        test_user: User,
        event_url_factory: Any,
        settings_factory: Any,
    ) -> None:
        event_url = await event_url_factory(user_id=test_user.id)
        await settings_factory(user_id=test_user.id, event_url_id=event_url.id)
        target = await settings_factory(user_id=test_user.id, event_name="Target")

        response = await client.post(
            f"/api/v1/user/event-urls/{event_url.id}/settings",
            json={"settingsId": str(target.id)},
        )
        assert response.status_code == 200
        assert response.json()["eventName"] == "Target"

        active = await db_session.execute(
            select(EventUrlSettings.settings_id).where(
                EventUrlSettings.event_url_id == event_url.id,
                EventUrlSettings.active == True,  # noqa: E712
            )
        )
        assert active.scalars().all() == [target.id]

    async def test_link_foreign_settings_returns_404(
        self,
        client: AsyncClient,
        test_user: User,
        user_factory: Any,
        event_url_factory: Any,
        settings_factory: Any,
    ) -> None:
        event_url = await event_url_factory(user_id=test_user.id)
        other = await user_factory()
        foreign = await settings_factory(user_id=other.id)

        response = await client.post(
            f"/api/v1/user/event-urls/{event_url.id}/settings",
            json={"settingsId": str(foreign.id)},
        )
        assert response.status_code == 404
