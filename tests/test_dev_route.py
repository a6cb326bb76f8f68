"""Tests for the development email preview endpoints."""

import pytest
from httpx import AsyncClient

from boothboss.core.config import settings
from boothboss.services.email_service import EmailAttachment, email_preview_store


@pytest.fixture
def development(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "environment", "development")


def _store(subject: str, attachments: list[EmailAttachment] | None = None) -> str:
    return email_preview_store.store_email(
        to="guest@example.com",
        from_address='"Booth" <booth@example.com>',
        subject=subject,
        html=f"<h1>{subject}</h1>",
        attachments=attachments,
    ).id


@pytest.mark.usefixtures("development")
class TestEmailPreviews:
    async def test_list_newest_first(self, plain_client: AsyncClient) -> None:
        _store("First")
        _store("Second")

        response = await plain_client.get("/api/v1/dev/emails")
        assert response.status_code == 200
        data = response.json()
        assert [e["subject"] for e in data] == ["Second", "First"]
        assert data[0]["fromAddress"] == '"Booth" <booth@example.com>'
        assert "html" not in data[0]

    async def test_detail(self, plain_client: AsyncClient) -> None:
        email_id = _store(
            "Your photo", [EmailAttachment("your-photo.jpg", b"\xff\xd8\xff", "image/jpeg")]
        )

        response = await plain_client.get(f"/api/v1/dev/emails/{email_id}")
        assert response.status_code == 200
        data = response.json()
        assert data["html"] == "<h1>Your photo</h1>"
        assert data["attachments"] == [
            {"filename": "your-photo.jpg", "contentType": "image/jpeg", "size": 3}
        ]

    async def test_unknown_id_returns_404(self, plain_client: AsyncClient) -> None:
        response = await plain_client.get("/api/v1/dev/emails/email-missing")
        assert response.status_code == 404
        assert response.json()["detail"] == "Email preview not found"

    async def test_clear(self, plain_client: AsyncClient) -> None:
        _store("One")
        _store("Two")

        response = await plain_client.delete("/api/v1/dev/emails")
        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Cleared 2 email previews"}
        assert email_preview_store.get_all_emails() == []


async def test_hidden_outside_development(
    plain_client: AsyncClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(settings, "environment", "production")
    _store("Secret")

    for method, path in (("GET", "/api/v1/dev/emails"), ("DELETE", "/api/v1/dev/emails")):
        response = await plain_client.request(method, path)
        assert response.status_code == 404
    assert len(email_preview_store) == 1
