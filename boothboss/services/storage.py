"""Media storage with switchable providers.

Captured photos and videos go to Vercel Blob when it is configured, and to
the local upload directory otherwise (or when a Blob upload fails).
"""

import asyncio
import logging
import secrets
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path, PurePosixPath
from typing import Literal

import httpx

from boothboss.core.config import settings
from boothboss.core.errors import StorageError
from boothboss.models.settings import Settings

logger = logging.getLogger(__name__)

ProviderName = Literal["local", "vercel"]

LOCAL_URL_PREFIX = "/uploads"
BLOB_API_VERSION = "7"


@dataclass
class StorageResult:
    url: str
    pathname: str
    size: int
    content_type: str
    provider: ProviderName
    uploaded_at: datetime = field(default_factory=lambda: datetime.now(UTC))


def generate_unique_filename(original_name: str) -> str:
    """``{ms}-{random}-{basename}.{ext}`` so uploads never collide."""
    path = PurePosixPath(original_name or "upload")
    stem = "".join(c if c.isalnum() or c in "-_" else "-" for c in path.stem) or "upload"
    return f"{int(time.time() * 1000)}-{secrets.token_hex(3)}-{stem}{path.suffix.lower()}"


class StorageProvider(ABC):
    name: ProviderName

    @abstractmethod
    async def upload_file(
        self, content: bytes, filename: str, content_type: str, directory: str = ""
    ) -> StorageResult: ...

    @abstractmethod
    async def delete_file(self, url_or_path: str) -> bool: ...


class LocalStorageProvider(StorageProvider):
    """Writes under ``upload_dir``; served by the app at ``/uploads``."""

    name: ProviderName = "local"

    def __init__(self, upload_dir: str | Path | None = None, base_url: str | None = None) -> None:
        self.upload_dir = Path(upload_dir or settings.upload_dir)
        self.base_url = (base_url or "").rstrip("/")

    def _resolve(self, relative: str) -> Path:
        root = self.upload_dir.resolve()
        target = (root / relative).resolve()
        if not target.is_relative_to(root):
            raise StorageError(f"Path escapes the upload directory: {relative}")
        return target

    async def upload_file(
        self, content: bytes, filename: str, content_type: str, directory: str = ""
    ) -> StorageResult:
        relative = str(PurePosixPath(directory.strip("/")) / filename) if directory else filename
        target = self._resolve(relative)

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)

        await asyncio.to_thread(_write)

        pathname = f"{LOCAL_URL_PREFIX}/{relative}"
        logger.info("Stored %s bytes locally at %s", len(content), pathname)
        return StorageResult(
            url=f"{self.base_url}{pathname}",
            pathname=pathname,
            size=len(content),
            content_type=content_type,
            provider=self.name,
        )

    async def delete_file(self, url_or_path: str) -> bool:
        path = url_or_path
        if self.base_url and path.startswith(self.base_url):
            path = path[len(self.base_url) :]
        if not path.startswith(f"{LOCAL_URL_PREFIX}/"):
            return False
        target = self._resolve(path[len(LOCAL_URL_PREFIX) + 1 :])
        if not target.exists():
            return False
        await asyncio.to_thread(target.unlink)
        return True


class VercelBlobProvider(StorageProvider):
    """Vercel Blob over its HTTP API."""

    name: ProviderName = "vercel"

    def __init__(self, token: str | None = None, api_url: str | None = None) -> None:
        self.token = token if token is not None else settings.blob_read_write_token
        self.api_url = (api_url or settings.blob_api_url).rstrip("/")

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "x-api-version": BLOB_API_VERSION,
        }

    async def upload_file(
        self, content: bytes, filename: str, content_type: str, directory: str = ""
    ) -> StorageResult:
        if not self.token:
            raise StorageError("Vercel Blob token is not configured")

        pathname = f"{directory.strip('/')}/{filename}" if directory else filename
        try:
            async with httpx.AsyncClient(timeout=60.0) as client:
                response = await client.put(
                    f"{self.api_url}/{pathname}",
                    headers={
                        **self._headers(),
                        "x-content-type": content_type,
                        "x-add-random-suffix": "0",
                    },
                    content=content,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise StorageError(f"Vercel Blob upload failed: {e}") from e

        logger.info("Stored %s bytes in Vercel Blob at %s", len(content), data.get("pathname"))
        return StorageResult(
            url=data["url"],
            pathname=data.get("pathname", pathname),
            size=len(content),
            content_type=data.get("contentType", content_type),
            provider=self.name,
        )

    async def delete_file(self, url_or_path: str) -> bool:
        if not self.token or not url_or_path.startswith("http"):
            return False
        try:
            async with httpx.AsyncClient(timeout=15.0) as client:
                response = await client.post(
                    f"{self.api_url}/delete",
                    headers=self._headers(),
                    json={"urls": [url_or_path]},
                )
                response.raise_for_status()
        except httpx.HTTPError:
            logger.warning("Vercel Blob delete failed for %s", url_or_path, exc_info=True)
            return False
        return True


def determine_provider(booth_settings: Settings | None = None) -> ProviderName:
    """Pick the provider for a booth.

    Explicit ``local``/``vercel`` wins. ``auto`` means Vercel when a token is
    configured and the booth allows Blob, local otherwise.
    """
    configured = (booth_settings.storage_provider if booth_settings else None) or (
        settings.storage_provider
    )
    if configured in ("local", "vercel"):
        return configured  # type: ignore[return-value]

    blob_enabled = booth_settings.blob_vercel_enabled if booth_settings else True
    if settings.blob_read_write_token and blob_enabled:
        return "vercel"
    return "local"


async def upload_media(
    content: bytes,
    original_filename: str,
    content_type: str,
    *,
    booth_settings: Settings | None = None,
    directory: str = "",
) -> StorageResult:
    """Upload captured media, falling back to local storage if Vercel fails.

    Raises:
        StorageError: Every provider failed.
    """
    filename = generate_unique_filename(original_filename)
    provider_name = determine_provider(booth_settings)

    if provider_name == "vercel":
        try:
            return await VercelBlobProvider().upload_file(
                content, filename, content_type, directory
            )
        except StorageError:
            logger.warning("Vercel upload failed, falling back to local storage", exc_info=True)

    try:
        return await LocalStorageProvider().upload_file(content, filename, content_type, directory)
    except OSError as e:
        raise StorageError(f"Local upload failed: {e}") from e


async def delete_media(url_or_path: str) -> bool:
    """Best-effort removal of a stored media file."""
    if url_or_path.startswith("http") and settings.blob_read_write_token:
        return await VercelBlobProvider().delete_file(url_or_path)
    try:
        return await LocalStorageProvider().delete_file(url_or_path)
    except (OSError, StorageError):
        logger.warning("Could not delete local media %s", url_or_path, exc_info=True)
        return False


def absolute_media_url(url: str) -> str:
    """Absolute URL for emails; Blob URLs are already absolute."""
    if url.startswith(("http://", "https://")):
        return url
    return f"{settings.base_url.rstrip('/')}{url}"
