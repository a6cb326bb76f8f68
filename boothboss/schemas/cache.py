"""Pydantic schemas for cache invalidation."""

from datetime import datetime

from boothboss.schemas.common import BaseSchema


class InvalidationResponse(BaseSchema):
    """A cache-version bump."""

    success: bool = True
    resource: str
    version: int
    url_path: str | None = None
    urgent: bool = False
    timestamp: datetime


class CacheVersionResponse(BaseSchema):
    """Current cache version(s)."""

    resource: str | None = None
    version: int | None = None
    versions: dict[str, int] | None = None
