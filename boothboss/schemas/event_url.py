"""Pydantic schemas for event URLs."""

import re
from datetime import UTC, datetime
from uuid import UUID

from pydantic import Field, field_validator, model_validator

from boothboss.constants import RESERVED_URL_PATHS, URL_PATH_PATTERN
from boothboss.schemas.common import BaseSchema


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC so event dates always compare."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _normalize_path_input(value: object) -> object:
    return value.strip().lower() if isinstance(value, str) else value


def _check_url_path(value: str) -> str:
    value = value.strip().lower()
    if value in RESERVED_URL_PATHS:
        raise ValueError(f"'{value}' is a reserved path")
    return value


class EventUrlCreate(BaseSchema):
    """Claim a new booth path."""

    url_path: str = Field(..., min_length=3, max_length=30)
    event_name: str = Field(..., min_length=1, max_length=255)
    is_active: bool = True
    event_start_date: datetime | None = None
    event_end_date: datetime | None = None

    @field_validator("url_path", mode="before")
    @classmethod
    def _normalize_path(cls, value: object) -> object:
        return _normalize_path_input(value)

    @field_validator("url_path")
    @classmethod
    def _validate_path(cls, value: str) -> str:
        if not re.match(URL_PATH_PATTERN, value):
            raise ValueError("URL path may only contain lowercase letters, numbers and hyphens")
        return _check_url_path(value)

    @field_validator("event_start_date", "event_end_date")
    @classmethod
    def _dates_as_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)

    @model_validator(mode="after")
    def _check_dates(self) -> "EventUrlCreate":
        if (
            self.event_start_date
            and self.event_end_date
            and self.event_end_date < self.event_start_date
        ):
            raise ValueError("Event end date must be after start date")
        return self


class EventUrlUpdate(BaseSchema):
    """Edit an event URL. Only provided fields change."""

    url_path: str | None = Field(
        default=None, min_length=3, max_length=30, pattern=URL_PATH_PATTERN
    )
    event_name: str | None = Field(default=None, min_length=1, max_length=255)
    is_active: bool | None = None
    event_start_date: datetime | None = None
    event_end_date: datetime | None = None

    @field_validator("url_path", mode="before")
    @classmethod
    def _normalize_path(cls, value: object) -> object:
        return _normalize_path_input(value)

    @field_validator("url_path")
    @classmethod
    def _validate_path(cls, value: str | None) -> str | None:
        return _check_url_path(value) if value is not None else None

    @field_validator("event_start_date", "event_end_date")
    @classmethod
    def _dates_as_utc(cls, value: datetime | None) -> datetime | None:
        return as_utc(value)


class EventUrlResponse(BaseSchema):
    """Event URL as listed in the dashboard."""

    id: UUID
    user_id: UUID
    url_path: str
    event_name: str
    is_active: bool
    event_start_date: datetime | None
    event_end_date: datetime | None
    created_at: datetime
    updated_at: datetime


class EventUrlListResponse(BaseSchema):
    """All event URLs of a user with the remaining quota."""

    items: list[EventUrlResponse]
    total: int
    limit: int


class UrlAvailabilityResponse(BaseSchema):
    """Result of a path availability check."""

    url_path: str
    available: bool
    reason: str | None = None
