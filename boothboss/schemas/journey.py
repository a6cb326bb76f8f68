"""Pydantic schemas for saved journeys."""

from datetime import datetime
from uuid import UUID

from pydantic import Field

from boothboss.schemas.common import BaseSchema
from boothboss.schemas.settings import JourneyPage


class JourneySave(BaseSchema):
    """Create a journey, or replace one when ``id`` is given."""

    id: UUID | None = None
    name: str = Field(..., min_length=1, max_length=255)
    pages: list[JourneyPage] = Field(default_factory=list)


class JourneyResponse(BaseSchema):
    """A saved journey."""

    id: UUID
    user_id: UUID
    name: str
    pages: list[JourneyPage]
    created_at: datetime
    updated_at: datetime
