"""Saved custom journeys."""

import uuid
from typing import Any

from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from boothboss.models.base import Base, JSONType


class Journey(Base):
    """An ordered list of pages shown to the guest before capture."""

    __tablename__ = "journeys"

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    pages: Mapped[list[dict[str, Any]]] = mapped_column(JSONType, default=list, nullable=False)

    def __repr__(self) -> str:
        return f"<Journey {self.name} ({len(self.pages or [])} pages)>"
