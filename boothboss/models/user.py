"""User model for booth owners and administrators."""

import enum
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from boothboss.models.base import Base

if TYPE_CHECKING:
    from boothboss.models.event_url import EventUrl
    from boothboss.models.settings import Settings


class UserRole(str, enum.Enum):
    """Account roles."""

    ADMIN = "ADMIN"
    CUSTOMER = "CUSTOMER"


class User(Base):
    """Dashboard account. Owns settings rows and event URLs."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    username: Mapped[str | None] = mapped_column(String(191), unique=True, nullable=True)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)

    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, name="user_role"),
        default=UserRole.CUSTOMER,
        nullable=False,
    )

    organization_name: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Usage counters
    media_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    emails_sent: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    settings: Mapped[list["Settings"]] = relationship(
        "Settings",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    event_urls: Mapped[list["EventUrl"]] = relationship(
        "EventUrl",
        back_populates="user",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role.value})>"
