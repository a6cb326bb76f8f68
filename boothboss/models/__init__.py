"""SQLAlchemy models."""

from boothboss.models.analytics import BoothAnalytics, BoothEventLog
from boothboss.models.base import Base
from boothboss.models.booth_session import BoothSession
from boothboss.models.event_url import EventUrl, EventUrlSettings
from boothboss.models.journey import Journey
from boothboss.models.settings import Settings
from boothboss.models.user import User, UserRole

__all__ = [
    # Base
    "Base",
    # Accounts
    "User",
    "UserRole",
    # Booths & configuration
    "EventUrl",
    "EventUrlSettings",
    "Settings",
    "Journey",
    # Captures & analytics
    "BoothSession",
    "BoothAnalytics",
    "BoothEventLog",
]
