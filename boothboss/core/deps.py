"""Dependency injection for FastAPI routes."""

from collections.abc import AsyncGenerator
from typing import Annotated, Any
from uuid import UUID

import redis.asyncio as aioredis
from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

# Re-export auth dependencies for convenience
from boothboss.core.auth import (
    AdminUser,
    CurrentUser,
    OptionalUser,
    get_admin_user,
    get_current_user,
    get_optional_user,
    is_admin,
)
from boothboss.core.config import settings
from boothboss.core.database import get_async_session
from boothboss.models.event_url import EventUrl
from boothboss.services.cache_service import CacheService

# Type alias for database session dependency
AsyncSessionDep = Annotated[AsyncSession, Depends(get_async_session)]


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Alias for get_async_session for backwards compatibility."""
    async for session in get_async_session():
        yield session


# Shared Redis connection pool
_redis_pool: aioredis.ConnectionPool | None = None


def _get_redis_pool() -> aioredis.ConnectionPool:
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is None:
        _redis_pool = aioredis.ConnectionPool.from_url(
            str(settings.redis_url), decode_responses=True
        )
    return _redis_pool


async def close_redis_pool() -> None:
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is not None:
        await _redis_pool.aclose()
        _redis_pool = None


async def get_redis() -> AsyncGenerator[aioredis.Redis, None]:
    """Yield a Redis client from the shared connection pool."""
    pool = _get_redis_pool()
    r = aioredis.Redis(connection_pool=pool)
    try:
        yield r
    finally:
        await r.aclose()


async def get_cache_service(
    redis: aioredis.Redis = Depends(get_redis),
) -> CacheService:
    return CacheService(redis)


# Database session dependency
DBSession = Annotated[AsyncSession, Depends(get_db)]
RedisClient = Annotated[aioredis.Redis, Depends(get_redis)]
Cache = Annotated[CacheService, Depends(get_cache_service)]


def get_user_id(user: dict[str, Any]) -> UUID:
    """Extract the user ID from the authenticated user's JWT payload."""
    try:
        return UUID(str(user.get("sub")))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token subject",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_event_url_for_user(
    event_url_id: UUID,
    user: dict[str, Any],
    db: AsyncSession,
) -> EventUrl:
    """Get an event URL by ID, verifying it belongs to the user.

    Admins may access any event URL.
    """
    query = select(EventUrl).where(EventUrl.id == event_url_id)
    if not is_admin(user):
        query = query.where(EventUrl.user_id == get_user_id(user))

    result = await db.execute(query)
    event_url = result.scalar_one_or_none()

    if not event_url:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event URL not found or access denied",
        )

    return event_url


__all__ = [
    "AdminUser",
    "AsyncSessionDep",
    "Cache",
    "CurrentUser",
    "DBSession",
    "OptionalUser",
    "RedisClient",
    "close_redis_pool",
    "get_admin_user",
    "get_cache_service",
    "get_current_user",
    "get_db",
    "get_event_url_for_user",
    "get_optional_user",
    "get_redis",
    "get_user_id",
    "is_admin",
]
