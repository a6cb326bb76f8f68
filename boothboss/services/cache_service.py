"""Cache-version bumps backed by Redis.

Clients keep a cached copy of settings and compare version numbers to decide
when to refetch. Urgent bumps for a specific booth are also published on a
pub/sub channel so open booth tabs can react without polling.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

import redis.asyncio as aioredis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)

CACHE_RESOURCES = ("user-settings", "booth-settings", "event-urls")
ALL_RESOURCES = "all"
INVALIDATION_CHANNEL = "cache-invalidation"
VERSION_KEY_PREFIX = "cache:version"


def version_key(resource: str, url_path: str | None = None) -> str:
    if url_path:
        return f"{VERSION_KEY_PREFIX}:{resource}:{url_path}"
    return f"{VERSION_KEY_PREFIX}:{resource}"


def validate_resource(resource: str) -> str:
    """Return ``resource`` if it is a known cache resource.

    Raises:
        ValueError: Unknown resource name.
    """
    if resource != ALL_RESOURCES and resource not in CACHE_RESOURCES:
        msg = f"Invalid resource '{resource}'. Expected one of: all, {', '.join(CACHE_RESOURCES)}"
        raise ValueError(msg)
    return resource


@dataclass
class InvalidationResult:
    """Outcome of a version bump."""

    resource: str
    version: int
    url_path: str | None = None
    urgent: bool = False
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))


class CacheService:
    """Bump and read cache versions."""

    def __init__(self, redis: aioredis.Redis) -> None:
        self.redis = redis

    async def invalidate(
        self,
        resource: str,
        url_path: str | None = None,
        urgent: bool = False,
    ) -> InvalidationResult:
        """Increment the version of ``resource`` (and of its ``url_path`` scope).

        Raises:
            ValueError: Unknown resource name.
        """
        validate_resource(resource)
        resources = CACHE_RESOURCES if resource == ALL_RESOURCES else (resource,)

        version = 0
        for name in resources:
            version = await self.redis.incr(version_key(name, None))
            if url_path:
                version = await self.redis.incr(version_key(name, url_path))

        result = InvalidationResult(
            resource=resource,
            version=int(version),
            url_path=url_path,
            urgent=urgent,
        )

        if urgent and url_path:
            message = {
                "resource": resource,
                "urlPath": url_path,
                "version": result.version,
                "timestamp": result.timestamp.isoformat(),
            }
            await self.redis.publish(INVALIDATION_CHANNEL, json.dumps(message))

        logger.info(
            "Cache invalidated",
            extra={
                "resource": resource,
                "url_path": url_path,
                "version": result.version,
                "urgent": urgent,
            },
        )
        return result

    async def get_version(self, resource: str, url_path: str | None = None) -> int:
        """Current version of ``resource``; 0 when it was never bumped."""
        validate_resource(resource)
        raw = await self.redis.get(version_key(resource, url_path))
        return int(raw) if raw is not None else 0

    async def get_versions(self) -> dict[str, int]:
        """Current versions of every resource."""
        keys = [version_key(name) for name in CACHE_RESOURCES]
        values = await self.redis.mget(keys)
        return {
            name: int(raw) if raw is not None else 0
            for name, raw in zip(CACHE_RESOURCES, values, strict=True)
        }

    async def invalidate_quietly(
        self,
        resource: str,
        url_path: str | None = None,
        urgent: bool = False,
    ) -> InvalidationResult | None:
        """Like :meth:`invalidate`, but a Redis failure is logged instead of raised."""
        try:
            return await self.invalidate(resource, url_path=url_path, urgent=urgent)
        except RedisError:
            logger.warning("Cache invalidation failed for %s", resource, exc_info=True)
            return None

    async def notify_settings_changed(
        self, url_paths: list[str] | None = None
    ) -> list[InvalidationResult]:
        """Bump versions after a settings write.

        Redis failures are logged and swallowed; the write that triggered the
        bump has already been committed.
        """
        results: list[InvalidationResult] = []
        try:
            results.append(await self.invalidate("user-settings"))
            for path in url_paths or []:
                results.append(await self.invalidate("booth-settings", url_path=path, urgent=True))
        except RedisError:
            logger.warning("Cache invalidation failed after settings write", exc_info=True)
        return results

    async def current_booth_version(self, url_path: str) -> int:
        """Version a booth should compare against, or the clock if Redis is down."""
        try:
            return await self.get_version("booth-settings", url_path)
        except RedisError:
            logger.warning("Could not read cache version for %s", url_path, exc_info=True)
            return _now_ms()


def _now_ms() -> int:
    return int(datetime.now(UTC).timestamp() * 1000)
