"""Cache invalidation endpoints."""

from dataclasses import asdict

from fastapi import APIRouter, HTTPException, Query, status
from redis.exceptions import RedisError

from boothboss.core.deps import Cache, OptionalUser
from boothboss.schemas.cache import CacheVersionResponse, InvalidationResponse

router = APIRouter()

# Booths bump their own settings version without signing in
PUBLIC_RESOURCES = frozenset({"booth-settings"})


@router.post(
    "/invalidate",
    response_model=InvalidationResponse,
    summary="Invalidate cache",
    description="Bump the cache version of a resource. Urgent bumps with a URL path are broadcast.",
)
async def invalidate(
    cache: Cache,
    user: OptionalUser,
    resource: str = Query("all"),
    url_path: str | None = Query(None, alias="urlPath", max_length=191),
    urgent: bool = Query(False),
) -> InvalidationResponse:
    if user is None and resource not in PUBLIC_RESOURCES:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        result = await cache.invalidate(resource, url_path=url_path, urgent=urgent)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except RedisError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Cache backend unavailable",
        )

    return InvalidationResponse(**asdict(result))


@router.get(
    "/invalidate",
    response_model=CacheVersionResponse,
    summary="Get cache version",
    description="Current version of one resource, or of every resource when none is given.",
)
async def get_version(
    cache: Cache,
    resource: str | None = Query(None),
    url_path: str | None = Query(None, alias="urlPath", max_length=191),
) -> CacheVersionResponse:
    try:
        if resource is None or resource == "all":
            return CacheVersionResponse(versions=await cache.get_versions())
        version = await cache.get_version(resource, url_path)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except RedisError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Cache backend unavailable",
        )
    return CacheVersionResponse(resource=resource, version=version)
