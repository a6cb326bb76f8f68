"""API v1 router combining all route modules."""

from fastapi import APIRouter

from boothboss.api.v1 import (
    admin,
    analytics,
    auth,
    booth,
    cache,
    dev,
    event_urls,
    health,
    journeys,
    sessions,
    user_settings,
)

api_router = APIRouter()

# Include health check routes (no prefix)
api_router.include_router(health.router)

# Account registration and login
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["auth"],
)

# Booth configuration (requires auth)
api_router.include_router(
    user_settings.router,
    prefix="/user/settings",
    tags=["settings"],
)

# Event URLs (requires auth)
api_router.include_router(
    event_urls.router,
    prefix="/user/event-urls",
    tags=["event-urls"],
)

# Public booth endpoints (no auth - addressed by URL path)
api_router.include_router(
    booth.router,
    prefix="/booth",
    tags=["booth"],
)

# Captured sessions (requires auth)
api_router.include_router(
    sessions.router,
    prefix="/user/sessions",
    tags=["sessions"],
)

# Saved custom journeys (requires auth)
api_router.include_router(
    journeys.router,
    prefix="/journeys",
    tags=["journeys"],
)

# Analytics beacon (public) and dashboard summary (requires auth)
api_router.include_router(
    analytics.router,
    prefix="/analytics",
    tags=["analytics"],
)
api_router.include_router(
    analytics.user_router,
    prefix="/user/analytics",
    tags=["analytics"],
)

# Cache versions (mixed auth: booth-settings bumps are public)
api_router.include_router(
    cache.router,
    prefix="/cache",
    tags=["cache"],
)

# Administration (admin role)
api_router.include_router(
    admin.router,
    prefix="/admin",
    tags=["admin"],
)

# Email previews (development only)
api_router.include_router(
    dev.router,
    prefix="/dev",
    tags=["dev"],
)
