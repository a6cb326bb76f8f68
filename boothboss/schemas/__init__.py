"""Pydantic schemas for API requests and responses."""

from boothboss.schemas.common import (
    BaseSchema,
    ErrorResponse,
    HealthResponse,
    PaginatedResponse,
    SuccessResponse,
)

__all__ = [
    "BaseSchema",
    "ErrorResponse",
    "HealthResponse",
    "PaginatedResponse",
    "SuccessResponse",
]
