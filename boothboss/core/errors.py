"""Service-level exceptions and their HTTP mapping."""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse


class BoothError(Exception):
    """Base class for expected service failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    error_type: str = "SERVER_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(BoothError):
    """Resource is missing or not owned by the caller."""

    status_code = status.HTTP_404_NOT_FOUND
    error_type = "NOT_FOUND"


class ConflictError(BoothError):
    """Resource collides with an existing one (duplicate path, email...)."""

    status_code = status.HTTP_409_CONFLICT
    error_type = "CONFLICT"


class LimitExceededError(BoothError):
    """A per-user quota has been reached."""

    status_code = status.HTTP_403_FORBIDDEN
    error_type = "LIMIT_EXCEEDED"


class EmailDeliveryError(BoothError):
    """Outbound SMTP delivery failed."""

    status_code = status.HTTP_502_BAD_GATEWAY
    error_type = "EMAIL_ERROR"


class StorageError(BoothError):
    """Every configured media storage provider failed."""

    status_code = status.HTTP_502_BAD_GATEWAY
    error_type = "STORAGE_ERROR"


def setup_error_handlers(app: FastAPI) -> None:
    """Register the handler that renders BoothError as JSON."""

    @app.exception_handler(BoothError)
    async def booth_error_handler(_request: Request, exc: BoothError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message, "type": exc.error_type},
        )
