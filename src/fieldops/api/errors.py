"""Translation of domain errors into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from ..errors import (
    AlreadyInTerminalState,
    ConflictError,
    FieldOpsError,
    NotAdmin,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def status_for(exc: FieldOpsError) -> int:
    if isinstance(exc, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, (ConflictError, AlreadyInTerminalState)):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, NotAdmin):
        return status.HTTP_403_FORBIDDEN
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def to_http_exception(exc: FieldOpsError | ConnectionError) -> HTTPException:
    """Map a domain or store failure onto an ``HTTPException``."""
    if isinstance(exc, FieldOpsError):
        return HTTPException(status_code=status_for(exc), detail=str(exc))
    logger.error("Store unavailable: %s", exc)
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=f"Database connection error: {exc}",
    )
