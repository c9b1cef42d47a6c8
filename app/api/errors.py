"""Translate service-layer errors to HTTP responses."""

from __future__ import annotations

import logging

from fastapi import HTTPException

from app.services.errors import (
    ConflictError,
    NotFoundError,
    PipelineError,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def to_http_exception(exc: PipelineError) -> HTTPException:
    """Map a PipelineError to the HTTPException a route should raise."""
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ConflictError):
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, StorageError):
        logger.error("Storage failure: %s", exc)
        return HTTPException(
            status_code=500,
            detail="Storage error, please retry",
        )
    logger.error("Unhandled pipeline error: %s", exc)
    return HTTPException(status_code=500, detail="Internal error")
