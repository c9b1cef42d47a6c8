"""Commit-or-rollback helper for service operations."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.services.errors import StorageError

logger = logging.getLogger(__name__)


@contextmanager
def unit_of_work(db: Session, operation: str) -> Iterator[Session]:
    """Run the block as one transaction: commit on success, roll back on any error.

    SQLAlchemy errors are re-raised as StorageError; everything else propagates as is.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("%s failed: database error", operation)
        raise StorageError(f"{operation} failed") from exc
    except Exception:
        db.rollback()
        raise
