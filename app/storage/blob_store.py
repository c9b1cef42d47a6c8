"""Blob storage for uploaded files.

Metadata lives in the database; the bytes live behind a BlobStore keyed by
an opaque storage key. LocalBlobStore keeps them under UPLOAD_DIR.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from app.config import get_settings

logger = logging.getLogger(__name__)


class BlobStore(Protocol):
    """Minimal byte store used by the company file service."""

    def store(self, key: str, data: bytes) -> str: ...

    def fetch(self, key: str) -> bytes: ...

    def delete(self, key: str) -> None: ...


class LocalBlobStore:
    """Stores blobs as files in a single directory.

    Keys are relative paths under root; keys resolving outside root are
    rejected with ValueError. fetch/delete raise FileNotFoundError for
    missing blobs; other OSErrors propagate.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    def _path_for(self, key: str) -> Path:
        if not key or Path(key).is_absolute():
            raise ValueError(f"Invalid storage key: {key!r}")
        path = (self.root / key).resolve()
        if path == self.root or self.root not in path.parents:
            raise ValueError(f"Invalid storage key: {key!r}")
        return path

    def store(self, key: str, data: bytes) -> str:
        path = self._path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.debug("Stored blob %s (%d bytes)", key, len(data))
        return key

    def fetch(self, key: str) -> bytes:
        return self._path_for(key).read_bytes()

    def delete(self, key: str) -> None:
        self._path_for(key).unlink()
        logger.debug("Deleted blob %s", key)


def get_blob_store() -> BlobStore:
    """FastAPI dependency: blob store rooted at the configured upload directory."""
    return LocalBlobStore(get_settings().upload_dir)
