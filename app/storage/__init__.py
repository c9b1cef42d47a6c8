"""Blob storage for company file attachments."""

from app.storage.blob_store import BlobStore, LocalBlobStore, get_blob_store

__all__ = ["BlobStore", "LocalBlobStore", "get_blob_store"]
