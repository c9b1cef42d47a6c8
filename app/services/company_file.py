"""Company file attachments: metadata in the database, bytes in a BlobStore."""

from __future__ import annotations

import logging
import re
from pathlib import PurePath
from uuid import uuid4

from sqlalchemy.orm import Session

from app.config import get_settings
from app.db.transaction import unit_of_work
from app.models.company import Company
from app.models.company_file import CompanyFile
from app.models.user import User
from app.schemas.company_file import CompanyFileRead
from app.schemas.company_log import CompanyAction
from app.services.company_log import record_company_action
from app.services.errors import (
    CompanyFileNotFoundError,
    CompanyNotFoundError,
    FileValidationError,
    StorageError,
)
from app.storage.blob_store import BlobStore

logger = logging.getLogger(__name__)

ALLOWED_FILE_TYPES = frozenset(
    {
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    }
)

_EXTENSION_RE = re.compile(r"^\.[a-z0-9]{1,10}$")


def is_allowed_file_type(mime_type: str | None) -> bool:
    return (mime_type or "").split(";")[0].strip().lower() in ALLOWED_FILE_TYPES


def _storage_key(original_filename: str) -> str:
    """uuid4 hex plus the original extension when it is a plain short suffix."""
    suffix = PurePath(original_filename).suffix.lower()
    return uuid4().hex + (suffix if _EXTENSION_RE.match(suffix) else "")


def _model_to_read(file: CompanyFile, uploader: User | None = None) -> CompanyFileRead:
    return CompanyFileRead(
        id=file.id,
        company_id=file.company_id,
        filename=file.filename,
        original_filename=file.original_filename,
        file_size=file.file_size,
        file_type=file.file_type,
        description=file.description,
        uploaded_by=file.uploaded_by,
        uploader_name=uploader.display_name if uploader is not None else None,
        created_at=file.created_at,
    )


def _validate_upload(content: bytes, original_filename: str | None, mime_type: str | None) -> str:
    name = PurePath((original_filename or "").replace("\\", "/")).name.strip()
    if not name:
        raise FileValidationError("No file uploaded")
    if not is_allowed_file_type(mime_type):
        raise FileValidationError(f"File type not allowed: {mime_type or 'unknown'}")
    if not content:
        raise FileValidationError("File is empty")
    limit = get_settings().max_upload_bytes
    if len(content) > limit:
        raise FileValidationError(f"File size exceeds limit of {limit} bytes")
    return name


def _active_company(db: Session, company_id: int) -> Company:
    """Attachments are only reachable through a non-deleted company."""
    company = (
        db.query(Company)
        .filter(Company.id == company_id, Company.deleted_at.is_(None))
        .first()
    )
    if company is None:
        raise CompanyNotFoundError(company_id)
    return company


def _find_file(db: Session, company_id: int, file_id: int) -> CompanyFile:
    _active_company(db, company_id)
    file = (
        db.query(CompanyFile)
        .filter(CompanyFile.id == file_id, CompanyFile.company_id == company_id)
        .first()
    )
    if file is None:
        raise CompanyFileNotFoundError(file_id)
    return file


def upload_company_file(
    db: Session,
    store: BlobStore,
    company_id: int,
    *,
    content: bytes,
    original_filename: str | None,
    mime_type: str | None,
    description: str | None = None,
    actor_id: int | None = None,
) -> CompanyFileRead:
    """Store an attachment for a non-deleted company.

    The metadata row and its file_upload log entry commit together. If that
    commit fails the blob written beforehand is removed again.
    """
    name = _validate_upload(content, original_filename, mime_type)
    _active_company(db, company_id)

    key = _storage_key(name)
    try:
        stored_path = store.store(key, content)
    except (OSError, ValueError) as exc:
        logger.exception("Blob store failed for company %s file %s", company_id, name)
        raise StorageError("Failed to store file") from exc

    file = CompanyFile(
        company_id=company_id,
        filename=key,
        original_filename=name,
        file_path=stored_path,
        file_size=len(content),
        file_type=mime_type.split(";")[0].strip().lower(),
        description=(description or "").strip() or None,
        uploaded_by=actor_id,
    )
    try:
        with unit_of_work(db, "upload_company_file"):
            db.add(file)
            db.flush()
            record_company_action(
                db,
                company_id=company_id,
                action=CompanyAction.file_upload,
                comment=f"Uploaded file: {name}",
                actor_id=actor_id,
            )
    except Exception:
        try:
            store.delete(key)
        except OSError:
            logger.warning("Could not remove orphaned blob %s", key)
        raise

    db.refresh(file)
    logger.info(
        "File %s (%s, %d bytes) uploaded to company %s by %s",
        file.id,
        name,
        file.file_size,
        company_id,
        actor_id,
    )
    uploader = db.get(User, actor_id) if actor_id is not None else None
    return _model_to_read(file, uploader)


def list_company_files(db: Session, company_id: int) -> list[CompanyFileRead]:
    """Attachments for a non-deleted company, newest first."""
    _active_company(db, company_id)
    rows = (
        db.query(CompanyFile, User)
        .outerjoin(User, CompanyFile.uploaded_by == User.id)
        .filter(CompanyFile.company_id == company_id)
        .order_by(CompanyFile.created_at.desc(), CompanyFile.id.desc())
        .all()
    )
    return [_model_to_read(file, uploader) for file, uploader in rows]


def get_company_file(db: Session, company_id: int, file_id: int) -> CompanyFileRead:
    file = _find_file(db, company_id, file_id)
    return _model_to_read(file, file.uploader)


def read_company_file(
    db: Session, store: BlobStore, company_id: int, file_id: int
) -> tuple[CompanyFileRead, bytes]:
    """Return metadata and bytes for a download. A missing blob is reported as not found."""
    file = _find_file(db, company_id, file_id)
    try:
        data = store.fetch(file.file_path)
    except FileNotFoundError:
        logger.warning("Blob %s for file %s is missing", file.file_path, file_id)
        raise CompanyFileNotFoundError(file_id, "File content not found") from None
    except (OSError, ValueError) as exc:
        logger.exception("Blob fetch failed for file %s", file_id)
        raise StorageError("Failed to read file") from exc
    return _model_to_read(file, file.uploader), data


def delete_company_file(
    db: Session,
    store: BlobStore,
    company_id: int,
    file_id: int,
    actor_id: int | None = None,
) -> None:
    """Delete the blob, then the metadata row and its file_delete log entry.

    An already-missing blob is only logged. Any other blob failure raises
    StorageError before the metadata is touched.
    """
    file = _find_file(db, company_id, file_id)
    name = file.original_filename
    try:
        store.delete(file.file_path)
    except FileNotFoundError:
        logger.warning("Blob %s for file %s already missing; removing metadata", file.file_path, file_id)
    except (OSError, ValueError) as exc:
        logger.exception("Blob delete failed for file %s", file_id)
        raise StorageError("Failed to delete file") from exc

    with unit_of_work(db, "delete_company_file"):
        db.delete(file)
        record_company_action(
            db,
            company_id=company_id,
            action=CompanyAction.file_delete,
            comment=f"Deleted file: {name}",
            actor_id=actor_id,
        )
    logger.info("File %s deleted from company %s by %s", file_id, company_id, actor_id)
