"""Tests for company file attachments (service layer, real database, temp blob store)."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

import app.services.company_file as company_file_service
from app.models.company_file import CompanyFile
from app.models.company_log import CompanyLog
from app.schemas.company import CompanyCreate
from app.services.company import create_company, restore_company, soft_delete_company
from app.services.company_file import (
    delete_company_file,
    get_company_file,
    is_allowed_file_type,
    list_company_files,
    read_company_file,
    upload_company_file,
)
from app.services.company_log import list_company_logs
from app.services.errors import (
    CompanyFileNotFoundError,
    CompanyNotFoundError,
    FileValidationError,
    StorageError,
)
from tests.test_constants import PDF_MIME, TEST_PDF_BYTES


@pytest.fixture
def company(db, user):
    return create_company(
        db, CompanyCreate(name="Acme", stage="selected", status="active"), actor_id=user.id
    )


def _upload(db, store, company_id, user=None, **overrides):
    kwargs = {
        "content": TEST_PDF_BYTES,
        "original_filename": "proposal.pdf",
        "mime_type": PDF_MIME,
        "description": "Signed proposal",
        "actor_id": user.id if user else None,
    }
    kwargs.update(overrides)
    return upload_company_file(db, store, company_id, **kwargs)


class _BrokenDeleteStore:
    """Wraps a store; delete() fails with the given error."""

    def __init__(self, inner, error: Exception) -> None:
        self.inner = inner
        self.error = error

    def store(self, key, data):
        return self.inner.store(key, data)

    def fetch(self, key):
        return self.inner.fetch(key)

    def delete(self, key):
        raise self.error


class TestAllowedTypes:
    def test_office_and_pdf_types_allowed(self):
        assert is_allowed_file_type("application/pdf")
        assert is_allowed_file_type("application/msword")
        assert is_allowed_file_type(
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )

    def test_other_types_rejected(self):
        assert not is_allowed_file_type("text/plain")
        assert not is_allowed_file_type("image/png")
        assert not is_allowed_file_type(None)


class TestUpload:
    def test_accepts_small_pdf(self, db, blob_store, company, user):
        meta = _upload(db, blob_store, company.id, user)
        assert meta.original_filename == "proposal.pdf"
        assert meta.file_size == 1024
        assert meta.file_type == PDF_MIME
        assert meta.filename.endswith(".pdf")
        assert meta.filename != "proposal.pdf"
        assert meta.uploader_name == user.full_name
        assert blob_store.fetch(meta.filename) == TEST_PDF_BYTES

    def test_upload_writes_log_entry(self, db, blob_store, company, user):
        _upload(db, blob_store, company.id, user)
        latest = list_company_logs(db, company.id)[0]
        assert latest.action == "file_upload"
        assert latest.comment == "Uploaded file: proposal.pdf"
        assert latest.user_id == user.id

    def test_rejects_oversized_file(self, db, blob_store, company):
        with pytest.raises(FileValidationError):
            _upload(db, blob_store, company.id, content=b"0" * (11 * 1024 * 1024))
        assert list_company_files(db, company.id) == []

    def test_rejects_text_plain(self, db, blob_store, company):
        with pytest.raises(FileValidationError):
            _upload(db, blob_store, company.id, mime_type="text/plain", original_filename="a.txt")

    def test_rejects_empty_file(self, db, blob_store, company):
        with pytest.raises(FileValidationError):
            _upload(db, blob_store, company.id, content=b"")

    def test_rejects_missing_name(self, db, blob_store, company):
        with pytest.raises(FileValidationError):
            _upload(db, blob_store, company.id, original_filename="")

    def test_path_components_stripped_from_name(self, db, blob_store, company):
        meta = _upload(db, blob_store, company.id, original_filename="../../etc/report.pdf")
        assert meta.original_filename == "report.pdf"

    def test_deleted_company_rejected(self, db, blob_store, company):
        soft_delete_company(db, company.id)
        with pytest.raises(CompanyNotFoundError):
            _upload(db, blob_store, company.id)

    def test_list_is_newest_first(self, db, blob_store, company):
        first = _upload(db, blob_store, company.id, original_filename="one.pdf")
        second = _upload(db, blob_store, company.id, original_filename="two.pdf")
        assert [f.id for f in list_company_files(db, company.id)] == [second.id, first.id]

    def test_failed_commit_removes_stored_blob(self, db, blob_store, company, monkeypatch):
        def _fail(*args, **kwargs):
            raise OperationalError("INSERT INTO company_logs", {}, Exception("disk I/O error"))

        monkeypatch.setattr(company_file_service, "record_company_action", _fail)
        with pytest.raises(StorageError):
            _upload(db, blob_store, company.id)
        assert db.query(CompanyFile).count() == 0
        leftovers = list(blob_store.root.rglob("*")) if blob_store.root.exists() else []
        assert [p for p in leftovers if p.is_file()] == []


class TestReadAndGet:
    def test_read_returns_bytes(self, db, blob_store, company):
        meta = _upload(db, blob_store, company.id)
        got, data = read_company_file(db, blob_store, company.id, meta.id)
        assert got.id == meta.id
        assert data == TEST_PDF_BYTES

    def test_file_of_other_company_is_not_found(self, db, blob_store, company, user):
        other = create_company(db, CompanyCreate(name="Other", stage="won", status="active"))
        meta = _upload(db, blob_store, company.id)
        with pytest.raises(CompanyFileNotFoundError):
            get_company_file(db, other.id, meta.id)

    def test_missing_blob_reads_as_not_found(self, db, blob_store, company):
        meta = _upload(db, blob_store, company.id)
        blob_store.delete(meta.filename)
        with pytest.raises(CompanyFileNotFoundError):
            read_company_file(db, blob_store, company.id, meta.id)


class TestDelete:
    def test_delete_removes_blob_and_metadata(self, db, blob_store, company, user):
        meta = _upload(db, blob_store, company.id, user)
        delete_company_file(db, blob_store, company.id, meta.id, actor_id=user.id)
        assert list_company_files(db, company.id) == []
        with pytest.raises(FileNotFoundError):
            blob_store.fetch(meta.filename)
        latest = list_company_logs(db, company.id)[0]
        assert latest.action == "file_delete"
        assert latest.comment == "Deleted file: proposal.pdf"

    def test_missing_blob_still_removes_metadata(self, db, blob_store, company):
        meta = _upload(db, blob_store, company.id)
        blob_store.delete(meta.filename)
        delete_company_file(db, blob_store, company.id, meta.id)
        assert db.query(CompanyFile).count() == 0

    def test_blob_failure_keeps_metadata(self, db, blob_store, company):
        meta = _upload(db, blob_store, company.id)
        broken = _BrokenDeleteStore(blob_store, PermissionError("read-only"))
        with pytest.raises(StorageError):
            delete_company_file(db, broken, company.id, meta.id)
        assert [f.id for f in list_company_files(db, company.id)] == [meta.id]
        assert [e.action for e in list_company_logs(db, company.id)][0] == "file_upload"

    def test_delete_unknown_file(self, db, blob_store, company):
        with pytest.raises(CompanyFileNotFoundError):
            delete_company_file(db, blob_store, company.id, 12345)


class TestDeletedCompany:
    """Attachments of a soft-deleted company are unreachable until it is restored."""

    def test_files_hidden_after_soft_delete(self, db, blob_store, company):
        meta = _upload(db, blob_store, company.id)
        soft_delete_company(db, company.id)

        with pytest.raises(CompanyNotFoundError):
            list_company_files(db, company.id)
        with pytest.raises(CompanyNotFoundError):
            get_company_file(db, company.id, meta.id)
        with pytest.raises(CompanyNotFoundError):
            read_company_file(db, blob_store, company.id, meta.id)

    def test_delete_refused_and_nothing_logged(self, db, blob_store, company):
        meta = _upload(db, blob_store, company.id)
        soft_delete_company(db, company.id)

        with pytest.raises(CompanyNotFoundError):
            delete_company_file(db, blob_store, company.id, meta.id)
        assert db.query(CompanyFile).count() == 1
        assert blob_store.fetch(meta.filename) == TEST_PDF_BYTES
        actions = [row.action for row in db.query(CompanyLog).filter(CompanyLog.company_id == company.id)]
        assert "file_delete" not in actions

    def test_files_reachable_again_after_restore(self, db, blob_store, company):
        meta = _upload(db, blob_store, company.id)
        soft_delete_company(db, company.id)
        restore_company(db, company.id)
        assert [f.id for f in list_company_files(db, company.id)] == [meta.id]
