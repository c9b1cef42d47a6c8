"""Health endpoint and error-to-HTTP mapping tests."""

from __future__ import annotations

import pytest

from app.api.errors import to_http_exception
from app.services.errors import (
    CompanyFileNotFoundError,
    CompanyNotFoundError,
    FileValidationError,
    StaleCompanyStateError,
    StorageError,
)


def test_health_reports_database(client) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["database"] == "connected"


@pytest.mark.parametrize(
    ("error", "status_code"),
    [
        (FileValidationError("File is empty"), 422),
        (CompanyNotFoundError(1), 404),
        (CompanyFileNotFoundError(2), 404),
        (StaleCompanyStateError(1, ("won", "active"), ("waiting", "active")), 409),
        (StorageError("disk full"), 500),
    ],
)
def test_service_errors_map_to_status(error, status_code) -> None:
    assert to_http_exception(error).status_code == status_code


def test_storage_error_detail_is_generic() -> None:
    assert "disk full" not in to_http_exception(StorageError("disk full")).detail
