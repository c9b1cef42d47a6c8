"""Service-layer errors. API routes translate these to HTTP status codes."""

from __future__ import annotations


class PipelineError(Exception):
    """Base error for the pipeline tracker."""


class ValidationError(PipelineError, ValueError):
    """Missing or invalid input (required field, unknown stage, bad URL, bad file)."""


class NotFoundError(PipelineError, LookupError):
    """Entity unknown, or not in the state the operation requires."""


class ConflictError(PipelineError):
    """Request is based on state that no longer matches the database."""


class StorageError(PipelineError):
    """Persistence or blob storage failure."""


class CompanyValidationError(ValidationError):
    """Invalid company fields."""


class CompanyNotFoundError(NotFoundError):
    """Raised when a company id does not match a record in the required state."""

    def __init__(self, company_id: int, detail: str = "Company not found") -> None:
        self.company_id = company_id
        super().__init__(detail)


class StaleCompanyStateError(ConflictError):
    """Raised when the caller's from_stage/from_status no longer match the stored record."""

    def __init__(self, company_id: int, expected: tuple, actual: tuple) -> None:
        self.company_id = company_id
        self.expected = expected
        self.actual = actual
        actual_stage, actual_status = (getattr(v, "value", v) for v in actual)
        expected_stage, expected_status = (getattr(v, "value", v) for v in expected)
        super().__init__(
            f"Company {company_id} is at {actual_stage}/{actual_status}, "
            f"not {expected_stage}/{expected_status}"
        )


class FileValidationError(ValidationError):
    """Uploaded file rejected (type, size, empty payload)."""


class CompanyFileNotFoundError(NotFoundError):
    """Raised when a file id is unknown or belongs to another company."""

    def __init__(self, file_id: int, detail: str = "File not found") -> None:
        self.file_id = file_id
        super().__init__(detail)


class UserNotFoundError(NotFoundError):
    """Raised when a user id does not match a record."""

    def __init__(self, user_id: int, detail: str = "User not found") -> None:
        self.user_id = user_id
        super().__init__(detail)


class UsernameTakenError(ConflictError):
    """Raised when creating a user whose username already exists."""

    def __init__(self, username: str) -> None:
        self.username = username
        super().__init__(f"User {username!r} already exists")
