"""Company schemas for request/response validation."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from app.pipeline.stages import StageId, SubStatus, parse_stage, parse_sub_status

_http_url = TypeAdapter(HttpUrl)


def clean_link(value: Optional[str]) -> Optional[str]:
    """Blank -> None; otherwise must parse as an http(s) URL. Returns the trimmed input."""
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    try:
        _http_url.validate_python(value)
    except PydanticValidationError:
        raise ValueError(f"Invalid URL: {value!r}") from None
    return value


class CompanyCreate(BaseModel):
    """Schema for creating a new company."""

    name: str = Field(..., min_length=1, max_length=255)
    stage: StageId
    status: SubStatus
    comment: str = ""
    doc_link: Optional[str] = Field(None, max_length=2048)
    tender_link: Optional[str] = Field(None, max_length=2048)
    proposal_link: Optional[str] = Field(None, max_length=2048)
    deadline_date: Optional[date] = None

    @field_validator("stage", mode="before")
    @classmethod
    def _parse_stage(cls, value):
        return parse_stage(value)

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, value):
        return parse_sub_status(value)

    @field_validator("doc_link", "tender_link", "proposal_link", mode="before")
    @classmethod
    def _clean_links(cls, value):
        return clean_link(value)

    @field_validator("comment", mode="before")
    @classmethod
    def _comment_default(cls, value):
        return value or ""


class CompanyUpdate(BaseModel):
    """Schema for updating a company. All fields optional; unset fields keep their value.

    from_stage/from_status describe the state the caller believes the company is in.
    When given they must match the stored record.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    stage: Optional[StageId] = None
    status: Optional[SubStatus] = None
    comment: Optional[str] = None
    doc_link: Optional[str] = Field(None, max_length=2048)
    tender_link: Optional[str] = Field(None, max_length=2048)
    proposal_link: Optional[str] = Field(None, max_length=2048)
    deadline_date: Optional[date] = None
    from_stage: Optional[StageId] = None
    from_status: Optional[SubStatus] = None

    @field_validator("stage", "from_stage", mode="before")
    @classmethod
    def _parse_stage(cls, value):
        return None if value is None else parse_stage(value)

    @field_validator("status", "from_status", mode="before")
    @classmethod
    def _parse_status(cls, value):
        return None if value is None else parse_sub_status(value)

    @field_validator("doc_link", "tender_link", "proposal_link", mode="before")
    @classmethod
    def _clean_links(cls, value):
        return clean_link(value)


class CompanyMoveRequest(BaseModel):
    """Schema for moving a company to another stage and/or sub-status."""

    to_stage: StageId
    to_status: SubStatus = SubStatus.ACTIVE
    from_stage: Optional[StageId] = None
    from_status: Optional[SubStatus] = None
    comment: Optional[str] = None

    @field_validator("to_stage", "from_stage", mode="before")
    @classmethod
    def _parse_stage(cls, value):
        return None if value is None else parse_stage(value)

    @field_validator("to_status", "from_status", mode="before")
    @classmethod
    def _parse_status(cls, value):
        return None if value is None else parse_sub_status(value)


class CompanyRead(BaseModel):
    """Schema for reading a company (response)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    stage: StageId
    stage_name: str
    status: SubStatus
    comment: str = ""
    doc_link: Optional[str] = None
    tender_link: Optional[str] = None
    proposal_link: Optional[str] = None
    deadline_date: Optional[date] = None
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None


class CompanyList(BaseModel):
    """List of companies."""

    items: list[CompanyRead]
    total: int


class DeletedCompanyList(BaseModel):
    """Soft-deleted companies, newest deletion first."""

    items: list[CompanyRead]
    count: int
