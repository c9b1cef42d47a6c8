"""Company file attachment schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class CompanyFileRead(BaseModel):
    """Attachment metadata (response). The storage path is not exposed."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    filename: str
    original_filename: str
    file_size: int
    file_type: str
    description: Optional[str] = None
    uploaded_by: Optional[int] = None
    uploader_name: Optional[str] = None
    created_at: datetime


class CompanyFileList(BaseModel):
    """Attachments for one company, newest first."""

    items: list[CompanyFileRead]
