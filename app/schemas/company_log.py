"""Company audit log schemas."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class CompanyAction(str, Enum):
    """Kind of mutation recorded in the company log."""

    create = "create"
    update = "update"
    move = "move"
    delete = "delete"
    restore = "restore"
    file_upload = "file_upload"
    file_delete = "file_delete"


class CompanyLogRead(BaseModel):
    """Log entry enriched with the actor's display fields."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    company_id: int
    user_id: Optional[int] = None
    username: Optional[str] = None
    user_full_name: Optional[str] = None
    action: CompanyAction
    from_stage: Optional[str] = None
    to_stage: Optional[str] = None
    from_status: Optional[str] = None
    to_status: Optional[str] = None
    comment: Optional[str] = None
    created_at: datetime


class CompanyLogList(BaseModel):
    """Log entries for one company, newest first."""

    items: list[CompanyLogRead]
