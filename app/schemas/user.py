"""User administration schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["admin", "manager"]


class UserCreate(BaseModel):
    """Schema for creating a user (admin only)."""

    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)
    full_name: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    role: Role = "manager"


class UserUpdate(BaseModel):
    """Schema for updating a user. Unset fields keep their value; password is re-hashed when given."""

    full_name: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    role: Optional[Role] = None
    is_active: Optional[bool] = None
    password: Optional[str] = Field(None, min_length=1)


class UserAdminRead(BaseModel):
    """Schema for reading a user in the admin API (response)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    role: str
    is_active: bool
    created_at: datetime
    last_login: Optional[datetime] = None


class UserList(BaseModel):
    """All users ordered by id."""

    items: list[UserAdminRead]
