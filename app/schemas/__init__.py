"""Pydantic schemas for request/response validation."""

from app.schemas.auth import LoginRequest, TokenResponse, UserRead
from app.schemas.company import (
    CompanyCreate,
    CompanyList,
    CompanyMoveRequest,
    CompanyRead,
    CompanyUpdate,
    DeletedCompanyList,
)
from app.schemas.company_file import CompanyFileList, CompanyFileRead
from app.schemas.company_log import CompanyAction, CompanyLogList, CompanyLogRead
from app.schemas.pipeline import PipelineStageSummary, PipelineSummary
from app.schemas.user import UserAdminRead, UserCreate, UserList, UserUpdate

__all__ = [
    # Company
    "CompanyCreate",
    "CompanyUpdate",
    "CompanyMoveRequest",
    "CompanyRead",
    "CompanyList",
    "DeletedCompanyList",
    # Audit log
    "CompanyAction",
    "CompanyLogRead",
    "CompanyLogList",
    # Files
    "CompanyFileRead",
    "CompanyFileList",
    # Pipeline
    "PipelineStageSummary",
    "PipelineSummary",
    # Auth
    "LoginRequest",
    "TokenResponse",
    "UserRead",
    # User administration
    "UserCreate",
    "UserUpdate",
    "UserAdminRead",
    "UserList",
]
