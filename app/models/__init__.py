"""SQLAlchemy models."""

from app.models.company import Company
from app.models.company_file import CompanyFile
from app.models.company_log import CompanyLog
from app.models.user import User

__all__ = [
    "Company",
    "CompanyFile",
    "CompanyLog",
    "User",
]
