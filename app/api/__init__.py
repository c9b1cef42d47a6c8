"""API routes."""

from app.api.auth import router as auth_router
from app.api.companies import router as companies_router
from app.api.company_files import router as company_files_router
from app.api.pipeline import router as pipeline_router
from app.api.users import router as users_router

__all__ = [
    "auth_router",
    "companies_router",
    "company_files_router",
    "pipeline_router",
    "users_router",
]
