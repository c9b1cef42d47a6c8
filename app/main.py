"""
Pipeline Tracker FastAPI application entry point.

Companies move through the pipeline stages; every change lands in the audit log.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app import __version__
from app.config import get_settings
from app.db.session import check_db_connection, engine

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown."""
    logger.info("Pipeline Tracker starting")
    try:
        try:
            check_db_connection()
            logger.info("Database connection verified")
        except Exception as e:
            logger.critical("Database unreachable: %s", e)
            raise

        settings = get_settings()
        if not settings.secret_key:
            logger.warning("SECRET_KEY is not set; issued tokens are not secure")
        if settings.enforce_stage_graph:
            logger.info("Stage graph enforcement enabled")

        yield
    finally:
        logger.info("Pipeline Tracker shutting down")
        engine.dispose()
        logger.info("Database connection pool closed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )

    from app.api import (
        auth_router,
        companies_router,
        company_files_router,
        pipeline_router,
        users_router,
    )

    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    app.include_router(pipeline_router, prefix="/api/pipeline", tags=["pipeline"])
    app.include_router(companies_router, prefix="/api/companies", tags=["companies"])
    app.include_router(company_files_router, prefix="/api/companies", tags=["files"])
    app.include_router(users_router, prefix="/api/users", tags=["users"])

    @app.get("/health")
    def health() -> dict:
        """Health check endpoint. Confirms DB connectivity."""
        from sqlalchemy import text
        from sqlalchemy.exc import SQLAlchemyError

        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return {
                "status": "ok",
                "version": __version__,
                "database": "connected",
            }
        except SQLAlchemyError:
            from fastapi.responses import JSONResponse

            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "version": __version__,
                    "database": "disconnected",
                },
            )

    return app


app = create_app()
