"""
App Store Catalog API - FastAPI Application

Main entry point for the FastAPI application.
"""

from contextlib import asynccontextmanager
from pathlib import Path

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import router as api_router
from app.core.config import get_settings
from app.db.base import Base
from app.db import models_registry  # noqa: F401 - Import to register models
from app.db.session import engine
from app.models.user import ROLE_ADMIN
from app.workers.relevance_refresh import RelevanceRefreshWorker
from app.workers.upload_retention import UploadRetentionWorker

settings = get_settings()

# Global instances
scheduler: AsyncIOScheduler | None = None


async def init_database() -> None:
    """Initialize database tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialized")


async def init_default_user() -> None:
    """Create default admin user if not exists."""
    from app.db.session import async_session_maker
    from app.services.user_service import UserService

    async with async_session_maker() as db:
        user_service = UserService(db)
        existing = await user_service.get_by_username("admin")
        if not existing:
            await user_service.create_user(
                user_id="admin",
                username="admin",
                password="admin",
                role=ROLE_ADMIN,
            )
            logger.info("Default admin user created")


def start_background_jobs() -> None:
    """Start scheduled maintenance jobs."""
    global scheduler

    if not settings.enable_background_jobs:
        logger.info("Background jobs disabled")
        return

    scheduler = AsyncIOScheduler()

    # Stale staged upload sweep
    upload_retention = UploadRetentionWorker()
    scheduler.add_job(
        upload_retention.run,
        "interval",
        minutes=max(1, settings.upload_retention_minutes // 2),
        id="upload_retention",
    )

    # Stored relevance score refresh
    relevance_refresh = RelevanceRefreshWorker()
    scheduler.add_job(
        relevance_refresh.run,
        "interval",
        minutes=settings.relevance_refresh_minutes,
        id="relevance_refresh",
    )

    scheduler.start()
    logger.info("Scheduler started")


def stop_background_jobs() -> None:
    """Stop scheduled maintenance jobs."""
    global scheduler

    if scheduler:
        scheduler.shutdown()
        scheduler = None
        logger.info("Scheduler stopped")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting App Store Catalog API...")

    Path(settings.data_save_folder).mkdir(parents=True, exist_ok=True)
    Path(settings.upload_dir).mkdir(parents=True, exist_ok=True)

    await init_database()
    await init_default_user()
    start_background_jobs()

    logger.info(f"App Store Catalog API started on port {settings.port}")

    yield

    logger.info("Shutting down App Store Catalog API...")
    stop_background_jobs()
    await engine.dispose()
    logger.info("App Store Catalog API stopped")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="App Store Catalog API - browsing, paid access and admin management",
    lifespan=lifespan,
    docs_url="/swagger" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)


# Exception handlers: every error body is {"success": false, "message": ...}
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Render HTTP errors in the response envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request validation errors in the response envelope."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = f"{location}: {first.get('msg', 'Invalid request')}" if location else "Invalid request"
    return JSONResponse(
        status_code=422,
        content={"success": False, "message": message},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler."""
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": str(exc)},
    )


# Include API router
app.include_router(api_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=settings.workers,
    )
