# ===================================
# app/main.py
# ===================================
from datetime import datetime, timezone
from pathlib import Path
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
import logging

from app.core.config import settings
from app.core.database import init_db, check_db_connection
from app.core.logging_config import setup_logging
from app.core.scheduler import init_scheduler, shutdown_scheduler
from app.services.sweet_service import SweetError

# Routes
from app.api.v1 import auth, sweets

# Logging
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle"""
    # Startup
    logger.info(f"Starting {settings.app_name} ({settings.environment})...")

    # Check the database connection
    if not check_db_connection():
        logger.error("Cannot connect to the database")
        raise RuntimeError("Database connection failed")

    # Initialise the database
    init_db()

    # Start the scheduler when enabled
    if settings.scheduler_enabled:
        init_scheduler()

    logger.info("Application started")

    yield

    # Shutdown
    shutdown_scheduler()
    logger.info("Application stopped")


def _error_response(status_code: int, message: str, error_type: str, **extra) -> JSONResponse:
    error = {
        "code": status_code,
        "message": message,
        "type": error_type
    }
    error.update(extra)
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": error
        },
    )


def _format_validation_error(err: dict) -> str:
    # Drop the body/query/path prefix, keep the field path
    location = [str(part) for part in err.get("loc", ())[1:]]
    field = ".".join(location) or str(err.get("loc", ("request",))[0])
    return f"{field}: {err.get('msg', 'invalid value')}"


def create_app() -> FastAPI:
    """Factory building the FastAPI application"""

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        openapi_url=f"{settings.api_prefix}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # API routes
    app.include_router(auth.router, prefix=f"{settings.api_prefix}/auth", tags=["Auth"])
    app.include_router(sweets.router, prefix=f"{settings.api_prefix}/sweets", tags=["Sweets"])

    # Health check
    @app.get("/health")
    async def health_check():
        """API health"""
        db_status = "ok" if check_db_connection() else "error"

        return {
            "status": "ok" if db_status == "ok" else "error",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": settings.app_version,
            "environment": settings.environment,
            "database": db_status
        }

    # Root
    @app.get("/")
    async def root():
        return {
            "message": f"Welcome to {settings.app_name}",
            "version": settings.app_version,
            "docs": "/docs",
            "health": "/health"
        }

    # Built single-page UI
    if settings.frontend_dist_dir and Path(settings.frontend_dist_dir).is_dir():
        app.mount("/ui", StaticFiles(directory=settings.frontend_dist_dir, html=True), name="ui")
        logger.info(f"Serving UI from {settings.frontend_dist_dir} at /ui")

    # Global error handling
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail
        if exc.status_code == 404 and message == "Not Found":
            message = "Route not found"
        response = _error_response(exc.status_code, message, "http_error")
        if getattr(exc, "headers", None):
            response.headers.update(exc.headers)
        return response

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return _error_response(
            400,
            "Validation failed",
            "validation_error",
            details=[_format_validation_error(err) for err in exc.errors()]
        )

    @app.exception_handler(SweetError)
    async def sweet_exception_handler(request: Request, exc: SweetError):
        return _error_response(exc.status_code, exc.message, "sweet_error")

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error: {exc}", exc_info=True)
        extra = {"detail": str(exc)} if settings.debug else {}
        return _error_response(500, "Internal server error", "internal_error", **extra)

    return app


# Application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=3001,
        reload=settings.debug,
        log_level=settings.log_level.lower()
    )
