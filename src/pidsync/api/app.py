"""
FastAPI application factory for the P&ID Sync API.

Exposes the drawing catalog and diagram save/load with consistent error
responses.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..shared import (
    CatalogError,
    ValidationError,
    close_database_connections,
    get_logger,
    get_settings,
    setup_logging,
)
from ..shared.models.base import utcnow
from .models import APIResponse, ErrorResponse
from .routers import drawings, health

API_PREFIX = "/api/v1"


def _timestamp() -> str:
    return utcnow().isoformat().replace("+00:00", "Z")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger = get_logger(__name__)

    # Startup
    setup_logging()
    settings = get_settings()
    logger.info(f"Starting {settings.app_name} API {settings.app_version}")

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name} API")
    close_database_connections()


def _error(status_code: int, exc: Exception, error: str = None) -> JSONResponse:
    error_response = ErrorResponse(
        error=error or type(exc).__name__,
        message=str(exc),
        timestamp=_timestamp(),
    )
    return JSONResponse(status_code=status_code, content=error_response.model_dump())


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI app instance
    """
    settings = get_settings()

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="""
        Drawing catalog and diagram persistence for the P&ID editor:
        - Drawings: list, create, rename and delete sheets
        - Diagrams: load a sheet from the plant graph and save it back
        """,
        version=settings.app_version,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        response.headers["X-Process-Time"] = str(time.time() - start_time)
        return response

    @app.exception_handler(CatalogError)
    async def catalog_exception_handler(request: Request, exc: CatalogError):
        return _error(404, exc)

    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: ValidationError):
        return _error(422, exc)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return _error(exc.status_code, Exception(exc.detail), error="HTTPException")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger = get_logger(__name__)
        logger.error(f"Unhandled exception in {request.method} {request.url}: {exc}")
        return _error(500, exc)

    app.include_router(health.router, prefix=API_PREFIX, tags=["Health"])
    app.include_router(drawings.router, prefix=API_PREFIX, tags=["Drawings"])

    @app.get("/", response_model=APIResponse)
    async def root():
        """Root endpoint with API information."""
        return APIResponse(
            success=True,
            data={
                "name": settings.app_name,
                "version": settings.app_version,
                "docs": "/docs",
                "health": f"{API_PREFIX}/health",
                "drawings": f"{API_PREFIX}/drawings",
            },
            message=f"{settings.app_name} API is running",
            timestamp=_timestamp(),
        )

    return app
