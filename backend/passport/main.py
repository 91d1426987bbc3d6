"""Property Passport UK - FastAPI Application Entry Point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from passport.core.config import get_settings
from passport.core.env_validation import validate_environment
from passport.core.logging import configure_logging
from passport.routers import (
    admin_router,
    auth_router,
    dashboard_router,
    documents_router,
    events_router,
    flags_router,
    integrations_router,
    invitations_router,
    issues_router,
    media_router,
    properties_router,
    public_router,
    search_router,
    stakeholders_router,
    tasks_router,
    watchlist_router,
)
from passport.schemas.base import first_error_message

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Hard-fails (exit 1) if required configuration is missing
    validate_environment()
    configure_logging(settings)
    logger.info(f"[STARTUP] CORS configured with origins: {settings.cors_origins}")
    yield


app = FastAPI(
    title=settings.app_name,
    description="Digital property passports for UK homes: documents, media, issues, stakeholder access and government data lookups.",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# In production, wildcard (*) is blocked by env_validation.py
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": message},
        headers=headers,
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return error_response(400, first_error_message(exc.errors()))


@app.exception_handler(PermissionError)
async def permission_error_handler(request: Request, exc: PermissionError):
    return error_response(403, str(exc) or "Forbidden")


@app.exception_handler(LookupError)
async def lookup_error_handler(request: Request, exc: LookupError):
    # KeyError and IndexError are bugs, not missing resources
    if isinstance(exc, (KeyError, IndexError)):
        return await unhandled_error_handler(request, exc)
    return error_response(404, str(exc) or "Not found")


@app.exception_handler(ValueError)
async def value_error_handler(request: Request, exc: ValueError):
    return error_response(400, str(exc) or "Invalid input")


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"[ERROR] {request.method} {request.url.path} failed: {exc!r}", exc_info=exc)
    return error_response(500, "Internal server error")


# API v1 routers
app.include_router(auth_router, prefix=settings.api_v1_prefix)
app.include_router(properties_router, prefix=settings.api_v1_prefix)
app.include_router(stakeholders_router, prefix=settings.api_v1_prefix)
app.include_router(documents_router, prefix=settings.api_v1_prefix)
app.include_router(media_router, prefix=settings.api_v1_prefix)
app.include_router(flags_router, prefix=settings.api_v1_prefix)
app.include_router(issues_router, prefix=settings.api_v1_prefix)
app.include_router(events_router, prefix=settings.api_v1_prefix)
app.include_router(tasks_router, prefix=settings.api_v1_prefix)
app.include_router(invitations_router, prefix=settings.api_v1_prefix)
app.include_router(watchlist_router, prefix=settings.api_v1_prefix)
app.include_router(search_router, prefix=settings.api_v1_prefix)
app.include_router(dashboard_router, prefix=settings.api_v1_prefix)
app.include_router(public_router, prefix=settings.api_v1_prefix)  # anonymous
app.include_router(integrations_router, prefix=settings.api_v1_prefix)  # government data proxies
app.include_router(admin_router, prefix=settings.api_v1_prefix)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": settings.app_name}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": settings.app_name,
        "version": "1.0.0",
        "docs": "/docs" if settings.debug else "Disabled in production",
    }
