"""
Jan Awaaz Issue Core - FastAPI Application Entry Point

Citizens report civic issues; municipal staff triage and resolve them.

DESIGN PRINCIPLES:
- All lifecycle rules live in the services; routes are thin adapters
- Duplicate submissions are rejected, never silently merged
- Staff status changes are trusted; citizens may only confirm or reopen
- Expected outcomes map to 4xx; invariant violations fail loudly as 500
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.errors import (
    DuplicateFoundError,
    InvalidRatingError,
    InvalidTransitionError,
    IssueNotFoundError,
    UserNotFoundError,
)
from app.core.settings import settings
from app.routes import admin, health, issues, users

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Issue lifecycle and duplicate-detection engine for citizen-reported civic issues",
    debug=settings.DEBUG,
)


@app.exception_handler(DuplicateFoundError)
async def duplicate_handler(request: Request, exc: DuplicateFoundError):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": str(exc), "duplicateIssueId": exc.existing_issue_id},
    )


@app.exception_handler(IssueNotFoundError)
@app.exception_handler(UserNotFoundError)
async def not_found_handler(request: Request, exc: Exception):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(InvalidRatingError)
async def invalid_rating_handler(request: Request, exc: InvalidRatingError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": str(exc), "rating": exc.rating},
    )


@app.exception_handler(InvalidTransitionError)
async def invalid_transition_handler(request: Request, exc: InvalidTransitionError):
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": str(exc), "status": exc.current_status},
    )


# Pydantic validation error handler
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log request validation errors before returning the standard 422."""
    logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_encoder(exc.errors())},
    )


# Global exception handler: anything reaching here is a bug (e.g. IntegrityViolation)
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(
        f"🔥 Unhandled exception on {request.method} {request.url.path}: {exc}",
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": f"Internal server error: {str(exc)}"},
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Application lifecycle events
@app.on_event("startup")
async def startup_event():
    """
    Load issues and users from the configured storage backend.
    A failure is logged; requests will retry the load lazily.
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION} (storage={settings.STORAGE_BACKEND})")
    from app.services.issue_service import get_issue_service

    try:
        service = get_issue_service()
        logger.info(f"[STARTUP] {len(service.get_all_issues())} issue(s) loaded")
    except Exception as e:
        logger.error(f"[STARTUP] Storage load failed: {e}", exc_info=True)


@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"Shutting down {settings.APP_NAME}")


# Include routers
app.include_router(health.router)
app.include_router(issues.router)
app.include_router(users.router)
app.include_router(admin.router)


# Root endpoint
@app.get("/")
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
        "health": "/health",
        "nearby": "/issues/nearby?lat={lat}&lng={lng}&radius_km=5",
    }
