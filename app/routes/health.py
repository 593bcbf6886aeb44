"""
Health check endpoints.
Used for monitoring, deployment readiness checks, and basic connectivity tests.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from app.core.settings import settings
from app.services.issue_service import IssueService, get_issue_service


router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
def health_check():
    """
    Basic health check endpoint.
    Returns 200 if service is running.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/db")
def database_health(service: IssueService = Depends(get_issue_service)):
    """
    Storage check.
    Reports the active backend and how many issues are loaded.
    """
    try:
        backend = service.store.repository.describe()
    except Exception as e:
        raise HTTPException(
            status_code=503,
            detail=f"Storage backend unavailable: {str(e)}",
        )

    return {
        "status": "healthy",
        "storage": backend,
        "issues_loaded": len(service.get_all_issues()),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
