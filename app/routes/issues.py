"""
Issue endpoints - citizen-facing API for submission, upvotes, resolution
feedback and map/"my reports" reads.

Domain errors (duplicate, not found, invalid rating, invalid transition)
are raised by the service and mapped to HTTP responses in app.main.
"""

from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, Query, status

from app.models.issue import Issue, IssueCreate, ReopenRequest, ResolutionConfirmRequest
from app.services.issue_service import IssueService, get_issue_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/issues", tags=["Issues"])


@router.post("", response_model=Issue, status_code=status.HTTP_201_CREATED)
def submit_issue(request: IssueCreate, service: IssueService = Depends(get_issue_service)):
    """
    Submit a new civic issue.

    Returns 409 with `duplicateIssueId` when a same-category issue was
    reported within ~50 m in the last 48 hours; the client should offer
    to upvote that issue instead.
    """
    logger.info(f"📝 POST /issues - category={request.category.value}, submitted_by={request.submitted_by}")
    return service.create_from_request(request)


@router.get("", response_model=List[Issue])
def list_issues(service: IssueService = Depends(get_issue_service)):
    """All issues in submission order."""
    return service.get_all_issues()


@router.get("/nearby", response_model=List[Issue])
def nearby_issues(
    lat: float = Query(..., ge=-90, le=90, description="Latitude of the citizen"),
    lng: float = Query(..., ge=-180, le=180, description="Longitude of the citizen"),
    radius_km: float = Query(5.0, gt=0, description="Search radius (approximate km)"),
    service: IssueService = Depends(get_issue_service),
):
    return service.get_nearby_issues(lat, lng, radius_km)


@router.get("/{issue_id}", response_model=Issue)
def get_issue(issue_id: str, service: IssueService = Depends(get_issue_service)):
    return service.get_issue(issue_id)


@router.post("/{issue_id}/upvote", response_model=Issue)
def upvote_issue(issue_id: str, service: IssueService = Depends(get_issue_service)):
    """Add one community upvote; 5 upvotes verify a submitted issue."""
    return service.upvote_issue(issue_id)


@router.post("/{issue_id}/confirm", response_model=Issue)
def confirm_resolution(
    issue_id: str,
    request: ResolutionConfirmRequest,
    service: IssueService = Depends(get_issue_service),
):
    """Citizen confirms a staff resolution with a 1-5 rating."""
    return service.confirm_resolution(issue_id, request.rating, request.comment)


@router.post("/{issue_id}/reopen", response_model=Issue)
def reopen_issue(
    issue_id: str,
    request: Optional[ReopenRequest] = None,
    service: IssueService = Depends(get_issue_service),
):
    """Citizen rejects a staff resolution; the issue goes back to in-progress."""
    comment = request.comment if request else None
    return service.reopen_issue(issue_id, comment)
