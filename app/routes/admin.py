"""
Admin endpoints - municipal staff control layer.

SCOPE OF ADMIN:
✅ Set any issue status (staff is trusted, jumps are allowed)
✅ Assign staff members
✅ Mark issues resolved (citizen is then asked to confirm)
✅ Filter/search issues and read dashboard counters

❌ NOT confirm resolutions on the citizen's behalf
❌ NOT edit issue content or location
❌ NOT delete issues
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.models.issue import Issue, IssueCategory, IssueStats, IssueStatus, StatusUpdateRequest
from app.models.user import User
from app.services.issue_service import IssueService, get_issue_service

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/issues", response_model=List[Issue])
def search_issues(
    status: Optional[IssueStatus] = Query(None, description="Exact status filter"),
    category: Optional[IssueCategory] = Query(None, description="Exact category filter"),
    q: Optional[str] = Query(None, max_length=200, description="Search title, description and address"),
    service: IssueService = Depends(get_issue_service),
):
    return service.search_issues(status=status, category=category, query=q)


@router.patch("/issues/{issue_id}/status", response_model=Issue)
def update_issue_status(
    issue_id: str,
    request: StatusUpdateRequest,
    service: IssueService = Depends(get_issue_service),
):
    """
    Change an issue's status.

    **Rules:**
    - Any target status is accepted
    - `resolved` is stored as `pending-confirmation` until the citizen confirms
    - `assignedTo` is applied when provided
    """
    return service.update_issue_status(
        issue_id,
        request.status,
        assigned_to=request.assigned_to,
        changed_by=request.changed_by,
        note=request.note,
    )


@router.get("/stats", response_model=IssueStats)
def dashboard_stats(service: IssueService = Depends(get_issue_service)):
    return service.get_issue_stats()


@router.get("/users", response_model=List[User])
def list_users(
    admins_only: bool = Query(False, description="Only municipal staff accounts"),
    service: IssueService = Depends(get_issue_service),
):
    return service.list_users(admins_only=admins_only)
