"""
User endpoints - read-only user lookup and "my reports".
"""

from typing import List

from fastapi import APIRouter, Depends

from app.models.issue import Issue
from app.models.user import User
from app.services.issue_service import IssueService, get_issue_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/{user_id}", response_model=User)
def get_user(user_id: str, service: IssueService = Depends(get_issue_service)):
    return service.get_user(user_id)


@router.get("/{user_id}/issues", response_model=List[Issue])
def issues_by_user(user_id: str, service: IssueService = Depends(get_issue_service)):
    """Issues submitted by the user. Unknown users simply have none."""
    return service.get_issues_by_user(user_id)
