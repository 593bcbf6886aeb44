"""
Issue service - the data API the surrounding application calls.

Flow:
- create: duplicate check → lifecycle init → persist (one atomic step)
- upvote / staff status / citizen feedback: per-issue edit → lifecycle engine → persist
- reads: QueryService

Every mutating call returns a copy of the persisted record.
"""

from datetime import datetime
from typing import Callable, List, Optional
import logging
import threading
import uuid

from app.models.issue import (
    Issue,
    IssueCategory,
    IssueCreate,
    IssueStats,
    IssueStatus,
    Location,
    department_for,
)
from app.models.user import User
from app.repositories.base import IssueRepository
from app.services.duplicate_detection import DuplicateDetectionService
from app.services.geo_metric import DistanceStrategy, PlanarDegreeDistance
from app.services.issue_store import IssueStore
from app.services.lifecycle_engine import LifecycleEngine
from app.services.notifications import ResolutionNotifier
from app.services.query_service import QueryService
from app.utils.timestamps import utc_now

logger = logging.getLogger(__name__)


class IssueService:

    def __init__(
        self,
        repository: IssueRepository,
        strategy: Optional[DistanceStrategy] = None,
        notifier: Optional[ResolutionNotifier] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.clock = clock
        self.strategy = strategy or PlanarDegreeDistance()
        self.store = IssueStore(repository)
        self.duplicates = DuplicateDetectionService(self.strategy)
        self.lifecycle = LifecycleEngine(notifier=notifier, clock=clock)
        self.queries = QueryService(self.store, self.strategy)

    def load(self) -> "IssueService":
        self.store.load()
        return self

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def create_issue(
        self,
        title: str,
        description: str,
        category,
        location: Location,
        submitted_by: str,
        photo: Optional[str] = None,
    ) -> Issue:
        """
        Create a new issue unless it duplicates a recent nearby one.

        Raises:
            DuplicateFoundError: a same-category issue exists within ~50 m / 48 h
        """
        department = department_for(category)
        category = IssueCategory(category)
        now = self.clock()

        issue = Issue(
            id=uuid.uuid4().hex,
            title=title,
            description=description,
            category=category,
            location=location,
            photo=photo,
            submitted_by=submitted_by,
            submitted_at=now,
            department=department,
        )
        self.lifecycle.initialize(issue)

        def reject_duplicates(existing: List[Issue]) -> None:
            self.duplicates.check_duplicate(location, category, now, existing)

        created = self.store.add(issue, guard=reject_duplicates)
        logger.info(f"Issue created: {created.id} ({category.value}, {created.department})")
        return created

    def create_from_request(self, request: IssueCreate) -> Issue:
        return self.create_issue(
            title=request.title,
            description=request.description,
            category=request.category,
            location=request.location,
            submitted_by=request.submitted_by,
            photo=request.photo,
        )

    def upvote_issue(self, issue_id: str) -> Issue:
        with self.store.edit(issue_id) as issue:
            self.lifecycle.apply_upvote(issue)
        return issue.model_copy(deep=True)

    def update_issue_status(
        self,
        issue_id: str,
        status: IssueStatus,
        assigned_to: Optional[str] = None,
        changed_by: Optional[str] = None,
        note: Optional[str] = None,
    ) -> Issue:
        with self.store.edit(issue_id) as issue:
            needs_feedback = self.lifecycle.apply_staff_status(
                issue, status, assigned_to=assigned_to, changed_by=changed_by, note=note
            )
        updated = issue.model_copy(deep=True)
        if needs_feedback:
            self.lifecycle.notify_pending_confirmation(updated)
        return updated

    def confirm_resolution(self, issue_id: str, rating, comment: Optional[str] = None) -> Issue:
        with self.store.edit(issue_id) as issue:
            self.lifecycle.confirm_resolution(issue, rating, comment)
        return issue.model_copy(deep=True)

    def reopen_issue(self, issue_id: str, comment: Optional[str] = None) -> Issue:
        with self.store.edit(issue_id) as issue:
            self.lifecycle.reopen(issue, comment)
        return issue.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_all_issues(self) -> List[Issue]:
        return self.queries.all_issues()

    def get_issue(self, issue_id: str) -> Issue:
        return self.queries.get_issue(issue_id)

    def get_issues_by_user(self, user_id: str) -> List[Issue]:
        return self.queries.issues_by_user(user_id)

    def get_nearby_issues(self, lat: float, lng: float, radius_km: float = QueryService.DEFAULT_RADIUS_KM) -> List[Issue]:
        return self.queries.nearby_issues(lat, lng, radius_km)

    def search_issues(
        self,
        status: Optional[IssueStatus] = None,
        category: Optional[IssueCategory] = None,
        query: Optional[str] = None,
    ) -> List[Issue]:
        return self.queries.search_issues(status=status, category=category, query=query)

    def get_issue_stats(self) -> IssueStats:
        return self.queries.issue_stats()

    def get_user(self, user_id: str) -> User:
        return self.queries.get_user(user_id)

    def list_users(self, admins_only: bool = False) -> List[User]:
        return self.queries.list_users(admins_only=admins_only)


# Global service instance (singleton pattern)
_issue_service: Optional[IssueService] = None
_issue_service_lock = threading.Lock()


def get_issue_service() -> IssueService:
    """
    Get or create the IssueService singleton, loaded from the configured
    repository with the configured distance strategy.
    """
    global _issue_service
    if _issue_service is not None:
        return _issue_service

    with _issue_service_lock:
        if _issue_service is None:
            from app.repositories.resolver import get_repository
            from app.services.geo_metric import get_distance_strategy

            _issue_service = IssueService(
                repository=get_repository(),
                strategy=get_distance_strategy(),
            ).load()
    return _issue_service
