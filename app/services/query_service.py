"""
Query Service - read paths used by the map, "my reports" and the
municipal dashboard.

All results are snapshots from the IssueStore in insertion order.
"""

from typing import List, Optional
import logging

from app.models.issue import Issue, IssueCategory, IssueStats, IssueStatus
from app.models.user import User
from app.services.geo_metric import DistanceStrategy
from app.services.issue_store import IssueStore

logger = logging.getLogger(__name__)


class QueryService:

    DEFAULT_RADIUS_KM = 5.0
    HIGH_PRIORITY_UPVOTES = 10

    def __init__(self, store: IssueStore, strategy: DistanceStrategy):
        self.store = store
        self.strategy = strategy

    def all_issues(self) -> List[Issue]:
        return self.store.snapshot()

    def get_issue(self, issue_id: str) -> Issue:
        return self.store.get(issue_id)

    def issues_by_user(self, user_id: str) -> List[Issue]:
        return [issue for issue in self.store.snapshot() if issue.submitted_by == user_id]

    def nearby_issues(self, lat: float, lng: float, radius_km: float = DEFAULT_RADIUS_KM) -> List[Issue]:
        """
        Issues within `radius_km` of (lat, lng), measured with the same
        distance strategy duplicate detection uses.
        """
        nearby = [
            issue
            for issue in self.store.snapshot()
            if self.strategy.is_within_radius(lat, lng, issue.location, radius_km)
        ]
        logger.debug(f"Nearby query ({lat}, {lng}, {radius_km} km) matched {len(nearby)} issue(s)")
        return nearby

    def search_issues(
        self,
        status: Optional[IssueStatus] = None,
        category: Optional[IssueCategory] = None,
        query: Optional[str] = None,
    ) -> List[Issue]:
        """
        Dashboard filter: exact status/category match plus a case-insensitive
        substring search over title, description and address.
        """
        needle = query.strip().lower() if query else ""
        results = []
        for issue in self.store.snapshot():
            if status is not None and issue.status != status:
                continue
            if category is not None and issue.category != category:
                continue
            if needle:
                haystack = " ".join(
                    [issue.title, issue.description, issue.location.address]
                ).lower()
                if needle not in haystack:
                    continue
            results.append(issue)
        return results

    def issue_stats(self) -> IssueStats:
        issues = self.store.snapshot()
        return IssueStats(
            total=len(issues),
            pending=sum(1 for i in issues if i.status in (IssueStatus.SUBMITTED, IssueStatus.VERIFIED)),
            in_progress=sum(1 for i in issues if i.status == IssueStatus.IN_PROGRESS),
            pending_confirmation=sum(1 for i in issues if i.status == IssueStatus.PENDING_CONFIRMATION),
            resolved=sum(1 for i in issues if i.status == IssueStatus.RESOLVED),
            high_priority=sum(1 for i in issues if i.community_upvotes >= self.HIGH_PRIORITY_UPVOTES),
        )

    def get_user(self, user_id: str) -> User:
        return self.store.get_user(user_id)

    def list_users(self, admins_only: bool = False) -> List[User]:
        users = self.store.users()
        if admins_only:
            return [user for user in users if user.is_admin]
        return users
