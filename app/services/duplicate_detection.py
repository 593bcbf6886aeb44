"""
Duplicate Detection Service - submission-time suppression of repeat reports.

Criteria for duplicate (ALL must hold for some existing issue):
1. Within the duplicate distance of the candidate (~50 m)
2. Same category
3. Submitted less than 48 hours before the candidate

A match rejects the submission; it is never merged. The caller decides
whether to send the citizen to upvote the existing issue instead.
"""

from datetime import datetime, timedelta
from typing import Iterable, Optional
import logging

from app.core.errors import DuplicateFoundError
from app.models.issue import Issue, IssueCategory, Location
from app.services.geo_metric import DistanceStrategy

logger = logging.getLogger(__name__)


class DuplicateDetectionService:

    # Configuration constants
    DUPLICATE_TIME_WINDOW = timedelta(hours=48)

    def __init__(self, strategy: DistanceStrategy):
        self.strategy = strategy

    def find_duplicate(
        self,
        location: Location,
        category: IssueCategory,
        now: datetime,
        existing: Iterable[Issue],
    ) -> Optional[Issue]:
        """
        Scan every existing issue (no index, no early cut-off) and return the
        first match in insertion order, or None.
        """
        for issue in existing:
            if issue.category != category:
                continue
            if now - issue.submitted_at >= self.DUPLICATE_TIME_WINDOW:
                continue
            if self.strategy.is_duplicate_distance(location, issue.location):
                return issue
        return None

    def check_duplicate(
        self,
        location: Location,
        category: IssueCategory,
        now: datetime,
        existing: Iterable[Issue],
    ) -> None:
        """Raise DuplicateFoundError if the candidate matches an existing issue."""
        duplicate = self.find_duplicate(location, category, now, existing)
        if duplicate is not None:
            logger.warning(
                f"Duplicate submission suppressed: {category.value} at "
                f"({location.lat}, {location.lng}) matches issue {duplicate.id}"
            )
            raise DuplicateFoundError(duplicate.id)
