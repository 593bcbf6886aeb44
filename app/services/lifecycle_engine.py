"""
Lifecycle Engine - issue status state machine.

DESIGN PRINCIPLES:
- The engine is the ONLY writer of `status`
- Staff is trusted: staff actions are coarse "set status X" commands and
  are never rejected, including jumps such as submitted → resolved
- Citizens are constrained: they may only confirm or reopen an issue that
  is pending confirmation
- Upvote promotion is one-directional: submitted → verified at 5 upvotes,
  after that upvotes only increment the counter
- Every status change is appended to status_history for auditability
"""

from datetime import datetime
from typing import Callable, Optional
import logging

from app.core.errors import InvalidRatingError, InvalidTransitionError
from app.models.issue import Issue, IssueStatus, StatusHistoryEntry
from app.services.notifications import LoggingResolutionNotifier, ResolutionNotifier
from app.utils.timestamps import utc_now

logger = logging.getLogger(__name__)


class LifecycleEngine:

    # Configuration constants
    UPVOTE_VERIFICATION_THRESHOLD = 5
    MIN_RATING = 1
    MAX_RATING = 5
    SYSTEM_ACTOR = "system"
    STAFF_ACTOR = "staff"

    # Staff "resolved" means "fixed on our side"; the citizen still has to confirm.
    STAFF_STATUS_ALIASES = {
        IssueStatus.RESOLVED: IssueStatus.PENDING_CONFIRMATION,
    }

    def __init__(
        self,
        notifier: Optional[ResolutionNotifier] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.notifier = notifier or LoggingResolutionNotifier()
        self.clock = clock

    # ------------------------------------------------------------------
    # System-driven transitions
    # ------------------------------------------------------------------
    def initialize(self, issue: Issue) -> None:
        """Put a freshly created issue into its initial state."""
        issue.status = IssueStatus.SUBMITTED
        issue.status_history = [
            StatusHistoryEntry(
                from_status=None,
                to_status=IssueStatus.SUBMITTED,
                changed_by=issue.submitted_by,
                timestamp=self.clock(),
                note="Issue submitted",
            )
        ]

    def apply_upvote(self, issue: Issue) -> bool:
        """
        Count one upvote and promote submitted → verified at the threshold.

        Returns True if this upvote promoted the issue.
        """
        issue.community_upvotes += 1

        if (
            issue.status == IssueStatus.SUBMITTED
            and issue.community_upvotes >= self.UPVOTE_VERIFICATION_THRESHOLD
        ):
            self._transition(
                issue,
                IssueStatus.VERIFIED,
                changed_by=self.SYSTEM_ACTOR,
                note=f"Community verified ({issue.community_upvotes} upvotes)",
            )
            logger.info(f"Issue {issue.id} promoted to verified by community upvotes")
            return True
        return False

    # ------------------------------------------------------------------
    # Staff actions (trusted, never rejected)
    # ------------------------------------------------------------------
    def apply_staff_status(
        self,
        issue: Issue,
        status: IssueStatus,
        assigned_to: Optional[str] = None,
        changed_by: Optional[str] = None,
        note: Optional[str] = None,
    ) -> bool:
        """
        Apply a staff status change.

        Returns True when the issue has just entered pending-confirmation,
        i.e. the citizen should be asked for feedback once it is persisted.
        """
        target = self.STAFF_STATUS_ALIASES.get(IssueStatus(status), IssueStatus(status))
        previous = issue.status

        if assigned_to:
            issue.assigned_to = assigned_to

        # A staff decision supersedes an earlier citizen confirmation.
        # A reopen comment (is_truly_resolved False) is kept.
        if issue.is_truly_resolved:
            self._clear_confirmation(issue)

        if target == previous:
            return False

        if target == IssueStatus.PENDING_CONFIRMATION and note is None:
            note = "Marked resolved by staff; awaiting citizen confirmation"
        self._transition(issue, target, changed_by=changed_by or self.STAFF_ACTOR, note=note)
        logger.info(f"Issue {issue.id}: staff moved {previous.value} → {target.value}")
        return target == IssueStatus.PENDING_CONFIRMATION

    def notify_pending_confirmation(self, issue: Issue) -> None:
        """
        Ask the citizen to confirm a staff resolution.
        Delivery problems are logged; they never undo the status change.
        """
        try:
            self.notifier.request_feedback(issue)
        except Exception:
            logger.error(f"Failed to request resolution feedback for issue {issue.id}", exc_info=True)

    # ------------------------------------------------------------------
    # Citizen actions (constrained)
    # ------------------------------------------------------------------
    @classmethod
    def validate_rating(cls, rating) -> int:
        if isinstance(rating, bool) or not isinstance(rating, int):
            raise InvalidRatingError(rating)
        if not cls.MIN_RATING <= rating <= cls.MAX_RATING:
            raise InvalidRatingError(rating)
        return rating

    def confirm_resolution(self, issue: Issue, rating, comment: Optional[str] = None) -> None:
        rating = self.validate_rating(rating)
        self._require_pending_confirmation(issue, "confirm resolution of")

        issue.is_truly_resolved = True
        issue.resolution_rating = rating
        issue.feedback_comment = _clean_comment(comment)
        issue.resolved_at = self.clock()
        self._transition(
            issue,
            IssueStatus.RESOLVED,
            changed_by=issue.submitted_by,
            note=f"Resolution confirmed by citizen (rating {rating}/5)",
        )
        logger.info(f"Issue {issue.id} confirmed resolved with rating {rating}")

    def reopen(self, issue: Issue, comment: Optional[str] = None) -> None:
        self._require_pending_confirmation(issue, "reopen")

        comment = _clean_comment(comment)
        self._clear_confirmation(issue)
        issue.feedback_comment = comment
        self._transition(
            issue,
            IssueStatus.IN_PROGRESS,
            changed_by=issue.submitted_by,
            note=f"Reopened by citizen: {comment}" if comment else "Reopened by citizen",
        )
        logger.info(f"Issue {issue.id} reopened by citizen")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _require_pending_confirmation(self, issue: Issue, action: str) -> None:
        if issue.status != IssueStatus.PENDING_CONFIRMATION:
            logger.warning(f"Rejected citizen action '{action}' on issue {issue.id} ({issue.status.value})")
            raise InvalidTransitionError(
                issue.id,
                issue.status.value,
                action,
                detail="the issue is not awaiting citizen confirmation",
            )

    @staticmethod
    def _clear_confirmation(issue: Issue) -> None:
        issue.is_truly_resolved = False
        issue.resolution_rating = None
        issue.feedback_comment = None
        issue.resolved_at = None

    def _transition(self, issue: Issue, to_status: IssueStatus, changed_by: str, note: Optional[str]) -> None:
        issue.status_history.append(
            StatusHistoryEntry(
                from_status=issue.status,
                to_status=to_status,
                changed_by=changed_by,
                timestamp=self.clock(),
                note=note,
            )
        )
        issue.status = to_status


def _clean_comment(comment: Optional[str]) -> Optional[str]:
    if comment is None:
        return None
    return comment.strip() or None
