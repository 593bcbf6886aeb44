"""
Error taxonomy for the issue core.

Everything deriving from IssueCoreError is a recoverable outcome that the
HTTP layer maps to a 4xx response. IntegrityViolation is kept
outside that hierarchy: it signals a programming error (bad category, corrupt
stored record) and must surface as a 500, never be caught and defaulted.
"""

from typing import Optional


class IssueCoreError(Exception):
    """Base class for expected, caller-recoverable outcomes."""


class DuplicateFoundError(IssueCoreError):
    """A submission matched an existing issue inside the duplicate window."""

    def __init__(self, existing_issue_id: str):
        self.existing_issue_id = existing_issue_id
        super().__init__(
            f"A similar issue was reported nearby in the last 48 hours: {existing_issue_id}"
        )


class IssueNotFoundError(IssueCoreError):
    def __init__(self, issue_id: str):
        self.issue_id = issue_id
        super().__init__(f"Issue {issue_id} not found")


class UserNotFoundError(IssueCoreError):
    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")


class InvalidRatingError(IssueCoreError):
    def __init__(self, rating: object):
        self.rating = rating
        super().__init__(f"Resolution rating must be an integer between 1 and 5, got {rating!r}")


class InvalidTransitionError(IssueCoreError):
    """A citizen action was attempted on an issue that is not awaiting it."""

    def __init__(self, issue_id: str, current_status: str, action: str, detail: Optional[str] = None):
        self.issue_id = issue_id
        self.current_status = current_status
        self.action = action
        message = f"Cannot {action} issue {issue_id} while it is '{current_status}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class IntegrityViolation(Exception):
    """An internal invariant was broken. Not recoverable by the caller."""
