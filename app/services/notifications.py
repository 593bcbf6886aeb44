"""
Resolution feedback notifier.

When staff marks an issue resolved, the submitting citizen is asked to
confirm the fix (rate it) or reopen the issue. Delivery (push, SMS, e-mail)
belongs to the surrounding application; the core only raises the request.
"""

from abc import ABC, abstractmethod
from typing import List
import logging

from app.models.issue import Issue

logger = logging.getLogger(__name__)


class ResolutionNotifier(ABC):

    @abstractmethod
    def request_feedback(self, issue: Issue) -> None:
        """Ask issue.submitted_by to confirm or reopen the resolution."""
        raise NotImplementedError


class LoggingResolutionNotifier(ResolutionNotifier):
    """
    SIMULATED notifier - nothing is sent.
    Records the feedback request in the log for operators.
    """

    def request_feedback(self, issue: Issue) -> None:
        logger.info(
            f"📨 Feedback requested from {issue.submitted_by} for issue {issue.id} "
            f"('{issue.title}', {issue.department})"
        )


class RecordingResolutionNotifier(ResolutionNotifier):
    """Keeps every request in memory; handy for demos and tests."""

    def __init__(self):
        self.requests: List[str] = []

    def request_feedback(self, issue: Issue) -> None:
        self.requests.append(issue.id)
