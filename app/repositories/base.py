from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Sequence, Tuple
import logging

from app.models.issue import Issue
from app.models.user import User

logger = logging.getLogger(__name__)


class IssueRepository(ABC):
    """
    Persistence boundary for the issue core.

    Contract:
    - Two collections: "issues" and "users"
    - load() returns both collections wholesale, issues in insertion order
    - save() rewrites both collections wholesale (seeding, file backends)
    - save_issue() persists one created or changed issue and MUST be
      all-or-nothing: a failed save leaves the previously saved state readable
    - Failures propagate; the store rolls back its in-memory change
    """

    name: str = "abstract"

    @abstractmethod
    def load(self) -> Tuple[List[Issue], List[User]]:
        raise NotImplementedError

    @abstractmethod
    def save(self, issues: Sequence[Issue], users: Sequence[User]) -> None:
        raise NotImplementedError

    def save_issue(self, issue: Issue, issues: Sequence[Issue], users: Sequence[User]) -> None:
        """
        Persist `issue`, which is already part of `issues`.
        Backends whose save() is atomic can simply rewrite everything.
        """
        self.save(issues, users)

    def describe(self) -> Dict[str, object]:
        """Backend details for the /health/db endpoint."""
        return {"backend": self.name}


def dump_records(records: Iterable) -> List[dict]:
    return [record.to_document() for record in records]


def parse_issues(documents: Iterable[dict]) -> List[Issue]:
    return [Issue.model_validate(document) for document in documents]


def parse_users(documents: Iterable[dict]) -> List[User]:
    return [User.model_validate(document) for document in documents]
