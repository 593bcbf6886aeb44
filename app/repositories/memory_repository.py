"""
In-memory repository.
Used by tests and throwaway demo runs (STORAGE_BACKEND=memory).
"""

from typing import List, Optional, Sequence, Tuple

from app.models.issue import Issue
from app.models.user import User
from app.repositories.base import IssueRepository, dump_records, parse_issues, parse_users


class InMemoryRepository(IssueRepository):
    """Keeps serialized documents so every load is a fresh, validated copy."""

    name = "memory"

    def __init__(self, issues: Optional[Sequence[Issue]] = None, users: Optional[Sequence[User]] = None):
        self._issue_documents: List[dict] = dump_records(issues or [])
        self._user_documents: List[dict] = dump_records(users or [])
        self.save_count = 0

    def load(self) -> Tuple[List[Issue], List[User]]:
        return parse_issues(self._issue_documents), parse_users(self._user_documents)

    def save(self, issues: Sequence[Issue], users: Sequence[User]) -> None:
        # Serialize both collections before replacing either one.
        issue_documents = dump_records(issues)
        user_documents = dump_records(users)
        self._issue_documents = issue_documents
        self._user_documents = user_documents
        self.save_count += 1

    def describe(self):
        return {
            "backend": self.name,
            "issues": len(self._issue_documents),
            "users": len(self._user_documents),
        }
