"""
IssueStore - authoritative collection of issue and user records.

DESIGN PRINCIPLES:
- One in-memory owner of every issue record; callers only ever see copies
- Writes to the same issue serialize on a per-issue lock
- A mutation becomes visible only after it is persisted through the
  repository; if the save fails the in-memory record is rolled back
- Reads are snapshots taken under the commit lock (no partial writes)
"""

from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional
import logging
import threading

from app.core.errors import IssueNotFoundError, UserNotFoundError
from app.models.issue import Issue
from app.models.user import User
from app.repositories.base import IssueRepository

logger = logging.getLogger(__name__)


class IssueStore:

    def __init__(self, repository: IssueRepository):
        self.repository = repository
        self._issues: Dict[str, Issue] = {}  # dicts keep insertion order
        self._users: Dict[str, User] = {}
        self._commit_lock = threading.Lock()
        self._create_lock = threading.Lock()
        self._issue_locks: Dict[str, threading.Lock] = {}
        self._issue_locks_guard = threading.Lock()

    def load(self) -> None:
        """Replace in-memory state with whatever the repository holds."""
        issues, users = self.repository.load()
        with self._commit_lock:
            self._issues = {issue.id: issue for issue in issues}
            self._users = {user.id: user for user in users}
        logger.info(f"IssueStore loaded {len(issues)} issue(s), {len(users)} user(s) via {self.repository.name}")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def snapshot(self) -> List[Issue]:
        with self._commit_lock:
            return [issue.model_copy(deep=True) for issue in self._issues.values()]

    def get(self, issue_id: str) -> Issue:
        with self._commit_lock:
            issue = self._issues.get(issue_id)
            if issue is None:
                raise IssueNotFoundError(issue_id)
            return issue.model_copy(deep=True)

    def users(self) -> List[User]:
        with self._commit_lock:
            return [user.model_copy() for user in self._users.values()]

    def get_user(self, user_id: str) -> User:
        with self._commit_lock:
            user = self._users.get(user_id)
            if user is None:
                raise UserNotFoundError(user_id)
            return user.model_copy()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def add(self, issue: Issue, guard: Optional[Callable[[List[Issue]], None]] = None) -> Issue:
        """
        Insert a new issue and persist.

        `guard` receives a snapshot of the existing issues and may raise to
        veto the insert. Guard and insert run under one lock, so two
        concurrent submissions cannot both pass the same check.
        """
        with self._create_lock:
            if guard is not None:
                guard(self.snapshot())
            if issue.id in self._issues:
                raise ValueError(f"Issue id {issue.id} already exists")
            self._commit(issue)
        return issue.model_copy(deep=True)

    @contextmanager
    def edit(self, issue_id: str) -> Iterator[Issue]:
        """
        Read-modify-write one issue atomically.

        Yields a working copy; changes are committed when the block exits
        cleanly and discarded if it raises.
        """
        # Issues are never deleted, so an id that exists now still exists under its lock.
        with self._commit_lock:
            if issue_id not in self._issues:
                raise IssueNotFoundError(issue_id)

        with self._lock_for(issue_id):
            with self._commit_lock:
                working = self._issues[issue_id].model_copy(deep=True)
            yield working
            self._commit(working)

    def _lock_for(self, issue_id: str) -> threading.Lock:
        with self._issue_locks_guard:
            lock = self._issue_locks.get(issue_id)
            if lock is None:
                lock = threading.Lock()
                self._issue_locks[issue_id] = lock
            return lock

    def _commit(self, issue: Issue) -> None:
        with self._commit_lock:
            previous = self._issues.get(issue.id)
            self._issues[issue.id] = issue
            try:
                self.repository.save_issue(issue, list(self._issues.values()), list(self._users.values()))
            except Exception:
                logger.error(f"Failed to persist issue {issue.id}; rolling back", exc_info=True)
                if previous is None:
                    del self._issues[issue.id]
                else:
                    self._issues[issue.id] = previous
                raise
