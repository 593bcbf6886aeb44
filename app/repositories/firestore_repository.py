"""
Firestore repository.

Collections:
- issues: one document per issue, document id == issue id
- users:  one document per user, document id == user id

Each issue document carries a `position` field so load() can return issues in
insertion order (Firestore streams documents in id order otherwise). Documents
without a position (written by other tools) are loaded after the rest, in id
order.

Writes:
- save_issue() writes the single changed document, which Firestore applies
  atomically. This is the path every store commit takes.
- save() replaces both collections (seeding). It deletes documents that are
  not in the new data. Batched writes are capped at 500 operations, so a
  replace larger than that is committed chunk by chunk and is only atomic per
  chunk.
"""

from typing import List, Sequence, Tuple
import logging

from app.models.issue import Issue
from app.models.user import User
from app.repositories.base import IssueRepository, parse_issues, parse_users

logger = logging.getLogger(__name__)


class FirestoreRepository(IssueRepository):
    name = "firestore"

    ISSUES_COLLECTION = "issues"
    USERS_COLLECTION = "users"
    POSITION_FIELD = "position"
    MAX_BATCH_WRITES = 500  # Firestore limit per batched write

    def __init__(self, db=None):
        self._db = db

    @property
    def db(self):
        if self._db is None:
            from app.config.firebase import get_db
            self._db = get_db()
        return self._db

    def load(self) -> Tuple[List[Issue], List[User]]:
        issue_documents = []
        for doc in self.db.collection(self.ISSUES_COLLECTION).stream():
            data = doc.to_dict()
            data["id"] = doc.id
            issue_documents.append(data)

        unordered = [d["id"] for d in issue_documents if d.get(self.POSITION_FIELD) is None]
        if unordered:
            logger.warning(
                f"[FIRESTORE] {len(unordered)} issue document(s) have no '{self.POSITION_FIELD}' field; "
                f"loading them last"
            )
        issue_documents.sort(
            key=lambda d: (d.get(self.POSITION_FIELD) is None, d.get(self.POSITION_FIELD) or 0, d["id"])
        )
        for data in issue_documents:
            data.pop(self.POSITION_FIELD, None)

        user_documents = []
        for doc in self.db.collection(self.USERS_COLLECTION).stream():
            data = doc.to_dict()
            data["id"] = doc.id
            user_documents.append(data)

        issues = parse_issues(issue_documents)
        users = parse_users(user_documents)
        logger.info(f"[FIRESTORE] Loaded {len(issues)} issue(s) and {len(users)} user(s)")
        return issues, users

    def save_issue(self, issue: Issue, issues: Sequence[Issue], users: Sequence[User]) -> None:
        position = next(index for index, candidate in enumerate(issues) if candidate.id == issue.id)
        data = issue.to_document()
        data[self.POSITION_FIELD] = position
        self.db.collection(self.ISSUES_COLLECTION).document(issue.id).set(data)
        logger.debug(f"[FIRESTORE] Saved issue {issue.id} (position {position})")

    def save(self, issues: Sequence[Issue], users: Sequence[User]) -> None:
        issues_ref = self.db.collection(self.ISSUES_COLLECTION)
        users_ref = self.db.collection(self.USERS_COLLECTION)

        writes = []
        for position, issue in enumerate(issues):
            data = issue.to_document()
            data[self.POSITION_FIELD] = position
            writes.append((issues_ref.document(issue.id), data))
        for user in users:
            writes.append((users_ref.document(user.id), user.to_document()))

        keep_issues = {issue.id for issue in issues}
        keep_users = {user.id for user in users}
        stale = [ref for ref in issues_ref.list_documents() if ref.id not in keep_issues]
        stale += [ref for ref in users_ref.list_documents() if ref.id not in keep_users]
        writes += [(ref, None) for ref in stale]

        if len(writes) > self.MAX_BATCH_WRITES:
            logger.warning(
                f"[FIRESTORE] {len(writes)} writes exceed one batch ({self.MAX_BATCH_WRITES}); "
                f"committing in chunks"
            )

        for start in range(0, len(writes), self.MAX_BATCH_WRITES):
            batch = self.db.batch()
            for ref, data in writes[start:start + self.MAX_BATCH_WRITES]:
                if data is None:
                    batch.delete(ref)
                else:
                    batch.set(ref, data)
            batch.commit()

        logger.info(
            f"[FIRESTORE] Replaced collections: {len(issues)} issue(s), {len(users)} user(s), "
            f"{len(stale)} stale document(s) deleted"
        )

    def describe(self):
        collections = [c.id for c in self.db.collections()]
        return {
            "backend": self.name,
            "collections_count": len(collections),
        }
