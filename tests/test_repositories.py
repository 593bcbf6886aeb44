import json
import os
from datetime import datetime, timezone
from pathlib import Path

import pytest

from app.core.settings import settings
from app.models.issue import Issue, IssueCategory, Location
from app.models.user import User
from app.repositories import json_repository
from app.repositories.firestore_repository import FirestoreRepository
from app.repositories.json_repository import JsonFileRepository
from app.repositories.memory_repository import InMemoryRepository
from app.repositories.resolver import build_repository
from app.services.issue_service import IssueService
from scripts.seed_db import load_seed, write_to_repository

SEED_FILE = Path(__file__).resolve().parent.parent / "db_seed.json"
T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


def populated_service(repository, clock):
    service = IssueService(repository, clock=clock).load()
    first = service.create_issue("Pothole", "", "Pothole", Location(lat=1, lng=1), "citizen1")
    service.create_issue("Dark street", "", "Broken Streetlight", Location(lat=2, lng=2), "citizen2")
    service.update_issue_status(first.id, "resolved")
    return service


# ----------------------------------------------------------------------
# JSON file
# ----------------------------------------------------------------------
def test_json_missing_file_loads_empty(tmp_path):
    repository = JsonFileRepository(tmp_path / "db.json")
    assert repository.load() == ([], [])
    assert repository.describe()["exists"] is False


def test_json_round_trip_keeps_order_and_state(tmp_path, clock):
    path = tmp_path / "nested" / "db.json"
    service = populated_service(JsonFileRepository(path), clock)

    reloaded = IssueService(JsonFileRepository(path), clock=clock).load()

    assert [i.to_document() for i in reloaded.get_all_issues()] == [
        i.to_document() for i in service.get_all_issues()
    ]
    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["issues"][0]["status"] == "pending-confirmation"
    assert "communityUpvotes" in raw["issues"][0]


def test_json_failed_save_keeps_previous_file(tmp_path, clock, monkeypatch):
    path = tmp_path / "db.json"
    service = populated_service(JsonFileRepository(path), clock)
    before = path.read_text(encoding="utf-8")

    def broken_replace(src, dst):
        raise OSError("rename failed")

    monkeypatch.setattr(json_repository.os, "replace", broken_replace)
    issue_id = service.get_all_issues()[1].id
    with pytest.raises(OSError):
        service.upvote_issue(issue_id)

    assert path.read_text(encoding="utf-8") == before
    assert sorted(os.listdir(tmp_path)) == ["db.json"]
    assert service.get_issue(issue_id).community_upvotes == 0


# ----------------------------------------------------------------------
# Firestore (fake client)
# ----------------------------------------------------------------------
class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data

    def to_dict(self):
        return dict(self._data)


class FakeDocument:
    def __init__(self, db, docs, doc_id):
        self.db = db
        self.docs = docs
        self.id = doc_id

    def set(self, data):
        if self.db.fail_writes:
            raise RuntimeError("firestore unavailable")
        self.db.single_writes += 1
        self.docs[self.id] = dict(data)


class FakeCollection:
    def __init__(self, db, name, docs):
        self.db = db
        self.id = name
        self.docs = docs

    def document(self, doc_id):
        return FakeDocument(self.db, self.docs, doc_id)

    def list_documents(self):
        return [self.document(doc_id) for doc_id in sorted(self.docs)]

    def stream(self):
        return [FakeSnapshot(doc_id, data) for doc_id, data in sorted(self.docs.items())]


class FakeBatch:
    def __init__(self, db):
        self.db = db
        self.ops = []

    def set(self, ref, data):
        self.ops.append((ref, data))

    def delete(self, ref):
        self.ops.append((ref, None))

    def commit(self):
        self.db.commits += 1
        for ref, data in self.ops:
            if data is None:
                ref.docs.pop(ref.id, None)
            else:
                ref.docs[ref.id] = dict(data)


class FakeFirestore:
    def __init__(self):
        self.data = {}
        self.commits = 0
        self.single_writes = 0
        self.fail_writes = False

    def collection(self, name):
        return FakeCollection(self, name, self.data.setdefault(name, {}))

    def collections(self):
        return [FakeCollection(self, name, docs) for name, docs in self.data.items()]

    def batch(self):
        return FakeBatch(self)


def other_issue(n):
    return Issue(
        id=f"issue-{n:04d}",
        title=f"Issue {n}",
        category=IssueCategory.OTHER,
        location=Location(lat=n * 0.01, lng=0),
        submitted_by="citizen1",
        submitted_at=T0,
        department="General Administration",
    )


def test_firestore_round_trip_preserves_insertion_order(clock):
    db = FakeFirestore()
    service = IssueService(FirestoreRepository(db=db), clock=clock).load()
    # uuid hex ids are random, so id order differs from insertion order in general
    created = [
        service.create_issue("Issue", "", "Other", Location(lat=i, lng=i), "citizen1").id
        for i in range(6)
    ]

    reloaded = IssueService(FirestoreRepository(db=db), clock=clock).load()

    assert [i.id for i in reloaded.get_all_issues()] == created
    stored = db.data["issues"][created[3]]
    assert stored["position"] == 3
    assert stored["department"] == "General Administration"


def test_firestore_edit_writes_only_the_changed_document(clock):
    db = FakeFirestore()
    repository = FirestoreRepository(db=db)
    repository.save([other_issue(n) for n in range(600)], [])
    commits_after_seed = db.commits

    service = IssueService(repository, clock=clock).load()
    service.upvote_issue("issue-0599")

    assert db.commits == commits_after_seed
    assert db.single_writes == 1
    upvotes = {doc["communityUpvotes"] for doc in db.data["issues"].values()}
    assert upvotes == {0, 1}
    assert db.data["issues"]["issue-0599"]["position"] == 599


def test_firestore_failed_write_changes_nothing(clock):
    db = FakeFirestore()
    repository = FirestoreRepository(db=db)
    repository.save([other_issue(n) for n in range(600)], [])
    service = IssueService(repository, clock=clock).load()

    db.fail_writes = True
    with pytest.raises(RuntimeError):
        service.upvote_issue("issue-0007")

    assert service.get_issue("issue-0007").community_upvotes == 0
    assert {doc["communityUpvotes"] for doc in db.data["issues"].values()} == {0}


def test_firestore_replace_is_chunked_and_removes_stale_documents(monkeypatch):
    db = FakeFirestore()
    repository = FirestoreRepository(db=db)
    repository.save([other_issue(n) for n in range(3)], [User(id="old", name="Old")])
    monkeypatch.setattr(FirestoreRepository, "MAX_BATCH_WRITES", 2)
    users = [User(id=f"u{i}", name=f"User {i}") for i in range(5)]

    repository.save([other_issue(1)], users)

    # 1 issue + 5 users + 3 deletes (issue-0000, issue-0002, old)
    assert db.commits == 1 + 5
    assert sorted(db.data["issues"]) == ["issue-0001"]
    assert db.data["issues"]["issue-0001"]["position"] == 0
    assert sorted(db.data["users"]) == [f"u{i}" for i in range(5)]
    assert repository.describe() == {"backend": "firestore", "collections_count": 2}


def test_firestore_loads_documents_without_position_last(clock):
    db = FakeFirestore()
    repository = FirestoreRepository(db=db)
    repository.save([other_issue(5), other_issue(9)], [])
    foreign = other_issue(1).to_document()
    db.data["issues"]["issue-0001"] = foreign

    issues, _ = repository.load()

    assert [i.id for i in issues] == ["issue-0005", "issue-0009", "issue-0001"]


# ----------------------------------------------------------------------
# Resolver and seed script
# ----------------------------------------------------------------------
def test_build_repository_backends(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "DATA_FILE_PATH", str(tmp_path / "db.json"))

    json_repo = build_repository("json")
    assert isinstance(json_repo, JsonFileRepository)
    assert json_repo.path == tmp_path / "db.json"
    assert isinstance(build_repository("memory"), InMemoryRepository)
    assert isinstance(build_repository("firestore"), FirestoreRepository)
    with pytest.raises(ValueError):
        build_repository("postgres")


def test_seed_file_validates_and_applies(clock):
    issues, users = load_seed(str(SEED_FILE))
    assert [i.id for i in issues] == ["1", "2"]
    assert [u.id for u in users] == ["citizen1", "admin1"]

    repository = InMemoryRepository()
    write_to_repository(repository, issues, users, apply=False)
    assert repository.save_count == 0

    write_to_repository(repository, issues, users, apply=True)
    service = IssueService(repository, clock=clock).load()
    assert service.get_issue("1").community_upvotes == 15
    assert service.get_user("admin1").is_admin is True
    assert service.get_issue_stats().high_priority == 1
