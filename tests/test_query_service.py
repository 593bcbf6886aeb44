import pytest

from app.core.errors import UserNotFoundError
from app.models.issue import IssueCategory, IssueStatus
from app.models.user import User
from app.repositories.memory_repository import InMemoryRepository
from app.services.issue_service import IssueService


def test_nearby_uses_radius_times_point_zero_one(service, make_issue):
    inside = make_issue(lat=10.049, lng=10.0, category="Pothole")
    diagonal = make_issue(lat=10.03, lng=9.97, category="Road Damage")  # ~0.0424
    make_issue(lat=10.06, lng=10.0, category="Other")  # 0.06, excluded
    make_issue(lat=10.0, lng=10.051, category="Drainage Problem")  # 0.051, excluded

    nearby = service.get_nearby_issues(10.0, 10.0, 5)

    assert [i.id for i in nearby] == [inside.id, diagonal.id]


def test_nearby_default_radius_is_five_km(service, make_issue):
    near = make_issue(lat=10.04, lng=10.0)
    make_issue(lat=10.06, lng=10.0)
    assert [i.id for i in service.get_nearby_issues(10.0, 10.0)] == [near.id]


def test_nearby_smaller_radius(service, make_issue):
    make_issue(lat=10.02, lng=10.0)
    assert service.get_nearby_issues(10.0, 10.0, 1) == []
    assert len(service.get_nearby_issues(10.0, 10.0, 3)) == 1


def test_issues_by_user(service, make_issue):
    mine = make_issue(submitted_by="citizen1")
    make_issue(submitted_by="citizen2", category="Other")
    assert [i.id for i in service.get_issues_by_user("citizen1")] == [mine.id]
    assert service.get_issues_by_user("nobody") == []


def test_all_issues_keeps_insertion_order(service, make_issue):
    ids = [make_issue(lat=i, lng=i).id for i in range(5)]
    # Mutating an early issue must not move it.
    service.upvote_issue(ids[0])
    assert [i.id for i in service.get_all_issues()] == ids


def test_search_filters(service, make_issue):
    pothole = make_issue(title="Crater on Ring Road", address="Ring Road")
    garbage = make_issue(title="Overflowing bins", category="Garbage Overflow", address="Khan Market")
    service.update_issue_status(garbage.id, IssueStatus.IN_PROGRESS)

    assert [i.id for i in service.search_issues(status=IssueStatus.IN_PROGRESS)] == [garbage.id]
    assert [i.id for i in service.search_issues(category=IssueCategory.POTHOLE)] == [pothole.id]
    assert [i.id for i in service.search_issues(query="khan")] == [garbage.id]
    assert [i.id for i in service.search_issues(query="RING")] == [pothole.id]
    assert service.search_issues(category=IssueCategory.POTHOLE, status=IssueStatus.IN_PROGRESS) == []
    assert len(service.search_issues()) == 2


def test_issue_stats(service, make_issue):
    submitted = make_issue(lat=1, lng=1)
    verified = make_issue(lat=2, lng=2)
    in_progress = make_issue(lat=3, lng=3)
    pending = make_issue(lat=4, lng=4)
    resolved = make_issue(lat=5, lng=5)

    for _ in range(10):
        service.upvote_issue(verified.id)
    service.update_issue_status(in_progress.id, IssueStatus.IN_PROGRESS)
    service.update_issue_status(pending.id, IssueStatus.RESOLVED)
    service.update_issue_status(resolved.id, IssueStatus.RESOLVED)
    service.confirm_resolution(resolved.id, 5)

    stats = service.get_issue_stats()

    assert stats.total == 5
    assert stats.pending == 2
    assert stats.in_progress == 1
    assert stats.pending_confirmation == 1
    assert stats.resolved == 1
    assert stats.high_priority == 1
    assert submitted.id != verified.id


def test_users_lookup(clock):
    users = [
        User(id="citizen1", name="Rajesh Kumar", email="rajesh@example.com"),
        User(id="admin1", name="Admin User", is_admin=True),
    ]
    service = IssueService(InMemoryRepository(users=users), clock=clock).load()

    assert service.get_user("admin1").is_admin is True
    assert [u.id for u in service.list_users()] == ["citizen1", "admin1"]
    assert [u.id for u in service.list_users(admins_only=True)] == ["admin1"]
    with pytest.raises(UserNotFoundError):
        service.get_user("ghost")
