"""Shared fixtures: an IssueService over in-memory storage with a controllable clock."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.models.issue import Location
from app.repositories.memory_repository import InMemoryRepository
from app.services.issue_service import IssueService, get_issue_service
from app.services.notifications import RecordingResolutionNotifier

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


class FrozenClock:
    def __init__(self, now: datetime = T0):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def repository():
    return InMemoryRepository()


@pytest.fixture
def notifier():
    return RecordingResolutionNotifier()


@pytest.fixture
def service(repository, clock, notifier):
    return IssueService(repository, notifier=notifier, clock=clock).load()


@pytest.fixture
def make_issue(service):
    """Create an issue with sensible defaults; keyword overrides win."""

    def _make(lat=28.6139, lng=77.2090, category="Pothole", submitted_by="citizen1", title="Pothole", **kwargs):
        return service.create_issue(
            title=title,
            description=kwargs.pop("description", "Deep pothole near the bus stop"),
            category=category,
            location=Location(lat=lat, lng=lng, address=kwargs.pop("address", "Main Street")),
            submitted_by=submitted_by,
            **kwargs,
        )

    return _make


@pytest.fixture
def client(service):
    app.dependency_overrides[get_issue_service] = lambda: service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
