"""
Общие фикстуры: пользователи разных ролей, управляемые часы и сервис заявок.
"""

from datetime import datetime, timedelta, timezone

import pytest

from facility_tracker.models.request import RequestCategory, RequestLocation, UrgencyLevel
from facility_tracker.models.user import User, UserRole
from facility_tracker.services.request_service import RequestService
from facility_tracker.services.request_store import RequestStore

T0 = datetime(2024, 3, 4, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Часы, которые двигаются только вручную."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def staff() -> User:
    return User(id="u1", name="Ji-Min Kim", email="jimin.kim@branksome.asia", role=UserRole.STAFF)


@pytest.fixture
def other_staff() -> User:
    return User(id="u5", name="Requester Test", email="chihoyun2@branksome.asia", role=UserRole.STAFF)


@pytest.fixture
def worker() -> User:
    return User(id="u2", name="Chul-Soo Park", email="park.cs@maintenance.com", role=UserRole.WORKER)


@pytest.fixture
def other_worker() -> User:
    return User(id="u6", name="Worker Test", email="chihoyun3@branksome.asia", role=UserRole.WORKER)


@pytest.fixture
def admin() -> User:
    return User(id="u3", name="Chiho Yun", email="chihoyun@branksome.asia", role=UserRole.ADMIN)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> RequestStore:
    return RequestStore()


@pytest.fixture
def service(store, clock) -> RequestService:
    return RequestService(store=store, clock=clock)


@pytest.fixture
def make_request(service, staff):
    """Фабрика заявок: создает заявку от имени пользователя (по умолчанию staff)."""

    def _make(actor: User | None = None, **overrides):
        params = {
            "title": "Projector broken",
            "description": "Projector in room 304 does not turn on.",
            "category": RequestCategory.ELECTRIC,
            "location": RequestLocation.SCHOOL_CENTER,
            "urgency": UrgencyLevel.MEDIUM,
        }
        params.update(overrides)
        return service.create_request(actor or staff, **params)

    return _make
