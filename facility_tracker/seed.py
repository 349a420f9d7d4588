"""
Демонстрационные пользователи и заявки.
"""

from datetime import datetime, timedelta, timezone

from facility_tracker.models.request import (
    Comment,
    RequestCategory,
    RequestLocation,
    RequestStatus,
    ServiceRequest,
    TimelineEvent,
    UrgencyLevel,
)
from facility_tracker.models.user import User, UserRole
from facility_tracker.services.request_store import RequestStore
from facility_tracker.services.user_service import UserService

DEMO_USERS = [
    User(
        id="u1",
        user_code="USR-1001",
        name="Ji-Min Kim",
        email="jimin.kim@branksome.asia",
        role=UserRole.STAFF,
        department="Science Dept",
        created_at=datetime(2024, 1, 15, tzinfo=timezone.utc),
    ),
    User(
        id="u2",
        user_code="USR-2002",
        name="Chul-Soo Park",
        email="park.cs@maintenance.com",
        role=UserRole.WORKER,
        created_at=datetime(2024, 1, 10, tzinfo=timezone.utc),
    ),
    User(
        id="u3",
        user_code="USR-0001",
        name="Chiho Yun",
        email="chihoyun@branksome.asia",
        role=UserRole.ADMIN,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    ),
    User(
        id="u4",
        user_code="USR-5001",
        name="New Teacher",
        email="teacher@branksome.asia",
        role=UserRole.STAFF,
        is_approved=False,
    ),
]


def demo_requests(now: datetime) -> list[ServiceRequest]:
    """Заявки в разных статусах относительно момента `now`."""
    requester = DEMO_USERS[0]
    worker = DEMO_USERS[1]
    common = {
        "requester_id": requester.id,
        "requester_name": requester.name,
        "requester_email": requester.email,
    }
    assigned = {
        "assignee_id": worker.id,
        "assignee_name": worker.name,
        "assignee_email": worker.email,
    }
    day_ago = now - timedelta(days=1)
    two_days_ago = now - timedelta(days=2)
    earlier = now - timedelta(hours=11)

    return [
        ServiceRequest(
            **common,
            title="AC unit leaking in Lab 2",
            description="The air conditioner in the science lab is dripping water onto the desks.",
            category=RequestCategory.MACHINERY,
            location=RequestLocation.STMEV,
            urgency=UrgencyLevel.HIGH,
            timeline=(TimelineEvent(status=RequestStatus.PENDING, timestamp=day_ago),),
            created_at=day_ago,
        ),
        ServiceRequest(
            **common,
            **assigned,
            title="Projector broken",
            description="Projector in room 304 does not turn on.",
            category=RequestCategory.ELECTRIC,
            location=RequestLocation.SCHOOL_CENTER,
            urgency=UrgencyLevel.MEDIUM,
            status=RequestStatus.COMPLETED,
            timeline=(
                TimelineEvent(status=RequestStatus.PENDING, timestamp=two_days_ago),
                TimelineEvent(
                    status=RequestStatus.IN_PROGRESS,
                    timestamp=two_days_ago + timedelta(hours=2),
                ),
                TimelineEvent(status=RequestStatus.COMPLETED, timestamp=day_ago),
            ),
            comments=(
                Comment(
                    id="c1",
                    author_id=worker.id,
                    author_name=worker.name,
                    text="I will check it tomorrow morning.",
                    timestamp=two_days_ago + timedelta(hours=3),
                ),
                Comment(
                    id="c2",
                    author_id=requester.id,
                    author_name=requester.name,
                    text="Thank you! Please come before 9 AM.",
                    timestamp=two_days_ago + timedelta(hours=4),
                ),
            ),
            feedback_rating=5,
            feedback_comment="Fast service, thanks!",
            created_at=two_days_ago,
        ),
        ServiceRequest(
            **common,
            **assigned,
            title="Broken window latch",
            description="Window in the gym storage does not lock properly.",
            category=RequestCategory.REPAIR,
            location=RequestLocation.WELLNESS,
            urgency=UrgencyLevel.LOW,
            status=RequestStatus.IN_PROGRESS,
            timeline=(
                TimelineEvent(status=RequestStatus.PENDING, timestamp=earlier),
                TimelineEvent(
                    status=RequestStatus.IN_PROGRESS, timestamp=now - timedelta(hours=1)
                ),
            ),
            created_at=earlier,
        ),
    ]


def seed(store: RequestStore, users: UserService, now: datetime | None = None) -> None:
    """Заполняет хранилище и справочник пользователей демонстрационными данными."""
    now = now or datetime.now(timezone.utc)
    for user in DEMO_USERS:
        users.add_user(user)
    for request in demo_requests(now):
        store.create(request)
