"""
Тесты для UserService.
"""

from datetime import date, datetime, timezone

import pytest

from facility_tracker.core.exceptions import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
)
from facility_tracker.models.user import User, UserRole
from facility_tracker.services.user_service import UserService, parse_role

SAMPLE_USERS = [
    User(
        id="u1",
        name="Ji-Min Kim",
        email="jimin.kim@branksome.asia",
        role=UserRole.STAFF,
        created_at=datetime(2024, 1, 15, tzinfo=timezone.utc),
    ),
    User(
        id="u2",
        name="Chul-Soo Park",
        email="park.cs@maintenance.com",
        role=UserRole.WORKER,
        created_at=datetime(2024, 1, 10, tzinfo=timezone.utc),
    ),
    User(
        id="u4",
        name="New Teacher",
        email="teacher@branksome.asia",
        role=UserRole.STAFF,
        is_approved=False,
        created_at=datetime(2024, 2, 20, tzinfo=timezone.utc),
    ),
]


@pytest.fixture
def user_service(admin) -> UserService:
    """Фикстура для создания UserService с тестовыми пользователями."""
    service = UserService()
    for user in SAMPLE_USERS + [admin]:
        service.add_user(user)
    return service


def test_add_user_fills_code_and_avatar(user_service):
    user = user_service.get_user_by_id("u1")
    assert user.user_code.startswith("USR-")
    assert "Ji-Min+Kim" in user.avatar_url


def test_get_user_by_email_is_case_insensitive(user_service):
    assert user_service.get_user_by_email(" PARK.CS@maintenance.com ").id == "u2"
    assert user_service.get_user_by_email("nobody@x.com") is None


def test_register_user_awaits_approval(user_service):
    user = user_service.register_user("Min-Ji Lee", "minji.lee@branksome.asia", UserRole.WORKER)
    assert user.is_approved is False
    assert user.role is UserRole.WORKER
    assert user_service.get_user_by_id(user.id) == user


def test_register_duplicate_email(user_service):
    with pytest.raises(ValidationError, match="already registered"):
        user_service.register_user("Someone", "JIMIN.KIM@branksome.asia")


def test_register_requires_name(user_service):
    with pytest.raises(ValidationError, match="Full Name"):
        user_service.register_user("   ", "blank@branksome.asia")


def test_list_users_filters(user_service, admin):
    assert [u.id for u in user_service.list_users(admin, pending_only=True)] == ["u4"]
    assert [u.id for u in user_service.list_users(admin, search="PARK")] == ["u2"]
    assert {
        u.id
        for u in user_service.list_users(
            admin, start_date=date(2024, 1, 12), end_date=date(2024, 1, 31)
        )
    } == {"u1"}


def test_list_users_is_admin_only(user_service, worker):
    with pytest.raises(AuthorizationError):
        user_service.list_users(worker)


def test_approve_user(user_service, admin):
    approved = user_service.approve_user(admin, "u4")
    assert approved.is_approved is True
    assert user_service.get_user_by_id("u4").is_approved is True


def test_approve_unknown_user(user_service, admin):
    with pytest.raises(NotFoundError):
        user_service.approve_user(admin, "u-missing")


def test_update_user(user_service, admin):
    updated = user_service.update_user(admin, "u1", role="WORKER", department="Facilities")
    assert updated.role is UserRole.WORKER
    assert updated.department == "Facilities"


def test_update_user_rejects_unknown_fields(user_service, admin):
    with pytest.raises(ValidationError):
        user_service.update_user(admin, "u1", id="u99")


def test_update_user_rejects_taken_email(user_service, admin):
    with pytest.raises(ValidationError):
        user_service.update_user(admin, "u1", email="park.cs@maintenance.com")


def test_delete_users(user_service, admin):
    assert user_service.delete_users(admin, ["u1", "u2", "u-missing"]) == 2
    assert user_service.get_user_by_id("u1") is None


def test_delete_users_is_admin_only(user_service, staff):
    with pytest.raises(AuthorizationError):
        user_service.delete_users(staff, ["u2"])
    assert user_service.get_user_by_id("u2") is not None


def test_bulk_import_later_line_overwrites(admin):
    """Тест: Вторая строка с тем же email перезаписывает первую."""
    service = UserService([admin])
    result = service.bulk_import(admin, "a@x.com, Alice, STAFF\na@x.com, Alice2, WORKER")

    matches = [u for u in service.get_all_users() if u.email == "a@x.com"]
    assert len(matches) == 1
    assert matches[0].name == "Alice2"
    assert matches[0].role is UserRole.WORKER
    assert matches[0].is_approved is True
    assert len(result.created) == 1
    assert result.updated == result.created


def test_bulk_import_updates_existing_and_skips_bad_lines(user_service, admin):
    csv_text = "\n".join(
        [
            "teacher@branksome.asia, Homeroom Teacher, ADMIN",
            "",
            "missing-name@x.com,",
            "new.guard@branksome.asia, Gate Guard, guard",
        ]
    )
    result = user_service.bulk_import(admin, csv_text)

    teacher = user_service.get_user_by_id("u4")
    assert teacher.name == "Homeroom Teacher"
    assert teacher.role is UserRole.ADMIN
    assert teacher.is_approved is True
    assert result.updated == ["u4"]
    assert result.skipped == [3]

    guard = user_service.get_user_by_email("new.guard@branksome.asia")
    assert guard.role is UserRole.STAFF
    assert result.created == [guard.id]


def test_bulk_import_is_admin_only(user_service, worker):
    with pytest.raises(AuthorizationError):
        user_service.bulk_import(worker, "a@x.com, Alice, STAFF")


@pytest.mark.parametrize(
    "value, expected",
    [("WORKER", UserRole.WORKER), (" admin ", UserRole.ADMIN), ("", UserRole.STAFF), (None, UserRole.STAFF)],
)
def test_parse_role(value, expected):
    assert parse_role(value) is expected
