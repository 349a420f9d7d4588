"""
Тесты для RequestStore.
"""

import pytest

from facility_tracker.models.request import (
    RequestCategory,
    RequestLocation,
    RequestStatus,
    ServiceRequest,
    TimelineEvent,
    UrgencyLevel,
)
from facility_tracker.services.request_store import RequestStore


@pytest.fixture
def draft() -> ServiceRequest:
    return ServiceRequest(
        requester_id="u1",
        requester_name="Ji-Min Kim",
        requester_email="jimin.kim@branksome.asia",
        title="AC unit leaking in Lab 2",
        description="The air conditioner in the science lab is dripping water.",
        category=RequestCategory.MACHINERY,
        location=RequestLocation.STMEV,
        urgency=UrgencyLevel.HIGH,
        timeline=(TimelineEvent(status=RequestStatus.PENDING),),
    )


def test_create_assigns_id(draft):
    store = RequestStore()
    request_id = store.create(draft)

    assert request_id.startswith("req-")
    assert store.get(request_id).id == request_id
    assert len(store) == 1


def test_get_missing_returns_none():
    assert RequestStore().get("req-missing") is None


def test_update_replaces_record(draft):
    store = RequestStore()
    request_id = store.create(draft)
    before = store.get(request_id)

    updated = store.update(request_id, title="AC unit leaking badly", id="req-hijack")

    assert updated.title == "AC unit leaking badly"
    assert updated.id == request_id
    assert store.get(request_id) is updated
    # Предыдущая версия записи не изменилась
    assert before.title == "AC unit leaking in Lab 2"


def test_update_missing_returns_none():
    assert RequestStore().update("req-missing", title="x") is None


def test_delete(draft):
    store = RequestStore()
    request_id = store.create(draft)

    assert store.delete(request_id) is True
    assert request_id not in store
    assert store.delete(request_id) is False


def test_ids_not_reused_after_delete(draft, mocker):
    """Тест: Идентификатор удаленной заявки не выдается повторно."""
    store = RequestStore()
    first_id = store.create(draft)
    store.delete(first_id)

    fixed = mocker.Mock(hex=first_id.removeprefix("req-") + "0000")
    fresh = mocker.Mock(hex="abcdef120000")
    mocker.patch(
        "facility_tracker.services.request_store.uuid.uuid4", side_effect=[fixed, fresh]
    )

    second_id = store.create(draft)
    assert second_id == "req-abcdef12"


def test_list_returns_all(draft):
    store = RequestStore()
    ids = {store.create(draft) for _ in range(3)}
    assert {r.id for r in store.list()} == ids


def test_independent_instances(draft):
    first, second = RequestStore(), RequestStore()
    first.create(draft)
    assert second.list() == []
