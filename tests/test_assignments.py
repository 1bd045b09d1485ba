import threading
from datetime import datetime, timezone

import pytest

from fieldops.errors import (
    AlreadyCompleted,
    AssignmentNotFound,
    ConflictError,
    InvalidProgress,
    PoiNotFound,
    TaskNotFound,
    UserNotFound,
    ZoneAlreadyAssigned,
    ZoneInProgress,
    ZoneNotFound,
)
from fieldops.models.domain import AssignmentStatus, PoiType, TaskStatus, UserRole
from fieldops.services import assignments as service

from conftest import SQUARE_POLYGON

NOW = datetime(2024, 5, 1, tzinfo=timezone.utc)


@pytest.fixture
def zone(store, admin):
    return store.insert_zone(
        {
            "name": "Riverside",
            "description": None,
            "geometry": SQUARE_POLYGON,
            "estimated_houses": 120,
            "created_by": admin.id,
            "created_at": NOW,
            "updated_at": NOW,
        }
    )


@pytest.fixture
def poi(store, admin):
    return store.insert_poi(
        {
            "name": "Station wall",
            "description": "Left of the entrance",
            "latitude": 51.5074,
            "longitude": -0.1278,
            "poi_type": PoiType.WALL,
            "created_by": admin.id,
            "created_at": NOW,
            "updated_at": NOW,
        }
    )


def test_assign_zone_creates_assigned_record(store, zone, field_user, ticking_clock):
    assignment = service.assign_zone(store, zone.id, field_user.id)

    assert assignment.status is AssignmentStatus.ASSIGNED
    assert assignment.progress_houses == 0
    assert assignment.completed_at is None
    assert assignment.assigned_at == ticking_clock.current
    assert store.get_assignment(assignment.id) == assignment


def test_assign_zone_unknown_zone(store, field_user):
    with pytest.raises(ZoneNotFound, match="Zone with id 999 not found"):
        service.assign_zone(store, 999, field_user.id)
    assert store.list_assignments() == []


def test_assign_zone_unknown_user(store, zone):
    with pytest.raises(UserNotFound, match="User with id 999 not found"):
        service.assign_zone(store, zone.id, 999)
    assert store.list_assignments() == []


def test_assign_zone_rejects_already_assigned_zone(store, zone, field_user):
    other = store.insert_user("other@example.com", UserRole.USER)
    service.assign_zone(store, zone.id, field_user.id)

    with pytest.raises(ZoneAlreadyAssigned, match=f"Zone {zone.id} is already assigned to another user"):
        service.assign_zone(store, zone.id, other.id)
    assert len(store.list_assignments(zone_id=zone.id)) == 1


def test_assign_zone_rejects_zone_in_progress(store, zone, field_user):
    other = store.insert_user("other@example.com", UserRole.USER)
    first = service.assign_zone(store, zone.id, field_user.id)
    service.update_progress(store, first.id, 10)

    with pytest.raises(ZoneInProgress, match="currently in progress"):
        service.assign_zone(store, zone.id, other.id)


def test_conflicts_share_a_base_class(store, zone, field_user):
    service.assign_zone(store, zone.id, field_user.id)

    with pytest.raises(ConflictError):
        service.assign_zone(store, zone.id, field_user.id)


def test_completed_zone_can_be_reassigned(store, zone, field_user):
    other = store.insert_user("other@example.com", UserRole.USER)
    first = service.assign_zone(store, zone.id, field_user.id)
    service.complete_zone(store, first.id)

    second = service.assign_zone(store, zone.id, other.id)
    service.complete_zone(store, second.id)
    again = service.assign_zone(store, zone.id, field_user.id)

    assert second.user_id == other.id
    assert second.status is AssignmentStatus.ASSIGNED
    assert again.user_id == field_user.id
    assert len(store.list_assignments(zone_id=zone.id)) == 3


def test_user_can_hold_several_zones(store, admin, zone, field_user):
    other_zone = store.insert_zone(
        {
            "name": "Hillside",
            "description": None,
            "geometry": SQUARE_POLYGON,
            "estimated_houses": 80,
            "created_by": admin.id,
            "created_at": NOW,
            "updated_at": NOW,
        }
    )

    service.assign_zone(store, zone.id, field_user.id)
    service.assign_zone(store, other_zone.id, field_user.id)

    assert {a.zone_id for a in service.list_user_assignments(store, field_user.id)} == {zone.id, other_zone.id}


def test_concurrent_assignments_leave_one_active(store, zone):
    users = [store.insert_user(f"user{i}@example.com") for i in range(8)]
    outcomes: list[str] = []
    barrier = threading.Barrier(len(users))

    def attempt(user_id: int) -> None:
        barrier.wait()
        try:
            service.assign_zone(store, zone.id, user_id)
            outcomes.append("ok")
        except ZoneAlreadyAssigned:
            outcomes.append("conflict")

    threads = [threading.Thread(target=attempt, args=(user.id,)) for user in users]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count("conflict") == len(users) - 1


def test_listing_while_another_thread_inserts(store, poi, field_user):
    errors: list[Exception] = []
    done = threading.Event()

    def writer() -> None:
        try:
            for _ in range(2000):
                service.assign_poi(store, poi.id, field_user.id)
        finally:
            done.set()

    def reader() -> None:
        while not done.is_set():
            try:
                service.list_user_poi_tasks(store, field_user.id)
                store.list_assignments(user_id=field_user.id)
                store.list_pois()
            except RuntimeError as exc:
                errors.append(exc)
                return

    threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(store.list_poi_tasks(user_id=field_user.id)) == 2000


def test_update_progress_starts_assignment(store, zone, field_user):
    assignment = service.assign_zone(store, zone.id, field_user.id)

    updated = service.update_progress(store, assignment.id, 25)

    assert updated.status is AssignmentStatus.IN_PROGRESS
    assert updated.progress_houses == 25
    assert updated.completed_at is None
    assert store.get_assignment(assignment.id).progress_houses == 25


def test_update_progress_zero_still_starts_assignment(store, zone, field_user):
    assignment = service.assign_zone(store, zone.id, field_user.id)

    assert service.update_progress(store, assignment.id, 0).status is AssignmentStatus.IN_PROGRESS


def test_update_progress_allows_increase_and_decrease(store, zone, field_user):
    assignment = service.assign_zone(store, zone.id, field_user.id)

    assert service.update_progress(store, assignment.id, 50).progress_houses == 50
    corrected = service.update_progress(store, assignment.id, 30)

    assert corrected.progress_houses == 30
    assert corrected.status is AssignmentStatus.IN_PROGRESS


def test_update_progress_on_completed_assignment_keeps_status(store, zone, field_user):
    assignment = service.assign_zone(store, zone.id, field_user.id)
    completed = service.complete_zone(store, assignment.id)

    updated = service.update_progress(store, assignment.id, 75)

    assert updated.status is AssignmentStatus.COMPLETED
    assert updated.progress_houses == 75
    assert updated.completed_at == completed.completed_at


def test_update_progress_unknown_assignment(store):
    with pytest.raises(AssignmentNotFound, match="assignment with id 42 not found"):
        service.update_progress(store, 42, 5)


def test_update_progress_rejects_negative_values(store, zone, field_user):
    assignment = service.assign_zone(store, zone.id, field_user.id)

    with pytest.raises(InvalidProgress):
        service.update_progress(store, assignment.id, -1)
    assert store.get_assignment(assignment.id).status is AssignmentStatus.ASSIGNED


def test_complete_zone_preserves_progress(store, zone, field_user, ticking_clock):
    assignment = service.assign_zone(store, zone.id, field_user.id)
    service.update_progress(store, assignment.id, 75)

    completed = service.complete_zone(store, assignment.id)

    assert completed.status is AssignmentStatus.COMPLETED
    assert completed.progress_houses == 75
    assert completed.completed_at == ticking_clock.current
    assert completed.completed_at > completed.assigned_at


def test_complete_zone_directly_from_assigned(store, zone, field_user):
    assignment = service.assign_zone(store, zone.id, field_user.id)

    assert service.complete_zone(store, assignment.id).status is AssignmentStatus.COMPLETED


def test_complete_zone_twice_is_rejected(store, zone, field_user):
    assignment = service.assign_zone(store, zone.id, field_user.id)
    first = service.complete_zone(store, assignment.id)

    with pytest.raises(AlreadyCompleted, match="already completed"):
        service.complete_zone(store, assignment.id)
    assert store.get_assignment(assignment.id).completed_at == first.completed_at


def test_complete_zone_unknown_assignment(store):
    with pytest.raises(AssignmentNotFound):
        service.complete_zone(store, 7)


def test_assign_poi_creates_task(store, poi, field_user):
    task = service.assign_poi(store, poi.id, field_user.id)

    assert task.status is TaskStatus.ASSIGNED
    assert task.completed_at is None
    assert task.poi_id == poi.id


def test_assign_poi_unknown_references(store, poi, field_user):
    with pytest.raises(PoiNotFound):
        service.assign_poi(store, 999, field_user.id)
    with pytest.raises(UserNotFound):
        service.assign_poi(store, poi.id, 999)
    assert store.list_poi_tasks() == []


def test_complete_poi_task_is_idempotent(store, poi, field_user, ticking_clock):
    task = service.assign_poi(store, poi.id, field_user.id)

    first = service.complete_poi_task(store, task.id)
    second = service.complete_poi_task(store, task.id)

    assert first.status is TaskStatus.COMPLETED
    assert second.status is TaskStatus.COMPLETED
    assert second.completed_at > first.completed_at


def test_complete_poi_task_unknown_task(store):
    with pytest.raises(TaskNotFound, match="POI task with id 999 not found"):
        service.complete_poi_task(store, 999)


def test_list_user_poi_tasks_joins_poi(store, poi, field_user):
    other = store.insert_user("other@example.com")
    service.assign_poi(store, poi.id, field_user.id)
    service.assign_poi(store, poi.id, other.id)

    entries = service.list_user_poi_tasks(store, field_user.id)

    assert len(entries) == 1
    assert entries[0].task.user_id == field_user.id
    assert entries[0].poi.name == "Station wall"
