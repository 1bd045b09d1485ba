"""Zone assignment and POI task lifecycles.

Zone assignments move ``assigned -> in_progress -> completed``; POI tasks move
``assigned -> completed``. A zone may carry at most one active (assigned or
in-progress) assignment at a time; once that assignment completes the zone can
be handed to anyone again.

Completing a POI task twice is accepted and refreshes ``completed_at``, while
completing a zone assignment twice is rejected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..errors import (
    AlreadyCompleted,
    AssignmentNotFound,
    InvalidProgress,
    PoiNotFound,
    TaskNotFound,
    UserNotFound,
    ZoneAlreadyAssigned,
    ZoneInProgress,
    ZoneNotFound,
)
from ..models.domain import (
    ACTIVE_ASSIGNMENT_STATUSES,
    AssignmentStatus,
    PoiTask,
    PointOfInterest,
    TaskStatus,
    ZoneAssignment,
)
from ..persistence.base import RecordStore
from . import clock

logger = logging.getLogger(__name__)

# Status reached when progress is reported from each state.
PROGRESS_TRANSITIONS: dict[AssignmentStatus, AssignmentStatus] = {
    AssignmentStatus.ASSIGNED: AssignmentStatus.IN_PROGRESS,
    AssignmentStatus.IN_PROGRESS: AssignmentStatus.IN_PROGRESS,
    AssignmentStatus.COMPLETED: AssignmentStatus.COMPLETED,
}


@dataclass(slots=True)
class PoiTaskWithPoi:
    """A POI task joined with the location it refers to."""

    task: PoiTask
    poi: PointOfInterest


def _require_assignment(store: RecordStore, assignment_id: int) -> ZoneAssignment:
    assignment = store.get_assignment(assignment_id)
    if assignment is None:
        raise AssignmentNotFound(assignment_id)
    return assignment


def assign_zone(store: RecordStore, zone_id: int, user_id: int) -> ZoneAssignment:
    """Create a new ``assigned`` assignment binding ``zone_id`` to ``user_id``."""
    with store.transaction():
        if store.get_zone(zone_id) is None:
            raise ZoneNotFound(zone_id)
        if store.get_user(user_id) is None:
            raise UserNotFound(user_id)

        active = store.list_assignments(zone_id=zone_id, statuses=ACTIVE_ASSIGNMENT_STATUSES)
        if any(item.status is AssignmentStatus.ASSIGNED for item in active):
            logger.warning("Rejected assignment of zone %s to user %s: already assigned", zone_id, user_id)
            raise ZoneAlreadyAssigned(zone_id)
        if any(item.status is AssignmentStatus.IN_PROGRESS for item in active):
            logger.warning("Rejected assignment of zone %s to user %s: in progress", zone_id, user_id)
            raise ZoneInProgress(zone_id)

        assignment = store.insert_assignment(
            {
                "zone_id": zone_id,
                "user_id": user_id,
                "status": AssignmentStatus.ASSIGNED,
                "progress_houses": 0,
                "assigned_at": clock.utcnow(),
                "completed_at": None,
            }
        )
    logger.info("Zone %s assigned to user %s (assignment %s)", zone_id, user_id, assignment.id)
    return assignment


def update_progress(store: RecordStore, assignment_id: int, progress_houses: int) -> ZoneAssignment:
    """Record the number of houses visited.

    Progress is a snapshot: it may go down (a correction) and it is still
    recorded on a completed assignment. The first report on an ``assigned``
    assignment moves it to ``in_progress``.
    """
    if progress_houses < 0:
        raise InvalidProgress(f"progress_houses must be >= 0, got {progress_houses}")

    with store.transaction():
        assignment = _require_assignment(store, assignment_id)
        next_status = PROGRESS_TRANSITIONS[assignment.status]
        updated = store.update_assignment(
            assignment_id,
            {"progress_houses": progress_houses, "status": next_status},
        )
    if updated is None:
        raise AssignmentNotFound(assignment_id)

    if next_status is not assignment.status:
        logger.info("Assignment %s started (%s -> %s)", assignment_id, assignment.status.value, next_status.value)
    logger.info("Assignment %s progress set to %s houses", assignment_id, progress_houses)
    return updated


def complete_zone(store: RecordStore, assignment_id: int) -> ZoneAssignment:
    """Mark an assignment completed, keeping its progress count."""
    with store.transaction():
        assignment = _require_assignment(store, assignment_id)
        if assignment.status is AssignmentStatus.COMPLETED:
            raise AlreadyCompleted(assignment_id)
        updated = store.update_assignment(
            assignment_id,
            {"status": AssignmentStatus.COMPLETED, "completed_at": clock.utcnow()},
        )
    if updated is None:
        raise AssignmentNotFound(assignment_id)
    logger.info("Assignment %s completed for zone %s", assignment_id, updated.zone_id)
    return updated


def assign_poi(store: RecordStore, poi_id: int, user_id: int) -> PoiTask:
    """Create an ``assigned`` poster task for ``poi_id``."""
    with store.transaction():
        if store.get_poi(poi_id) is None:
            raise PoiNotFound(poi_id)
        if store.get_user(user_id) is None:
            raise UserNotFound(user_id)
        task = store.insert_poi_task(
            {
                "poi_id": poi_id,
                "user_id": user_id,
                "status": TaskStatus.ASSIGNED,
                "assigned_at": clock.utcnow(),
                "completed_at": None,
            }
        )
    logger.info("POI %s assigned to user %s (task %s)", poi_id, user_id, task.id)
    return task


def complete_poi_task(store: RecordStore, task_id: int) -> PoiTask:
    """Mark a POI task completed. Repeating the call refreshes ``completed_at``."""
    with store.transaction():
        updated = store.update_poi_task(
            task_id,
            {"status": TaskStatus.COMPLETED, "completed_at": clock.utcnow()},
        )
    if updated is None:
        raise TaskNotFound(task_id)
    logger.info("POI task %s completed", task_id)
    return updated


def list_user_assignments(store: RecordStore, user_id: int) -> list[ZoneAssignment]:
    return store.list_assignments(user_id=user_id)


def list_user_poi_tasks(store: RecordStore, user_id: int) -> list[PoiTaskWithPoi]:
    tasks = store.list_poi_tasks(user_id=user_id)
    pois = store.get_pois([task.poi_id for task in tasks])
    # tasks whose POI has vanished are skipped, like an inner join
    return [PoiTaskWithPoi(task=task, poi=pois[task.poi_id]) for task in tasks if task.poi_id in pois]
