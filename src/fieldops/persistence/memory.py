"""Process-local record store used when no database is configured, and by tests."""

from __future__ import annotations

import itertools
import threading
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Iterable, Iterator, Optional, TypeVar

from ..models.domain import (
    AssignmentStatus,
    PoiTask,
    PointOfInterest,
    User,
    UserRole,
    Zone,
    ZoneAssignment,
)
from ..services.geospatial import BoundingBox
from .base import RecordStore

RecordT = TypeVar("RecordT")


class _Table(dict[int, Any]):
    """Rows keyed by id, remembering the next id to hand out."""

    def __init__(self) -> None:
        super().__init__()
        self._ids = itertools.count(1)

    def next_id(self) -> int:
        return next(self._ids)


class InMemoryStore(RecordStore):
    """Dictionary-backed store.

    A re-entrant lock serialises writers, and ``transaction()`` holds that lock
    for the whole read-check-write sequence, so the one-active-assignment-per-zone
    rule cannot race inside a single process.
    """

    name = "memory"

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._users = _Table()
        self._zones = _Table()
        self._pois = _Table()
        self._assignments = _Table()
        self._poi_tasks = _Table()

    @contextmanager
    def transaction(self) -> Iterator["InMemoryStore"]:
        with self._lock:
            yield self

    def _insert(self, table: _Table, factory: type[RecordT], values: dict[str, Any]) -> RecordT:
        with self._lock:
            record = factory(id=table.next_id(), **values)
            table[record.id] = record
            return record

    def _update(self, table: _Table, record_id: int, changes: dict[str, Any]) -> Optional[Any]:
        with self._lock:
            current = table.get(record_id)
            if current is None:
                return None
            updated = replace(current, **changes)
            table[record_id] = updated
            return updated

    # Users

    def insert_user(self, email: str, role: UserRole | str = UserRole.USER) -> User:
        """Seed a user record; users are otherwise owned by the auth collaborator."""
        return self._insert(
            self._users,
            User,
            {"email": email, "role": UserRole(role), "created_at": datetime.now(timezone.utc)},
        )

    def get_user(self, user_id: int) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    # Zones

    def get_zone(self, zone_id: int) -> Optional[Zone]:
        with self._lock:
            return self._zones.get(zone_id)

    def list_zones(self) -> list[Zone]:
        with self._lock:
            return list(self._zones.values())

    def insert_zone(self, values: dict[str, Any]) -> Zone:
        return self._insert(self._zones, Zone, values)

    def update_zone(self, zone_id: int, changes: dict[str, Any]) -> Optional[Zone]:
        return self._update(self._zones, zone_id, changes)

    # Points of interest

    def get_poi(self, poi_id: int) -> Optional[PointOfInterest]:
        with self._lock:
            return self._pois.get(poi_id)

    def list_pois(self, bbox: Optional[BoundingBox] = None) -> list[PointOfInterest]:
        with self._lock:
            pois = list(self._pois.values())
        if bbox is None:
            return pois
        return [poi for poi in pois if bbox.contains(poi.latitude, poi.longitude)]

    def insert_poi(self, values: dict[str, Any]) -> PointOfInterest:
        return self._insert(self._pois, PointOfInterest, values)

    def update_poi(self, poi_id: int, changes: dict[str, Any]) -> Optional[PointOfInterest]:
        return self._update(self._pois, poi_id, changes)

    # Zone assignments

    def get_assignment(self, assignment_id: int) -> Optional[ZoneAssignment]:
        with self._lock:
            return self._assignments.get(assignment_id)

    def list_assignments(
        self,
        *,
        zone_id: Optional[int] = None,
        user_id: Optional[int] = None,
        statuses: Optional[Iterable[AssignmentStatus]] = None,
    ) -> list[ZoneAssignment]:
        wanted = set(statuses) if statuses is not None else None
        with self._lock:
            rows = list(self._assignments.values())
        return [
            assignment
            for assignment in rows
            if (zone_id is None or assignment.zone_id == zone_id)
            and (user_id is None or assignment.user_id == user_id)
            and (wanted is None or assignment.status in wanted)
        ]

    def insert_assignment(self, values: dict[str, Any]) -> ZoneAssignment:
        return self._insert(self._assignments, ZoneAssignment, values)

    def update_assignment(self, assignment_id: int, changes: dict[str, Any]) -> Optional[ZoneAssignment]:
        return self._update(self._assignments, assignment_id, changes)

    # POI tasks

    def get_poi_task(self, task_id: int) -> Optional[PoiTask]:
        with self._lock:
            return self._poi_tasks.get(task_id)

    def list_poi_tasks(self, *, user_id: Optional[int] = None, poi_id: Optional[int] = None) -> list[PoiTask]:
        with self._lock:
            rows = list(self._poi_tasks.values())
        return [
            task
            for task in rows
            if (user_id is None or task.user_id == user_id) and (poi_id is None or task.poi_id == poi_id)
        ]

    def insert_poi_task(self, values: dict[str, Any]) -> PoiTask:
        return self._insert(self._poi_tasks, PoiTask, values)

    def update_poi_task(self, task_id: int, changes: dict[str, Any]) -> Optional[PoiTask]:
        return self._update(self._poi_tasks, task_id, changes)
