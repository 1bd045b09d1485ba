"""Supabase-backed record store.

Expected tables: ``users``, ``zones``, ``pois``, ``zone_assignments`` and
``poi_tasks``. The one-active-assignment rule is enforced by a partial unique
index on ``zone_assignments``::

    CREATE UNIQUE INDEX zone_assignments_one_active
        ON zone_assignments (zone_id)
        WHERE status IN ('assigned', 'in_progress');

A unique violation raised by that index is reported as ``ZoneAlreadyAssigned``.
"""

from __future__ import annotations

import logging
from contextlib import nullcontext
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Iterable, Optional, TypeVar

from postgrest.exceptions import APIError
from supabase import Client

from ..errors import ZoneAlreadyAssigned
from ..models.domain import (
    AssignmentStatus,
    PoiTask,
    PoiType,
    PointOfInterest,
    TaskStatus,
    User,
    UserRole,
    Zone,
    ZoneAssignment,
)
from ..services.geospatial import BoundingBox
from .base import RecordStore

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"

RecordT = TypeVar("RecordT")


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed is not None and parsed.tzinfo is None:
        # Columns are "timestamp without time zone" written in UTC.
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _serialize(values: dict[str, Any]) -> dict[str, Any]:
    row: dict[str, Any] = {}
    for key, value in values.items():
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, datetime):
            value = value.isoformat()
        row[key] = value
    return row


def _row_to_user(row: dict[str, Any]) -> User:
    return User(
        id=int(row["id"]),
        email=str(row["email"]),
        role=UserRole(row["role"]),
        created_at=_parse_timestamp(row.get("created_at")),
    )


def _row_to_zone(row: dict[str, Any]) -> Zone:
    return Zone(
        id=int(row["id"]),
        name=str(row["name"]),
        description=row.get("description"),
        geometry=str(row["geometry"]),
        estimated_houses=int(row["estimated_houses"]),
        created_by=int(row["created_by"]),
        created_at=_parse_timestamp(row["created_at"]),
        updated_at=_parse_timestamp(row["updated_at"]),
    )


def _row_to_poi(row: dict[str, Any]) -> PointOfInterest:
    # numeric columns come back as strings
    return PointOfInterest(
        id=int(row["id"]),
        name=str(row["name"]),
        description=row.get("description"),
        latitude=float(row["latitude"]),
        longitude=float(row["longitude"]),
        poi_type=PoiType(row["poi_type"]),
        created_by=int(row["created_by"]),
        created_at=_parse_timestamp(row["created_at"]),
        updated_at=_parse_timestamp(row["updated_at"]),
    )


def _row_to_assignment(row: dict[str, Any]) -> ZoneAssignment:
    return ZoneAssignment(
        id=int(row["id"]),
        zone_id=int(row["zone_id"]),
        user_id=int(row["user_id"]),
        status=AssignmentStatus(row["status"]),
        progress_houses=int(row["progress_houses"]),
        assigned_at=_parse_timestamp(row["assigned_at"]),
        completed_at=_parse_timestamp(row.get("completed_at")),
    )


def _row_to_poi_task(row: dict[str, Any]) -> PoiTask:
    return PoiTask(
        id=int(row["id"]),
        poi_id=int(row["poi_id"]),
        user_id=int(row["user_id"]),
        status=TaskStatus(row["status"]),
        assigned_at=_parse_timestamp(row["assigned_at"]),
        completed_at=_parse_timestamp(row.get("completed_at")),
    )


class SupabaseStore(RecordStore):
    """Record store over the Supabase table API.

    Each call is a single PostgREST request, so there is no client-side
    transaction; ``transaction()`` exists for interface parity and the database
    constraints above carry the exclusivity guarantee.
    """

    name = "supabase"

    def __init__(self, client: Client) -> None:
        self.client = client

    def transaction(self):
        return nullcontext(self)

    def _execute(self, query: Any) -> Any:
        """Run a PostgREST request. Failures other than unique violations become ``ConnectionError``."""
        try:
            return query.execute()
        except APIError as exc:
            if exc.code == UNIQUE_VIOLATION:
                raise
            logger.error("Supabase request failed (%s): %s", exc.code, exc.message)
            raise ConnectionError(f"Supabase request failed: {exc.message}") from exc

    def _get(self, table: str, record_id: int, convert: Callable[[dict[str, Any]], RecordT]) -> Optional[RecordT]:
        response = self._execute(self.client.table(table).select("*").eq("id", record_id).limit(1))
        rows = response.data or []
        return convert(rows[0]) if rows else None

    def _insert(self, table: str, values: dict[str, Any], convert: Callable[[dict[str, Any]], RecordT]) -> RecordT:
        response = self._execute(self.client.table(table).insert(_serialize(values)))
        rows = response.data or []
        if not rows:
            raise ConnectionError(f"Insert into '{table}' returned no rows")
        return convert(rows[0])

    def _update(
        self,
        table: str,
        record_id: int,
        changes: dict[str, Any],
        convert: Callable[[dict[str, Any]], RecordT],
    ) -> Optional[RecordT]:
        response = self._execute(self.client.table(table).update(_serialize(changes)).eq("id", record_id))
        rows = response.data or []
        return convert(rows[0]) if rows else None

    # Users

    def get_user(self, user_id: int) -> Optional[User]:
        return self._get("users", user_id, _row_to_user)

    # Zones

    def get_zone(self, zone_id: int) -> Optional[Zone]:
        return self._get("zones", zone_id, _row_to_zone)

    def list_zones(self) -> list[Zone]:
        response = self._execute(self.client.table("zones").select("*").order("id"))
        return [_row_to_zone(row) for row in response.data or []]

    def insert_zone(self, values: dict[str, Any]) -> Zone:
        return self._insert("zones", values, _row_to_zone)

    def update_zone(self, zone_id: int, changes: dict[str, Any]) -> Optional[Zone]:
        return self._update("zones", zone_id, changes, _row_to_zone)

    # Points of interest

    def get_poi(self, poi_id: int) -> Optional[PointOfInterest]:
        return self._get("pois", poi_id, _row_to_poi)

    def list_pois(self, bbox: Optional[BoundingBox] = None) -> list[PointOfInterest]:
        query = self.client.table("pois").select("*")
        if bbox is not None:
            query = (
                query.gte("latitude", bbox.min_lat)
                .lte("latitude", bbox.max_lat)
                .gte("longitude", bbox.min_lon)
                .lte("longitude", bbox.max_lon)
            )
        response = self._execute(query.order("id"))
        return [_row_to_poi(row) for row in response.data or []]

    def insert_poi(self, values: dict[str, Any]) -> PointOfInterest:
        return self._insert("pois", values, _row_to_poi)

    def update_poi(self, poi_id: int, changes: dict[str, Any]) -> Optional[PointOfInterest]:
        return self._update("pois", poi_id, changes, _row_to_poi)

    def get_pois(self, poi_ids) -> dict[int, PointOfInterest]:
        ids = sorted(set(poi_ids))
        if not ids:
            return {}
        response = self._execute(self.client.table("pois").select("*").in_("id", ids))
        return {poi.id: poi for poi in (_row_to_poi(row) for row in response.data or [])}

    # Zone assignments

    def get_assignment(self, assignment_id: int) -> Optional[ZoneAssignment]:
        return self._get("zone_assignments", assignment_id, _row_to_assignment)

    def list_assignments(
        self,
        *,
        zone_id: Optional[int] = None,
        user_id: Optional[int] = None,
        statuses: Optional[Iterable[AssignmentStatus]] = None,
    ) -> list[ZoneAssignment]:
        query = self.client.table("zone_assignments").select("*")
        if zone_id is not None:
            query = query.eq("zone_id", zone_id)
        if user_id is not None:
            query = query.eq("user_id", user_id)
        if statuses is not None:
            query = query.in_("status", [AssignmentStatus(status).value for status in statuses])
        response = self._execute(query.order("id"))
        return [_row_to_assignment(row) for row in response.data or []]

    def insert_assignment(self, values: dict[str, Any]) -> ZoneAssignment:
        try:
            return self._insert("zone_assignments", values, _row_to_assignment)
        except APIError as exc:
            if exc.code == UNIQUE_VIOLATION:
                logger.warning("Concurrent assignment rejected by database for zone %s", values.get("zone_id"))
                raise ZoneAlreadyAssigned(values["zone_id"]) from exc
            raise

    def update_assignment(self, assignment_id: int, changes: dict[str, Any]) -> Optional[ZoneAssignment]:
        return self._update("zone_assignments", assignment_id, changes, _row_to_assignment)

    # POI tasks

    def get_poi_task(self, task_id: int) -> Optional[PoiTask]:
        return self._get("poi_tasks", task_id, _row_to_poi_task)

    def list_poi_tasks(self, *, user_id: Optional[int] = None, poi_id: Optional[int] = None) -> list[PoiTask]:
        query = self.client.table("poi_tasks").select("*")
        if user_id is not None:
            query = query.eq("user_id", user_id)
        if poi_id is not None:
            query = query.eq("poi_id", poi_id)
        response = self._execute(query.order("id"))
        return [_row_to_poi_task(row) for row in response.data or []]

    def insert_poi_task(self, values: dict[str, Any]) -> PoiTask:
        return self._insert("poi_tasks", values, _row_to_poi_task)

    def update_poi_task(self, task_id: int, changes: dict[str, Any]) -> Optional[PoiTask]:
        return self._update("poi_tasks", task_id, changes, _row_to_poi_task)
