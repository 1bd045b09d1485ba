"""Record store contract shared by the in-memory and Supabase backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any, Iterable, Optional, Sequence

from ..models.domain import (
    AssignmentStatus,
    PoiTask,
    PointOfInterest,
    User,
    Zone,
    ZoneAssignment,
)
from ..services.geospatial import BoundingBox


class RecordStore(ABC):
    """Point lookups, filtered scans and insert/update-with-returning per entity.

    ``update_*`` methods return None when no record has the given id and leave the
    store untouched in that case.
    """

    name = "store"

    @abstractmethod
    def transaction(self) -> AbstractContextManager[Any]:
        """Scope a read-check-write sequence."""

    # Users

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    # Zones

    @abstractmethod
    def get_zone(self, zone_id: int) -> Optional[Zone]:
        raise NotImplementedError

    @abstractmethod
    def list_zones(self) -> list[Zone]:
        raise NotImplementedError

    @abstractmethod
    def insert_zone(self, values: dict[str, Any]) -> Zone:
        raise NotImplementedError

    @abstractmethod
    def update_zone(self, zone_id: int, changes: dict[str, Any]) -> Optional[Zone]:
        raise NotImplementedError

    # Points of interest

    @abstractmethod
    def get_poi(self, poi_id: int) -> Optional[PointOfInterest]:
        raise NotImplementedError

    @abstractmethod
    def list_pois(self, bbox: Optional[BoundingBox] = None) -> list[PointOfInterest]:
        """Return POIs in insertion order, optionally restricted to ``bbox``."""
        raise NotImplementedError

    @abstractmethod
    def insert_poi(self, values: dict[str, Any]) -> PointOfInterest:
        raise NotImplementedError

    @abstractmethod
    def update_poi(self, poi_id: int, changes: dict[str, Any]) -> Optional[PointOfInterest]:
        raise NotImplementedError

    # Zone assignments

    @abstractmethod
    def get_assignment(self, assignment_id: int) -> Optional[ZoneAssignment]:
        raise NotImplementedError

    @abstractmethod
    def list_assignments(
        self,
        *,
        zone_id: Optional[int] = None,
        user_id: Optional[int] = None,
        statuses: Optional[Iterable[AssignmentStatus]] = None,
    ) -> list[ZoneAssignment]:
        raise NotImplementedError

    @abstractmethod
    def insert_assignment(self, values: dict[str, Any]) -> ZoneAssignment:
        raise NotImplementedError

    @abstractmethod
    def update_assignment(self, assignment_id: int, changes: dict[str, Any]) -> Optional[ZoneAssignment]:
        raise NotImplementedError

    # POI tasks

    @abstractmethod
    def get_poi_task(self, task_id: int) -> Optional[PoiTask]:
        raise NotImplementedError

    @abstractmethod
    def list_poi_tasks(self, *, user_id: Optional[int] = None, poi_id: Optional[int] = None) -> list[PoiTask]:
        raise NotImplementedError

    @abstractmethod
    def insert_poi_task(self, values: dict[str, Any]) -> PoiTask:
        raise NotImplementedError

    @abstractmethod
    def update_poi_task(self, task_id: int, changes: dict[str, Any]) -> Optional[PoiTask]:
        raise NotImplementedError

    def get_pois(self, poi_ids: Sequence[int]) -> dict[int, PointOfInterest]:
        result: dict[int, PointOfInterest] = {}
        for poi_id in dict.fromkeys(poi_ids):
            poi = self.get_poi(poi_id)
            if poi is not None:
                result[poi_id] = poi
        return result
