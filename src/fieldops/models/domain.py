"""Domain models for zones, points of interest and the work assigned on them."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


class PoiType(str, Enum):
    BILLBOARD = "billboard"
    WALL = "wall"
    OTHER = "other"


class AssignmentStatus(str, Enum):
    """Lifecycle of a zone assignment: assigned -> in_progress -> completed."""

    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"

    @property
    def is_active(self) -> bool:
        return self is not AssignmentStatus.COMPLETED


class TaskStatus(str, Enum):
    """Lifecycle of a POI task: assigned -> completed."""

    ASSIGNED = "assigned"
    COMPLETED = "completed"


ACTIVE_ASSIGNMENT_STATUSES = (AssignmentStatus.ASSIGNED, AssignmentStatus.IN_PROGRESS)


@dataclass(slots=True)
class User:
    """A field or admin user, as supplied by the auth collaborator."""

    id: int
    email: str
    role: UserRole
    created_at: Optional[datetime] = None

    @property
    def is_admin(self) -> bool:
        return self.role is UserRole.ADMIN


@dataclass(slots=True)
class Zone:
    """A named polygonal area for leaflet distribution."""

    id: int
    name: str
    description: Optional[str]
    geometry: str
    estimated_houses: int
    created_by: int
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class PointOfInterest:
    """A single location for poster placement."""

    id: int
    name: str
    description: Optional[str]
    latitude: float
    longitude: float
    poi_type: PoiType
    created_by: int
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class ZoneAssignment:
    """Binds one zone to one user for a work cycle."""

    id: int
    zone_id: int
    user_id: int
    status: AssignmentStatus
    progress_houses: int
    assigned_at: datetime
    completed_at: Optional[datetime] = None


@dataclass(slots=True)
class PoiTask:
    """Binds one POI to one user for a single poster-pasting action."""

    id: int
    poi_id: int
    user_id: int
    status: TaskStatus
    assigned_at: datetime
    completed_at: Optional[datetime] = None
