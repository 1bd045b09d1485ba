"""Domain records."""

from .domain import (
    ACTIVE_ASSIGNMENT_STATUSES,
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

__all__ = [
    "ACTIVE_ASSIGNMENT_STATUSES",
    "AssignmentStatus",
    "PoiTask",
    "PoiType",
    "PointOfInterest",
    "TaskStatus",
    "User",
    "UserRole",
    "Zone",
    "ZoneAssignment",
]
