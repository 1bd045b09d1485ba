"""Exception taxonomy for field operations.

Every error carries a human-readable message; the API layer maps each family to
an HTTP status code.
"""

from __future__ import annotations


class FieldOpsError(Exception):
    """Base class for all domain errors."""


# Not found


class NotFoundError(FieldOpsError):
    """A referenced record does not exist."""

    entity = "Record"

    def __init__(self, record_id: int) -> None:
        self.record_id = record_id
        super().__init__(f"{self.entity} with id {record_id} not found")


class ZoneNotFound(NotFoundError):
    entity = "Zone"


class UserNotFound(NotFoundError):
    entity = "User"


class PoiNotFound(NotFoundError):
    entity = "POI"


class AssignmentNotFound(NotFoundError):
    entity = "Zone assignment"


class TaskNotFound(NotFoundError):
    entity = "POI task"


# Conflict


class ConflictError(FieldOpsError):
    """The zone already has an active assignment."""

    def __init__(self, zone_id: int, message: str) -> None:
        self.zone_id = zone_id
        super().__init__(message)


class ZoneAlreadyAssigned(ConflictError):
    def __init__(self, zone_id: int) -> None:
        super().__init__(zone_id, f"Zone {zone_id} is already assigned to another user")


class ZoneInProgress(ConflictError):
    def __init__(self, zone_id: int) -> None:
        super().__init__(zone_id, f"Zone {zone_id} is currently in progress by another user")


# Validation


class ValidationError(FieldOpsError, ValueError):
    """Input failed a domain rule."""


class GeometryError(ValidationError):
    """Zone geometry is not a usable GeoJSON polygon."""


class MalformedJSON(GeometryError):
    def __init__(self, detail: str | None = None) -> None:
        message = "Invalid JSON format for geometry"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class InvalidGeometryType(GeometryError):
    def __init__(self, detail: str | None = None) -> None:
        message = "Invalid GeoJSON format - must be a Polygon"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class InvalidRing(GeometryError):
    def __init__(self, ring_index: int, detail: str) -> None:
        self.ring_index = ring_index
        super().__init__(f"Invalid GeoJSON coordinates in ring {ring_index}: {detail}")


class CoordinateOutOfRange(ValidationError):
    pass


class InvalidProgress(ValidationError):
    pass


class NotAdmin(ValidationError):
    def __init__(self, user_id: int, action: str) -> None:
        self.user_id = user_id
        super().__init__(f"Only admin users can {action}")


# Terminal state


class AlreadyInTerminalState(FieldOpsError):
    """The record has already reached its final state."""


class AlreadyCompleted(AlreadyInTerminalState):
    def __init__(self, assignment_id: int) -> None:
        self.assignment_id = assignment_id
        super().__init__(f"Zone assignment {assignment_id} is already completed")
