"""Zone administration."""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..errors import NotAdmin, UserNotFound, ValidationError, ZoneNotFound
from ..models.domain import Zone
from ..persistence.base import RecordStore
from . import clock
from .geometry import validate_polygon

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({"name", "description", "geometry", "estimated_houses"})
NULLABLE_FIELDS = frozenset({"description"})


def _check_estimated_houses(value: int) -> None:
    if value < 0:
        raise ValidationError(f"estimated_houses must be >= 0, got {value}")


def create_zone(
    store: RecordStore,
    *,
    name: str,
    geometry: str,
    estimated_houses: int,
    created_by: int,
    description: Optional[str] = None,
) -> Zone:
    """Validate and persist a new zone. Only administrators may create zones."""
    user = store.get_user(created_by)
    if user is None:
        raise UserNotFound(created_by)
    if not user.is_admin:
        logger.warning("User %s attempted to create a zone without admin role", created_by)
        raise NotAdmin(created_by, "create zones")

    validate_polygon(geometry)
    _check_estimated_houses(estimated_houses)

    now = clock.utcnow()
    zone = store.insert_zone(
        {
            "name": name,
            "description": description,
            "geometry": geometry,
            "estimated_houses": estimated_houses,
            "created_by": created_by,
            "created_at": now,
            "updated_at": now,
        }
    )
    logger.info("Zone %s '%s' created by user %s", zone.id, zone.name, created_by)
    return zone


def update_zone(store: RecordStore, zone_id: int, changes: dict[str, Any]) -> Zone:
    """Apply a partial update. ``description`` may be cleared by passing None."""
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Cannot update zone fields: {', '.join(sorted(unknown))}")
    cleared = sorted(key for key, value in changes.items() if value is None and key not in NULLABLE_FIELDS)
    if cleared:
        raise ValidationError(f"Zone fields cannot be null: {', '.join(cleared)}")

    if store.get_zone(zone_id) is None:
        raise ZoneNotFound(zone_id)
    if "geometry" in changes:
        validate_polygon(changes["geometry"])
    if "estimated_houses" in changes:
        _check_estimated_houses(changes["estimated_houses"])

    updated = store.update_zone(zone_id, {**changes, "updated_at": clock.utcnow()})
    if updated is None:
        raise ZoneNotFound(zone_id)
    logger.info("Zone %s updated (%s)", zone_id, ", ".join(sorted(changes)) or "timestamp only")
    return updated


def list_zones(store: RecordStore) -> list[Zone]:
    return store.list_zones()
